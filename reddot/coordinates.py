"""
Image-space to screen-space mapping.

Coordinate convention: every rectangle and point in Reddot uses a TOP-LEFT
origin with y growing downwards, in logical screen points. mss monitors,
Win32 GetWindowRect and pyautogui all share this convention, so the window
origin is added without any vertical flip.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple

from .shape_filter import Marker


@dataclass(frozen=True)
class WindowRect:
    """On-screen rectangle of the captured window (top-left origin, points)."""
    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True)
class ScreenPoint:
    """A point in screen coordinates, ready for the input injector."""
    x: float
    y: float

    def rounded(self) -> Tuple[int, int]:
        return (int(round(self.x)), int(round(self.y)))


def capture_size_for(window_rect: WindowRect, scale_factor: float) -> Tuple[int, int]:
    """Pixel size to request so one image pixel is one device pixel."""
    return (
        max(1, int(round(window_rect.width * scale_factor))),
        max(1, int(round(window_rect.height * scale_factor))),
    )


def map_to_screen(
    markers: Iterable[Marker],
    image_size: Tuple[int, int],
    window_rect: WindowRect,
) -> List[ScreenPoint]:
    """
    Rescale image-space marker centers onto the window's screen rectangle.

    Args:
        markers: centers in image pixels
        image_size: (width, height) of the captured image
        window_rect: where the window sits on screen

    Returns:
        Screen points, in the same order as `markers`
    """
    img_w, img_h = image_size
    if img_w <= 0 or img_h <= 0:
        return []

    scale_x = window_rect.width / img_w
    scale_y = window_rect.height / img_h

    return [
        ScreenPoint(
            x=window_rect.left + m.center_x * scale_x,
            y=window_rect.top + m.center_y * scale_y,
        )
        for m in markers
    ]
