"""
Frame source: captures the foreground window as a BGRA pixel buffer.
"""

import ctypes
import platform
import threading
from dataclasses import dataclass
from typing import Optional, Tuple

import mss
import mss.exception
import numpy as np
from PIL import Image

from .coordinates import WindowRect, capture_size_for
from .exceptions import CaptureUnavailable, ClassificationDegenerate
from .utils import ForegroundWindow, get_foreground_window


@dataclass(frozen=True)
class PixelBuffer:
    """
    Read-only BGRA pixels, 4 bytes per pixel.

    `stride` is the number of bytes per row and may exceed width * 4 when
    rows are padded; 0 means tightly packed.
    """
    data: bytes
    width: int
    height: int
    stride: int = 0

    @property
    def bytes_per_row(self) -> int:
        return self.stride or self.width * 4

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def as_array(self) -> np.ndarray:
        """(height, width, 4) uint8 view over the buffer, without copying."""
        if self.width <= 0 or self.height <= 0:
            raise ClassificationDegenerate(f"Empty pixel buffer ({self.width}x{self.height})")
        row = self.bytes_per_row
        if row < self.width * 4:
            raise ClassificationDegenerate(f"Stride {row} is shorter than a {self.width}px row")
        needed = row * (self.height - 1) + self.width * 4
        if len(self.data) < needed:
            raise ClassificationDegenerate(
                f"Buffer holds {len(self.data)} bytes, {needed} needed for "
                f"{self.width}x{self.height} at stride {row}"
            )

        flat = np.frombuffer(self.data, dtype=np.uint8, count=needed)
        return np.lib.stride_tricks.as_strided(
            flat,
            shape=(self.height, self.width, 4),
            strides=(row, 4, 1),
            writeable=False,
        )

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        """Build a packed buffer from any PIL image."""
        rgba = image.convert("RGBA")
        return cls(rgba.tobytes("raw", "BGRA"), rgba.width, rgba.height)

    def to_image(self) -> Image.Image:
        """Convert to an RGB PIL image (debug dumps)."""
        arr = self.as_array()
        return Image.fromarray(np.ascontiguousarray(arr[:, :, 2::-1]))

    def resized(self, width: int, height: int) -> "PixelBuffer":
        """Resample to another pixel size."""
        image = Image.frombuffer(
            "RGBA", (self.width, self.height), self.data, "raw", "BGRA", self.bytes_per_row, 1
        )
        return PixelBuffer.from_image(image.resize((width, height), Image.Resampling.BILINEAR))


@dataclass(frozen=True)
class CapturedFrame:
    """One capture of a window, ready for detection."""
    buffer: PixelBuffer
    window_rect: WindowRect
    scale_factor: float
    title: str = ""


class WindowCapture:
    """Captures windows with DPI awareness."""

    def __init__(
        self,
        scale_factor: Optional[float] = None,
        fullscreen_fallback: bool = True,
        min_window_size: int = 50,
    ):
        self.fullscreen_fallback = fullscreen_fallback
        self.min_window_size = min_window_size
        self._scale_override = scale_factor
        self._cached_scale_factor: Optional[float] = None
        self._lock = threading.Lock()
        self._setup_dpi_awareness()

    def _setup_dpi_awareness(self):
        """Set DPI awareness on Windows for accurate coordinates."""
        if platform.system() != "Windows":
            return
        try:
            # Set DPI awareness to per-monitor aware
            ctypes.windll.shcore.SetProcessDpiAwareness(2)
        except (AttributeError, OSError):
            try:
                # Fallback to system DPI aware
                ctypes.windll.user32.SetProcessDPIAware()
            except (AttributeError, OSError):
                pass  # Already set

    def scale_factor(self, rect: WindowRect, native_width: int) -> float:
        """Device pixels per logical point, measured once from a real grab."""
        if self._scale_override:
            return self._scale_override
        with self._lock:
            if self._cached_scale_factor is None:
                measured = native_width / rect.width if rect.width else 1.0
                self._cached_scale_factor = round(measured * 4) / 4 or 1.0
            return self._cached_scale_factor

    def primary_monitor(self) -> WindowRect:
        """The primary monitor, as a capture target."""
        try:
            with mss.mss() as sct:
                monitor = sct.monitors[1]
        except mss.exception.ScreenShotError as e:
            raise CaptureUnavailable(f"Cannot enumerate monitors: {e}") from e
        return WindowRect(
            left=monitor["left"], top=monitor["top"], width=monitor["width"], height=monitor["height"]
        )

    def foreground_window(self) -> ForegroundWindow:
        """Resolve the capture target, falling back to the primary monitor if allowed."""
        window = get_foreground_window(self.min_window_size)
        if window is not None:
            return window
        if not self.fullscreen_fallback:
            raise CaptureUnavailable("No foreground window to capture")
        return ForegroundWindow(handle=0, title="Primary monitor", process_name=None, rect=self.primary_monitor())

    def _grab(self, rect: WindowRect) -> PixelBuffer:
        monitor = {
            "left": int(rect.left),
            "top": int(rect.top),
            "width": int(rect.width),
            "height": int(rect.height),
        }
        try:
            # mss handles are per thread; detection runs on worker threads
            with mss.mss() as sct:
                shot = sct.grab(monitor)
        except mss.exception.ScreenShotError as e:
            raise CaptureUnavailable(f"Screen capture failed: {e}") from e
        return PixelBuffer(bytes(shot.bgra), shot.width, shot.height)

    def capture(self, rect: WindowRect, pixel_width: int, pixel_height: int) -> PixelBuffer:
        """
        Capture a screen rectangle at a specific pixel resolution.

        Args:
            rect: on-screen rectangle in logical points
            pixel_width, pixel_height: requested buffer size

        Returns:
            BGRA PixelBuffer of exactly pixel_width x pixel_height
        """
        buffer = self._grab(rect)
        if buffer.size != (pixel_width, pixel_height):
            buffer = buffer.resized(pixel_width, pixel_height)
        return buffer

    def capture_foreground(self) -> CapturedFrame:
        """Capture the foreground window at device resolution."""
        window = self.foreground_window()
        rect = window.rect

        native = self._grab(rect)
        scale = self.scale_factor(rect, native.width)
        width, height = capture_size_for(rect, scale)
        buffer = native if native.size == (width, height) else native.resized(width, height)

        return CapturedFrame(buffer=buffer, window_rect=rect, scale_factor=scale, title=window.title)
