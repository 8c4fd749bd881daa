"""
BadgeDetector - finds notification badges in a captured window.

Pipeline: BGRA buffer -> red mask -> 4-connected regions -> merged
fragments -> shape filter -> screen points.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np
from PIL import Image

from .color_mask import DEFAULT_THRESHOLDS, MarkerThresholds, build_marker_mask
from .coordinates import ScreenPoint, WindowRect, capture_size_for, map_to_screen
from .exceptions import CaptureUnavailable, ClassificationDegenerate
from .regions import RegionLabeler, merge_regions
from .screenshot import PixelBuffer
from .shape_filter import DEFAULT_LIMITS, Marker, ShapeLimits, filter_markers
from .utils import format_duration, log_to_console


@dataclass(frozen=True)
class DetectionSettings:
    """Plain-value knobs for one detector."""
    thresholds: MarkerThresholds = DEFAULT_THRESHOLDS
    merge_gap: int = 3
    limits: ShapeLimits = DEFAULT_LIMITS
    row_height: int = 20
    debug_dump_dir: str = ""


@dataclass
class DetectionStats:
    """Counters and timings from the last detection, for logging."""
    marker_pixels: int = 0
    regions: int = 0
    merged: int = 0
    markers: int = 0
    timings: dict = field(default_factory=dict)


class BadgeDetector:
    """
    Stateless badge detector.

    Every call allocates its own mask and label arrays; the flood-fill stack
    is kept per thread so concurrent calls never share buffers.
    """

    def __init__(
        self,
        settings: Optional[DetectionSettings] = None,
        log_callback: Optional[Callable[[str, str], None]] = None,
    ):
        self.settings = settings or DetectionSettings()
        self._log_callback = log_callback
        self._local = threading.local()
        self.last_stats = DetectionStats()

    def set_log_callback(self, callback: Optional[Callable[[str, str], None]]) -> None:
        self._log_callback = callback

    def log(self, message, tag="info"):
        (self._log_callback or log_to_console)(str(message), str(tag))

    def _labeler(self) -> RegionLabeler:
        labeler = getattr(self._local, "labeler", None)
        if labeler is None:
            labeler = RegionLabeler()
            self._local.labeler = labeler
        return labeler

    def detect_markers(self, buffer: PixelBuffer) -> List[Marker]:
        """
        Find badge centers in image coordinates.

        Raises:
            ClassificationDegenerate: the buffer has no pixels or a bad stride
        """
        s = self.settings
        stats = DetectionStats()

        t0 = time.perf_counter()
        pixels = buffer.as_array()
        mask = build_marker_mask(pixels, s.thresholds)
        stats.marker_pixels = int(np.count_nonzero(mask))
        t1 = time.perf_counter()

        regions, _labels = self._labeler().label(mask)
        stats.regions = len(regions)
        t2 = time.perf_counter()

        merged = merge_regions(regions, s.merge_gap)
        stats.merged = len(merged)
        markers = filter_markers(merged, s.limits, s.row_height)
        stats.markers = len(markers)
        t3 = time.perf_counter()

        stats.timings = {"classify": t1 - t0, "label": t2 - t1, "filter": t3 - t2}
        self.last_stats = stats

        if s.debug_dump_dir:
            self._dump(buffer, mask)

        self.log(
            f"Red pixels: {stats.marker_pixels}, regions: {stats.regions}, "
            f"merged: {stats.merged}, badges: {stats.markers}"
        )
        return markers

    def detect(
        self,
        buffer: PixelBuffer,
        window_rect: WindowRect,
        scale_factor: Optional[float] = None,
    ) -> List[ScreenPoint]:
        """
        Find badges and return their screen positions in reading order.

        Args:
            buffer: BGRA capture of the window
            window_rect: window's on-screen rectangle (top-left origin)
            scale_factor: device pixels per point the capture was requested at

        Returns:
            Screen points; empty when nothing was found or the buffer is unusable
        """
        try:
            markers = self.detect_markers(buffer)
        except ClassificationDegenerate as e:
            self.log(f"Unusable pixel buffer: {e}", "error")
            return []

        if scale_factor:
            expected = capture_size_for(window_rect, scale_factor)
            if abs(expected[0] - buffer.width) > 1 or abs(expected[1] - buffer.height) > 1:
                self.log(
                    f"Capture is {buffer.width}x{buffer.height} but {expected[0]}x{expected[1]} "
                    f"was expected at scale {scale_factor}; positions follow the actual size",
                    "warning",
                )

        return map_to_screen(markers, buffer.size, window_rect)

    def detect_foreground(self, frame_source) -> List[ScreenPoint]:
        """
        Capture the foreground window from `frame_source` and detect badges in it.

        A frame source that cannot capture yields no badges, never an error.
        """
        t0 = time.perf_counter()
        try:
            frame = frame_source.capture_foreground()
        except CaptureUnavailable as e:
            self.log(f"Capture unavailable: {e}", "warning")
            return []
        t1 = time.perf_counter()

        self.log(f"Screenshot: {frame.buffer.width}x{frame.buffer.height} of '{frame.title}'")
        points = self.detect(frame.buffer, frame.window_rect, frame.scale_factor)
        t2 = time.perf_counter()

        self.log(
            f"{len(points)} badges | capture={format_duration(t1 - t0)} "
            f"detect={format_duration(t2 - t1)} total={format_duration(t2 - t0)}"
        )
        return points

    def _dump(self, buffer: PixelBuffer, mask: np.ndarray) -> None:
        """Save the capture and its mask next to each other for tuning."""
        out_dir = Path(self.settings.debug_dump_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        stamp = time.strftime("%Y%m%d-%H%M%S")
        buffer.to_image().save(out_dir / f"capture-{stamp}.png")
        Image.fromarray(mask * 255).save(out_dir / f"mask-{stamp}.png")
        self.log(f"Saved debug images to {out_dir}", "info")
