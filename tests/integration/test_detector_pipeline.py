"""
End-to-end detector tests on synthetic frames: classification, labeling,
merging, filtering and mapping together.
"""
from types import SimpleNamespace

import pytest

from reddot.controller import assign_hints
from reddot.coordinates import ScreenPoint, WindowRect
from reddot.detector import BadgeDetector, DetectionSettings
from reddot.exceptions import CaptureUnavailable
from reddot.regions import Region, label_regions, merge_regions
from reddot.screenshot import CapturedFrame, PixelBuffer


WHITE = (255, 255, 255)


@pytest.fixture
def detector(quiet_log):
    return BadgeDetector(log_callback=quiet_log)


class TestBadgeDetector:
    """Test suite for BadgeDetector on synthetic captures."""

    def test_single_badge(self, detector, frame):
        buffer = frame(200, 200).badge(50, 50, size=20).buffer()

        points = detector.detect(buffer, WindowRect(0, 0, 200, 200))

        assert len(points) == 1
        assert points[0].x == pytest.approx(60, abs=1)
        assert points[0].y == pytest.approx(60, abs=1)

    def test_badge_split_by_digit_is_merged(self, detector, frame):
        """A white glyph cutting the badge in two still gives one badge."""
        canvas = frame(200, 200).badge(50, 50, size=20).fill(59, 50, 61, 70, WHITE)

        markers = detector.detect_markers(canvas.buffer())
        regions, _ = label_regions(canvas.mask())

        assert merge_regions(regions, gap=3) == [Region(50, 50, 69, 69, 20 * 20 - 2 * 20)]
        assert detector.last_stats.regions == 2
        assert detector.last_stats.merged == 1
        assert markers[0].center_x == pytest.approx(59.5)
        assert markers[0].center_y == pytest.approx(59.5)

    def test_twenty_seven_badges_in_reading_order(self, detector, frame):
        canvas = frame(300, 120)
        for y in (10, 50, 90):
            for i in range(9):
                canvas.badge(10 + 30 * i, y)

        points = detector.detect(canvas.buffer(), WindowRect(0, 0, 300, 120))
        hints = assign_hints(points)

        assert len(points) == 27
        assert len(hints) == 26
        expected = [(14.5 + 30 * i, y + 4.5) for y in (10, 50, 90) for i in range(9)]
        assert [(p.x, p.y) for p in points] == expected
        assert hints[0].point == ScreenPoint(14.5, 14.5)
        assert hints[-1].label == "z"
        assert hints[-1].point == points[25]

    def test_thin_line_is_not_a_badge(self, detector, frame):
        buffer = frame(200, 200).fill(20, 20, 23, 60, (230, 30, 30)).buffer()
        assert detector.detect(buffer, WindowRect(0, 0, 200, 200)) == []

    def test_large_red_area_is_not_a_badge(self, detector, frame):
        buffer = frame(200, 200).fill(0, 0, 120, 120, (230, 30, 30)).buffer()
        assert detector.detect(buffer, WindowRect(0, 0, 200, 200)) == []

    def test_padded_rows_give_same_result(self, detector, frame):
        canvas = frame(120, 80).badge(10, 10).badge(70, 40, size=14)
        rect = WindowRect(0, 0, 120, 80)

        packed = detector.detect(canvas.buffer(), rect)
        padded = detector.detect(canvas.buffer(row_padding=16), rect)

        assert len(packed) == 2
        assert padded == packed

    @pytest.mark.parametrize("buffer", [
        PixelBuffer(b"", 0, 0),
        PixelBuffer(b"", 10, 10),
        PixelBuffer(bytes(400), 10, 10, stride=8),
    ])
    def test_degenerate_buffer_gives_nothing(self, detector, buffer, quiet_log):
        assert detector.detect(buffer, WindowRect(0, 0, 10, 10)) == []
        assert any(tag == "error" for tag, _ in quiet_log.messages)

    def test_retina_capture_maps_back_to_points(self, detector, frame):
        """A 2x capture of a window at (100, 200) lands on logical points."""
        buffer = frame(400, 300).badge(200, 100, size=20).buffer()
        rect = WindowRect(100, 200, 200, 150)

        (point,) = detector.detect(buffer, rect, scale_factor=2.0)

        assert point.x == pytest.approx(100 + 209.5 / 2)
        assert point.y == pytest.approx(200 + 109.5 / 2)

    def test_unexpected_capture_size_is_reported(self, detector, frame, quiet_log):
        buffer = frame(100, 100).badge(40, 40).buffer()
        points = detector.detect(buffer, WindowRect(0, 0, 100, 100), scale_factor=2.0)

        assert len(points) == 1
        assert any(tag == "warning" for tag, _ in quiet_log.messages)

    def test_zero_gap_keeps_fragments_apart(self, frame, quiet_log):
        detector = BadgeDetector(DetectionSettings(merge_gap=0), log_callback=quiet_log)
        buffer = (
            frame(200, 200)
            .fill(40, 50, 70, 70, (230, 30, 30))
            .fill(54, 50, 58, 70, WHITE)
            .buffer()
        )

        assert len(detector.detect(buffer, WindowRect(0, 0, 200, 200))) == 2

    def test_debug_dump(self, frame, tmp_path, quiet_log):
        detector = BadgeDetector(DetectionSettings(debug_dump_dir=str(tmp_path)), log_callback=quiet_log)
        detector.detect(frame(50, 50).badge(10, 10).buffer(), WindowRect(0, 0, 50, 50))

        names = sorted(p.name.split("-")[0] for p in tmp_path.iterdir())
        assert names == ["capture", "mask"]


class TestDetectForeground:

    def test_capture_failure_gives_nothing(self, detector, quiet_log):
        def capture_foreground():
            raise CaptureUnavailable("screen recording not permitted")

        source = SimpleNamespace(capture_foreground=capture_foreground)

        assert detector.detect_foreground(source) == []
        assert any("not permitted" in msg for _, msg in quiet_log.messages)

    def test_uses_frame_geometry(self, detector, frame):
        buffer = frame(200, 160).badge(100, 60).buffer()
        captured = CapturedFrame(buffer=buffer, window_rect=WindowRect(10, 20, 100, 80), scale_factor=2.0)
        source = SimpleNamespace(capture_foreground=lambda: captured)

        (point,) = detector.detect_foreground(source)

        assert point == ScreenPoint(10 + 104.5 / 2, 20 + 64.5 / 2)
