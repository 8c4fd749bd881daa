"""Pytest configuration and shared fixtures for Reddot.

Provides synthetic BGRA frames and fake collaborators (overlay, input
injector, frame source) so the detector and the hint controller can be
tested without a display.
"""
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import List, Tuple
from unittest.mock import Mock

import numpy as np
import pytest

# Add the project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from reddot.screenshot import PixelBuffer


BADGE_RED = (230, 30, 30)  # r, g, b
BACKGROUND = (200, 200, 200)
WHITE = (255, 255, 255)


class FrameBuilder:
    """Paints rectangles onto a BGRA canvas."""

    def __init__(self, width: int, height: int, background=BACKGROUND):
        self.pixels = np.zeros((height, width, 4), dtype=np.uint8)
        self.fill(0, 0, width, height, background)

    def fill(self, x0: int, y0: int, x1: int, y1: int, rgb) -> "FrameBuilder":
        """Fill [x0, x1) x [y0, y1) with an (r, g, b) color."""
        r, g, b = rgb
        self.pixels[y0:y1, x0:x1] = (b, g, r, 255)
        return self

    def badge(self, x0: int, y0: int, size: int = 10) -> "FrameBuilder":
        return self.fill(x0, y0, x0 + size, y0 + size, BADGE_RED)

    def mask(self) -> np.ndarray:
        return np.all(self.pixels[:, :, :3] == (BADGE_RED[2], BADGE_RED[1], BADGE_RED[0]), axis=2).astype(np.uint8)

    def buffer(self, row_padding: int = 0) -> PixelBuffer:
        height, width = self.pixels.shape[:2]
        if row_padding:
            padded = np.zeros((height, width + row_padding, 4), dtype=np.uint8)
            padded[:, :width] = self.pixels
            return PixelBuffer(padded.tobytes(), width, height, stride=(width + row_padding) * 4)
        return PixelBuffer(self.pixels.tobytes(), width, height)


@pytest.fixture
def frame():
    """Factory for synthetic frames."""
    def _make(width: int = 200, height: int = 200) -> FrameBuilder:
        return FrameBuilder(width, height)
    return _make


@pytest.fixture
def mask_from_points():
    """Build a uint8 mask from a list of (x, y) marked pixels."""
    def _make(width: int, height: int, points: List[Tuple[int, int]]) -> np.ndarray:
        mask = np.zeros((height, width), dtype=np.uint8)
        for x, y in points:
            mask[y, x] = 1
        return mask
    return _make


@pytest.fixture
def overlay():
    """Fake overlay renderer."""
    return Mock(spec=["show_hints", "show_status", "dismiss_all"])


@pytest.fixture
def injector():
    """Fake input injector whose actions always succeed."""
    fake = Mock(spec=["move_to", "click"])
    fake.move_to.return_value = SimpleNamespace(success=True, message="moved")
    fake.click.return_value = SimpleNamespace(success=True, message="clicked")
    return fake


@pytest.fixture
def inline_spawn():
    """Run background work immediately on the calling thread."""
    def _spawn(target, *args):
        target(*args)
    return _spawn


class DeferredSpawn:
    """Collects background work so a test decides when it runs."""

    def __init__(self):
        self.jobs = []

    def __call__(self, target, *args):
        self.jobs.append((target, args))

    def run_next(self):
        target, args = self.jobs.pop(0)
        target(*args)


@pytest.fixture
def deferred_spawn():
    return DeferredSpawn()


@pytest.fixture
def quiet_log():
    """Log sink that records messages instead of printing them."""
    messages = []

    def _log(message, tag):
        messages.append((tag, message))
    _log.messages = messages
    return _log
