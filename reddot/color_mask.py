"""
Marker-color classification.

A pixel is "marker colored" when it is bright, saturated and its hue sits
within 15 degrees of pure red. All tests are integer inequalities so the
scalar and the vectorised forms agree exactly.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class MarkerThresholds:
    """Tunable classification thresholds (all on the 0-255 scale)."""
    v_min: int = 128  # V >= 0.50
    s_min_255: int = 153  # S >= 0.60, as delta * 255 >= max * s_min_255
    hue_band_divisor: int = 4  # |g - b| * 4 <= delta  <=>  hue in [345, 360] U [0, 15]


DEFAULT_THRESHOLDS = MarkerThresholds()


def is_marker_pixel(r: int, g: int, b: int, thresholds: MarkerThresholds = DEFAULT_THRESHOLDS) -> bool:
    """Return True if one (r, g, b) pixel is near-red, bright and saturated."""
    max_c = max(r, g, b)
    if max_c < thresholds.v_min:
        return False

    delta = max_c - min(r, g, b)
    if delta == 0:
        return False
    if delta * 255 < max_c * thresholds.s_min_255:
        return False

    # Hue band only makes sense around red
    if r != max_c:
        return False

    return abs(g - b) * thresholds.hue_band_divisor <= delta


def build_marker_mask(pixels: np.ndarray, thresholds: MarkerThresholds = DEFAULT_THRESHOLDS) -> np.ndarray:
    """
    Classify every pixel of a BGRA image.

    Args:
        pixels: (height, width, 4) uint8 array in blue, green, red, alpha order
        thresholds: classification thresholds

    Returns:
        (height, width) uint8 mask, 1 where the pixel is marker colored
    """
    if pixels.ndim != 3 or pixels.shape[2] < 3:
        raise ValueError(f"Expected a (h, w, 4) BGRA array, got shape {pixels.shape}")

    b = pixels[:, :, 0].astype(np.int32)
    g = pixels[:, :, 1].astype(np.int32)
    r = pixels[:, :, 2].astype(np.int32)

    max_c = np.maximum(np.maximum(r, g), b)
    delta = max_c - np.minimum(np.minimum(r, g), b)

    mask = max_c >= thresholds.v_min
    mask &= delta > 0
    mask &= delta * 255 >= max_c * thresholds.s_min_255
    mask &= r == max_c
    mask &= np.abs(g - b) * thresholds.hue_band_divisor <= delta
    return mask.astype(np.uint8)
