"""
Shape filter: keeps small, roughly square, mostly filled blobs and turns
them into marker centers in reading order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List

from .regions import Region


@dataclass(frozen=True)
class ShapeLimits:
    """Geometry a badge must satisfy. Bounds are inclusive."""
    min_pixels: int = 20
    max_pixels: int = 3000
    min_width: int = 5
    max_width: int = 60
    min_height: int = 5
    max_height: int = 40
    min_aspect: float = 0.5
    max_aspect: float = 3.0
    min_fill_ratio: float = 0.35  # Loose enough for badges with digits in them


DEFAULT_LIMITS = ShapeLimits()


@dataclass(frozen=True)
class Marker:
    """Center of an accepted badge, in image pixels."""
    center_x: float
    center_y: float


def accepts(region: Region, limits: ShapeLimits = DEFAULT_LIMITS) -> bool:
    """Return True if the region looks like a badge."""
    width = region.width
    height = region.height

    if width < limits.min_width or width > limits.max_width:
        return False
    if height < limits.min_height or height > limits.max_height:
        return False
    if region.pixel_count < limits.min_pixels or region.pixel_count > limits.max_pixels:
        return False

    aspect = width / height
    if aspect < limits.min_aspect or aspect > limits.max_aspect:
        return False

    return region.pixel_count / region.box_area >= limits.min_fill_ratio


def reading_order_key(marker: Marker, row_height: int = 20):
    """Sort key: rows of `row_height` pixels top to bottom, then left to right."""
    return (math.floor(marker.center_y / row_height), marker.center_x)


def filter_markers(
    regions: Iterable[Region],
    limits: ShapeLimits = DEFAULT_LIMITS,
    row_height: int = 20,
) -> List[Marker]:
    """Drop non-badge regions and return the survivors' centers in reading order."""
    markers = []
    for region in regions:
        if not accepts(region, limits):
            continue
        cx, cy = region.center
        markers.append(Marker(cx, cy))

    markers.sort(key=lambda m: reading_order_key(m, row_height))
    return markers
