"""
Connected-component labeling and fragment merging for marker masks.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Tuple

import numpy as np


@dataclass
class Region:
    """Inclusive pixel bounds of one connected component plus its pixel count."""
    min_x: int
    min_y: int
    max_x: int
    max_y: int
    pixel_count: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1

    @property
    def box_area(self) -> int:
        return self.width * self.height

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0)

    def expanded_overlaps(self, other: "Region", gap: int) -> bool:
        """True if this box grown by `gap` on every side intersects `other`."""
        overlap_x = self.min_x <= other.max_x + gap and other.min_x <= self.max_x + gap
        overlap_y = self.min_y <= other.max_y + gap and other.min_y <= self.max_y + gap
        return overlap_x and overlap_y

    def absorb(self, other: "Region") -> None:
        """Grow to the union of both boxes and take over the other's pixels."""
        self.min_x = min(self.min_x, other.min_x)
        self.min_y = min(self.min_y, other.min_y)
        self.max_x = max(self.max_x, other.max_x)
        self.max_y = max(self.max_y, other.max_y)
        self.pixel_count += other.pixel_count


class RegionLabeler:
    """
    4-connected flood-fill labeler.

    The fill stack is an explicit list kept between calls so repeated
    detections do not regrow it; one labeler must not be shared between
    threads.
    """

    def __init__(self):
        self._stack: List[int] = []

    def label(self, mask: np.ndarray) -> Tuple[List[Region], np.ndarray]:
        """
        Label every mask-true pixel.

        Args:
            mask: (height, width) array, non-zero = marker pixel

        Returns:
            (regions, labels) where regions are in discovery (raster) order
            and labels is a (height, width) int32 array, 0 = unlabeled,
            N = index N-1 in regions.
        """
        height, width = mask.shape
        total = width * height
        labels = np.zeros(total, dtype=np.int32)
        regions: List[Region] = []
        if total == 0:
            return regions, labels.reshape(height, width)

        marked = (np.asarray(mask).reshape(total) != 0).tobytes()
        visited = bytearray(total)
        stack = self._stack
        stack.clear()
        current_label = 0
        last_row = total - width

        # flatnonzero walks row-major, so seeds come in raster order
        for seed in np.flatnonzero(np.frombuffer(marked, dtype=np.uint8)).tolist():
            if visited[seed]:
                continue

            current_label += 1
            visited[seed] = 1
            stack.append(seed)
            min_x = max_x = seed % width
            min_y = max_y = seed // width
            count = 0

            while stack:
                idx = stack.pop()
                labels[idx] = current_label
                count += 1
                y, x = divmod(idx, width)
                if x < min_x:
                    min_x = x
                elif x > max_x:
                    max_x = x
                if y < min_y:
                    min_y = y
                elif y > max_y:
                    max_y = y

                if x + 1 < width:
                    n = idx + 1
                    if marked[n] and not visited[n]:
                        visited[n] = 1
                        stack.append(n)
                if x > 0:
                    n = idx - 1
                    if marked[n] and not visited[n]:
                        visited[n] = 1
                        stack.append(n)
                if idx < last_row:
                    n = idx + width
                    if marked[n] and not visited[n]:
                        visited[n] = 1
                        stack.append(n)
                if idx >= width:
                    n = idx - width
                    if marked[n] and not visited[n]:
                        visited[n] = 1
                        stack.append(n)

            regions.append(Region(min_x, min_y, max_x, max_y, count))

        return regions, labels.reshape(height, width)


def label_regions(mask: np.ndarray) -> Tuple[List[Region], np.ndarray]:
    """Label a mask with a fresh labeler."""
    return RegionLabeler().label(mask)


def merge_regions(regions: List[Region], gap: int = 3) -> List[Region]:
    """
    Merge regions whose boxes come within `gap` pixels of each other.

    A badge with white digits splits its red background into several
    components; merging reunites them. Runs pairwise passes until nothing
    changes, so chains of fragments collapse transitively. The input list
    and its regions are left untouched.
    """
    if not regions:
        return []

    merged = [replace(r) for r in regions]
    changed = True

    while changed:
        changed = False
        i = 0
        while i < len(merged):
            j = i + 1
            while j < len(merged):
                if merged[i].expanded_overlaps(merged[j], gap):
                    merged[i].absorb(merged.pop(j))
                    changed = True
                else:
                    j += 1
            i += 1

    return merged
