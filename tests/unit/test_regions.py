"""Unit tests for connected-component labeling and region merging."""
from itertools import permutations

import numpy as np

from reddot.regions import Region, RegionLabeler, label_regions, merge_regions


class TestRegionLabeler:
    """Test suite for the flood-fill labeler."""

    def test_empty_mask(self):
        regions, labels = label_regions(np.zeros((5, 7), dtype=np.uint8))
        assert regions == []
        assert labels.shape == (5, 7)
        assert labels.dtype == np.int32
        assert not labels.any()

    def test_single_block(self):
        mask = np.zeros((10, 10), dtype=np.uint8)
        mask[2:5, 3:8] = 1
        regions, labels = label_regions(mask)

        assert regions == [Region(3, 2, 7, 4, 15)]
        assert (labels[2:5, 3:8] == 1).all()
        assert labels.sum() == 15

    def test_diagonal_neighbours_are_not_connected(self, mask_from_points):
        mask = mask_from_points(4, 4, [(0, 0), (1, 1), (2, 2)])
        regions, labels = label_regions(mask)

        assert len(regions) == 3
        assert {labels[0, 0], labels[1, 1], labels[2, 2]} == {1, 2, 3}

    def test_two_blobs_touching_at_a_corner(self):
        mask = np.zeros((6, 6), dtype=np.uint8)
        mask[0:3, 0:3] = 1
        mask[3:6, 3:6] = 1
        regions, _ = label_regions(mask)

        assert len(regions) == 2
        assert regions[0] == Region(0, 0, 2, 2, 9)
        assert regions[1] == Region(3, 3, 5, 5, 9)

    def test_labels_follow_raster_discovery_order(self, mask_from_points):
        # (5, 0) is discovered before (1, 3) in a row-major scan
        mask = mask_from_points(8, 5, [(1, 3), (5, 0), (0, 4)])
        regions, labels = label_regions(mask)

        assert [(r.min_x, r.min_y) for r in regions] == [(5, 0), (1, 3), (0, 4)]
        assert labels[0, 5] == 1
        assert labels[3, 1] == 2
        assert labels[4, 0] == 3

    def test_concave_shape_is_one_region(self):
        # U shape: the scan meets both arms before the bottom joins them
        mask = np.zeros((6, 7), dtype=np.uint8)
        mask[0:5, 1] = 1
        mask[0:5, 5] = 1
        mask[4, 1:6] = 1
        regions, labels = label_regions(mask)

        assert len(regions) == 1
        assert regions[0] == Region(1, 0, 5, 4, 13)
        assert set(np.unique(labels)) == {0, 1}

    def test_large_region_does_not_recurse(self):
        """A fully marked frame is one region and needs no call stack."""
        mask = np.ones((300, 400), dtype=np.uint8)
        regions, labels = label_regions(mask)

        assert regions == [Region(0, 0, 399, 299, 120000)]
        assert (labels == 1).all()

    def test_every_marked_pixel_is_labeled_once(self):
        rng = np.random.default_rng(7)
        mask = (rng.random((30, 40)) < 0.3).astype(np.uint8)
        regions, labels = label_regions(mask)

        assert ((labels > 0) == (mask > 0)).all()
        assert sum(r.pixel_count for r in regions) == int(mask.sum())
        for index, region in enumerate(regions, start=1):
            ys, xs = np.nonzero(labels == index)
            assert region.pixel_count == len(xs)
            assert (region.min_x, region.max_x) == (xs.min(), xs.max())
            assert (region.min_y, region.max_y) == (ys.min(), ys.max())
            assert region.pixel_count <= region.box_area

    def test_labeler_can_be_reused(self):
        labeler = RegionLabeler()
        first = np.zeros((4, 4), dtype=np.uint8)
        first[1:3, 1:3] = 1
        second = np.zeros((4, 4), dtype=np.uint8)
        second[0, 0] = 1

        assert labeler.label(first)[0] == [Region(1, 1, 2, 2, 4)]
        assert labeler.label(second)[0] == [Region(0, 0, 0, 0, 1)]


class TestMergeRegions:
    """Test suite for gap-tolerant region merging."""

    def test_regions_two_pixels_apart_merge(self):
        a = Region(0, 0, 10, 10, 50)
        b = Region(13, 0, 20, 10, 40)  # columns 11 and 12 empty
        merged = merge_regions([a, b], gap=3)

        assert merged == [Region(0, 0, 20, 10, 90)]

    def test_regions_four_pixels_apart_stay_separate(self):
        a = Region(0, 0, 10, 10, 50)
        b = Region(15, 0, 20, 10, 40)  # columns 11-14 empty
        merged = merge_regions([a, b], gap=3)

        assert merged == [a, b]

    def test_axes_are_tested_independently(self):
        # Close on X but far on Y
        a = Region(0, 0, 10, 10, 50)
        b = Region(5, 30, 10, 40, 40)
        assert len(merge_regions([a, b], gap=3)) == 2

    def test_merge_is_transitive(self):
        # a and c are too far apart, but b bridges them
        a = Region(0, 0, 4, 4, 25)
        b = Region(7, 0, 11, 4, 25)
        c = Region(14, 0, 18, 4, 25)
        merged = merge_regions([a, c, b], gap=3)

        assert merged == [Region(0, 0, 18, 4, 75)]

    def test_merge_order_does_not_matter(self):
        a = Region(0, 0, 4, 4, 25)
        b = Region(6, 2, 9, 8, 20)
        c = Region(2, 10, 8, 12, 15)
        results = {tuple(vars(r).values()) for order in permutations([a, b, c])
                   for r in merge_regions(list(order), gap=3)}

        assert results == {(0, 0, 9, 12, 60)}

    def test_inputs_are_not_modified(self):
        a = Region(0, 0, 4, 4, 25)
        b = Region(6, 0, 9, 4, 20)
        regions = [a, b]
        merge_regions(regions, gap=3)

        assert regions == [Region(0, 0, 4, 4, 25), Region(6, 0, 9, 4, 20)]

    def test_empty_input(self):
        assert merge_regions([], gap=3) == []

    def test_zero_gap_merges_only_overlapping_boxes(self):
        a = Region(0, 0, 4, 4, 25)
        touching = Region(4, 0, 8, 4, 20)
        adjacent = Region(5, 10, 9, 14, 20)
        b = Region(0, 10, 4, 14, 25)

        assert len(merge_regions([a, touching], gap=0)) == 1
        assert len(merge_regions([b, adjacent], gap=0)) == 2
