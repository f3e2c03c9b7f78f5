"""Tests for ROI / exclusion masking."""

import unittest

import numpy as np

from graph_digitizer.region import Bounds, Rect, RegionMask


class TestRect(unittest.TestCase):

    def test_normalizes_corners(self):
        r = Rect(50, 60, 10, 20)
        self.assertEqual((r.x1, r.y1, r.x2, r.y2), (10, 20, 50, 60))
        self.assertEqual(r.width, 40)
        self.assertEqual(r.height, 40)

    def test_contains_is_inclusive(self):
        r = Rect(10, 10, 20, 20)
        self.assertTrue(r.contains(10, 10))
        self.assertTrue(r.contains(20, 20))
        self.assertTrue(r.contains(15, 20))
        self.assertFalse(r.contains(21, 15))
        self.assertFalse(r.contains(9, 15))

    def test_min_size(self):
        self.assertFalse(Rect(0, 0, 9, 20).is_large_enough())
        self.assertFalse(Rect(0, 0, 20, 9).is_large_enough())
        self.assertTrue(Rect(0, 0, 10, 10).is_large_enough())
        self.assertTrue(Rect(0, 0, 5, 5).is_large_enough(min_size=5))


class TestRegionMask(unittest.TestCase):

    def test_full_image_without_roi(self):
        region = RegionMask(100, 50)
        self.assertEqual(region.bounds(), Bounds(0, 100, 0, 50))

    def test_roi_bounds_include_both_edges(self):
        region = RegionMask(100, 50)
        region.set_roi(Rect(10, 5, 20, 15))
        b = region.bounds()
        self.assertEqual(b, Bounds(10, 21, 5, 16))
        self.assertEqual((b.width, b.height), (11, 11))

    def test_roi_clamped_to_image(self):
        region = RegionMask(100, 50)
        region.set_roi(Rect(-5, -5, 200, 200))
        self.assertEqual(region.bounds(), Bounds(0, 100, 0, 50))

    def test_roi_outside_image_is_empty(self):
        region = RegionMask(100, 50)
        region.set_roi(Rect(150, 60, 180, 90))
        self.assertTrue(region.bounds().is_empty())

    def test_fractional_roi(self):
        region = RegionMask(100, 50)
        region.set_roi(Rect(10.5, 5.2, 20.7, 15.9))
        self.assertEqual(region.bounds(), Bounds(11, 21, 6, 16))

    def test_clear_roi(self):
        region = RegionMask(100, 50)
        region.set_roi(Rect(10, 5, 20, 15))
        region.clear_roi()
        self.assertIsNone(region.roi)
        self.assertEqual(region.bounds(), Bounds(0, 100, 0, 50))

    def test_exclusions(self):
        region = RegionMask(100, 50)
        region.add_exclude(Rect(10, 10, 20, 20))
        region.add_exclude(Rect(30, 30, 35, 35))
        self.assertTrue(region.is_excluded(10, 10))
        self.assertTrue(region.is_excluded(20, 20))
        self.assertTrue(region.is_excluded(33, 31))
        self.assertFalse(region.is_excluded(25, 25))
        region.clear_excludes()
        self.assertEqual(region.excludes, [])
        self.assertFalse(region.is_excluded(10, 10))

    def test_excluded_mask_agrees_with_is_excluded(self):
        region = RegionMask(40, 30)
        region.set_roi(Rect(5, 4, 30, 25))
        region.add_exclude(Rect(0, 0, 8, 8))
        region.add_exclude(Rect(12.5, 10, 20, 14.5))
        region.add_exclude(Rect(28, 20, 60, 60))
        b = region.bounds()
        mask = region.excluded_mask(b)
        self.assertEqual(mask.shape, (b.height, b.width))
        for y in range(b.start_y, b.end_y):
            for x in range(b.start_x, b.end_x):
                self.assertEqual(
                    bool(mask[y - b.start_y, x - b.start_x]),
                    region.is_excluded(x, y),
                    msg=f"pixel ({x}, {y})",
                )

    def test_excluded_mask_without_excludes(self):
        region = RegionMask(10, 8)
        mask = region.excluded_mask()
        self.assertEqual(mask.shape, (8, 10))
        self.assertFalse(np.any(mask))


if __name__ == "__main__":
    unittest.main()
