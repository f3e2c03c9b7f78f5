"""Tests for the annotated overlay image."""

import os
import tempfile
import unittest

import numpy as np

from graph_digitizer.calibration import CalibrationModel
from graph_digitizer.color import ColorMatcher
from graph_digitizer.cv_utils import PixelBuffer
from graph_digitizer.data_model import DataPoint, DataPointStore
from graph_digitizer.region import Rect, RegionMask

try:
    import cv2  # noqa: F401
    HAS_CV2 = True
except ImportError:
    HAS_CV2 = False

if HAS_CV2:
    from graph_digitizer.render import HIGHLIGHT_COLOR, POINT_COLOR, ROI_COLOR, render_overlay, save_overlay


def _buffer():
    rgb = np.full((60, 80, 3), 255, dtype=np.uint8)
    rgb[5, 70] = (0, 0, 255)
    return PixelBuffer.from_rgb(rgb)


@unittest.skipUnless(HAS_CV2, "OpenCV not installed")
class TestRenderOverlay(unittest.TestCase):

    def test_plain_copy(self):
        buf = _buffer()
        out = render_overlay(buf)
        self.assertEqual(out.shape, (60, 80, 3))
        self.assertTrue(np.array_equal(out, buf.rgb))
        self.assertIsNot(out, buf.rgb)

    def test_points_and_regions_drawn(self):
        buf = _buffer()
        region = RegionMask(buf.width, buf.height)
        region.set_roi(Rect(2, 2, 60, 50))
        out = render_overlay(buf, region=region, points=[DataPoint(30, 30, 0.0, 0.0)])
        self.assertEqual(tuple(out[30, 30]), POINT_COLOR)
        self.assertEqual(tuple(out[2, 20]), ROI_COLOR)
        # source untouched
        self.assertEqual(tuple(buf.rgb[30, 30]), (255, 255, 255))

    def test_highlight(self):
        buf = _buffer()
        preview = ColorMatcher().preview(buf, RegionMask(buf.width, buf.height))
        out = render_overlay(buf, highlight=preview)
        self.assertEqual(tuple(out[5, 70]), HIGHLIGHT_COLOR)

    def test_anchors_drawn(self):
        buf = _buffer()
        cal = CalibrationModel()
        cal.set_point("x1", 20, 40)
        out = render_overlay(buf, calibration=cal)
        self.assertFalse(np.array_equal(out, buf.rgb))

    def test_edited_point_stays_at_its_pixel(self):
        buf = _buffer()
        store = DataPointStore([DataPoint(30, 30, 1.0, 1.0)])
        store.update_at(0, 500.0, -500.0)
        out = render_overlay(buf, points=store.points)
        self.assertEqual(tuple(out[30, 30]), POINT_COLOR)

    def test_save(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "overlay.png")
            save_overlay(path, render_overlay(_buffer()))
            self.assertTrue(os.path.getsize(path) > 0)


if __name__ == "__main__":
    unittest.main()
