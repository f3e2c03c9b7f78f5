"""Tests for the four-anchor pixel -> data calibration."""

import unittest

from graph_digitizer.calibration import (
    AxisCalibration,
    CalibrationModel,
    DegenerateCalibrationError,
    parse_value,
)


def _scenario_calibration():
    cal = CalibrationModel()
    cal.set_point("x1", 10, 40)
    cal.set_point("x2", 90, 40)
    cal.set_point("y1", 10, 40)
    cal.set_point("y2", 10, 10)
    cal.set_value("x1", "0")
    cal.set_value("x2", "10")
    cal.set_value("y1", "0")
    cal.set_value("y2", "5")
    return cal


class TestCalibrationModel(unittest.TestCase):

    def test_defaults(self):
        cal = CalibrationModel()
        self.assertEqual(cal.values, {"x1": 0.0, "x2": 10.0, "y1": 0.0, "y2": 10.0})
        self.assertFalse(cal.is_calibrated())
        self.assertEqual(cal.missing_anchors(), ["x1", "x2", "y1", "y2"])

    def test_identity_until_all_anchors_set(self):
        cal = CalibrationModel()
        cal.set_point("x1", 10, 40)
        cal.set_point("x2", 90, 40)
        cal.set_point("y1", 10, 40)
        self.assertFalse(cal.is_calibrated())
        self.assertEqual(cal.pixel_to_data(33, 44), (33.0, 44.0))
        self.assertIn("1 more", cal.status_message())
        self.assertIn("y2", cal.status_message())

    def test_anchor_pixels_map_to_anchor_values(self):
        cal = _scenario_calibration()
        self.assertTrue(cal.is_calibrated())
        for py in (0, 17, 49):
            self.assertAlmostEqual(cal.pixel_to_data(10, py)[0], 0.0)
            self.assertAlmostEqual(cal.pixel_to_data(90, py)[0], 10.0)
        for px in (0, 55, 99):
            self.assertAlmostEqual(cal.pixel_to_data(px, 40)[1], 0.0)
            self.assertAlmostEqual(cal.pixel_to_data(px, 10)[1], 5.0)

    def test_scenario_point(self):
        cal = _scenario_calibration()
        x, y = cal.pixel_to_data(50, 25)
        self.assertAlmostEqual(x, 5.0)
        self.assertAlmostEqual(y, 2.5)

    def test_monotonic_between_anchors(self):
        cal = _scenario_calibration()
        xs = [cal.pixel_to_data(px, 0)[0] for px in range(10, 91)]
        for a, b in zip(xs, xs[1:]):
            self.assertLess(a, b)

    def test_inverted_axis(self):
        cal = _scenario_calibration()
        cal.set_value("x1", "10")
        cal.set_value("x2", "0")
        xs = [cal.pixel_to_data(px, 0)[0] for px in range(10, 91, 5)]
        for a, b in zip(xs, xs[1:]):
            self.assertGreater(a, b)
        self.assertAlmostEqual(cal.pixel_to_data(10, 0)[0], 10.0)
        self.assertAlmostEqual(cal.pixel_to_data(90, 0)[0], 0.0)

    def test_overwriting_anchor(self):
        cal = _scenario_calibration()
        cal.set_point("x2", 50, 40)
        self.assertAlmostEqual(cal.pixel_to_data(50, 0)[0], 10.0)

    def test_degenerate_x(self):
        cal = _scenario_calibration()
        cal.set_point("x2", 10, 30)
        self.assertTrue(cal.is_degenerate())
        with self.assertRaises(DegenerateCalibrationError):
            cal.pixel_to_data(50, 25)
        self.assertIn("overlap", cal.status_message())

    def test_degenerate_y_is_value_error(self):
        cal = _scenario_calibration()
        cal.set_point("y2", 80, 40)
        self.assertTrue(cal.is_degenerate())
        with self.assertRaises(ValueError):
            cal.pixel_to_data(50, 25)

    def test_incomplete_is_not_degenerate(self):
        cal = CalibrationModel()
        cal.set_point("x1", 10, 10)
        cal.set_point("x2", 10, 10)
        self.assertFalse(cal.is_degenerate())

    def test_set_value_is_lenient(self):
        cal = CalibrationModel()
        self.assertEqual(cal.set_value("x2", "abc"), 0.0)
        self.assertEqual(cal.values["x2"], 0.0)
        self.assertEqual(cal.set_value("y2", " 2.5 "), 2.5)
        self.assertEqual(cal.set_value("y1", 3), 3.0)

    def test_unknown_key(self):
        cal = CalibrationModel()
        with self.assertRaises(KeyError):
            cal.set_point("z1", 0, 0)
        with self.assertRaises(KeyError):
            cal.set_value("x3", "1")

    def test_reset(self):
        cal = _scenario_calibration()
        cal.reset()
        self.assertFalse(cal.is_calibrated())
        self.assertEqual(cal.values["y2"], 10.0)
        self.assertEqual(cal.missing_anchors(), ["x1", "x2", "y1", "y2"])


class TestParseValue(unittest.TestCase):

    def test_values(self):
        self.assertEqual(parse_value("1.5"), 1.5)
        self.assertEqual(parse_value("-3"), -3.0)
        self.assertEqual(parse_value("1e3"), 1000.0)
        self.assertEqual(parse_value(""), 0.0)
        self.assertEqual(parse_value(None), 0.0)
        self.assertEqual(parse_value("nan"), 0.0)
        self.assertEqual(parse_value("inf"), 0.0)
        self.assertEqual(parse_value("12abc"), 0.0)


class TestAxisCalibration(unittest.TestCase):

    def test_pixel_axis_pointing_up(self):
        ax = AxisCalibration(p0=100, p1=20, v0=0, v1=8)
        self.assertTrue(ax.is_valid())
        self.assertAlmostEqual(ax.px_to_value(60), 4.0)
        self.assertAlmostEqual(ax.px_to_value(20), 8.0)

    def test_invalid(self):
        ax = AxisCalibration(p0=5, p1=5, v0=0, v1=1)
        self.assertFalse(ax.is_valid())
        with self.assertRaises(DegenerateCalibrationError):
            ax.px_to_value(3)


if __name__ == "__main__":
    unittest.main()
