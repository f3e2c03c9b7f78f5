from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

ANCHOR_KEYS = ("x1", "x2", "y1", "y2")
DEFAULT_VALUES = {"x1": 0.0, "x2": 10.0, "y1": 0.0, "y2": 10.0}


class DegenerateCalibrationError(ValueError):
    """Both anchors of an axis sit on the same pixel, so the axis has no scale."""


def parse_value(s: Union[str, float, int, None]) -> float:
    # Lenient: anything that is not a finite number becomes 0.
    if s is None:
        return 0.0
    try:
        v = float(s.strip() if isinstance(s, str) else s)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(v):
        return 0.0
    return v


@dataclass(frozen=True)
class CalibrationPoint:
    pixel_x: float
    pixel_y: float


@dataclass
class AxisCalibration:
    # pixel anchors
    p0: float
    p1: float
    # value anchors
    v0: float
    v1: float

    def is_valid(self) -> bool:
        return self.p0 != self.p1

    def px_to_value(self, p: float) -> float:
        if not self.is_valid():
            raise DegenerateCalibrationError(
                f"Axis anchors share the same pixel coordinate ({self.p0})."
            )
        t = (p - self.p0) / (self.p1 - self.p0)
        return self.v0 + t * (self.v1 - self.v0)


class CalibrationModel:
    """
    Four-anchor linear pixel -> data mapping.

    x1/x2 anchor the horizontal axis through their pixel x, y1/y2 anchor the
    vertical axis through their pixel y. Each axis is mapped independently,
    so inverted axes (x2 value < x1 value) and anchors away from the origin
    both work. Until all four anchors are placed, pixel_to_data is the
    identity so provisional points can still be shown.
    """

    def __init__(self) -> None:
        self.points: Dict[str, Optional[CalibrationPoint]] = {k: None for k in ANCHOR_KEYS}
        self.values: Dict[str, float] = dict(DEFAULT_VALUES)
        self.calibrated = False

    @staticmethod
    def _check_key(key: str) -> None:
        if key not in ANCHOR_KEYS:
            raise KeyError(f"Unknown calibration anchor: {key!r}")

    def set_point(self, key: str, px: float, py: float) -> None:
        self._check_key(key)
        self.points[key] = CalibrationPoint(float(px), float(py))
        logger.debug("calibration anchor %s at (%s, %s)", key, px, py)
        self._check_calibration()

    def set_value(self, key: str, value) -> float:
        self._check_key(key)
        v = parse_value(value)
        self.values[key] = v
        self._check_calibration()
        return v

    def reset(self) -> None:
        self.points = {k: None for k in ANCHOR_KEYS}
        self.values = dict(DEFAULT_VALUES)
        self.calibrated = False

    def _check_calibration(self) -> bool:
        self.calibrated = all(self.points[k] is not None for k in ANCHOR_KEYS)
        return self.calibrated

    def is_calibrated(self) -> bool:
        return self.calibrated

    def missing_anchors(self) -> List[str]:
        return [k for k in ANCHOR_KEYS if self.points[k] is None]

    def x_axis(self) -> AxisCalibration:
        p1, p2 = self.points["x1"], self.points["x2"]
        if p1 is None or p2 is None:
            raise ValueError("X axis anchors are not set.")
        return AxisCalibration(p1.pixel_x, p2.pixel_x, self.values["x1"], self.values["x2"])

    def y_axis(self) -> AxisCalibration:
        p1, p2 = self.points["y1"], self.points["y2"]
        if p1 is None or p2 is None:
            raise ValueError("Y axis anchors are not set.")
        return AxisCalibration(p1.pixel_y, p2.pixel_y, self.values["y1"], self.values["y2"])

    def is_degenerate(self) -> bool:
        if not self.calibrated:
            return False
        return not (self.x_axis().is_valid() and self.y_axis().is_valid())

    def pixel_to_data(self, px: float, py: float) -> Tuple[float, float]:
        if not self.calibrated:
            return float(px), float(py)
        return self.x_axis().px_to_value(px), self.y_axis().px_to_value(py)

    def status_message(self) -> str:
        missing = self.missing_anchors()
        if missing:
            return f"Set {len(missing)} more calibration point(s): {', '.join(missing)}"
        if self.is_degenerate():
            return "Calibration anchors overlap: x1/x2 (or y1/y2) share the same pixel."
        return "Calibration complete! You can now extract data."
