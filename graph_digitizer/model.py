from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Literal

from .calibration import CalibrationModel, DegenerateCalibrationError
from .color import ColorMatcher
from .cv_utils import PixelBuffer
from .data_model import DataPoint, DataPointStore
from .extract import ExtractionParams, extract_points
from .region import RegionMask

logger = logging.getLogger(__name__)

ExtractionStatus = Literal["ok", "not_calibrated", "degenerate_calibration"]

STATUS_MESSAGES = {
    "not_calibrated": "Please complete axis calibration first.",
    "degenerate_calibration": "Calibration anchors overlap: x1/x2 (or y1/y2) share the same pixel. Move one of them.",
}


@dataclass
class ExtractionResult:
    status: ExtractionStatus
    points: List[DataPoint] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def message(self) -> str:
        if self.ok:
            return f"{len(self.points)} points"
        return STATUS_MESSAGES[self.status]


@dataclass
class DigitizerState:
    """Everything one loaded image needs: calibration, region, color, points."""
    buffer: PixelBuffer
    calibration: CalibrationModel = field(default_factory=CalibrationModel)
    matcher: ColorMatcher = field(default_factory=ColorMatcher)
    params: ExtractionParams = field(default_factory=ExtractionParams)
    store: DataPointStore = field(default_factory=DataPointStore)
    region: RegionMask = None  # type: ignore[assignment]

    def __post_init__(self):
        if self.region is None:
            self.region = RegionMask(self.buffer.width, self.buffer.height)

    def run_extraction(self) -> ExtractionResult:
        # Store is only touched on success.
        if not self.calibration.is_calibrated():
            return ExtractionResult("not_calibrated")
        try:
            pts = extract_points(self.buffer, self.region, self.matcher, self.calibration, self.params)
        except DegenerateCalibrationError as e:
            logger.warning("extraction rejected: %s", e)
            return ExtractionResult("degenerate_calibration")
        self.store.replace_all(pts)
        return ExtractionResult("ok", pts)

    def status_message(self) -> str:
        return self.calibration.status_message()
