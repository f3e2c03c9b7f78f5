from __future__ import annotations

from typing import Iterable, Optional, Tuple

import numpy as np

from .calibration import ANCHOR_KEYS, CalibrationModel
from .color import MatchPreview
from .cv_utils import PixelBuffer, require_cv2
from .data_model import DataPoint
from .region import RegionMask

# RGB
ANCHOR_COLORS = {
    "x1": (225, 29, 72),
    "x2": (249, 115, 22),
    "y1": (37, 99, 235),
    "y2": (16, 185, 129),
}
ROI_COLOR = (34, 197, 94)
EXCLUDE_COLOR = (220, 38, 38)
POINT_COLOR = (255, 0, 0)
HIGHLIGHT_COLOR = (255, 0, 255)


def _pt(x: float, y: float) -> Tuple[int, int]:
    return int(round(x)), int(round(y))


def render_overlay(
    buffer: PixelBuffer,
    *,
    calibration: Optional[CalibrationModel] = None,
    region: Optional[RegionMask] = None,
    points: Iterable[DataPoint] = (),
    highlight: Optional[MatchPreview] = None,
) -> np.ndarray:
    """
    Draw calibration anchors, ROI/exclusions, matched pixels and extracted
    points onto a copy of the image. Returns (H,W,3) RGB uint8.

    All colors are given in RGB and drawn on an RGB array, so no channel swap
    is involved.
    """
    require_cv2()
    import cv2

    img = np.ascontiguousarray(buffer.rgb.copy())

    if highlight is not None and highlight.count:
        img[highlight.ys, highlight.xs] = HIGHLIGHT_COLOR

    if region is not None:
        if region.roi is not None:
            r = region.roi
            cv2.rectangle(img, _pt(r.x1, r.y1), _pt(r.x2, r.y2), ROI_COLOR, 1)
        for r in region.excludes:
            cv2.rectangle(img, _pt(r.x1, r.y1), _pt(r.x2, r.y2), EXCLUDE_COLOR, 1)

    if calibration is not None:
        for key in ANCHOR_KEYS:
            p = calibration.points[key]
            if p is None:
                continue
            color = ANCHOR_COLORS[key]
            c = _pt(p.pixel_x, p.pixel_y)
            cv2.drawMarker(img, c, color, markerType=cv2.MARKER_CROSS, markerSize=20, thickness=2)
            cv2.circle(img, c, 6, color, 2)
            cv2.putText(img, key.upper(), (c[0] + 10, c[1] - 8), cv2.FONT_HERSHEY_SIMPLEX, 0.4, color, 1, cv2.LINE_AA)

    for p in points:
        c = (int(p.pixel_x), int(p.pixel_y))
        cv2.circle(img, c, 4, POINT_COLOR, -1, cv2.LINE_AA)
        cv2.circle(img, c, 4, (255, 255, 255), 1, cv2.LINE_AA)

    return img


def save_overlay(path: str, rgb: np.ndarray) -> None:
    from PIL import Image
    Image.fromarray(rgb.astype(np.uint8)).save(path)
