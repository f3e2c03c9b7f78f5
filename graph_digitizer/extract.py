from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Sequence, Tuple

import numpy as np

from .calibration import CalibrationModel, DegenerateCalibrationError
from .color import ColorMatcher
from .cv_utils import PixelBuffer, require_cv2
from .data_model import DataPoint
from .region import RegionMask

logger = logging.getLogger(__name__)

ComponentKind = Literal["dot", "line"]


@dataclass
class ExtractionParams:
    # components with fewer pixels are noise
    min_point_size: int = 3
    # bounding-box span (px) at or below which a component is a marker dot
    dot_max_span: int = 20
    # samples per line component: clamp(span_x // sample_divisor, min_samples, max_samples)
    min_samples: int = 20
    max_samples: int = 100
    sample_divisor: int = 3
    # columns on each side of a sampled x that feed its median
    window_radius: int = 1


@dataclass
class Component:
    # image pixel coordinates, in raster order
    xs: List[int]
    ys: List[int]

    def __len__(self) -> int:
        return len(self.xs)

    @property
    def bbox(self) -> Tuple[int, int, int, int]:
        return min(self.xs), min(self.ys), max(self.xs), max(self.ys)

    @property
    def span_x(self) -> int:
        x0, _, x1, _ = self.bbox
        return x1 - x0 + 1

    @property
    def span_y(self) -> int:
        _, y0, _, y1 = self.bbox
        return y1 - y0 + 1

    @property
    def span(self) -> int:
        return max(self.span_x, self.span_y)

    def centroid(self) -> Tuple[int, int]:
        n = len(self.xs)
        cx = sum(self.xs) / n
        cy = sum(self.ys) / n
        return _round_half_up(cx), _round_half_up(cy)

    def columns(self) -> Dict[int, List[int]]:
        cols: Dict[int, List[int]] = {}
        for x, y in zip(self.xs, self.ys):
            cols.setdefault(x, []).append(y)
        return cols


def _round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def _lower_median(values: Sequence[int]) -> int:
    s = sorted(values)
    return s[(len(s) - 1) // 2]


def label_components(
    mask: np.ndarray,
    min_size: int = 1,
    *,
    origin: Tuple[int, int] = (0, 0),
) -> List[Component]:
    """
    8-connected components of a boolean mask (cv2 labelling, no recursion,
    so large blobs are fine).

    Components are returned in raster order of their first pixel (top row
    first, left to right), whatever order cv2 numbered them in. Coordinates
    are offset by origin=(x0,y0) so callers can label a sub-rectangle and get
    back image coordinates. Components with fewer than min_size pixels are
    dropped.
    """
    if mask.ndim != 2:
        raise ValueError("mask must be HxW")
    if mask.size == 0 or not mask.any():
        return []

    require_cv2()
    import cv2

    m = (mask > 0).astype(np.uint8)
    _num, labels, stats, _centroids = cv2.connectedComponentsWithStats(m, connectivity=8)

    # nonzero walks in raster order; a stable sort by label keeps that order per component
    ys, xs = np.nonzero(labels)
    lab = labels[ys, xs]
    keys, first = np.unique(lab, return_index=True)
    order = np.argsort(lab, kind="stable")
    xs = xs[order] + origin[0]
    ys = ys[order] + origin[1]
    areas = stats[keys, cv2.CC_STAT_AREA]
    starts = np.concatenate(([0], np.cumsum(areas)[:-1]))

    comps: List[Component] = []
    for i in np.argsort(first, kind="stable"):
        if areas[i] < min_size:
            continue
        s, e = int(starts[i]), int(starts[i] + areas[i])
        comps.append(Component(xs[s:e].tolist(), ys[s:e].tolist()))
    return comps


def classify_component(comp: Component, dot_max_span: int = 20) -> ComponentKind:
    # inclusive on the dot side: span == dot_max_span is still a dot
    return "dot" if comp.span <= dot_max_span else "line"


def sample_line_component(comp: Component, params: Optional[ExtractionParams] = None) -> List[Tuple[int, int]]:
    """
    Column-sample a curve component.

    For each sampled x, the y values of that column and its neighbors
    (window_radius each side) are pooled and the lower median is taken.
    Samples whose window holds no pixels are skipped.
    """
    params = params or ExtractionParams()
    x0, _, x1, _ = comp.bbox
    span_x = comp.span_x
    n_samples = min(params.max_samples, max(params.min_samples, span_x // max(1, params.sample_divisor)))
    step = max(1, span_x // n_samples)

    cols = comp.columns()
    out: List[Tuple[int, int]] = []
    for sx in range(x0, x1 + 1, step):
        ys: List[int] = []
        for wx in range(sx - params.window_radius, sx + params.window_radius + 1):
            ys.extend(cols.get(wx, ()))
        if not ys:
            continue
        out.append((sx, _lower_median(ys)))
    return out


def component_pixel_points(comp: Component, params: Optional[ExtractionParams] = None) -> List[Tuple[int, int]]:
    params = params or ExtractionParams()
    if classify_component(comp, params.dot_max_span) == "dot":
        return [comp.centroid()]
    return sample_line_component(comp, params)


def extract_points(
    buffer: PixelBuffer,
    region: RegionMask,
    matcher: ColorMatcher,
    calibration: CalibrationModel,
    params: Optional[ExtractionParams] = None,
) -> List[DataPoint]:
    """
    Color-based point extraction.

    1) Match mask over region.bounds() (excluded pixels never match).
    2) 8-connected components; drop those under min_point_size.
    3) Small components (span <= dot_max_span) -> one point at the centroid;
       larger ones -> column samples with a median y.
    4) Map through calibration and sort by data x (stable).

    Returns [] when calibration is incomplete; raises DegenerateCalibrationError
    when an axis has both anchors on the same pixel. Reads region/matcher/
    calibration throughout, so they must not change while this runs.
    """
    params = params or ExtractionParams()
    if not calibration.is_calibrated():
        logger.info("extraction skipped: calibration incomplete (%s)", ", ".join(calibration.missing_anchors()))
        return []
    if calibration.is_degenerate():
        raise DegenerateCalibrationError(
            "Calibration anchors overlap: x1/x2 (or y1/y2) share the same pixel."
        )

    bounds, mask = matcher.match_mask(buffer, region)
    comps = label_components(mask, params.min_point_size, origin=(bounds.start_x, bounds.start_y))

    x_axis = calibration.x_axis()
    y_axis = calibration.y_axis()
    pts: List[DataPoint] = []
    n_dots = 0
    for comp in comps:
        px_points = component_pixel_points(comp, params)
        if classify_component(comp, params.dot_max_span) == "dot":
            n_dots += 1
        for px, py in px_points:
            pts.append(DataPoint(int(px), int(py), x_axis.px_to_value(px), y_axis.px_to_value(py)))

    pts.sort(key=lambda p: p.data_x)
    logger.info(
        "extracted %d points from %d components (%d dots, %d lines) in %dx%d px",
        len(pts), len(comps), n_dots, len(comps) - n_dots, bounds.width, bounds.height,
    )
    return pts
