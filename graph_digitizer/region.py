from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, NamedTuple, Optional

import numpy as np

MIN_REGION_PX = 10


class Bounds(NamedTuple):
    # half-open: start <= x < end
    start_x: int
    end_x: int
    start_y: int
    end_y: int

    @property
    def width(self) -> int:
        return max(0, self.end_x - self.start_x)

    @property
    def height(self) -> int:
        return max(0, self.end_y - self.start_y)

    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0


@dataclass(frozen=True)
class Rect:
    # pixel rectangle, edges inclusive
    x1: float
    y1: float
    x2: float
    y2: float

    def __post_init__(self):
        if self.x1 > self.x2:
            x1, x2 = self.x2, self.x1
            object.__setattr__(self, "x1", x1)
            object.__setattr__(self, "x2", x2)
        if self.y1 > self.y2:
            y1, y2 = self.y2, self.y1
            object.__setattr__(self, "y1", y1)
            object.__setattr__(self, "y2", y2)

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    def contains(self, x: float, y: float) -> bool:
        return self.x1 <= x <= self.x2 and self.y1 <= y <= self.y2

    def is_large_enough(self, min_size: float = MIN_REGION_PX) -> bool:
        return self.width >= min_size and self.height >= min_size


class RegionMask:
    """
    Which pixels extraction may look at: an optional ROI and any number of
    exclusion rectangles. Exclusions apply even inside the ROI.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.roi: Optional[Rect] = None
        self.excludes: List[Rect] = []

    def set_roi(self, rect: Rect) -> None:
        self.roi = rect

    def clear_roi(self) -> None:
        self.roi = None

    def add_exclude(self, rect: Rect) -> None:
        self.excludes.append(rect)

    def clear_excludes(self) -> None:
        self.excludes = []

    def bounds(self) -> Bounds:
        if self.roi is None:
            return Bounds(0, self.width, 0, self.height)
        r = self.roi
        sx = max(0, math.ceil(r.x1))
        ex = min(self.width, math.floor(r.x2) + 1)
        sy = max(0, math.ceil(r.y1))
        ey = min(self.height, math.floor(r.y2) + 1)
        return Bounds(sx, max(sx, ex), sy, max(sy, ey))

    def is_excluded(self, x: float, y: float) -> bool:
        return any(r.contains(x, y) for r in self.excludes)

    def excluded_mask(self, bounds: Optional[Bounds] = None) -> np.ndarray:
        """
        Boolean (h,w) mask over the bounds sub-rectangle; True where is_excluded.
        """
        if bounds is None:
            bounds = self.bounds()
        out = np.zeros((bounds.height, bounds.width), dtype=bool)
        for r in self.excludes:
            # integer pixels x with r.x1 <= x <= r.x2
            x0 = max(bounds.start_x, math.ceil(r.x1))
            x1 = min(bounds.end_x, math.floor(r.x2) + 1)
            y0 = max(bounds.start_y, math.ceil(r.y1))
            y1 = min(bounds.end_y, math.floor(r.y2) + 1)
            if x0 >= x1 or y0 >= y1:
                continue
            out[y0 - bounds.start_y:y1 - bounds.start_y, x0 - bounds.start_x:x1 - bounds.start_x] = True
        return out
