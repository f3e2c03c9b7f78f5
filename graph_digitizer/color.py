from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .cv_utils import PixelBuffer, color_distance_mask
from .region import Bounds, RegionMask

RGB = Tuple[int, int, int]

_HEX6 = re.compile(r"[0-9a-fA-F]{6}")


def _clamp_channel(v) -> int:
    return max(0, min(255, int(v)))


def parse_hex_color(hex_str: str):
    """'#rrggbb' or 'rrggbb' -> (r,g,b); extra trailing characters are ignored.
    Returns None when the first six characters are not hex digits."""
    s = (hex_str or "").strip()
    if s.startswith("#"):
        s = s[1:]
    s = s[:6]
    if not _HEX6.fullmatch(s):
        return None
    return int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16)


def rgb_to_hex(rgb: RGB) -> str:
    return "#" + "".join(f"{_clamp_channel(c):02x}" for c in rgb)


@dataclass
class MatchPreview:
    count: int
    # image pixel coordinates of every match
    xs: np.ndarray
    ys: np.ndarray


class ColorMatcher:
    def __init__(self, target: RGB = (0, 0, 255), tolerance: int = 30) -> None:
        self.target: RGB = (0, 0, 0)
        self.set_target_color(*target)
        self.tolerance = tolerance

    @property
    def tolerance(self) -> int:
        return self._tolerance

    @tolerance.setter
    def tolerance(self, v) -> None:
        self._tolerance = max(0, int(v))

    @property
    def target_hex(self) -> str:
        return rgb_to_hex(self.target)

    def set_target_color(self, r, g, b) -> None:
        self.target = (_clamp_channel(r), _clamp_channel(g), _clamp_channel(b))

    def set_target_color_hex(self, hex_str: str) -> bool:
        rgb = parse_hex_color(hex_str)
        if rgb is None:
            return False
        self.target = rgb
        return True

    @staticmethod
    def distance(pixel: RGB, target: RGB) -> float:
        dr = int(pixel[0]) - int(target[0])
        dg = int(pixel[1]) - int(target[1])
        db = int(pixel[2]) - int(target[2])
        return math.sqrt(dr * dr + dg * dg + db * db)

    def matches(self, pixel: RGB) -> bool:
        return self.distance(pixel, self.target) <= self.tolerance

    def match_mask(self, buffer: PixelBuffer, region: RegionMask) -> Tuple[Bounds, np.ndarray]:
        """
        Binary match mask over region.bounds() only; excluded pixels are False.
        """
        b = region.bounds()
        sub = buffer.rgb[b.start_y:b.end_y, b.start_x:b.end_x]
        if b.is_empty():
            return b, np.zeros((b.height, b.width), dtype=bool)
        mask = color_distance_mask(sub, self.target, self.tolerance)
        if region.excludes:
            mask &= ~region.excluded_mask(b)
        return b, mask

    def preview(self, buffer: PixelBuffer, region: RegionMask) -> MatchPreview:
        b, mask = self.match_mask(buffer, region)
        ys, xs = np.nonzero(mask)
        return MatchPreview(count=int(xs.size), xs=xs + b.start_x, ys=ys + b.start_y)

    def preview_count(self, buffer: PixelBuffer, region: RegionMask) -> int:
        return self.preview(buffer, region).count
