from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, List, TYPE_CHECKING

if TYPE_CHECKING:
    from .calibration import CalibrationModel


OUTPUT_DECIMALS = 6


@dataclass(frozen=True)
class DataPoint:
    pixel_x: int
    pixel_y: int
    # chart units, frozen at creation; later calibration changes do not touch them
    data_x: float
    data_y: float

    @classmethod
    def from_pixel(cls, px: int, py: int, calibration: "CalibrationModel") -> "DataPoint":
        x, y = calibration.pixel_to_data(px, py)
        return cls(int(px), int(py), float(x), float(y))


class DataPointStore:
    """
    Ordered point list addressed by position.

    Indices shift on removal, so callers should re-read them after any
    mutation. Order only changes through sort_by_data_x or replace_all.
    Out-of-range indices are ignored and reported by a False return.
    """

    def __init__(self, points: Iterable[DataPoint] = ()) -> None:
        self._points: List[DataPoint] = list(points)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[DataPoint]:
        return iter(list(self._points))

    def __getitem__(self, index: int) -> DataPoint:
        return self._points[index]

    @property
    def points(self) -> List[DataPoint]:
        return list(self._points)

    def _in_range(self, index: int) -> bool:
        return 0 <= index < len(self._points)

    def append(self, pt: DataPoint) -> None:
        self._points.append(pt)

    def add_manual_point(self, px: int, py: int, calibration: "CalibrationModel") -> DataPoint:
        pt = DataPoint.from_pixel(px, py, calibration)
        self._points.append(pt)
        return pt

    def remove_last(self) -> bool:
        if not self._points:
            return False
        self._points.pop()
        return True

    def remove_at(self, index: int) -> bool:
        if not self._in_range(index):
            return False
        del self._points[index]
        return True

    def clear(self) -> None:
        self._points = []

    def sort_by_data_x(self) -> None:
        # list.sort is stable: ties keep detection order
        self._points.sort(key=lambda p: p.data_x)

    def update_at(self, index: int, new_x: float, new_y: float) -> bool:
        if not self._in_range(index):
            return False
        self._points[index] = replace(self._points[index], data_x=float(new_x), data_y=float(new_y))
        return True

    def replace_all(self, points: Iterable[DataPoint]) -> None:
        # build first, then swap, so readers never see a half-filled list
        new_points = list(points)
        self._points = new_points

    def to_rows(self) -> List[Dict[str, float]]:
        return [
            {
                "index": i,
                "x": round(p.data_x, OUTPUT_DECIMALS),
                "y": round(p.data_y, OUTPUT_DECIMALS),
                "px": p.pixel_x,
                "py": p.pixel_y,
            }
            for i, p in enumerate(self._points)
        ]
