from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Optional

from .color import ColorMatcher, parse_hex_color
from .extract import ExtractionParams

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".graph_digitizer_config.json"


def config_path() -> Path:
    env = os.environ.get("GRAPH_DIGITIZER_CONFIG")
    return Path(env) if env else CONFIG_PATH


@dataclass
class DigitizerSettings:
    target_hex: str = "#0000ff"
    tolerance: int = 30
    min_point_size: int = 3
    dot_max_span: int = 20
    min_samples: int = 20
    max_samples: int = 100
    # drag rectangles smaller than this (either side) are ignored
    min_region_px: int = 10

    def to_params(self) -> ExtractionParams:
        return ExtractionParams(
            min_point_size=int(self.min_point_size),
            dot_max_span=int(self.dot_max_span),
            min_samples=int(self.min_samples),
            max_samples=int(self.max_samples),
        )

    def apply_to(self, matcher: ColorMatcher) -> None:
        matcher.set_target_color_hex(self.target_hex)
        matcher.tolerance = int(self.tolerance)


# counts that feed a division or a size filter
_AT_LEAST_ONE = {"min_point_size", "min_samples", "max_samples"}


def _coerce(name: str, value: Any, default: Any) -> Any:
    if isinstance(default, str):
        if not isinstance(value, str) or parse_hex_color(value) is None:
            raise ValueError(f"not a hex color: {value!r}")
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"not a number: {value!r}")
    try:
        v = int(value)
    except (ValueError, OverflowError):
        raise ValueError(f"not a whole number: {value!r}") from None
    if v < (1 if name in _AT_LEAST_ONE else 0):
        raise ValueError(f"out of range: {v}")
    return v


def load_settings(path: Optional[Path] = None) -> DigitizerSettings:
    path = path or config_path()
    if not path.exists():
        return DigitizerSettings()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        # If config is corrupt, fall back without blocking app usage.
        logger.warning("ignoring unreadable settings file %s: %s", path, e)
        return DigitizerSettings()
    if not isinstance(data, dict):
        logger.warning("ignoring settings file %s: expected a JSON object", path)
        return DigitizerSettings()

    merged = asdict(DigitizerSettings())
    for f in fields(DigitizerSettings):
        if f.name not in data:
            continue
        try:
            merged[f.name] = _coerce(f.name, data[f.name], merged[f.name])
        except ValueError as e:
            logger.warning("settings %s: using default for %s (%s)", path, f.name, e)
    return DigitizerSettings(**merged)


def save_settings(settings: DigitizerSettings, path: Optional[Path] = None) -> None:
    path = path or config_path()
    path.write_text(json.dumps(asdict(settings), indent=2), encoding="utf-8")
