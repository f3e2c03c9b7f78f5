from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

STATS_PATH = Path("data") / "stats.json"


def stats_path() -> Path:
    env = os.environ.get("GRAPH_DIGITIZER_STATS_PATH")
    return Path(env) if env else STATS_PATH


def _today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def _empty() -> Dict[str, Any]:
    return {"total_users": 0, "total_graphs": 0, "daily": {}}


class StatsStore:
    """
    Usage counters in a small JSON file: total visits, total graphs processed,
    and graphs per UTC day. Every call reads and rewrites the file.

    Served from a thread pool, so each read-modify-write holds a lock and
    the file is replaced atomically; readers never see a half-written file.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else stats_path()
        self._lock = threading.Lock()

    def load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return _empty()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("stats file %s unreadable, starting from zero: %s", self.path, e)
            return _empty()
        if not isinstance(data, dict):
            return _empty()
        out = _empty()
        out["total_users"] = int(data.get("total_users", 0) or 0)
        out["total_graphs"] = int(data.get("total_graphs", 0) or 0)
        daily = data.get("daily")
        if isinstance(daily, dict):
            out["daily"] = {str(k): int(v) for k, v in daily.items()}
        return out

    def _write(self, data: Dict[str, Any]) -> None:
        # temp file in the same directory, then rename over the target
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name + ".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise

    def save(self, data: Dict[str, Any]) -> None:
        with self._lock:
            self._write(data)

    def get_stats(self) -> Dict[str, int]:
        with self._lock:
            data = self.load()
        return {
            "total_users": data["total_users"],
            "total_graphs": data["total_graphs"],
            "daily_active": data["daily"].get(_today(), 0),
        }

    def increment_users(self) -> None:
        with self._lock:
            data = self.load()
            data["total_users"] += 1
            self._write(data)

    def increment_graphs(self) -> None:
        with self._lock:
            data = self.load()
            data["total_graphs"] += 1
            today = _today()
            data["daily"][today] = data["daily"].get(today, 0) + 1
            self._write(data)
