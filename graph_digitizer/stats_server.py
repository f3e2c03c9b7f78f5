from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from fastapi import FastAPI

from .stats import StatsStore

logger = logging.getLogger(__name__)


def create_app(store: Optional[StatsStore] = None) -> FastAPI:
    store = store or StatsStore()
    app = FastAPI(title="Graph Digitizer Stats", version="1.0.0")

    @app.get("/api/stats")
    def get_stats() -> Dict[str, Any]:
        try:
            return store.get_stats()
        except Exception as exc:
            logger.warning("stats read failed: %s", exc)
            return {"total_users": 0, "total_graphs": 0, "daily_active": 0}

    @app.post("/api/stats/visit")
    def record_visit() -> Dict[str, Any]:
        try:
            store.increment_users()
        except Exception as exc:
            logger.warning("recording visit failed: %s", exc)
            return {"ok": False}
        return {"ok": True}

    @app.post("/api/stats/graph")
    def record_graph() -> Dict[str, Any]:
        try:
            store.increment_graphs()
        except Exception as exc:
            logger.warning("recording graph failed: %s", exc)
            return {"ok": False}
        return {"ok": True}

    return app


def main() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "3000"))
    logger.info("Graph Digitizer stats service on http://%s:%d", host, port)
    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
