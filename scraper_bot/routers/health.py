"""Health check endpoint.

Returns service status including storage connectivity, scheduler state and
whether a scraping pipeline run is in progress.
"""

import logging
from typing import Any

from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

from scraper_bot.scheduler.jobs import is_scheduler_running
from scraper_bot.scheduler.lock import get_current_run_id

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> Any:
    """Open and close the storage adapter once.

    Returns 200 OK when storage answers, 503 when it does not.
    """
    db_status = "disconnected"
    storage = getattr(request.app.state, "storage", None)

    if storage is not None:
        try:
            async with storage.opened():
                db_status = "connected"
        except Exception:
            logger.warning("health_storage_unavailable", exc_info=True)

    payload: dict[str, str | None] = {
        "status": "ok" if db_status == "connected" else "degraded",
        "database": db_status,
        "scheduler": "running" if is_scheduler_running() else "stopped",
        "pipeline_run_id": get_current_run_id(),
    }

    if db_status != "connected":
        return JSONResponse(status_code=503, content=payload)

    return payload
