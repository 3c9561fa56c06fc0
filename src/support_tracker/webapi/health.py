"""Health check endpoint for the Support Tracker API."""

import platform
import time
from typing import Any, Dict

from fastapi import APIRouter, Request

from .. import __version__
from ..config.logging import get_logger
from ..exceptions import StoreError
from .models.responses import StatusResponse

logger = get_logger(__name__)
router = APIRouter()

# Track application start time for uptime calculation
_app_start_time = time.time()


def check_store_health(store) -> Dict[str, Any]:
    """Check the watchlist store can be read."""
    try:
        tracked = len(store.list_all())
        return {"status": "healthy", "tracked_symbols": tracked}
    except StoreError as e:
        logger.error("Store health check failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}


def check_scheduler_health(refresh_scheduler) -> Dict[str, Any]:
    """Report refresh scheduler state and the outcome of the last cycle."""
    if refresh_scheduler is None:
        return {"status": "disabled"}

    status = refresh_scheduler.status()
    last_result = status.get("last_result")
    if not status["running"]:
        status["status"] = "stopped"
    elif last_result and last_result.get("error"):
        status["status"] = "degraded"
    else:
        status["status"] = "healthy"
    return status


@router.get(
    "/health",
    response_model=StatusResponse,
    summary="Health Check",
    description="Store connectivity, refresh scheduler state and uptime",
)
def health_check(request: Request):
    request_id = getattr(request.state, "request_id", None)

    services = {
        "store": check_store_health(request.app.state.watchlist_service.store),
        "scheduler": check_scheduler_health(
            getattr(request.app.state, "refresh_scheduler", None)
        ),
    }

    statuses = {service["status"] for service in services.values()}
    if "unhealthy" in statuses:
        overall = "unhealthy"
    elif statuses & {"degraded", "stopped"}:
        overall = "degraded"
    else:
        overall = "healthy"

    return StatusResponse.create(
        data={
            "status": overall,
            "services": services,
            "uptime_seconds": round(time.time() - _app_start_time, 1),
            "version": __version__,
            "python_version": platform.python_version(),
        },
        request_id=request_id,
    )
