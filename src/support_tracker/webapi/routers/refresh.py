"""Manual refresh trigger."""

from fastapi import APIRouter, HTTPException, Request

from ...config.logging import get_logger
from ..models.responses import StatusResponse

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=StatusResponse,
    status_code=202,
    summary="Trigger Price Refresh",
    description="Queue an immediate refresh cycle instead of waiting for the next tick",
)
def trigger_refresh(request: Request):
    request_id = getattr(request.state, "request_id", None)
    refresh_scheduler = getattr(request.app.state, "refresh_scheduler", None)

    if refresh_scheduler is None or not refresh_scheduler.is_running:
        raise HTTPException(status_code=503, detail="Refresh scheduler is not running")

    triggered = refresh_scheduler.trigger_now()
    logger.info("Manual refresh requested", triggered=triggered, request_id=request_id)

    return StatusResponse.create(
        data={"triggered": triggered},
        message="Refresh queued" if triggered else "A refresh cycle is already running",
        request_id=request_id,
    )
