"""FastAPI application factory."""

import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config.logging import get_logger
from ..config.settings import Settings, get_settings
from ..scheduler import RefreshScheduler
from ..services.watchlist import WatchlistService
from .exceptions import setup_exception_handlers
from .health import router as health_router
from .routers import refresh_router, stocks_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the refresh scheduler with the server and stop it on shutdown."""
    logger.info("Starting Support Tracker API")

    refresh_scheduler: Optional[RefreshScheduler] = app.state.refresh_scheduler
    if refresh_scheduler is not None:
        refresh_scheduler.start()

    yield

    logger.info("Shutting down Support Tracker API")
    if refresh_scheduler is not None:
        refresh_scheduler.stop()
    logger.info("Support Tracker API shutdown completed")


async def add_request_id_middleware(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    logger.info(
        "Request started",
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        query_params=str(request.query_params),
        remote_addr=request.client.host if request.client else None,
    )

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    logger.info(
        "Request completed",
        request_id=request_id,
        status_code=response.status_code,
        method=request.method,
        path=request.url.path,
    )

    return response


def create_app(
    watchlist_service: Optional[WatchlistService] = None,
    refresh_scheduler: Optional[RefreshScheduler] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        watchlist_service: Service backing the CRUD endpoints; built from
            settings when omitted
        refresh_scheduler: Scheduler started and stopped with the app, if any
        settings: Application settings, defaults to get_settings()
    """
    settings = settings or get_settings()

    if watchlist_service is None:
        from ..bootstrap import build_components

        components = build_components(settings)
        watchlist_service = components.watchlist_service
        if refresh_scheduler is None and settings.refresh_enabled:
            refresh_scheduler = components.refresh_scheduler

    app = FastAPI(
        title="Support Tracker API",
        description="Watchlist of ticker symbols measured against support levels.",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.state.watchlist_service = watchlist_service
    app.state.refresh_scheduler = refresh_scheduler

    app.middleware("http")(add_request_id_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(stocks_router, prefix="/api/v1/stocks", tags=["Watchlist"])
    app.include_router(refresh_router, prefix="/api/v1/refresh", tags=["Refresh"])

    return app
