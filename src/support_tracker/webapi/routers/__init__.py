"""API routers."""

from .refresh import router as refresh_router
from .stocks import router as stocks_router

__all__ = ["refresh_router", "stocks_router"]
