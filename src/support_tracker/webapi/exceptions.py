"""Exception handlers mapping errors onto the API envelope."""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config.logging import get_logger
from ..exceptions import SupportTrackerError
from .models.responses import ErrorResponse

logger = get_logger(__name__)


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    error_type: str,
    details: dict = None,
) -> JSONResponse:
    error_response = ErrorResponse(
        error=message,
        error_type=error_type,
        details=details or {},
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(status_code=status_code, content=error_response.model_dump())


async def support_tracker_exception_handler(
    request: Request, exc: SupportTrackerError
) -> JSONResponse:
    """Handle domain exceptions raised by the watchlist core."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Request failed",
        exception_type=type(exc).__name__,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        request_id=getattr(request.state, "request_id", None),
        path=request.url.path,
        method=request.method,
    )

    return _error_response(
        request, exc.status_code, exc.message, type(exc).__name__, exc.details
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request body / query validation failures as 400."""
    field_errors = {}
    for error in exc.errors():
        field_path = ".".join(str(loc) for loc in error["loc"])
        field_errors[field_path] = error["msg"]

    logger.warning(
        "Validation error occurred",
        field_errors=field_errors,
        request_id=getattr(request.state, "request_id", None),
        path=request.url.path,
        method=request.method,
    )

    return _error_response(
        request,
        400,
        "Request validation failed",
        "ValidationException",
        {"field_errors": field_errors},
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle framework HTTP exceptions (404 routes, 405 methods, ...)."""
    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method,
    )

    return _error_response(request, exc.status_code, str(exc.detail), "HTTPException")


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without leaking internals."""
    logger.error(
        "Unexpected exception occurred",
        exception_type=type(exc).__name__,
        message=str(exc),
        request_id=getattr(request.state, "request_id", None),
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )

    return _error_response(
        request, 500, "An unexpected error occurred", "InternalServerError"
    )


def setup_exception_handlers(app):
    """Register exception handlers with FastAPI app."""
    app.add_exception_handler(SupportTrackerError, support_tracker_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
