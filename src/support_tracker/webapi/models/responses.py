"""Response models for the Support Tracker API."""

from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ...core.models import TrackedSymbol, utcnow
from ...services.watchlist import WatchlistPage

# Generic type for data responses
T = TypeVar("T")


class BaseResponse(BaseModel):
    """Base envelope for all API responses."""

    success: bool = Field(..., description="Whether the request was successful")
    timestamp: datetime = Field(default_factory=utcnow, description="Response timestamp")
    request_id: Optional[str] = Field(
        None, description="Unique request identifier for tracking"
    )

    model_config = ConfigDict(use_enum_values=True)

    @field_serializer("timestamp")
    def serialize_timestamp(self, dt: datetime) -> str:
        return dt.isoformat()


class SuccessResponse(BaseResponse, Generic[T]):
    """Generic success response with typed data."""

    success: bool = Field(True, description="Always true for success responses")
    data: T = Field(..., description="Response data")
    message: Optional[str] = Field(None, description="Optional success message")


class ErrorResponse(BaseResponse):
    """Error envelope."""

    success: bool = Field(False, description="Always false for error responses")
    error: str = Field(..., description="Human readable error message")
    error_type: str = Field(..., description="Error class name")
    details: Dict[str, Any] = Field(default_factory=dict, description="Error details")


class PaginationMeta(BaseModel):
    """Pagination metadata."""

    page: int = Field(..., ge=1, description="Current page number")
    per_page: Optional[int] = Field(None, description="Items per page, null for all")
    total: int = Field(..., ge=0, description="Items matching the search")
    pages: int = Field(..., ge=1, description="Total number of pages")
    has_next: bool = Field(..., description="Whether there is a next page")
    has_prev: bool = Field(..., description="Whether there is a previous page")


class StockResponse(SuccessResponse[TrackedSymbol]):
    """A single watchlist entry."""

    data: TrackedSymbol


class StockListResponse(SuccessResponse[List[TrackedSymbol]]):
    """A page of watchlist entries."""

    data: List[TrackedSymbol]
    count: int = Field(..., description="Number of entries on this page")
    total: int = Field(..., description="Tracked symbols before filtering")
    pagination: PaginationMeta
    last_update: datetime = Field(default_factory=utcnow)

    @field_serializer("last_update")
    def serialize_last_update(self, dt: datetime) -> str:
        return dt.isoformat()

    @classmethod
    def from_page(
        cls, page: WatchlistPage, request_id: Optional[str] = None
    ) -> "StockListResponse":
        return cls(
            data=page.items,
            count=len(page.items),
            total=page.total,
            pagination=PaginationMeta(
                page=page.page,
                per_page=page.per_page,
                total=page.filtered,
                pages=page.pages,
                has_next=page.has_next,
                has_prev=page.has_prev,
            ),
            request_id=request_id,
        )


class StatusResponse(SuccessResponse[Dict[str, Any]]):
    """Generic status response."""

    data: Dict[str, Any] = Field(..., description="Status data")

    @classmethod
    def create(
        cls,
        data: Dict[str, Any],
        message: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> "StatusResponse":
        return cls(success=True, data=data, message=message, request_id=request_id)
