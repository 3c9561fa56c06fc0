"""Request and response models for the API."""

from .requests import AddStockRequest, EditSupportLevelsRequest
from .responses import (
    BaseResponse,
    ErrorResponse,
    PaginationMeta,
    StatusResponse,
    StockListResponse,
    StockResponse,
    SuccessResponse,
)

__all__ = [
    "AddStockRequest",
    "BaseResponse",
    "EditSupportLevelsRequest",
    "ErrorResponse",
    "PaginationMeta",
    "StatusResponse",
    "StockListResponse",
    "StockResponse",
    "SuccessResponse",
]
