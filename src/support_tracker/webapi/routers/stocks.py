"""Watchlist CRUD endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ...config.logging import get_logger
from ...services.watchlist import SortOrder, WatchlistService
from ..models.requests import AddStockRequest, EditSupportLevelsRequest
from ..models.responses import StockListResponse, StockResponse

logger = get_logger(__name__)

router = APIRouter()


def get_watchlist_service(request: Request) -> WatchlistService:
    """Dependency returning the application's watchlist service."""
    return request.app.state.watchlist_service


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


@router.get(
    "",
    response_model=StockListResponse,
    summary="List Watchlist",
    description="List tracked stocks with search, sorting and pagination",
)
def list_stocks(
    request: Request,
    search: Optional[str] = Query(None, description="Match symbol or name"),
    sort: SortOrder = Query(SortOrder.DISTANCE, description="Sort order"),
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    per_page: Optional[int] = Query(
        None, ge=1, le=500, description="Items per page, omit for all"
    ),
    service: WatchlistService = Depends(get_watchlist_service),
):
    """
    List the watchlist.

    Default order is the absolute distance to the nearest support, nearest
    first. Entries without a computed distance come last.
    """
    result = service.query(search=search, sort=sort, page=page, per_page=per_page)
    return StockListResponse.from_page(result, request_id=_request_id(request))


@router.get(
    "/{symbol}",
    response_model=StockResponse,
    summary="Get Stock",
    description="Get a single tracked stock",
)
def get_stock(
    symbol: str,
    request: Request,
    service: WatchlistService = Depends(get_watchlist_service),
):
    record = service.get_symbol(symbol)
    return StockResponse(data=record, request_id=_request_id(request))


@router.post(
    "",
    response_model=StockResponse,
    status_code=201,
    summary="Add Stock",
    description="Add a stock with its support levels to the watchlist",
)
def add_stock(
    stock_request: AddStockRequest,
    request: Request,
    service: WatchlistService = Depends(get_watchlist_service),
):
    """
    Add a stock to the watchlist.

    - **symbol**: Ticker symbol, case-insensitive
    - **support_levels**: One or more positive price levels

    The current quote is fetched once; unknown symbols are rejected with 404.
    """
    logger.info(
        "Add stock requested",
        symbol=stock_request.symbol,
        request_id=_request_id(request),
    )
    record = service.add_symbol(stock_request.symbol, stock_request.support_levels)
    return StockResponse(
        data=record,
        message=f"Added {record.symbol} to the watchlist",
        request_id=_request_id(request),
    )


@router.patch(
    "/{symbol}",
    response_model=StockResponse,
    summary="Edit Support Levels",
    description="Replace the support levels of a tracked stock",
)
def edit_support_levels(
    symbol: str,
    edit_request: EditSupportLevelsRequest,
    request: Request,
    service: WatchlistService = Depends(get_watchlist_service),
):
    record = service.edit_support_levels(symbol, edit_request.support_levels)
    return StockResponse(
        data=record,
        message=f"Updated support levels of {record.symbol}",
        request_id=_request_id(request),
    )


@router.delete(
    "/{symbol}",
    response_model=StockResponse,
    summary="Remove Stock",
    description="Remove a stock from the watchlist",
)
def remove_stock(
    symbol: str,
    request: Request,
    service: WatchlistService = Depends(get_watchlist_service),
):
    record = service.remove_symbol(symbol)
    return StockResponse(
        data=record,
        message=f"Removed {record.symbol} from the watchlist",
        request_id=_request_id(request),
    )
