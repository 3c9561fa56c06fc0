"""Watchlist store backed by the SQLAlchemy repositories."""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..config.logging import get_logger
from ..core.models import TrackedSymbol
from ..exceptions import ConflictError, StoreError
from .database import get_session_factory
from .models import TrackedStock
from .repositories import TrackedStockRepository

logger = get_logger(__name__)

_COLUMNS = (
    "display_name",
    "support_levels",
    "last_price",
    "nearest_support",
    "distance_to_nearest_support",
    "distance_percent",
    "currency",
    "market_state",
    "created_at",
    "last_updated",
)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_record(stock: TrackedStock) -> TrackedSymbol:
    """Convert an ORM row into the domain model."""
    return TrackedSymbol(
        symbol=stock.symbol,
        display_name=stock.display_name or "",
        support_levels=list(stock.support_levels or []),
        last_price=stock.last_price or 0.0,
        nearest_support=stock.nearest_support,
        distance_to_nearest_support=stock.distance_to_nearest_support,
        distance_percent=stock.distance_percent,
        currency=stock.currency,
        market_state=stock.market_state,
        created_at=_as_utc(stock.created_at),
        last_updated=_as_utc(stock.last_updated),
    )


def to_columns(record: TrackedSymbol) -> dict:
    """Column values of a domain record, excluding the symbol key."""
    return {name: getattr(record, name) for name in _COLUMNS}


class SqlWatchlistStore:
    """WatchlistStore implementation that opens one session per operation."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory or get_session_factory()
        self.logger = logger.bind(component="sql_store")

    def _repository(self) -> TrackedStockRepository:
        return TrackedStockRepository(session_factory=self.session_factory)

    def _fail(self, operation: str, error: Exception) -> StoreError:
        self.logger.error(
            "Store operation failed", operation=operation, error=str(error), exc_info=True
        )
        return StoreError(operation, str(error))

    def list_all(self) -> List[TrackedSymbol]:
        try:
            with self._repository() as repo:
                return [to_record(stock) for stock in repo.get_all_stocks()]
        except SQLAlchemyError as e:
            raise self._fail("list", e) from e

    def find_by_symbol(self, symbol: str) -> Optional[TrackedSymbol]:
        try:
            with self._repository() as repo:
                stock = repo.get_stock_by_symbol(symbol)
                return to_record(stock) if stock is not None else None
        except SQLAlchemyError as e:
            raise self._fail("find", e) from e

    def insert(self, record: TrackedSymbol) -> TrackedSymbol:
        try:
            with self._repository() as repo:
                stock = repo.add_stock(symbol=record.symbol, **to_columns(record))
                return to_record(stock)
        except IntegrityError as e:
            raise ConflictError(record.symbol) from e
        except SQLAlchemyError as e:
            raise self._fail("insert", e) from e

    def update(self, record: TrackedSymbol) -> TrackedSymbol:
        try:
            with self._repository() as repo:
                stock = repo.update_stock(record.symbol, to_columns(record))
                if stock is None:
                    raise StoreError("update", f"symbol '{record.symbol}' is not stored")
                return to_record(stock)
        except SQLAlchemyError as e:
            raise self._fail("update", e) from e

    def delete_by_symbol(self, symbol: str) -> Optional[TrackedSymbol]:
        try:
            with self._repository() as repo:
                stock = repo.get_stock_by_symbol(symbol)
                if stock is None:
                    return None
                record = to_record(stock)
                repo.delete_stock(stock)
                return record
        except SQLAlchemyError as e:
            raise self._fail("delete", e) from e
