"""Watchlist orchestration: list, add, edit and remove tracked symbols."""

from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from ...config.logging import get_logger
from ...core.locks import SymbolLocks
from ...core.models import TrackedSymbol, utcnow
from ...core.quotes import QuoteSource
from ...core.support import apply_support, normalize_support_levels, normalize_symbol
from ...exceptions import ConflictError, NotFoundError, ValidationException
from .models import SortOrder, WatchlistPage

logger = get_logger(__name__)


def _missing_last(value: Optional[float]) -> Tuple[bool, float]:
    return (value is None, abs(value) if value is not None else 0.0)


_SORT_KEYS: dict = {
    SortOrder.DISTANCE: (lambda r: _missing_last(r.distance_to_nearest_support), False),
    SortOrder.DISTANCE_PERCENT: (lambda r: _missing_last(r.distance_percent), False),
    SortOrder.SYMBOL: (lambda r: r.symbol, False),
    SortOrder.PRICE_HIGH: (lambda r: r.last_price, True),
    SortOrder.PRICE_LOW: (lambda r: r.last_price, False),
}


def sort_records(
    records: Sequence[TrackedSymbol], order: SortOrder = SortOrder.DISTANCE
) -> List[TrackedSymbol]:
    """Stable sort of watchlist records; missing distances always sort last."""
    key, reverse = _SORT_KEYS[order]
    return sorted(records, key=key, reverse=reverse)


class WatchlistService:
    """
    CRUD orchestration for the watchlist.

    Every mutation recomputes the derived support fields before it is
    written, and holds the symbol's lock from read to write so it does not
    interleave with a refresh cycle touching the same symbol. Errors are
    raised to the caller.
    """

    def __init__(
        self,
        store,
        quote_source: QuoteSource,
        locks: Optional[SymbolLocks] = None,
        max_tracked_symbols: int = 0,
        clock: Callable = utcnow,
    ):
        self.store = store
        self.quote_source = quote_source
        self.locks = locks or SymbolLocks()
        self.max_tracked_symbols = max_tracked_symbols
        self.clock = clock
        self.logger = logger.bind(service="watchlist_service")

    def list_symbols(self) -> List[TrackedSymbol]:
        """All tracked symbols, nearest to support first."""
        return sort_records(self.store.list_all(), SortOrder.DISTANCE)

    def query(
        self,
        search: Optional[str] = None,
        sort: Union[SortOrder, str] = SortOrder.DISTANCE,
        page: int = 1,
        per_page: Optional[int] = None,
    ) -> WatchlistPage:
        """
        Filter, sort and paginate the watchlist.

        Args:
            search: Case-insensitive substring matched against symbol and name
            sort: One of SortOrder
            page: 1-based page number
            per_page: Page size, or None for a single page with everything

        Returns:
            WatchlistPage with the items of the requested page
        """
        try:
            order = SortOrder(sort)
        except ValueError:
            raise ValidationException(
                f"Unknown sort order '{sort}'",
                field_errors={"sort": f"must be one of {[o.value for o in SortOrder]}"},
            )
        if page < 1:
            raise ValidationException(
                "Page must be at least 1", field_errors={"page": "must be >= 1"}
            )
        if per_page is not None and per_page < 1:
            raise ValidationException(
                "Page size must be at least 1", field_errors={"per_page": "must be >= 1"}
            )

        records = self.store.list_all()
        total = len(records)

        needle = (search or "").strip().lower()
        if needle:
            records = [
                r
                for r in records
                if needle in r.symbol.lower() or needle in r.display_name.lower()
            ]

        records = sort_records(records, order)

        if per_page is not None:
            start = (page - 1) * per_page
            items = records[start : start + per_page]
        else:
            items = records if page == 1 else []

        return WatchlistPage(
            items=items,
            total=total,
            filtered=len(records),
            page=page,
            per_page=per_page,
        )

    def get_symbol(self, symbol: str) -> TrackedSymbol:
        symbol = normalize_symbol(symbol)
        record = self.store.find_by_symbol(symbol)
        if record is None:
            raise NotFoundError("Stock", symbol)
        return record

    def add_symbol(self, symbol: Any, support_levels: Any) -> TrackedSymbol:
        """
        Start tracking a symbol.

        Raises:
            ValidationException: Bad symbol or levels, or the watchlist is full
            ConflictError: The symbol is already tracked
            NotFoundError: The quote source does not know the symbol
            QuoteSourceError: The quote source failed
        """
        symbol = normalize_symbol(symbol)
        levels = normalize_support_levels(support_levels)

        self.logger.info("Adding stock to watchlist", symbol=symbol, support_levels=levels)

        with self.locks.hold(symbol):
            if self.store.find_by_symbol(symbol) is not None:
                self.logger.info("Stock already tracked", symbol=symbol)
                raise ConflictError(symbol)

            if self.max_tracked_symbols:
                tracked = len(self.store.list_all())
                if tracked >= self.max_tracked_symbols:
                    raise ValidationException(
                        f"Watchlist is full ({self.max_tracked_symbols} symbols)",
                        field_errors={"symbol": "watchlist limit reached"},
                    )

            quote = self.quote_source.get_prices([symbol]).get(symbol)
            if quote is None:
                self.logger.warning("No quote for symbol", symbol=symbol)
                raise NotFoundError("Quote", symbol)

            now = self.clock()
            record = apply_support(
                TrackedSymbol(
                    symbol=symbol,
                    display_name=quote.display_name or symbol,
                    support_levels=levels,
                    last_price=quote.price,
                    currency=quote.currency,
                    market_state=quote.market_state,
                    created_at=now,
                    last_updated=now,
                )
            )
            record = self.store.insert(record)

        self.logger.info(
            "Stock added to watchlist",
            symbol=symbol,
            last_price=record.last_price,
            nearest_support=record.nearest_support,
        )
        return record

    def remove_symbol(self, symbol: Any) -> TrackedSymbol:
        """Stop tracking a symbol and return the deleted record."""
        symbol = normalize_symbol(symbol)

        with self.locks.hold(symbol):
            deleted = self.store.delete_by_symbol(symbol)

        if deleted is None:
            raise NotFoundError("Stock", symbol)

        self.logger.info("Stock removed from watchlist", symbol=symbol)
        return deleted

    def edit_support_levels(self, symbol: Any, support_levels: Any) -> TrackedSymbol:
        """
        Replace a symbol's support levels.

        Derived fields are recomputed against the stored price; no quote is
        fetched.
        """
        symbol = normalize_symbol(symbol)
        levels = normalize_support_levels(support_levels)

        with self.locks.hold(symbol):
            current = self.store.find_by_symbol(symbol)
            if current is None:
                raise NotFoundError("Stock", symbol)

            record = apply_support(
                current.model_copy(update={"support_levels": levels})
            )
            record = self.store.update(record)

        self.logger.info(
            "Support levels updated",
            symbol=symbol,
            support_levels=levels,
            nearest_support=record.nearest_support,
        )
        return record
