"""Batch price refresh for every tracked symbol."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..config.logging import get_logger
from .locks import SymbolLocks
from .models import utcnow
from .quotes import QuoteSource
from .support import apply_support

logger = get_logger(__name__)


@dataclass
class RefreshResult:
    """Outcome of one refresh cycle."""

    total: int = 0
    updated: int = 0
    skipped: List[str] = field(default_factory=list)
    error: Optional[str] = None
    started_at: datetime = field(default_factory=utcnow)
    duration_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "updated": self.updated,
            "skipped": list(self.skipped),
            "error": self.error,
            "started_at": self.started_at.isoformat(),
            "duration_ms": round(self.duration_ms, 1),
        }


class PriceRefresher:
    """
    Reconcile the stored watchlist with the latest quotes.

    One cycle issues a single batched quote request for every tracked symbol
    and rewrites the price, metadata and derived support fields of each
    symbol that came back. Symbols missing from the batch keep their previous
    values. A failure of the quote request aborts the cycle before anything
    is written. ``run_cycle`` never raises; failures are logged and returned
    in the result.
    """

    def __init__(self, store, quote_source: QuoteSource, locks: Optional[SymbolLocks] = None):
        self.store = store
        self.quote_source = quote_source
        self.locks = locks or SymbolLocks()
        self.logger = logger.bind(component="price_refresher")

    def run_cycle(self) -> RefreshResult:
        result = RefreshResult()

        try:
            self._refresh(result)
        except Exception as e:
            result.error = str(e)
            self.logger.error(
                "Price refresh failed, will retry on next interval",
                error_type=type(e).__name__,
                error=str(e),
                exc_info=True,
            )
        finally:
            result.duration_ms = (utcnow() - result.started_at).total_seconds() * 1000

        return result

    def _refresh(self, result: RefreshResult) -> None:
        records = self.store.list_all()
        result.total = len(records)

        if not records:
            self.logger.info("No stocks to update")
            return

        symbols = [record.symbol for record in records]
        self.logger.info("Updating prices", count=len(symbols))

        quotes = self.quote_source.get_prices(symbols)

        for symbol in symbols:
            quote = quotes.get(symbol)
            if quote is None:
                result.skipped.append(symbol)
                continue

            with self.locks.hold(symbol):
                # Re-read so a concurrent edit or delete is not overwritten
                current = self.store.find_by_symbol(symbol)
                if current is None:
                    result.skipped.append(symbol)
                    continue

                refreshed = apply_support(
                    current.model_copy(
                        update={
                            "last_price": quote.price,
                            "currency": quote.currency,
                            "market_state": quote.market_state,
                            "display_name": quote.display_name or current.display_name,
                            "last_updated": utcnow(),
                        }
                    )
                )
                self.store.update(refreshed)
                result.updated += 1

        self.logger.info(
            "Price refresh completed",
            updated=result.updated,
            total=result.total,
            skipped=result.skipped,
        )
