"""Core watchlist logic: support computation, quotes and price refresh."""

from .locks import SymbolLocks
from .models import TrackedSymbol, utcnow
from .quotes import Quote, QuoteSource, YahooQuoteSource
from .refresher import PriceRefresher, RefreshResult
from .support import (
    SupportInfo,
    apply_support,
    compute_support,
    normalize_support_levels,
    normalize_symbol,
)

__all__ = [
    "PriceRefresher",
    "Quote",
    "QuoteSource",
    "RefreshResult",
    "SupportInfo",
    "SymbolLocks",
    "TrackedSymbol",
    "YahooQuoteSource",
    "apply_support",
    "compute_support",
    "normalize_support_levels",
    "normalize_symbol",
    "utcnow",
]
