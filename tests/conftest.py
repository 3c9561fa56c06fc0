"""Shared test configuration and fixtures."""

from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

import pytest
from sqlalchemy.orm import sessionmaker

from support_tracker.core.locks import SymbolLocks
from support_tracker.core.models import TrackedSymbol
from support_tracker.core.quotes import Quote
from support_tracker.core.refresher import PriceRefresher
from support_tracker.core.support import apply_support
from support_tracker.exceptions import QuoteSourceError
from support_tracker.ormdb.database import create_engine_for_url, create_tables
from support_tracker.ormdb.store import SqlWatchlistStore
from support_tracker.services.watchlist import WatchlistService
from support_tracker.store import JsonFileWatchlistStore

FIXED_TIME = datetime(2024, 1, 2, 15, 30, tzinfo=timezone.utc)


class FakeQuoteSource:
    """In-memory quote source keyed by symbol."""

    def __init__(self, prices: Optional[Dict[str, float]] = None):
        self.prices = dict(prices or {})
        self.error: Optional[Exception] = None
        self.calls = []

    def set_price(self, symbol: str, price: float) -> None:
        self.prices[symbol] = price

    def fail_with(self, error: Exception) -> None:
        self.error = error

    def get_prices(self, symbols: Iterable[str]) -> Dict[str, Quote]:
        symbols = list(symbols)
        self.calls.append(symbols)
        if self.error is not None:
            raise self.error
        return {
            symbol: Quote(
                symbol=symbol,
                price=self.prices[symbol],
                currency="USD",
                market_state="REGULAR",
                display_name=f"{symbol} Inc.",
            )
            for symbol in symbols
            if symbol in self.prices
        }


def make_record(symbol: str, last_price: float, support_levels, **overrides) -> TrackedSymbol:
    """Build a stored record with derived fields already computed."""
    fields = {
        "symbol": symbol,
        "display_name": f"{symbol} Inc.",
        "support_levels": sorted(support_levels, reverse=True),
        "last_price": last_price,
        "currency": "USD",
        "market_state": "REGULAR",
        "created_at": FIXED_TIME,
        "last_updated": FIXED_TIME,
    }
    fields.update(overrides)
    return apply_support(TrackedSymbol(**fields))


@pytest.fixture(autouse=True)
def clean_settings_cache():
    """Clear the settings cache between tests to avoid state pollution."""
    from support_tracker.config.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def quote_source():
    """Fake quote source with a few known symbols."""
    return FakeQuoteSource({"AAPL": 150.0, "MSFT": 410.0, "PTT.BK": 33.25})


@pytest.fixture
def sql_session_factory():
    """Session factory bound to a fresh in-memory SQLite database."""
    engine = create_engine_for_url("sqlite://")
    create_tables(engine)
    factory = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    yield factory
    engine.dispose()


@pytest.fixture
def sql_store(sql_session_factory):
    return SqlWatchlistStore(sql_session_factory)


@pytest.fixture
def json_store(tmp_path):
    return JsonFileWatchlistStore(str(tmp_path / "stocks.json"))


@pytest.fixture(params=["sql", "json"])
def store(request):
    """Each test using this fixture runs once per store backend."""
    if request.param == "sql":
        return request.getfixturevalue("sql_store")
    return request.getfixturevalue("json_store")


@pytest.fixture
def locks():
    return SymbolLocks()


@pytest.fixture
def watchlist_service(store, quote_source, locks):
    return WatchlistService(store, quote_source, locks=locks, clock=lambda: FIXED_TIME)


@pytest.fixture
def refresher(store, quote_source, locks):
    return PriceRefresher(store, quote_source, locks=locks)


@pytest.fixture
def failing_quote_source():
    source = FakeQuoteSource()
    source.fail_with(QuoteSourceError("upstream unavailable"))
    return source


@pytest.fixture
def record_factory():
    """Factory for stored records with derived fields already computed."""
    return make_record


@pytest.fixture
def fake_quote_source_cls():
    return FakeQuoteSource


@pytest.fixture
def fixed_time():
    """Timestamp the service clock returns in tests."""
    return FIXED_TIME
