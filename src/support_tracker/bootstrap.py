"""Application initialisation and component wiring."""

from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Optional

from .config.logging import get_logger, setup_logging
from .config.settings import Settings, get_settings
from .core.locks import SymbolLocks
from .core.quotes import QuoteSource, YahooQuoteSource
from .core.refresher import PriceRefresher
from .scheduler import RefreshScheduler, create_scheduler
from .services.watchlist import WatchlistService
from .store import JsonFileWatchlistStore


@dataclass
class AppComponents:
    """Everything the entry points need, wired together."""

    store: object
    quote_source: QuoteSource
    locks: SymbolLocks
    watchlist_service: WatchlistService
    refresher: PriceRefresher
    refresh_scheduler: RefreshScheduler


def initialize_application(settings: Optional[Settings] = None) -> Settings:
    """Configure logging and make sure the data directory exists."""
    settings = settings or get_settings()

    setup_logging(
        level=settings.log_level,
        format_type=settings.log_format,
        file_enabled=settings.log_file_enabled,
        file_path=settings.log_file_path,
        max_file_size=settings.log_max_file_size,
        backup_count=settings.log_backup_count,
    )

    Path(settings.data_directory).mkdir(parents=True, exist_ok=True)

    get_logger(__name__).info(
        "Application initialized",
        environment=settings.environment,
        debug=settings.debug,
        store_backend=settings.store_backend,
    )
    return settings


def build_store(settings: Settings):
    """Create the configured watchlist store backend."""
    if settings.store_backend == "json":
        return JsonFileWatchlistStore(settings.json_store_path)

    from .ormdb import SqlWatchlistStore, create_tables, get_session_factory

    create_tables()
    return SqlWatchlistStore(get_session_factory())


def build_components(
    settings: Optional[Settings] = None,
    store=None,
    quote_source: Optional[QuoteSource] = None,
) -> AppComponents:
    """Wire store, quote source, service, refresher and scheduler."""
    settings = settings or get_settings()
    store = store if store is not None else build_store(settings)
    quote_source = quote_source or YahooQuoteSource()
    locks = SymbolLocks()

    watchlist_service = WatchlistService(
        store,
        quote_source,
        locks=locks,
        max_tracked_symbols=settings.max_tracked_symbols,
    )
    refresher = PriceRefresher(store, quote_source, locks=locks)
    refresh_scheduler = RefreshScheduler(
        refresher,
        interval_seconds=settings.refresh_interval_seconds,
        initial_delay_seconds=settings.refresh_initial_delay_seconds,
        scheduler_factory=partial(
            create_scheduler, max_workers=settings.scheduler_max_workers
        ),
    )

    return AppComponents(
        store=store,
        quote_source=quote_source,
        locks=locks,
        watchlist_service=watchlist_service,
        refresher=refresher,
        refresh_scheduler=refresh_scheduler,
    )
