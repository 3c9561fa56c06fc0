"""
Support Tracker - Main application entry point.

Serves the watchlist API and keeps prices fresh in the background.

Usage:
    python src/main.py            Run the API server with the refresh scheduler
    python src/main.py -once      Run a single refresh cycle and exit
    python src/main.py -list      Print the watchlist, nearest to support first
"""

import sys

import uvicorn
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from support_tracker.bootstrap import build_components, initialize_application
from support_tracker.config.logging import get_logger
from support_tracker.webapi.app import create_app


def print_watchlist(components) -> None:
    """Print the watchlist as a plain table."""
    records = components.watchlist_service.list_symbols()
    if not records:
        print("Watchlist is empty.")
        return

    print(f"{'SYMBOL':<10} {'PRICE':>10} {'SUPPORT':>10} {'DIST':>9} {'DIST%':>8}")
    for record in records:
        support = "-" if record.nearest_support is None else f"{record.nearest_support:.2f}"
        distance = (
            "-"
            if record.distance_to_nearest_support is None
            else f"{record.distance_to_nearest_support:.2f}"
        )
        percent = "-" if record.distance_percent is None else f"{record.distance_percent:.2f}"
        print(
            f"{record.symbol:<10} {record.last_price:>10.2f} {support:>10} "
            f"{distance:>9} {percent:>8}"
        )


def main() -> None:
    """Main application entry point."""
    settings = initialize_application()
    logger = get_logger(__name__)

    components = build_components(settings)

    if "-once" in sys.argv:
        logger.info("Running a single refresh cycle")
        result = components.refresher.run_cycle()
        print(f"Updated {result.updated}/{result.total} stocks")
        if result.error:
            print(f"Refresh failed: {result.error}")
            sys.exit(1)
        return

    if "-list" in sys.argv:
        print_watchlist(components)
        return

    refresh_scheduler = components.refresh_scheduler if settings.refresh_enabled else None
    app = create_app(
        watchlist_service=components.watchlist_service,
        refresh_scheduler=refresh_scheduler,
        settings=settings,
    )

    logger.info(
        "Starting server",
        host=settings.endpoint_host,
        port=settings.endpoint_port,
        refresh_interval_seconds=settings.refresh_interval_seconds,
        store_backend=settings.store_backend,
    )

    try:
        uvicorn.run(
            app,
            host=settings.endpoint_host,
            port=settings.endpoint_port,
            log_level=settings.api_log_level.lower(),
        )
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")


if __name__ == "__main__":
    main()
