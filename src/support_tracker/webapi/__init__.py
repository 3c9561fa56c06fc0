"""HTTP API for the watchlist."""

from .app import create_app

__all__ = ["create_app"]
