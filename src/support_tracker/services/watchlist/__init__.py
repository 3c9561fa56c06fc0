"""Watchlist management service."""

from .models import SortOrder, WatchlistPage
from .service import WatchlistService, sort_records

__all__ = ["SortOrder", "WatchlistPage", "WatchlistService", "sort_records"]
