"""Service layer for business logic encapsulation."""

from .watchlist import SortOrder, WatchlistPage, WatchlistService

__all__ = [
    "SortOrder",
    "WatchlistPage",
    "WatchlistService",
]
