"""Database module for SQLAlchemy ORM integration."""

from .database import (
    Base,
    create_engine_for_url,
    create_tables,
    get_engine,
    get_session_factory,
    get_session_sync,
)
from .models import TrackedStock
from .repositories import BaseRepository, TrackedStockRepository
from .store import SqlWatchlistStore

__all__ = [
    # Database components
    "Base",
    "create_engine_for_url",
    "create_tables",
    "get_engine",
    "get_session_factory",
    "get_session_sync",
    # Models
    "TrackedStock",
    # Repositories
    "BaseRepository",
    "TrackedStockRepository",
    "SqlWatchlistStore",
]
