"""Repository classes for database operations using SQLAlchemy ORM."""

from .base import BaseRepository
from .tracked_stock import TrackedStockRepository

__all__ = [
    "BaseRepository",
    "TrackedStockRepository",
]
