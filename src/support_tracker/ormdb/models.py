"""SQLAlchemy ORM models for Support Tracker."""

import datetime

from sqlalchemy import Column, DateTime, Float, Integer, String
from sqlalchemy.types import JSON

from .database import Base


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class TrackedStock(Base):
    """Watchlist row: one per tracked symbol."""

    __tablename__ = "tracked_stocks"

    id = Column(Integer, primary_key=True, index=True)
    symbol = Column(String, unique=True, nullable=False, index=True)
    display_name = Column(String, default="", nullable=False)
    support_levels = Column(JSON, nullable=False)  # highest first
    last_price = Column(Float, default=0.0, nullable=False)
    nearest_support = Column(Float, nullable=True)
    distance_to_nearest_support = Column(Float, nullable=True, index=True)
    distance_percent = Column(Float, nullable=True, index=True)
    currency = Column(String, nullable=True)
    market_state = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    last_updated = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def __repr__(self):
        return f"<TrackedStock(symbol='{self.symbol}', last_price={self.last_price})>"
