"""Domain model for a tracked watchlist entry."""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class TrackedSymbol(BaseModel):
    """One watched ticker with its support levels and derived distances."""

    symbol: str = Field(..., description="Uppercase ticker symbol")
    display_name: str = Field("", description="Human-readable name from the quote source")
    support_levels: List[float] = Field(
        default_factory=list, description="Support levels, highest first"
    )
    last_price: float = Field(0.0, description="Most recently observed price")
    nearest_support: Optional[float] = Field(
        None, description="Support level nearest to last_price"
    )
    distance_to_nearest_support: Optional[float] = Field(
        None, description="last_price minus nearest_support"
    )
    distance_percent: Optional[float] = Field(
        None, description="Distance as a percentage of nearest_support"
    )
    currency: Optional[str] = Field(None, description="Quote currency")
    market_state: Optional[str] = Field(None, description="Market session state")
    created_at: datetime = Field(default_factory=utcnow)
    last_updated: datetime = Field(default_factory=utcnow)
