"""Data models for the watchlist service."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ...core.models import TrackedSymbol


class SortOrder(str, Enum):
    """Orderings offered for the watchlist view."""

    DISTANCE = "distance"  # absolute price distance, nearest first
    DISTANCE_PERCENT = "distance_percent"  # absolute percentage distance
    SYMBOL = "symbol"
    PRICE_HIGH = "price_high"
    PRICE_LOW = "price_low"


@dataclass
class WatchlistPage:
    """One page of a filtered and sorted watchlist."""

    items: List[TrackedSymbol]
    total: int  # tracked symbols before filtering
    filtered: int  # symbols matching the search
    page: int
    per_page: Optional[int]  # None means everything on one page

    @property
    def pages(self) -> int:
        if self.per_page is None:
            return 1
        return max(1, math.ceil(self.filtered / self.per_page))

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1
