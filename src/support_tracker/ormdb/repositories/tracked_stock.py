"""Repository for tracked stock operations."""

from typing import Any, Dict, List, Optional

from ..models import TrackedStock
from .base import BaseRepository


class TrackedStockRepository(BaseRepository):
    """Repository for tracked stock rows."""

    def get_all_stocks(self) -> List[TrackedStock]:
        """Get all tracked stocks ordered by symbol."""
        return self.session.query(TrackedStock).order_by(TrackedStock.symbol).all()

    def get_stock_by_symbol(self, symbol: str) -> Optional[TrackedStock]:
        """Get a tracked stock by symbol."""
        return (
            self.session.query(TrackedStock)
            .filter(TrackedStock.symbol == symbol.upper())
            .first()
        )

    def add_stock(self, **fields: Any) -> TrackedStock:
        """Insert a new tracked stock row."""
        stock = TrackedStock(**fields)
        self.session.add(stock)
        self.session.commit()
        self.session.refresh(stock)
        return stock

    def update_stock(self, symbol: str, fields: Dict[str, Any]) -> Optional[TrackedStock]:
        """Overwrite the given columns of an existing row."""
        stock = self.get_stock_by_symbol(symbol)
        if stock is None:
            return None

        for name, value in fields.items():
            setattr(stock, name, value)
        self.session.commit()
        return stock

    def delete_stock(self, stock: TrackedStock) -> None:
        """Hard delete a tracked stock row."""
        self.session.delete(stock)
        self.session.commit()
