"""Support Tracker - watchlist of tickers measured against support levels."""

__version__ = "1.0.0"
