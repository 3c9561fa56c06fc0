"""Quote source contract and the Yahoo Finance adapter."""

from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

import yfinance as yf
from pydantic import BaseModel, Field
from yfinance.exceptions import YFRateLimitError

from ..config.logging import get_logger
from ..exceptions import QuoteSourceError

logger = get_logger(__name__)

# yfinance info keys checked in order for a usable price
PRICE_FIELDS = ("regularMarketPrice", "currentPrice", "preMarketPrice", "postMarketPrice")


class Quote(BaseModel):
    """Current price and display metadata for one symbol."""

    symbol: str
    price: float = Field(..., gt=0, description="Current price")
    currency: str = "USD"
    market_state: str = "REGULAR"
    display_name: str = ""
    change: Optional[float] = None
    change_percent: Optional[float] = None
    day_high: Optional[float] = None
    day_low: Optional[float] = None

    @classmethod
    def from_info(cls, symbol: str, info: Dict[str, Any]) -> Optional["Quote"]:
        """
        Build a quote from a yfinance ``info`` mapping.

        Returns None when the mapping carries no usable price, which is how
        unknown symbols show up.
        """
        price = next((info.get(key) for key in PRICE_FIELDS if info.get(key)), None)
        if not isinstance(price, (int, float)) or price <= 0:
            return None

        return cls(
            symbol=symbol,
            price=float(price),
            currency=info.get("currency") or "USD",
            market_state=info.get("marketState") or "REGULAR",
            display_name=info.get("shortName") or info.get("longName") or symbol,
            change=info.get("regularMarketChange"),
            change_percent=info.get("regularMarketChangePercent"),
            day_high=info.get("regularMarketDayHigh"),
            day_low=info.get("regularMarketDayLow"),
        )


class QuoteSource(Protocol):
    """Protocol for quote providers."""

    def get_prices(self, symbols: Iterable[str]) -> Dict[str, Quote]:
        """
        Fetch quotes for a batch of symbols.

        Unknown symbols are absent from the result. A failure of the whole
        batch raises QuoteSourceError.
        """
        ...


def _is_not_found(error: Exception) -> bool:
    message = str(error)
    return "404" in message or "Not Found" in message


class YahooQuoteSource:
    """
    Quote source backed by Yahoo Finance through yfinance.

    A call builds one ``yf.Tickers`` object for the whole batch, but yfinance
    resolves ``.info`` per ticker, so a batch of N symbols costs N upstream
    HTTP requests. Callers still see a single ``get_prices`` call per cycle.
    """

    def __init__(self, tickers_factory: Callable[[str], Any] = yf.Tickers):
        self.tickers_factory = tickers_factory
        self.logger = logger.bind(component="yahoo_quote_source")

    def get_prices(self, symbols: Iterable[str]) -> Dict[str, Quote]:
        requested: List[str] = []
        for symbol in symbols:
            symbol = symbol.strip().upper()
            if symbol and symbol not in requested:
                requested.append(symbol)

        if not requested:
            return {}

        self.logger.info("Fetching quotes", symbols=requested)

        try:
            tickers = self.tickers_factory(" ".join(requested))
        except Exception as e:
            raise QuoteSourceError(str(e)) from e

        quotes: Dict[str, Quote] = {}
        failures: Dict[str, str] = {}

        for symbol in requested:
            ticker = tickers.tickers.get(symbol)
            if ticker is None:
                continue

            try:
                info = ticker.info or {}
            except YFRateLimitError as e:
                self.logger.warning("Rate limited by Yahoo Finance", symbol=symbol)
                raise QuoteSourceError(str(e), rate_limited=True) from e
            except Exception as e:
                if _is_not_found(e):
                    self.logger.info("Symbol not found", symbol=symbol)
                    continue
                failures[symbol] = str(e)
                continue

            quote = Quote.from_info(symbol, info)
            if quote is None:
                self.logger.info("No price available for symbol", symbol=symbol)
                continue
            quotes[symbol] = quote

        if failures and len(failures) == len(requested):
            self.logger.error("Quote batch failed", failures=failures)
            raise QuoteSourceError(next(iter(failures.values())))

        if failures:
            self.logger.warning(
                "Some quotes could not be fetched",
                failed_symbols=list(failures),
                successful_count=len(quotes),
                total_count=len(requested),
            )

        self.logger.info(
            "Quotes fetched", fetched=len(quotes), requested=len(requested)
        )
        return quotes
