"""
Price collaborator interface and adapters.

The gains engine only needs "current price for symbol". Anything that can
answer that (a fixed mapping, yfinance) implements PriceProvider. Missing
or non-positive quotes make the engine fall back to average cost.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Protocol

import yfinance as yf

from tracky.core.models import Position

logger = logging.getLogger(__name__)


# Ledger exchange codes -> Yahoo Finance ticker suffixes
YAHOO_SUFFIXES = {
    "XAMS": ".AS",
    "XETR": ".DE",
    "XLON": ".L",
    "XPAR": ".PA",
    "XNAS": "",
    "XNYS": "",
    "NYSE": "",
    "NASDAQ": "",
}


@dataclass(frozen=True)
class Quote:
    """A current price for one instrument."""

    price: float
    currency: Optional[str] = None
    change_percent: float = 0.0
    source: str = ""

    @property
    def is_usable(self) -> bool:
        return self.price is not None and self.price > 0


class PriceProvider(Protocol):
    """Anything that can quote a current price for a symbol."""

    def get_price(self, symbol: str, exchange: str = "") -> Optional[Quote]:
        ...


class StaticPriceProvider:
    """Serves quotes from a fixed mapping of symbol to quote or price."""

    def __init__(self, prices: Mapping[str, Quote | float]):
        self.quotes: dict[str, Quote] = {
            symbol: value if isinstance(value, Quote) else Quote(price=float(value), source="static")
            for symbol, value in prices.items()
        }

    def get_price(self, symbol: str, exchange: str = "") -> Optional[Quote]:
        return self.quotes.get(symbol)


def yahoo_symbol(symbol: str, exchange: str = "") -> str:
    """Map a ledger symbol and exchange code to a Yahoo Finance ticker."""
    return symbol + YAHOO_SUFFIXES.get((exchange or "").upper(), "")


class YFinanceProvider:
    """Quotes the latest daily close from Yahoo Finance via yfinance."""

    def __init__(self, period: str = "5d"):
        self.period = period

    def get_price(self, symbol: str, exchange: str = "") -> Optional[Quote]:
        """
        Fetch the latest close and its change against the previous close.

        Args:
            symbol: Clean symbol of the instrument.
            exchange: Ledger exchange code, used to pick the Yahoo suffix.

        Returns:
            Quote, or None if Yahoo has no recent history for the ticker.
        """
        ticker_symbol = yahoo_symbol(symbol, exchange)
        ticker = yf.Ticker(ticker_symbol)
        history = ticker.history(period=self.period)

        if history is None or history.empty or "Close" not in history:
            logger.warning(f"No price history returned for {ticker_symbol}")
            return None

        closes = history["Close"].dropna()
        if closes.empty:
            return None

        price = float(closes.iloc[-1])
        change_pct = 0.0
        if len(closes) > 1 and closes.iloc[-2]:
            previous = float(closes.iloc[-2])
            change_pct = (price - previous) / previous * 100

        currency = None
        try:
            currency = ticker.fast_info["currency"]
        except (KeyError, TypeError, AttributeError):
            logger.debug(f"No currency metadata for {ticker_symbol}")

        return Quote(price=price, currency=currency, change_percent=change_pct, source="yahoo")


def fetch_quotes(
    positions: Iterable[Position],
    provider: PriceProvider,
) -> dict[str, Quote]:
    """
    Ask the provider for a quote for each position.

    A failed lookup is logged and left out; the position then keeps its
    average cost as the proxy price.

    Args:
        positions: Positions to quote.
        provider: The price collaborator.

    Returns:
        Dict of symbol to usable Quote.
    """
    quotes: dict[str, Quote] = {}
    positions = list(positions)

    for position in positions:
        try:
            quote = provider.get_price(position.symbol, position.exchange)
        except Exception as e:
            logger.error(f"Price lookup failed for {position.symbol}: {e}")
            continue

        if quote and quote.is_usable:
            quotes[position.symbol] = quote
        else:
            logger.info(f"No usable price for {position.symbol}, using average cost")

    logger.info(f"Fetched {len(quotes)}/{len(positions)} quotes")
    return quotes


def resolve_current_price(position: Position, quote: Optional[Quote]) -> float:
    """Quoted price if positive, otherwise the position's average cost."""
    if quote is not None and quote.is_usable:
        return quote.price
    return position.average_cost
