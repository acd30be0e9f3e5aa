"""Market data providers."""

from .binance_provider import BinanceMarketDataProvider
from .provider import MarketDataProvider
from .stub_provider import StubMarketDataProvider

__all__ = [
    "BinanceMarketDataProvider",
    "MarketDataProvider",
    "StubMarketDataProvider",
]
