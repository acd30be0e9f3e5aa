"""Abstract market data provider interface."""

from abc import ABC, abstractmethod

from confluence_engine.models.candle import Candle


class MarketDataProvider(ABC):
    """Abstract interface for market data providers."""

    @abstractmethod
    def get_candles(self, symbol: str, timeframe: str, limit: int) -> list[Candle]:
        """
        Fetch OHLCV candles for a symbol.

        Args:
            symbol: Trading pair (e.g., "BTCUSDT" or "BTC/USDT")
            timeframe: Candle timeframe (e.g., "1m", "15m", "1h")
            limit: Number of candles to fetch

        Returns:
            List of candles, most recent last

        Raises:
            RuntimeError: If the data cannot be fetched
        """
        ...
