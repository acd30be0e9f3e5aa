"""Abstract signal provider interface."""

from abc import ABC, abstractmethod

from confluence_engine.config.models import StrategyConfig
from confluence_engine.models.candle import Candle
from confluence_engine.models.signal import SignalResult


class SignalProvider(ABC):
    """Abstract interface for signal generation."""

    @abstractmethod
    def generate_signal(
        self,
        symbol: str,
        candles: list[Candle],
        profile: StrategyConfig,
    ) -> SignalResult:
        """
        Generate a trading signal based on market data.

        Args:
            symbol: Trading pair (e.g., "BTCUSDT")
            candles: Historical OHLCV data, oldest first
            profile: Strategy configuration to score against

        Returns:
            Trading signal (BUY, SELL, or NEUTRAL)
        """
        ...
