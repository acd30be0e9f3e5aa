"""Stub market data provider for testing with deterministic data."""

from datetime import datetime, timedelta, timezone

from confluence_engine.models.candle import Candle

from .binance_provider import timeframe_seconds
from .provider import MarketDataProvider


class StubMarketDataProvider(MarketDataProvider):
    """Stub provider returning a fixed-drift price path for every symbol."""

    def __init__(
        self,
        base_price: float = 50000.0,
        drift_pct: float = 0.05,
        volume: float = 100.0,
    ):
        """
        Initialize stub provider with configurable parameters.

        Args:
            base_price: Close of the oldest candle
            drift_pct: Close-to-close change per candle in percent
                       (negative values produce a falling, oversold series)
            volume: Volume for candles
        """
        self.base_price = base_price
        self.drift_pct = drift_pct
        self.volume = volume
        self._closes: dict[str, list[float]] = {}

    def set_closes(self, symbol: str, closes: list[float]) -> None:
        """Serve ``closes`` for ``symbol`` instead of the drift path."""
        self._closes[symbol] = list(closes)

    def get_candles(self, symbol: str, timeframe: str, limit: int) -> list[Candle]:
        """Return deterministic candle data ending at the current interval."""
        if symbol in self._closes:
            closes = self._closes[symbol][-limit:]
        else:
            step = 1 + self.drift_pct / 100
            closes = [self.base_price * step**i for i in range(limit)]

        interval = timedelta(seconds=timeframe_seconds(timeframe))
        base_time = datetime.now(timezone.utc)
        candles: list[Candle] = []

        for i, close in enumerate(closes):
            timestamp = base_time - interval * (len(closes) - 1 - i)
            open_price = closes[i - 1] if i > 0 else close
            candles.append(
                Candle(
                    timestamp=timestamp,
                    open=open_price,
                    high=max(open_price, close) * 1.001,  # +0.1%
                    low=min(open_price, close) * 0.999,  # -0.1%
                    close=close,
                    volume=self.volume,
                )
            )

        return candles
