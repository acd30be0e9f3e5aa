"""Binance market data provider using CCXT.

Provides kline candles via the Binance REST API.
Uses CCXT's built-in rate limiting with exponential backoff for resilience.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any

from confluence_engine.market_data.provider import MarketDataProvider
from confluence_engine.models.candle import Candle

logger = logging.getLogger(__name__)

# Staleness floor for the most recent candle (seconds); longer timeframes
# are allowed two full intervals.
_DEFAULT_MAX_CANDLE_AGE_SECONDS = 600  # 10 minutes

_QUOTE_ASSETS = ("USDT", "FDUSD", "USDC", "BUSD", "BTC", "ETH", "BNB")

_TIMEFRAME_UNITS = {"s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}


def to_ccxt_symbol(symbol: str) -> str:
    """Convert an exchange symbol (``BTCUSDT``) to CCXT format (``BTC/USDT``)."""
    if "/" in symbol:
        return symbol
    upper = symbol.upper()
    for quote in _QUOTE_ASSETS:
        if upper.endswith(quote) and len(upper) > len(quote):
            return f"{upper[: -len(quote)]}/{quote}"
    return symbol


def timeframe_seconds(timeframe: str) -> int:
    """Length of a timeframe string such as ``15m`` or ``4h`` in seconds."""
    try:
        amount, unit = int(timeframe[:-1]), timeframe[-1]
        return amount * _TIMEFRAME_UNITS[unit]
    except (ValueError, KeyError, IndexError) as e:
        raise ValueError(f"Unsupported timeframe: {timeframe!r}") from e


class BinanceMarketDataProvider(MarketDataProvider):
    """Real Binance market data provider via CCXT.

    Attributes:
        exchange: CCXT exchange instance (must have ``enableRateLimit=True``).
        max_candle_age_seconds: Minimum staleness threshold for the latest candle.
        max_retries: Maximum retry attempts on transient failures.
        base_backoff_seconds: Initial backoff interval for retries.
    """

    def __init__(
        self,
        exchange: Any,
        *,
        max_candle_age_seconds: int = _DEFAULT_MAX_CANDLE_AGE_SECONDS,
        max_retries: int = 3,
        base_backoff_seconds: float = 1.0,
    ) -> None:
        """Initialise the provider.

        Args:
            exchange: A configured CCXT exchange instance.
            max_candle_age_seconds: Maximum age in seconds for the latest candle.
            max_retries: Number of retry attempts on transient errors.
            base_backoff_seconds: Base interval for exponential backoff.
        """
        self.exchange = exchange
        self.max_candle_age_seconds = max_candle_age_seconds
        self.max_retries = max_retries
        self.base_backoff_seconds = base_backoff_seconds

    # -- Public interface (MarketDataProvider) ---------------------------------

    def get_candles(self, symbol: str, timeframe: str, limit: int) -> list[Candle]:
        """Fetch OHLCV candles from Binance.

        Args:
            symbol: Trading pair (``"BTCUSDT"`` or ``"BTC/USDT"``).
            timeframe: Candle timeframe (e.g. ``"1m"``, ``"15m"``, ``"1h"``).
            limit: Number of candles to fetch.

        Returns:
            List of ``Candle`` objects, oldest first.

        Raises:
            RuntimeError: If all retry attempts fail, rows are malformed,
                or data is stale.
        """
        market = to_ccxt_symbol(symbol)
        raw = self._retry(
            lambda: self.exchange.fetch_ohlcv(market, timeframe, limit=limit),
            context=f"fetch_ohlcv({market}, {timeframe})",
        )

        if not raw:
            raise RuntimeError(
                f"Binance returned empty candle data for {market}/{timeframe}"
            )

        try:
            candles = [Candle.from_kline(row) for row in raw]
        except (TypeError, ValueError) as e:
            raise RuntimeError(
                f"Binance returned malformed candle data for {market}/{timeframe}: {e}"
            ) from e

        self._check_staleness(candles, market, timeframe)
        return candles

    # -- Internal helpers ------------------------------------------------------

    def _retry(self, fn: Any, *, context: str) -> Any:
        """Execute ``fn`` with exponential backoff.

        Args:
            fn: Callable to execute.
            context: Human-readable label for log messages.

        Returns:
            Return value of ``fn``.

        Raises:
            RuntimeError: After exhausting all retries.
        """
        last_error: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            try:
                return fn()
            except Exception as exc:
                last_error = exc
                wait = self.base_backoff_seconds * (2 ** (attempt - 1))
                logger.warning(
                    "Binance API error on %s (attempt %d/%d): %s, retrying in %.1fs",
                    context,
                    attempt,
                    self.max_retries,
                    exc,
                    wait,
                )
                if attempt < self.max_retries:
                    time.sleep(wait)

        raise RuntimeError(
            f"Binance API failed after {self.max_retries} retries "
            f"({context}): {last_error}"
        )

    def _check_staleness(
        self, candles: list[Candle], symbol: str, timeframe: str
    ) -> None:
        """Raise if the newest candle is older than the allowed age.

        Kline timestamps are open times, so the allowed age is at least two
        timeframe intervals.

        Raises:
            RuntimeError: If data is stale.
        """
        if not candles:
            return

        max_age = max(self.max_candle_age_seconds, 2 * timeframe_seconds(timeframe))
        newest = candles[-1]
        age_seconds = (
            datetime.now(timezone.utc) - newest.timestamp
        ).total_seconds()

        if age_seconds > max_age:
            raise RuntimeError(
                f"Stale market data for {symbol}/{timeframe}: "
                f"newest candle is {age_seconds:.0f}s old "
                f"(max {max_age}s)"
            )
