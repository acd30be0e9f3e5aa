"""Market data models for candles and candle series coercion."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

# Shortest series the slowest indicator (EMA 26 plus warm-up) is scored on.
MIN_CANDLES = 50


class CandleSeriesError(ValueError):
    """Raised when a candle series violates the input contract."""


@dataclass(frozen=True)
class Candle:
    """OHLCV candle data."""

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float

    def __post_init__(self) -> None:
        """Validate candle data integrity."""
        if min(self.open, self.high, self.low, self.close) <= 0:
            raise ValueError("Prices must be positive")
        if self.high < max(self.open, self.close, self.low):
            raise ValueError("High must be >= open, close, and low")
        if self.low > min(self.open, self.close, self.high):
            raise ValueError("Low must be <= open, close, and high")
        if self.volume < 0:
            raise ValueError("Volume must be non-negative")

    @classmethod
    def from_kline(cls, row: Sequence[Any]) -> "Candle":
        """
        Build a candle from an exchange kline array.

        Args:
            row: ``[open_time_ms, open, high, low, close, volume, ...]``.
                 Numeric fields may be strings, as Binance returns them.

        Returns:
            Candle instance.
        """
        if len(row) < 6:
            raise CandleSeriesError(f"Kline row needs at least 6 fields, got {len(row)}")
        ts_ms, o, h, l, c, v = row[0], row[1], row[2], row[3], row[4], row[5]
        return cls(
            timestamp=_to_datetime(ts_ms),
            open=float(o),
            high=float(h),
            low=float(l),
            close=float(c),
            volume=float(v),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Candle":
        """Build a candle from a dict with OHLCV keys and a time key."""
        ts = next(
            (data[key] for key in ("timestamp", "openTime", "time") if key in data),
            None,
        )
        if ts is None:
            raise CandleSeriesError("Candle mapping has no timestamp/openTime/time key")
        try:
            return cls(
                timestamp=_to_datetime(ts),
                open=float(data["open"]),
                high=float(data["high"]),
                low=float(data["low"]),
                close=float(data["close"]),
                volume=float(data.get("volume", 0.0)),
            )
        except KeyError as e:
            raise CandleSeriesError(f"Candle mapping is missing field {e}") from e


def _to_datetime(value: Any) -> datetime:
    """Convert epoch milliseconds or a datetime to an aware datetime."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise CandleSeriesError(f"Unsupported timestamp value: {value!r}")
    return datetime.fromtimestamp(float(value) / 1000.0, tz=timezone.utc)


def coerce_candles(raw: Any) -> list[Candle]:
    """
    Normalize a candle series to a list of ``Candle`` objects.

    Accepts ``Candle`` instances, kline arrays and mappings; the shapes may be
    mixed within one series.

    Args:
        raw: Sequence of candles, oldest first.

    Returns:
        List of candles, oldest first.

    Raises:
        CandleSeriesError: If the input is not a sequence, an element has an
            unknown shape or malformed fields, or timestamps decrease.
    """
    if raw is None:
        return []
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise CandleSeriesError(f"Candles must be a sequence, got {type(raw).__name__}")

    candles: list[Candle] = []
    for index, item in enumerate(raw):
        try:
            if isinstance(item, Candle):
                candle = item
            elif isinstance(item, Mapping):
                candle = Candle.from_mapping(item)
            elif isinstance(item, Sequence) and not isinstance(item, (str, bytes)):
                candle = Candle.from_kline(item)
            else:
                raise CandleSeriesError(f"Unsupported candle type {type(item).__name__}")
        except (TypeError, ValueError) as e:
            raise CandleSeriesError(f"Invalid candle at index {index}: {e}") from e

        if candles and candle.timestamp < candles[-1].timestamp:
            raise CandleSeriesError(
                f"Candles must be in time order: index {index} is older than index {index - 1}"
            )
        candles.append(candle)

    return candles
