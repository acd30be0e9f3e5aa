"""Data models for market data, signals, and protective levels."""

from .candle import MIN_CANDLES, Candle, CandleSeriesError, coerce_candles
from .signal import SignalResult, SignalType
from .trade_plan import ProtectiveLevels, plan_protective_levels

__all__ = [
    "MIN_CANDLES",
    "Candle",
    "CandleSeriesError",
    "ProtectiveLevels",
    "SignalResult",
    "SignalType",
    "coerce_candles",
    "plan_protective_levels",
]
