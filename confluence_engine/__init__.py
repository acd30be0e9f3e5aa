"""Weighted-confluence trading signal engine."""

from confluence_engine.config.models import IndicatorConfig, IndicatorName, StrategyConfig
from confluence_engine.models.candle import Candle
from confluence_engine.models.signal import SignalResult, SignalType
from confluence_engine.signals.scorer import analyze

__all__ = [
    "Candle",
    "IndicatorConfig",
    "IndicatorName",
    "SignalResult",
    "SignalType",
    "StrategyConfig",
    "analyze",
]
