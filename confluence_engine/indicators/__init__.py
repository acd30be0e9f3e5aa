"""Technical indicators used by the confluence scorer."""

from .bollinger import BandState, BollingerApproximation, calculate_bollinger_approximation, calculate_sma
from .ema import calculate_ema
from .macd import calculate_macd_line
from .rsi import calculate_rsi

__all__ = [
    "BandState",
    "BollingerApproximation",
    "calculate_bollinger_approximation",
    "calculate_ema",
    "calculate_macd_line",
    "calculate_rsi",
    "calculate_sma",
]
