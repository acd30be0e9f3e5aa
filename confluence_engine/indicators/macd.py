"""Moving Average Convergence Divergence (MACD) indicator."""

from collections.abc import Sequence

from confluence_engine.indicators.ema import calculate_ema


def calculate_macd_line(
    closes: Sequence[float],
    fast_period: int = 12,
    slow_period: int = 26,
) -> float:
    """
    Calculate the latest MACD line value.

    MACD Line = EMA(fast) - EMA(slow), evaluated at the newest close.
    Only the sign is used for scoring, so no signal line or histogram is built.

    Args:
        closes: Closing prices, oldest first.
        fast_period: Fast EMA period (default: 12).
        slow_period: Slow EMA period (default: 26).

    Returns:
        MACD line at the last index, 0.0 for an empty series.
    """
    if not closes:
        return 0.0

    ema_fast = calculate_ema(closes, fast_period)
    ema_slow = calculate_ema(closes, slow_period)
    return ema_fast[-1] - ema_slow[-1]
