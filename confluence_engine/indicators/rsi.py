"""Relative Strength Index (RSI) indicator."""

from collections.abc import Sequence

NEUTRAL_RSI = 50.0


def calculate_rsi(closes: Sequence[float], period: int = 14) -> float:
    """
    Calculate RSI over the most recent ``period`` price changes.

    Gains and losses are simple averages of the last ``period`` differences,
    not Wilder's smoothing over the whole series.

    Args:
        closes: Closing prices, oldest first.
        period: RSI period (default 14).

    Returns:
        RSI in [0, 100]. 50.0 if fewer than period+1 closes, 100.0 when the
        window has no losses.
    """
    if period < 1 or len(closes) < period + 1:
        return NEUTRAL_RSI

    gains = 0.0
    losses = 0.0
    for i in range(len(closes) - period, len(closes)):
        change = closes[i] - closes[i - 1]
        if change >= 0:
            gains += change
        else:
            losses -= change

    avg_gain = gains / period
    avg_loss = losses / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))
