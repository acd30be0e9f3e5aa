"""Exponential Moving Average (EMA) indicator."""

from collections.abc import Sequence


def calculate_ema(values: Sequence[float], period: int) -> list[float]:
    """
    Calculate Exponential Moving Average (EMA).

    Seeded with the first value and iterated forward in one pass as
    ``ema[i] = value[i] * k + ema[i-1] * (1 - k)`` with k = 2 / (period + 1),
    so every index carries a usable value. The operand order is fixed: the
    dashboard and worker compute this exact expression.

    Args:
        values: List of values (e.g., closing prices).
        period: EMA period.

    Returns:
        List of EMA values (same length as input). ``ema[0] == values[0]``.
    """
    if not values:
        return []

    multiplier = 2.0 / (period + 1)
    ema_values = [float(values[0])]
    for value in values[1:]:
        ema_values.append(value * multiplier + ema_values[-1] * (1 - multiplier))

    return ema_values
