"""Bollinger band approximation around a simple moving average."""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum


class BandState(str, Enum):
    """Where the latest close sits relative to the SMA envelope."""

    DIP = "DIP"
    INSIDE = "INSIDE"
    OVEREXTENDED = "OVEREXTENDED"


@dataclass(frozen=True)
class BollingerApproximation:
    """Bollinger approximation output."""

    sma: float
    price: float
    state: BandState

    @property
    def deviation_pct(self) -> float:
        """Signed distance of price from the SMA, in percent."""
        if self.sma == 0:
            return 0.0
        return (self.price - self.sma) / self.sma * 100.0


def calculate_sma(values: Sequence[float], period: int) -> float:
    """
    Simple moving average of the last ``period`` values.

    Returns 0.0 when there are fewer than ``period`` values.
    """
    if period < 1 or len(values) < period:
        return 0.0
    return sum(values[-period:]) / period


def calculate_bollinger_approximation(
    closes: Sequence[float], period: int = 20, band_pct: float = 2.0
) -> BollingerApproximation:
    """
    Classify the latest close against a fixed-percentage SMA envelope.

    This is a percentage envelope (default +/-2% around SMA20), not a
    standard-deviation band.

    Args:
        closes: Closing prices, oldest first.
        period: SMA period.
        band_pct: Envelope half-width in percent.

    Returns:
        BollingerApproximation; state INSIDE when the series is too short.
    """
    if not closes:
        return BollingerApproximation(sma=0.0, price=0.0, state=BandState.INSIDE)

    price = closes[-1]
    sma = calculate_sma(closes, period)
    if sma == 0.0:
        return BollingerApproximation(sma=sma, price=price, state=BandState.INSIDE)

    if price < sma * (1 - band_pct / 100):
        state = BandState.DIP
    elif price > sma * (1 + band_pct / 100):
        state = BandState.OVEREXTENDED
    else:
        state = BandState.INSIDE

    return BollingerApproximation(sma=sma, price=price, state=state)
