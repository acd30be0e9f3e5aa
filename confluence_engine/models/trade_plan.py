"""Protective stop-loss and take-profit levels for an actionable signal."""

from dataclasses import dataclass

from confluence_engine.models.signal import SignalType


@dataclass(frozen=True)
class ProtectiveLevels:
    """
    Stop-loss and take-profit prices around an entry.

    All prices are in quote currency (e.g., USDT for BTCUSDT).
    """

    side: SignalType
    entry_price: float
    stop_loss_price: float
    take_profit_price: float

    def __post_init__(self) -> None:
        """Validate level ordering for the side."""
        if self.side == SignalType.NEUTRAL:
            raise ValueError("Protective levels need a BUY or SELL side")
        if self.entry_price <= 0:
            raise ValueError("Entry price must be positive")

        # Long: SL < entry < TP. Short: TP < entry < SL.
        if self.side == SignalType.BUY:
            if self.stop_loss_price >= self.entry_price:
                raise ValueError("Stop loss must be below entry price for long")
            if self.take_profit_price <= self.entry_price:
                raise ValueError("Take profit must be above entry price for long")
        else:
            if self.stop_loss_price <= self.entry_price:
                raise ValueError("Stop loss must be above entry price for short")
            if self.take_profit_price >= self.entry_price:
                raise ValueError("Take profit must be below entry price for short")

    @property
    def risk_per_unit(self) -> float:
        """Price distance to the stop."""
        return abs(self.entry_price - self.stop_loss_price)

    @property
    def reward_per_unit(self) -> float:
        """Price distance to the target."""
        return abs(self.take_profit_price - self.entry_price)

    @property
    def risk_reward_ratio(self) -> float:
        """Reward-to-risk ratio."""
        return self.reward_per_unit / self.risk_per_unit if self.risk_per_unit > 0 else 0.0


def plan_protective_levels(
    signal: SignalType,
    entry_price: float,
    stop_loss_pct: float,
    take_profit_pct: float,
) -> ProtectiveLevels:
    """
    Derive symmetric percentage offsets from the entry price.

    BUY: SL = price * (1 - sl/100), TP = price * (1 + tp/100).
    SELL mirrors both offsets.

    Raises:
        ValueError: For a NEUTRAL signal or non-positive percentages.
    """
    if signal == SignalType.NEUTRAL:
        raise ValueError("Cannot plan protective levels for a NEUTRAL signal")
    if stop_loss_pct <= 0 or take_profit_pct <= 0:
        raise ValueError("Stop loss and take profit percentages must be positive")

    direction = 1.0 if signal == SignalType.BUY else -1.0
    return ProtectiveLevels(
        side=signal,
        entry_price=entry_price,
        stop_loss_price=entry_price * (1 - direction * stop_loss_pct / 100),
        take_profit_price=entry_price * (1 + direction * take_profit_pct / 100),
    )
