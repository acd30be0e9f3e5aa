"""Signal models for trading decisions."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SignalType(str, Enum):
    """Trading signal types."""

    BUY = "BUY"  # Long entry
    SELL = "SELL"  # Short entry
    NEUTRAL = "NEUTRAL"  # No action


@dataclass(frozen=True)
class SignalResult:
    """Outcome of one analysis call: direction, confidence and reasons."""

    signal: SignalType
    confidence: float = 0.0  # 0 to 100
    details: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate signal data."""
        if not 0.0 <= self.confidence <= 100.0:
            raise ValueError("Confidence must be between 0 and 100")
        if self.signal == SignalType.NEUTRAL and self.confidence != 0.0:
            raise ValueError("NEUTRAL signals must have zero confidence")
        if not isinstance(self.details, tuple):
            object.__setattr__(self, "details", tuple(self.details))

    @classmethod
    def neutral(cls, *details: str) -> "SignalResult":
        """NEUTRAL result with zero confidence."""
        return cls(signal=SignalType.NEUTRAL, confidence=0.0, details=details)

    @property
    def is_actionable(self) -> bool:
        """True for BUY and SELL."""
        return self.signal != SignalType.NEUTRAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "signal": self.signal.value,
            "confidence": self.confidence,
            "details": list(self.details),
        }
