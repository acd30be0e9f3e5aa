"""Stub signal provider for testing with controllable signals."""

from confluence_engine.config.models import StrategyConfig
from confluence_engine.models.candle import Candle
from confluence_engine.models.signal import SignalResult, SignalType

from .provider import SignalProvider


class StubSignalProvider(SignalProvider):
    """Stub provider returning controllable signals for testing."""

    def __init__(self) -> None:
        """Initialize stub provider with a default NEUTRAL signal."""
        self._next_result = SignalResult.neutral()
        self.calls: list[tuple[str, str | None]] = []

    def set_next_signal(
        self, signal_type: SignalType, confidence: float = 100.0, *details: str
    ) -> None:
        """
        Set the signal to return from now on.

        Args:
            signal_type: Signal type to return on generate_signal() calls
            confidence: Confidence for BUY/SELL (ignored for NEUTRAL)
            details: Reason strings to attach
        """
        if signal_type == SignalType.NEUTRAL:
            self._next_result = SignalResult.neutral(*details)
        else:
            self._next_result = SignalResult(
                signal=signal_type, confidence=confidence, details=details
            )

    def generate_signal(
        self,
        symbol: str,
        candles: list[Candle],
        profile: StrategyConfig,
    ) -> SignalResult:
        """Return the pre-configured signal."""
        self.calls.append((symbol, getattr(profile, "id", None)))
        return self._next_result
