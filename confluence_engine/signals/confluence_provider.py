"""Confluence signal provider implementation."""

import logging

from confluence_engine.config.models import StrategyConfig
from confluence_engine.models.candle import Candle
from confluence_engine.models.signal import SignalResult
from confluence_engine.signals.provider import SignalProvider
from confluence_engine.signals.scorer import ConfluenceScorer

logger = logging.getLogger(__name__)


class ConfluenceSignalProvider(SignalProvider):
    """Signal provider backed by the weighted confluence scorer."""

    def __init__(self, scorer: ConfluenceScorer | None = None) -> None:
        """
        Initialize confluence provider.

        Args:
            scorer: Scorer to use. Defaults to a fresh stateless scorer.
        """
        self.scorer = scorer or ConfluenceScorer()

    def generate_signal(
        self,
        symbol: str,
        candles: list[Candle],
        profile: StrategyConfig,
    ) -> SignalResult:
        """
        Generate signal using the confluence scorer.

        Args:
            symbol: Trading symbol.
            candles: List of candles.
            profile: Strategy configuration.

        Returns:
            SignalResult with contributing reasons.
        """
        result = self.scorer.analyze(candles, profile)
        logger.debug("%s: %s %.1f", symbol, result.signal.value, result.confidence)
        return result
