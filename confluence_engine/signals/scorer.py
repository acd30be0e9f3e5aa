"""Weighted confluence scorer.

Turns a candle series and a strategy configuration into one BUY/SELL/NEUTRAL
decision. Every caller (scan loop, worker, scheduled job) goes through this
module so identical inputs always give identical signals.

Scoring:
    1. Each enabled indicator may cast a buy or sell vote worth its weight.
    2. Scores are normalized by the total weight of enabled indicators
       (floor 1) into 0-100 confidences.
    3. The stronger side wins if it also clears the confidence threshold.
       Equal confidences are always NEUTRAL.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from functools import cached_property
from typing import Any, ClassVar

from confluence_engine.config.models import (
    DEFAULT_THRESHOLD_HIGH,
    DEFAULT_THRESHOLD_LOW,
    IndicatorConfig,
    IndicatorName,
    StrategyConfig,
)
from confluence_engine.indicators.bollinger import (
    BandState,
    BollingerApproximation,
    calculate_bollinger_approximation,
)
from confluence_engine.indicators.macd import calculate_macd_line
from confluence_engine.indicators.rsi import calculate_rsi
from confluence_engine.models.candle import MIN_CANDLES, coerce_candles
from confluence_engine.models.signal import SignalResult, SignalType

logger = logging.getLogger(__name__)

INSUFFICIENT_DATA = "Insufficient data"

DEFAULT_RSI_PERIOD = 14
DEFAULT_RSI_LOW = DEFAULT_THRESHOLD_LOW
DEFAULT_RSI_HIGH = DEFAULT_THRESHOLD_HIGH
DEFAULT_SMA_PERIOD = 20
BAND_PCT = 2.0

# Configurable indicators that have no scoring rule yet. They never vote,
# but an enabled one still counts toward the active weight.
UNSCORED_INDICATORS: frozenset[IndicatorName] = frozenset(
    {
        IndicatorName.STOCHASTIC,
        IndicatorName.ICHIMOKU,
        IndicatorName.SAR,
        IndicatorName.CCI,
        IndicatorName.VOLUME,
    }
)


@dataclass(frozen=True)
class Vote:
    """One indicator's directional vote."""

    side: SignalType
    detail: str


class MarketSnapshot:
    """Closing prices plus readings computed on first use."""

    def __init__(self, closes: Sequence[float]) -> None:
        self.closes = list(closes)

    @property
    def current_price(self) -> float:
        return self.closes[-1]

    def rsi(self, period: int) -> float:
        return calculate_rsi(self.closes, period)

    @cached_property
    def macd_line(self) -> float:
        return calculate_macd_line(self.closes)

    def bollinger(self, period: int) -> BollingerApproximation:
        return calculate_bollinger_approximation(self.closes, period, BAND_PCT)


IndicatorRule = Callable[[MarketSnapshot, IndicatorConfig], Vote | None]


def _rsi_rule(snapshot: MarketSnapshot, config: IndicatorConfig) -> Vote | None:
    # Unset or zero parameters fall back to the defaults.
    rsi = snapshot.rsi(config.period or DEFAULT_RSI_PERIOD)
    low = config.threshold_low or DEFAULT_RSI_LOW
    high = config.threshold_high or DEFAULT_RSI_HIGH
    if rsi < low:
        return Vote(SignalType.BUY, f"RSI {rsi:.1f} (Oversold)")
    if rsi > high:
        return Vote(SignalType.SELL, f"RSI {rsi:.1f} (Overbought)")
    return None


def _macd_rule(snapshot: MarketSnapshot, config: IndicatorConfig) -> Vote | None:
    macd = snapshot.macd_line
    if macd > 0:
        return Vote(SignalType.BUY, f"MACD {macd:.4f} (Bullish)")
    return Vote(SignalType.SELL, f"MACD {macd:.4f} (Bearish)")


def _bollinger_rule(snapshot: MarketSnapshot, config: IndicatorConfig) -> Vote | None:
    period = config.period or DEFAULT_SMA_PERIOD
    band = snapshot.bollinger(period)
    if band.state == BandState.DIP:
        return Vote(
            SignalType.BUY,
            f"Price {abs(band.deviation_pct):.2f}% below SMA{period} (Dip)",
        )
    if band.state == BandState.OVEREXTENDED:
        return Vote(
            SignalType.SELL,
            f"Price {band.deviation_pct:.2f}% above SMA{period} (Overextended)",
        )
    return None


def _not_implemented(snapshot: MarketSnapshot, config: IndicatorConfig) -> Vote | None:
    return None


@dataclass(frozen=True)
class ConfluenceScore:
    """Intermediate scoring numbers for one analysis call."""

    score_buy: float
    score_sell: float
    total_active_weight: float
    details: tuple[str, ...] = ()

    @classmethod
    def insufficient(cls) -> "ConfluenceScore":
        return cls(
            score_buy=0.0,
            score_sell=0.0,
            total_active_weight=1.0,
            details=(INSUFFICIENT_DATA,),
        )

    @property
    def confidence_buy(self) -> float:
        return min(self.score_buy / self.total_active_weight * 100, 100.0)

    @property
    def confidence_sell(self) -> float:
        return min(self.score_sell / self.total_active_weight * 100, 100.0)

    def decide(self, confidence_threshold: float) -> SignalResult:
        """
        Pick the signal for a confidence threshold.

        The winning side must be strictly stronger than the other and at
        least ``confidence_threshold``. Ties are NEUTRAL.
        """
        buy = self.confidence_buy
        sell = self.confidence_sell
        if buy > sell and buy >= confidence_threshold:
            return SignalResult(signal=SignalType.BUY, confidence=buy, details=self.details)
        if sell > buy and sell >= confidence_threshold:
            return SignalResult(signal=SignalType.SELL, confidence=sell, details=self.details)
        return SignalResult.neutral(*self.details)


class ConfluenceScorer:
    """Stateless scorer combining weighted indicator votes."""

    RULES: ClassVar[dict[IndicatorName, IndicatorRule]] = {
        IndicatorName.RSI: _rsi_rule,
        IndicatorName.MACD: _macd_rule,
        IndicatorName.BOLLINGER: _bollinger_rule,
        **{name: _not_implemented for name in UNSCORED_INDICATORS},
    }

    def analyze(self, candles: Sequence[Any], config: StrategyConfig | Mapping[str, Any]) -> SignalResult:
        """
        Compute the composite signal for a candle series.

        Args:
            candles: Candles oldest first, as ``Candle`` objects, kline arrays
                     or mappings.
            config: Strategy configuration, or a settings mapping parsed
                    leniently (invalid indicator entries count as disabled).

        Returns:
            SignalResult. NEUTRAL with "Insufficient data" for fewer than
            50 candles.

        Raises:
            CandleSeriesError: If the candle series is malformed.
            TypeError: If ``config`` is neither a StrategyConfig nor a mapping.
        """
        strategy = self._resolve_config(config)
        result = self.score(candles, strategy).decide(strategy.confidence_threshold)
        logger.debug(
            "Confluence result: %s (%.1f) %s",
            result.signal.value,
            result.confidence,
            list(result.details),
        )
        return result

    def score(self, candles: Sequence[Any], config: StrategyConfig | Mapping[str, Any]) -> ConfluenceScore:
        """Collect weighted votes without applying the threshold."""
        strategy = self._resolve_config(config)
        series = coerce_candles(candles)
        if len(series) < MIN_CANDLES:
            return ConfluenceScore.insufficient()

        snapshot = MarketSnapshot([c.close for c in series])
        score_buy = 0.0
        score_sell = 0.0
        total_active_weight = 0.0
        details: list[str] = []

        for name in IndicatorName:
            indicator = strategy.get(name)
            if indicator is None or not indicator.enabled:
                continue

            weight = max(indicator.weight, 0.0)
            total_active_weight += weight

            vote = self.RULES[name](snapshot, indicator)
            if vote is None:
                continue
            if vote.side == SignalType.BUY:
                score_buy += weight
            else:
                score_sell += weight
            details.append(vote.detail)

        logger.debug(
            "Confluence scores: buy=%.2f sell=%.2f active_weight=%.2f price=%.8g",
            score_buy,
            score_sell,
            total_active_weight,
            snapshot.current_price,
        )

        return ConfluenceScore(
            score_buy=score_buy,
            score_sell=score_sell,
            total_active_weight=total_active_weight or 1.0,
            details=tuple(details),
        )

    @staticmethod
    def _resolve_config(config: StrategyConfig | Mapping[str, Any]) -> StrategyConfig:
        if isinstance(config, StrategyConfig):
            return config
        if isinstance(config, Mapping):
            return StrategyConfig.from_settings(config)
        raise TypeError(
            f"config must be a StrategyConfig or a mapping, got {type(config).__name__}"
        )


_default_scorer = ConfluenceScorer()


def analyze(candles: Sequence[Any], config: StrategyConfig | Mapping[str, Any]) -> SignalResult:
    """Score ``candles`` against ``config`` with the shared scorer."""
    return _default_scorer.analyze(candles, config)
