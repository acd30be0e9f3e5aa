"""Pydantic configuration models with type safety and validation."""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from confluence_engine.market_data.binance_provider import timeframe_seconds

logger = logging.getLogger(__name__)

# Per-indicator ceiling applied by the profile editor.
MAX_INDICATOR_WEIGHT = 40.0

# Oscillator thresholds used when a profile leaves them unset or 0.
DEFAULT_THRESHOLD_LOW = 30.0
DEFAULT_THRESHOLD_HIGH = 70.0


class IndicatorName(str, Enum):
    """Indicators a strategy profile can enable.

    Declaration order is scoring order, which fixes the order of result details.
    """

    RSI = "rsi"
    MACD = "macd"
    STOCHASTIC = "stochastic"
    BOLLINGER = "bollinger"
    ICHIMOKU = "ichimoku"
    SAR = "sar"
    CCI = "cci"
    VOLUME = "volume"


class IndicatorConfig(BaseModel):
    """Per-indicator toggle, weight and optional parameters."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    enabled: bool = Field(description="Whether the indicator votes at all")
    weight: float = Field(
        ge=0.0,
        description="Confidence points added when the indicator agrees. Recommended: 0-40",
    )
    period: int | None = Field(
        default=None, ge=0, description="Lookback period, 0 or unset for the default (RSI 14)"
    )
    threshold_low: float | None = Field(
        default=None,
        ge=0.0,
        le=100.0,
        alias="thresholdLow",
        description="Oversold threshold, 0 or unset for the default (RSI 30)",
    )
    threshold_high: float | None = Field(
        default=None,
        ge=0.0,
        le=100.0,
        alias="thresholdHigh",
        description="Overbought threshold, 0 or unset for the default (RSI 70)",
    )

    @model_validator(mode="after")
    def _low_lt_high(self) -> "IndicatorConfig":
        # Compared after the default fallback the scorer applies
        low = self.threshold_low or DEFAULT_THRESHOLD_LOW
        high = self.threshold_high or DEFAULT_THRESHOLD_HIGH
        if low >= high:
            raise ValueError(
                f"thresholdLow ({low}) must be less than thresholdHigh ({high})"
            )
        return self


def _lenient_indicators(raw: Any) -> dict[IndicatorName, IndicatorConfig]:
    """Parse an indicator map, dropping entries that do not validate."""
    if not isinstance(raw, Mapping):
        if raw is not None:
            logger.warning("Ignoring indicator settings of type %s", type(raw).__name__)
        return {}

    indicators: dict[IndicatorName, IndicatorConfig] = {}
    for key, value in raw.items():
        try:
            name = IndicatorName(key)
        except ValueError:
            logger.warning("Ignoring unknown indicator %r", key)
            continue
        if isinstance(value, IndicatorConfig):
            indicators[name] = value
            continue
        try:
            indicators[name] = IndicatorConfig.model_validate(value)
        except ValidationError as e:
            logger.warning(
                "Indicator %s has invalid settings, treating as disabled: %s",
                name.value,
                e.errors(include_url=False),
            )
    return indicators


class StrategyConfig(BaseModel):
    """Indicator weight table and the confidence threshold that gates signals."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    indicators: dict[IndicatorName, IndicatorConfig] = Field(
        default_factory=dict,
        description="Indicator name -> config. Missing indicators are disabled",
    )
    confidence_threshold: float = Field(
        default=50.0,
        ge=0.0,
        le=100.0,
        alias="confidenceThreshold",
        description="Minimum confidence (0-100) for a BUY/SELL signal",
    )

    def get(self, name: IndicatorName) -> IndicatorConfig | None:
        """Config for ``name``, or None when it is not configured."""
        return self.indicators.get(name)

    def is_enabled(self, name: IndicatorName) -> bool:
        indicator = self.indicators.get(name)
        return indicator is not None and indicator.enabled

    def clamp_weights(self, max_weight: float = MAX_INDICATOR_WEIGHT) -> "StrategyConfig":
        """Return a copy with every weight clamped to [0, max_weight]."""
        clamped = {
            name: indicator.model_copy(
                update={"weight": min(max(indicator.weight, 0.0), max_weight)}
            )
            for name, indicator in self.indicators.items()
        }
        return self.model_copy(update={"indicators": clamped})

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "StrategyConfig":
        """
        Build a config from a loosely typed settings map.

        Unknown indicator keys are ignored and entries that fail validation
        are treated as disabled. Top-level fields are still validated.

        Args:
            settings: Mapping with ``indicators`` and ``confidenceThreshold``
                      (or ``confidence_threshold``) plus any model fields.

        Returns:
            Validated instance of ``cls``.

        Raises:
            pydantic.ValidationError: If a top-level field is invalid.
        """
        data = dict(settings)
        data["indicators"] = _lenient_indicators(data.get("indicators"))
        return cls.model_validate(data)


class StrategyProfile(StrategyConfig):
    """A named strategy configuration with the caller's protective settings."""

    id: str = Field(min_length=1, description="Stable profile identifier")
    name: str = Field(min_length=1, description="Display name")
    risk_level: str = Field(default="Custom", alias="riskLevel")
    active: bool = Field(default=True, description="Inactive profiles are skipped by the scanner")
    confidence_threshold: float = Field(
        default=60.0,
        ge=1.0,
        le=95.0,
        alias="confidenceThreshold",
        description="Minimum confidence (1-95) for a BUY/SELL signal",
    )
    stop_loss_pct: float = Field(
        default=3.0,
        gt=0.0,
        le=100.0,
        alias="stopLoss",
        description="Stop-loss distance from entry in percent",
    )
    take_profit_pct: float = Field(
        default=6.0,
        gt=0.0,
        le=1000.0,
        alias="takeProfit",
        description="Take-profit distance from entry in percent",
    )


class ScannerConfig(BaseModel):
    """Scan loop cadence and symbol universe."""

    symbols: list[str] = Field(
        default_factory=lambda: ["BTCUSDT", "ETHUSDT"],
        min_length=1,
        description="Symbols to scan, in exchange format (e.g., BTCUSDT)",
    )
    timeframe: str = Field(default="15m", description="Candle timeframe")
    candle_limit: int = Field(
        default=100,
        ge=50,
        le=1000,
        description="Candles fetched per symbol. Must cover the 50-candle minimum",
    )
    batch_size: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Symbols analyzed per tick. Recommended: 10-15",
    )
    interval_seconds: float = Field(
        default=6.0, gt=0.0, description="Pause between ticks in seconds"
    )

    @field_validator("timeframe")
    def _validate_timeframe(cls, v: str) -> str:
        """Accept only timeframes the market data providers can space candles by."""
        if timeframe_seconds(v) <= 0:
            raise ValueError(f"Timeframe must be positive: {v!r}")
        return v


def _default_profiles() -> list[StrategyProfile]:
    from .parameter_profiles import build_profile

    return [build_profile("MODERATE"), build_profile("ALPHA")]


class EngineConfig(BaseModel):
    """Top-level engine configuration."""

    scanner: ScannerConfig = Field(default_factory=ScannerConfig)
    profiles: list[StrategyProfile] = Field(default_factory=_default_profiles)

    @model_validator(mode="after")
    def _unique_profile_ids(self) -> "EngineConfig":
        ids = [profile.id for profile in self.profiles]
        duplicates = sorted({pid for pid in ids if ids.count(pid) > 1})
        if duplicates:
            raise ValueError(f"Duplicate profile ids: {', '.join(duplicates)}")
        return self
