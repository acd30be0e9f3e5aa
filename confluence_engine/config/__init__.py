"""Configuration package for the signal engine."""

from .loader import load_config
from .models import (
    EngineConfig,
    IndicatorConfig,
    IndicatorName,
    ScannerConfig,
    StrategyConfig,
    StrategyProfile,
)

__all__ = [
    "EngineConfig",
    "IndicatorConfig",
    "IndicatorName",
    "ScannerConfig",
    "StrategyConfig",
    "StrategyProfile",
    "load_config",
]
