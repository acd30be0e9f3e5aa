"""Preset strategy profiles for different risk appetites.

Each preset is a complete profile definition (indicator table, confidence
threshold, protective percentages) that can be used as is or overridden
field by field.
"""

from __future__ import annotations

import copy
from typing import Any

from .models import StrategyProfile

DEFAULT_INDICATORS: dict[str, dict[str, Any]] = {
    "rsi": {"enabled": True, "period": 14, "threshold_low": 30, "threshold_high": 70, "weight": 20},
    "macd": {"enabled": True, "weight": 15},
    "stochastic": {"enabled": False, "weight": 10},
    "bollinger": {"enabled": True, "weight": 15},
    "ichimoku": {"enabled": False, "weight": 20},
    "sar": {"enabled": False, "weight": 10},
    "cci": {"enabled": False, "weight": 10},
    "volume": {"enabled": True, "weight": 10},
}

_PROFILES: dict[str, dict[str, Any]] = {
    "SAFE": {
        "name": "Safe",
        "risk_level": "Low",
        "active": False,
        "confidence_threshold": 80,
        "stop_loss_pct": 2,
        "take_profit_pct": 5,
    },
    "MODERATE": {
        "name": "Moderate",
        "risk_level": "Med",
        "active": True,
        "confidence_threshold": 65,
        "stop_loss_pct": 5,
        "take_profit_pct": 10,
    },
    "BOLD": {
        "name": "Bold",
        "risk_level": "High",
        "active": False,
        "confidence_threshold": 50,
        "stop_loss_pct": 10,
        "take_profit_pct": 20,
    },
    "SPECIALIST": {
        "name": "Specialist",
        "risk_level": "Expert",
        "active": False,
        "confidence_threshold": 85,
        "stop_loss_pct": 5,
        "take_profit_pct": 15,
    },
    "ALPHA": {
        "name": "Alpha Predator",
        "risk_level": "Extreme",
        "active": True,
        "confidence_threshold": 50,
        "stop_loss_pct": 2,
        "take_profit_pct": 4,
    },
    "CUSTOM": {
        "name": "Custom",
        "risk_level": "Custom",
        "active": False,
        "confidence_threshold": 60,
        "stop_loss_pct": 3,
        "take_profit_pct": 6,
    },
}

AVAILABLE_PROFILES: list[str] = list(_PROFILES)

# Dashboard (camelCase) keys -> model field names, so merges never hold both.
_PROFILE_KEYS = {
    "riskLevel": "risk_level",
    "confidenceThreshold": "confidence_threshold",
    "stopLoss": "stop_loss_pct",
    "takeProfit": "take_profit_pct",
}
_INDICATOR_KEYS = {
    "thresholdLow": "threshold_low",
    "thresholdHigh": "threshold_high",
}


def get_profile(name: str) -> dict[str, Any]:
    """Return the settings dictionary for a named preset.

    Args:
        name: Preset name (SAFE, MODERATE, BOLD, SPECIALIST, ALPHA, CUSTOM).
              Matching is case-insensitive.

    Returns:
        Deep copy of the preset including its id and indicator table.

    Raises:
        ValueError: If profile name is not recognized.
    """
    key = name.upper()
    if key not in _PROFILES:
        raise ValueError(
            f"Unknown profile '{name}'. Available: {AVAILABLE_PROFILES}"
        )
    profile = copy.deepcopy(_PROFILES[key])
    profile["id"] = key
    profile["indicators"] = copy.deepcopy(DEFAULT_INDICATORS)
    return profile


def list_profiles() -> list[str]:
    """Return list of available profile names."""
    return list(AVAILABLE_PROFILES)


def apply_profile(config_dict: dict[str, Any], profile: str) -> dict[str, Any]:
    """Merge a stored profile dictionary on top of a preset.

    Performs a deep merge: values from ``config_dict`` override the preset,
    while keys it does not mention keep the preset values.

    Args:
        config_dict: Partial profile settings (e.g. one indicator's weight).
        profile: Preset name to start from.

    Returns:
        New dictionary with the overrides merged in.
    """
    result = get_profile(profile)
    _deep_merge(result, normalize_keys(config_dict))
    return result


def build_profile(preset: str, /, **overrides: Any) -> StrategyProfile:
    """Validate a preset, with optional overrides, into a ``StrategyProfile``.

    ``overrides`` may include any profile field, the display ``name`` included.
    """
    return StrategyProfile.from_settings(apply_profile(overrides, preset))


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Recursively merge override dict into base dict (in-place)."""
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def normalize_keys(settings: dict[str, Any]) -> dict[str, Any]:
    """Return a deep copy of profile settings with camelCase keys renamed."""
    result = {_PROFILE_KEYS.get(key, key): value for key, value in copy.deepcopy(settings).items()}
    indicators = result.get("indicators")
    if isinstance(indicators, dict):
        result["indicators"] = {
            name: (
                {_INDICATOR_KEYS.get(key, key): value for key, value in entry.items()}
                if isinstance(entry, dict)
                else entry
            )
            for name, entry in indicators.items()
        }
    return result
