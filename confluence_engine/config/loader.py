"""Configuration loader with JSON file and environment variable support."""

import json
import os
from pathlib import Path
from typing import Any

from .models import EngineConfig, StrategyProfile
from .parameter_profiles import apply_profile


def load_config(config_path: str | None = None) -> EngineConfig:
    """
    Load configuration from JSON file with environment variable overrides.

    Priority: env vars > config file > defaults

    A profile entry may name a preset (``{"preset": "SAFE", ...}``); its other
    keys are merged over that preset. Profile weights are clamped to the
    editor's [0, 40] range.

    Args:
        config_path: Path to JSON config file. If None, uses CONFLUENCE_CONFIG_PATH
                     env var or defaults to 'config.json' in the project root.

    Returns:
        Validated EngineConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        json.JSONDecodeError: If config file has invalid JSON
        pydantic.ValidationError: If config values are invalid
        ValueError: If a profile names an unknown preset
    """
    # Determine config file path
    if config_path is None:
        config_path = os.environ.get("CONFLUENCE_CONFIG_PATH", "config.json")

    config_file = Path(config_path)
    if not config_file.is_absolute():
        # Resolve relative to project root
        project_root = Path(__file__).parent.parent.parent
        config_file = project_root / config_file

    # Load JSON config
    config_data: dict[str, Any] = {}
    if config_file.exists():
        with open(config_file) as f:
            config_data = json.load(f)
    else:
        raise FileNotFoundError(f"Config file not found: {config_file}")

    # Apply environment variable overrides
    # Format: CONFLUENCE_SCANNER_SYMBOLS, CONFLUENCE_SCANNER_BATCH_SIZE, etc.
    if symbols := os.environ.get("CONFLUENCE_SCANNER_SYMBOLS"):
        config_data.setdefault("scanner", {})["symbols"] = [
            s.strip() for s in symbols.split(",") if s.strip()
        ]

    if timeframe := os.environ.get("CONFLUENCE_SCANNER_TIMEFRAME"):
        config_data.setdefault("scanner", {})["timeframe"] = timeframe

    if batch_size := os.environ.get("CONFLUENCE_SCANNER_BATCH_SIZE"):
        config_data.setdefault("scanner", {})["batch_size"] = int(batch_size)

    if interval := os.environ.get("CONFLUENCE_SCANNER_INTERVAL_SECONDS"):
        config_data.setdefault("scanner", {})["interval_seconds"] = float(interval)

    if "profiles" in config_data:
        config_data["profiles"] = [
            _load_profile(entry) for entry in config_data["profiles"]
        ]

    # Validate and return
    return EngineConfig(**config_data)


def _load_profile(entry: dict[str, Any]) -> StrategyProfile:
    """Resolve presets, validate leniently and clamp weights."""
    entry = dict(entry)
    preset = entry.pop("preset", None)
    if preset is not None:
        entry = apply_profile(entry, preset)
    profile = StrategyProfile.from_settings(entry)
    return profile.clamp_weights()
