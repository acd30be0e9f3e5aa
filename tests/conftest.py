import os
import sys
from pathlib import Path
from typing import Generator

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:  # pragma: no cover
    sys.path.append(str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def clean_config_env() -> Generator[None, None, None]:
    """Ensure CONFLUENCE_* env vars do not interfere with tests unless explicitly set."""
    # Store original values
    original_env = {}
    keys_to_clear = [
        "CONFLUENCE_CONFIG_PATH",
        "CONFLUENCE_SCANNER_SYMBOLS",
        "CONFLUENCE_SCANNER_TIMEFRAME",
        "CONFLUENCE_SCANNER_BATCH_SIZE",
        "CONFLUENCE_SCANNER_INTERVAL_SECONDS",
        "CONFLUENCE_MARKET_DATA_PROVIDER",
        "BINANCE_TESTNET",
        "MAX_TICKS",
    ]

    for key in keys_to_clear:
        if key in os.environ:
            original_env[key] = os.environ[key]
            os.environ.pop(key, None)

    yield

    # Restore
    for key, value in original_env.items():
        os.environ[key] = value
