"""Signal scoring and signal providers."""

from .confluence_provider import ConfluenceSignalProvider
from .provider import SignalProvider
from .scorer import (
    UNSCORED_INDICATORS,
    ConfluenceScore,
    ConfluenceScorer,
    analyze,
)
from .stub_provider import StubSignalProvider

__all__ = [
    "UNSCORED_INDICATORS",
    "ConfluenceScore",
    "ConfluenceScorer",
    "ConfluenceSignalProvider",
    "SignalProvider",
    "StubSignalProvider",
    "analyze",
]
