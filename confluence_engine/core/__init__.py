"""Scan loop that drives the signal scorer over profiles and symbols."""

from .scanner import MarketScanner, ScanResult

__all__ = ["MarketScanner", "ScanResult"]
