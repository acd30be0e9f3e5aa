"""Market scan loop cycling strategy profiles over symbol batches.

All scheduling state (which profile, which batch) lives here; the scorer it
calls holds none.
"""

import logging
import signal
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from confluence_engine.config.models import EngineConfig, StrategyProfile
from confluence_engine.market_data.provider import MarketDataProvider
from confluence_engine.models.candle import MIN_CANDLES
from confluence_engine.models.signal import SignalResult
from confluence_engine.models.trade_plan import ProtectiveLevels, plan_protective_levels
from confluence_engine.signals.provider import SignalProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanResult:
    """Signal produced for one symbol under one profile."""

    symbol: str
    profile_id: str
    profile_name: str
    price: float
    result: SignalResult
    confidence_threshold: float
    levels: ProtectiveLevels | None = None

    @property
    def is_opportunity(self) -> bool:
        """Actionable and at or above the profile threshold."""
        return (
            self.result.is_actionable
            and self.result.confidence >= self.confidence_threshold
        )


class MarketScanner:
    """Caller-owned scan loop.

    Each tick analyzes one batch of symbols for one profile. Once every
    profile has seen the batch the scanner moves to the next batch, wrapping
    to the start of the symbol list after the last one.
    """

    def __init__(
        self,
        config: EngineConfig,
        market_data_provider: MarketDataProvider,
        signal_provider: SignalProvider,
        on_signal: Callable[[ScanResult], None] | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        """
        Initialize scanner.

        Args:
            config: Engine configuration (scanner settings and profiles)
            market_data_provider: Candle source
            signal_provider: Signal generator
            on_signal: Called with every opportunity, e.g. an order submitter
            sleep: Sleep function used between ticks (default time.sleep)
        """
        self.config = config
        self.market_data_provider = market_data_provider
        self.signal_provider = signal_provider
        self.on_signal = on_signal
        self._sleep = sleep or time.sleep

        self.profiles: list[StrategyProfile] = list(config.profiles)
        self.symbols: list[str] = list(config.scanner.symbols)
        self.batch_size = config.scanner.batch_size

        # Scan cursor
        self.profile_index = 0
        self.batch_start = 0
        self.cycles_completed = 0

        self._shutdown_requested = False

    @property
    def current_batch(self) -> list[str]:
        return self.symbols[self.batch_start : self.batch_start + self.batch_size]

    def tick(self) -> list[ScanResult]:
        """Advance the cursor by one step and return the results produced."""
        if self.profile_index >= len(self.profiles):
            self._advance_batch()
            return []

        profile = self.profiles[self.profile_index]
        try:
            if not profile.active:
                logger.debug("Profile %s inactive, skipping", profile.name)
                return []

            batch = self.current_batch
            if not batch:
                return []

            logger.info(
                "%s: analyzing symbols %d to %d of %d (threshold %.0f%%)",
                profile.name,
                self.batch_start,
                self.batch_start + len(batch),
                len(self.symbols),
                profile.confidence_threshold,
            )
            return self._scan_batch(profile, batch)
        finally:
            self.profile_index += 1

    def _advance_batch(self) -> None:
        next_start = self.batch_start + self.batch_size
        if next_start >= len(self.symbols):
            self.batch_start = 0
            self.cycles_completed += 1
            logger.info("Scan cycle complete, restarting from the first batch")
        else:
            self.batch_start = next_start
        self.profile_index = 0

    def _scan_batch(self, profile: StrategyProfile, batch: list[str]) -> list[ScanResult]:
        results: list[ScanResult] = []
        opportunities = 0

        for symbol in batch:
            scan = self._scan_symbol(profile, symbol)
            if scan is None:
                continue
            results.append(scan)

            if scan.is_opportunity:
                opportunities += 1
                logger.info(
                    "Opportunity %s %s | confidence %.0f%% | price %.8g | reasons: %s",
                    symbol,
                    scan.result.signal.value,
                    scan.result.confidence,
                    scan.price,
                    ", ".join(scan.result.details),
                )
                self._dispatch(scan)
            else:
                logger.info(
                    "%s: %s (%.0f%%/%.0f%%) below threshold",
                    symbol,
                    scan.result.signal.value,
                    scan.result.confidence,
                    profile.confidence_threshold,
                )

        logger.info(
            "%s: %d opportunity(ies) in %d symbols analyzed",
            profile.name,
            opportunities,
            len(results),
        )
        return results

    def _scan_symbol(self, profile: StrategyProfile, symbol: str) -> ScanResult | None:
        try:
            candles = self.market_data_provider.get_candles(
                symbol, self.config.scanner.timeframe, self.config.scanner.candle_limit
            )
        except RuntimeError as e:
            logger.error("%s: market data unavailable: %s", symbol, e)
            return None

        if len(candles) < MIN_CANDLES:
            logger.warning(
                "%s: insufficient data (%d candles), skipped", symbol, len(candles)
            )
            return None

        result = self.signal_provider.generate_signal(symbol, candles, profile)
        price = candles[-1].close

        levels = None
        if result.is_actionable:
            levels = plan_protective_levels(
                result.signal, price, profile.stop_loss_pct, profile.take_profit_pct
            )

        return ScanResult(
            symbol=symbol,
            profile_id=profile.id,
            profile_name=profile.name,
            price=price,
            result=result,
            confidence_threshold=profile.confidence_threshold,
            levels=levels,
        )

    def _dispatch(self, scan: ScanResult) -> None:
        if self.on_signal is None:
            return
        try:
            self.on_signal(scan)
        except Exception as e:
            logger.error(
                "Signal handler failed for %s: %s", scan.symbol, e, exc_info=True
            )

    def run(self, max_ticks: int | None = None) -> list[ScanResult]:
        """
        Run the scan loop continuously or for a fixed number of ticks.

        Args:
            max_ticks: Maximum number of ticks to run (None = infinite)

        Returns:
            Every opportunity found during the run
        """
        # Set up signal handlers for graceful shutdown
        previous_handlers = {
            signum: signal.signal(signum, self._signal_handler)
            for signum in (signal.SIGINT, signal.SIGTERM)
        }

        opportunities: list[ScanResult] = []
        tick_count = 0
        try:
            while not self._shutdown_requested:
                opportunities.extend(s for s in self.tick() if s.is_opportunity)
                tick_count += 1

                if self._shutdown_requested:
                    break
                if max_ticks is not None and tick_count >= max_ticks:
                    break
                self._sleep(self.config.scanner.interval_seconds)
        finally:
            for signum, handler in previous_handlers.items():
                signal.signal(signum, handler)

        logger.info(
            "Scanner stopped after %d ticks (%d opportunities)",
            tick_count,
            len(opportunities),
        )
        return opportunities

    def stop(self) -> None:
        """Request a graceful stop after the current tick."""
        self._shutdown_requested = True

    def _signal_handler(self, signum: int, frame: Any) -> None:
        """Handle shutdown signals gracefully."""
        self.stop()
