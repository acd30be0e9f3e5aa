"""Tests for the market scan loop."""

import logging
import math
import signal
from unittest.mock import MagicMock

import pytest

from confluence_engine.config.models import EngineConfig, ScannerConfig, StrategyProfile
from confluence_engine.config.parameter_profiles import build_profile
from confluence_engine.core.scanner import MarketScanner, ScanResult
from confluence_engine.market_data.stub_provider import StubMarketDataProvider
from confluence_engine.models.signal import SignalResult, SignalType
from confluence_engine.signals.confluence_provider import ConfluenceSignalProvider
from confluence_engine.signals.stub_provider import StubSignalProvider
from tests.test_indicators import OVERSOLD_CLOSES


def make_config(
    symbols: list[str] | None = None,
    batch_size: int = 2,
    profiles: list[StrategyProfile] | None = None,
) -> EngineConfig:
    if profiles is None:
        profiles = [
            StrategyProfile(id="A", name="Active", confidence_threshold=60),
            StrategyProfile(id="B", name="Inactive", active=False),
        ]
    return EngineConfig(
        scanner=ScannerConfig(
            symbols=symbols or ["S1", "S2", "S3"],
            batch_size=batch_size,
            interval_seconds=0.5,
        ),
        profiles=profiles,
    )


def make_scanner(
    config: EngineConfig | None = None, **kwargs: object
) -> tuple[MarketScanner, StubSignalProvider, MagicMock]:
    signals = StubSignalProvider()
    sleep = MagicMock()
    scanner = MarketScanner(
        config=config or make_config(),
        market_data_provider=StubMarketDataProvider(),
        signal_provider=signals,
        sleep=sleep,
        **kwargs,  # type: ignore[arg-type]
    )
    return scanner, signals, sleep


class TestTickSequence:
    """Profile and batch cursor movement."""

    def test_cycles_profiles_then_batches(self) -> None:
        scanner, signals, _ = make_scanner()

        first = scanner.tick()  # A on [S1, S2]
        assert [r.symbol for r in first] == ["S1", "S2"]
        assert all(r.profile_id == "A" for r in first)

        assert scanner.tick() == []  # B inactive
        assert scanner.tick() == []  # advance
        assert scanner.batch_start == 2
        assert scanner.current_batch == ["S3"]

        assert [r.symbol for r in scanner.tick()] == ["S3"]
        assert scanner.tick() == []  # B inactive
        assert scanner.cycles_completed == 0

        assert scanner.tick() == []  # wrap
        assert scanner.batch_start == 0
        assert scanner.profile_index == 0
        assert scanner.cycles_completed == 1

        assert signals.calls == [("S1", "A"), ("S2", "A"), ("S3", "A")]

    def test_inactive_profile_never_analyzed(self) -> None:
        scanner, signals, _ = make_scanner()
        for _ in range(12):
            scanner.tick()
        assert all(profile_id == "A" for _, profile_id in signals.calls)

    def test_exact_multiple_batch_wraps(self) -> None:
        config = make_config(symbols=["S1", "S2"], batch_size=2)
        scanner, _, _ = make_scanner(config)

        scanner.tick()
        scanner.tick()
        scanner.tick()  # advance past the only batch
        assert scanner.batch_start == 0
        assert scanner.cycles_completed == 1

    def test_no_profiles_only_advances(self) -> None:
        config = make_config(profiles=[])
        scanner, signals, _ = make_scanner(config)

        assert scanner.tick() == []
        assert scanner.batch_start == 2
        assert signals.calls == []


class TestScanResults:
    """Per-symbol results and protective levels."""

    def test_neutral_result_has_no_levels(self) -> None:
        scanner, _, _ = make_scanner()
        results = scanner.tick()

        assert len(results) == 2
        assert all(r.result.signal == SignalType.NEUTRAL for r in results)
        assert all(r.levels is None for r in results)
        assert not any(r.is_opportunity for r in results)

    def test_buy_result_carries_levels(self) -> None:
        profiles = [StrategyProfile(id="A", name="A", stop_loss_pct=2, take_profit_pct=4)]
        handler = MagicMock()
        scanner, signals, _ = make_scanner(make_config(profiles=profiles), on_signal=handler)
        signals.set_next_signal(SignalType.BUY, 80.0, "RSI 20.0 (Oversold)")

        results = scanner.tick()

        scan = results[0]
        assert scan.is_opportunity
        assert scan.levels is not None
        assert math.isclose(scan.levels.stop_loss_price, scan.price * 0.98)
        assert math.isclose(scan.levels.take_profit_price, scan.price * 1.04)
        assert handler.call_count == 2
        handler.assert_any_call(scan)

    def test_sell_levels_mirror(self) -> None:
        profiles = [StrategyProfile(id="A", name="A", stop_loss_pct=5, take_profit_pct=10)]
        scanner, signals, _ = make_scanner(make_config(profiles=profiles))
        signals.set_next_signal(SignalType.SELL, 70.0)

        scan = scanner.tick()[0]
        assert scan.levels is not None
        assert math.isclose(scan.levels.stop_loss_price, scan.price * 1.05)
        assert math.isclose(scan.levels.take_profit_price, scan.price * 0.90)

    def test_below_threshold_is_not_dispatched(self) -> None:
        handler = MagicMock()
        scanner, signals, _ = make_scanner(on_signal=handler)
        signals.set_next_signal(SignalType.BUY, 40.0)  # profile A threshold 60

        results = scanner.tick()

        assert len(results) == 2
        assert not any(r.is_opportunity for r in results)
        handler.assert_not_called()

    def test_handler_errors_are_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        handler = MagicMock(side_effect=RuntimeError("order rejected"))
        scanner, signals, _ = make_scanner(on_signal=handler)
        signals.set_next_signal(SignalType.BUY, 90.0)

        with caplog.at_level(logging.ERROR):
            results = scanner.tick()

        assert len(results) == 2
        assert handler.call_count == 2
        assert "Signal handler failed for S1: order rejected" in caplog.text

    def test_market_data_failure_skips_symbol(self, caplog: pytest.LogCaptureFixture) -> None:
        market_data = MagicMock()
        stub = StubMarketDataProvider()
        market_data.get_candles.side_effect = [
            RuntimeError("Stale market data"),
            stub.get_candles("S2", "15m", 100),
        ]
        scanner = MarketScanner(make_config(), market_data, StubSignalProvider())

        with caplog.at_level(logging.ERROR):
            results = scanner.tick()

        assert [r.symbol for r in results] == ["S2"]
        assert "S1: market data unavailable: Stale market data" in caplog.text

    def test_short_series_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        scanner, signals, _ = make_scanner()
        scanner.market_data_provider.set_closes("S1", [100.0] * 49)  # type: ignore[attr-defined]

        with caplog.at_level(logging.WARNING):
            results = scanner.tick()

        assert [r.symbol for r in results] == ["S2"]
        assert "S1: insufficient data (49 candles)" in caplog.text
        assert signals.calls == [("S2", "A")]

    def test_scan_result_threshold(self) -> None:
        scan = ScanResult(
            symbol="S1",
            profile_id="A",
            profile_name="A",
            price=100.0,
            result=SignalResult(SignalType.BUY, 65.0),
            confidence_threshold=65.0,
        )
        assert scan.is_opportunity


def test_scanner_with_confluence_scorer() -> None:
    market_data = StubMarketDataProvider()
    market_data.set_closes("BTCUSDT", OVERSOLD_CLOSES)
    config = EngineConfig(
        scanner=ScannerConfig(symbols=["BTCUSDT"], batch_size=1),
        profiles=[build_profile("MODERATE"), build_profile("ALPHA")],
    )
    found: list[ScanResult] = []
    scanner = MarketScanner(config, market_data, ConfluenceSignalProvider(), on_signal=found.append)

    moderate = scanner.tick()
    alpha = scanner.tick()

    # 35 of 60 active weight: below MODERATE's 65, above ALPHA's 50
    assert moderate[0].result.signal == SignalType.NEUTRAL
    assert alpha[0].result.signal == SignalType.BUY
    assert math.isclose(alpha[0].result.confidence, 35.0 / 60.0 * 100)
    assert found == alpha
    assert alpha[0].price == 86.0
    assert alpha[0].levels is not None
    assert math.isclose(alpha[0].levels.stop_loss_price, 86.0 * 0.98)
    assert math.isclose(alpha[0].levels.take_profit_price, 86.0 * 1.04)


class TestRun:
    """Loop control."""

    def test_run_respects_max_ticks(self) -> None:
        scanner, signals, sleep = make_scanner()
        scanner.run(max_ticks=3)

        assert len(signals.calls) == 2  # only the first tick analyzes
        assert sleep.call_count == 2
        sleep.assert_called_with(0.5)

    def test_run_collects_opportunities(self) -> None:
        scanner, signals, _ = make_scanner()
        signals.set_next_signal(SignalType.SELL, 75.0)

        opportunities = scanner.run(max_ticks=4)

        assert [o.symbol for o in opportunities] == ["S1", "S2", "S3"]

    def test_stop_during_tick_ends_run(self) -> None:
        scanner, signals, sleep = make_scanner(on_signal=lambda scan: scanner.stop())
        signals.set_next_signal(SignalType.BUY, 90.0)

        scanner.run()

        sleep.assert_not_called()
        assert scanner.profile_index == 1

    def test_stop_before_run(self) -> None:
        scanner, signals, _ = make_scanner()
        scanner.stop()

        assert scanner.run() == []
        assert signals.calls == []

    def test_signal_handler_requests_stop(self) -> None:
        scanner, _, _ = make_scanner()
        scanner._signal_handler(signal.SIGTERM, None)
        assert scanner._shutdown_requested is True

    def test_run_restores_signal_handlers(self) -> None:
        before = signal.getsignal(signal.SIGINT)
        scanner, _, _ = make_scanner()
        scanner.run(max_ticks=1)
        assert signal.getsignal(signal.SIGINT) == before
