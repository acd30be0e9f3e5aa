import logging
import os
from unittest.mock import MagicMock, patch

from pytest import LogCaptureFixture

from confluence_engine.main import log_signal, main
from confluence_engine.models.signal import SignalResult, SignalType
from confluence_engine.models.trade_plan import plan_protective_levels
from confluence_engine.core.scanner import ScanResult


def test_main_returns_zero(caplog: LogCaptureFixture) -> None:
    with patch.dict(os.environ, {"MAX_TICKS": "1"}):
        with caplog.at_level(logging.INFO):
            result = main()

    assert result == 0
    assert "Confluence engine starting" in caplog.text
    assert "Market data: Stub" in caplog.text
    assert "Engine stopped" in caplog.text


def test_main_respects_max_ticks_env_var(caplog: LogCaptureFixture) -> None:
    with patch.dict(os.environ, {"MAX_TICKS": "2"}):
        with patch("confluence_engine.core.scanner.time.sleep"):
            with caplog.at_level(logging.INFO):
                result = main()

    assert result == 0
    assert "max_ticks=2" in caplog.text
    assert "Scanner stopped after 2 ticks" in caplog.text


def test_main_default_max_ticks(caplog: LogCaptureFixture) -> None:
    with patch("confluence_engine.main.MarketScanner") as mock_cls:
        with caplog.at_level(logging.INFO):
            result = main()

    assert result == 0
    mock_cls.return_value.run.assert_called_once_with(max_ticks=5)


def test_main_config_load_error(caplog: LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR)
    with patch("confluence_engine.main.load_config", side_effect=Exception("Config broken")):
        result = main()

    assert result == 1
    assert "Failed to load configuration: Config broken" in caplog.text


def test_main_keyboard_interrupt(caplog: LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    # Mock MarketScanner to raise KeyboardInterrupt on run()
    with patch("confluence_engine.main.MarketScanner") as mock_cls:
        mock_instance = mock_cls.return_value
        mock_instance.run.side_effect = KeyboardInterrupt()

        result = main()

    assert result == 0
    assert "Shutdown requested by user" in caplog.text
    assert "Engine stopped" in caplog.text


def test_main_runtime_error(caplog: LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR)
    with patch("confluence_engine.main.MarketScanner") as mock_cls:
        mock_instance = mock_cls.return_value
        mock_instance.run.side_effect = RuntimeError("Crash")

        result = main()

    assert result == 1
    assert "Scanner error: Crash" in caplog.text


def test_main_binance_provider(caplog: LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    env = {"CONFLUENCE_MARKET_DATA_PROVIDER": "binance", "BINANCE_TESTNET": "true"}
    with patch.dict(os.environ, env):
        with patch("ccxt.binance") as mock_binance:
            with patch("confluence_engine.main.MarketScanner") as mock_scanner:
                result = main()

    assert result == 0
    mock_binance.assert_called_once_with({"enableRateLimit": True})
    mock_binance.return_value.set_sandbox_mode.assert_called_once_with(True)
    provider = mock_scanner.call_args.kwargs["market_data_provider"]
    assert provider.exchange is mock_binance.return_value
    assert "Market data: Binance" in caplog.text


def test_log_signal(caplog: LogCaptureFixture) -> None:
    scan = ScanResult(
        symbol="BTCUSDT",
        profile_id="ALPHA",
        profile_name="Alpha Predator",
        price=100.0,
        result=SignalResult(SignalType.BUY, 80.0),
        confidence_threshold=50.0,
        levels=plan_protective_levels(SignalType.BUY, 100.0, 2.0, 4.0),
    )
    with caplog.at_level(logging.INFO):
        log_signal(scan)

    assert "SIGNAL BTCUSDT BUY (Alpha Predator) @ 100 | SL 98 | TP 104" in caplog.text


def test_log_signal_without_levels(caplog: LogCaptureFixture) -> None:
    scan = MagicMock(spec=ScanResult)
    scan.symbol = "ETHUSDT"
    scan.profile_name = "Safe"
    scan.price = 10.0
    scan.result = SignalResult(SignalType.SELL, 90.0)
    scan.levels = None
    with caplog.at_level(logging.INFO):
        log_signal(scan)

    assert "SIGNAL ETHUSDT SELL (Safe) @ 10 | SL nan | TP nan" in caplog.text
