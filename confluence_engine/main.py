"""Main entry point for the signal scanner."""

import logging
import os

from confluence_engine.config.loader import load_config
from confluence_engine.core.scanner import MarketScanner, ScanResult
from confluence_engine.market_data.binance_provider import BinanceMarketDataProvider
from confluence_engine.market_data.stub_provider import StubMarketDataProvider
from confluence_engine.signals.confluence_provider import ConfluenceSignalProvider

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def log_signal(scan: ScanResult) -> None:
    """Default signal handler: report the opportunity and its protective levels."""
    levels = scan.levels
    logger.info(
        "SIGNAL %s %s (%s) @ %.8g | SL %.8g | TP %.8g",
        scan.symbol,
        scan.result.signal.value,
        scan.profile_name,
        scan.price,
        levels.stop_loss_price if levels else float("nan"),
        levels.take_profit_price if levels else float("nan"),
    )


def main() -> int:
    """Main entry point for the signal scanner."""
    logger.info("Confluence engine starting...")

    # Load configuration
    try:
        config = load_config()
        logger.info(
            "Configuration loaded: %d profiles, %d symbols",
            len(config.profiles),
            len(config.scanner.symbols),
        )
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        return 1

    # Market data provider setup
    market_data_source = os.environ.get("CONFLUENCE_MARKET_DATA_PROVIDER", "stub")
    if market_data_source == "binance":
        import ccxt

        exchange = ccxt.binance({"enableRateLimit": True})
        if os.environ.get("BINANCE_TESTNET", "false").lower() == "true":
            exchange.set_sandbox_mode(True)
        market_data_provider = BinanceMarketDataProvider(exchange)
        logger.info("Market data: Binance")
    else:
        market_data_provider = StubMarketDataProvider(base_price=50000.0)
        logger.info("Market data: Stub (deterministic)")

    scanner = MarketScanner(
        config=config,
        market_data_provider=market_data_provider,
        signal_provider=ConfluenceSignalProvider(),
        on_signal=log_signal,
    )

    # Run the loop
    try:
        max_ticks_env = os.environ.get("MAX_TICKS")
        max_ticks = int(max_ticks_env) if max_ticks_env is not None else 5
        logger.info(
            f"Starting scanner for symbols: {config.scanner.symbols} "
            f"(max_ticks={max_ticks})"
        )
        scanner.run(max_ticks=max_ticks)
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")
    except Exception as e:
        logger.error(f"Scanner error: {e}", exc_info=True)
        return 1
    finally:
        logger.info("Engine stopped")

    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
