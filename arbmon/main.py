# arbmon/main.py
"""
Arbitrage Monitor Entry Point

Run with: python -m arbmon.main

MODES:
1. scan:    Quote and evaluate pairs, log what would be traded (safe)
2. execute: Submit trades through the arbitrage contract
"""

import sys
import signal
import logging
import argparse
from pathlib import Path

from arbmon.chain_client import ChainClient
from arbmon.config import load_config
from arbmon.exceptions import CircuitBreakerTripped, ConfigurationError
from arbmon.executor import TradeExecutor
from arbmon.log_sink import DailyFileSink
from arbmon.monitor import OpportunityMonitor
from arbmon.price_oracle import PriceOracle

logger = logging.getLogger(__name__)


def setup_logging(level: str, log_dir: Path):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s | %(levelname)-8s | %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            DailyFileSink(log_dir),
        ]
    )
    # web3 / urllib3 request chatter
    logging.getLogger("web3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_monitor(config, execute: bool) -> OpportunityMonitor:
    if execute:
        config.require_signer()

    chain = ChainClient(
        rpc_url=config.rpc_url,
        chain_id=config.chain_id,
        private_key=config.private_key if execute else None,
        timeout=config.rpc_timeout_seconds,
    )
    if execute:
        config.check_signer_address(chain.address)

    ok, status = chain.check_health()
    if ok:
        logger.info(f"✅ RPC healthy: {status}")
    else:
        # keep going: the loop backs off and retries
        logger.warning(f"⚠️ RPC unhealthy at startup: {status}")

    oracle = PriceOracle(chain, config.uniswap_router, config.sushiswap_router)
    executor = None
    if execute:
        executor = TradeExecutor(chain, config.contract_address, config.receipt_timeout_seconds)

    return OpportunityMonitor(config, chain, oracle, executor)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Two-router DEX arbitrage monitor")
    parser.add_argument(
        "--mode",
        choices=["scan", "execute"],
        default="scan",
        help="scan (observe only) or execute (real trades)",
    )
    parser.add_argument("--env-file", type=Path, default=None, help="Path to a .env file")
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    parser.add_argument("--log-level", default="INFO")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.env_file)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(args.log_level, config.log_dir)

    try:
        monitor = build_monitor(config, execute=args.mode == "execute")
    except ConfigurationError as e:
        logger.error(f"❌ {e}")
        return 2

    def _handle_shutdown(signum, frame):
        logger.info("🛑 Shutdown signal received...")
        monitor.stop()

    signal.signal(signal.SIGINT, _handle_shutdown)
    signal.signal(signal.SIGTERM, _handle_shutdown)

    try:
        monitor.run(max_cycles=1 if args.once else None)
    except CircuitBreakerTripped as e:
        logger.critical(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
