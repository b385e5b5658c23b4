# arbmon/monitor.py
"""
Opportunity Loop

Each cycle: read the block number, then for every configured pair in order
quote -> estimate -> decide -> (maybe) execute -> record. Faults are
contained at three levels:

1. quote failure    -> skip that pair for this cycle
2. trade failure    -> counted in failed_trades by the executor outcome
3. anything else    -> BACKOFF, wait the retry delay, try again

Consecutive cycle-level failures trip a circuit breaker.
"""

import logging
import threading
from enum import Enum
from typing import Optional

from arbmon.chain_client import ChainClient
from arbmon.config import MonitorConfig
from arbmon.decision import evaluate
from arbmon.exceptions import CircuitBreakerTripped, QuoteFailure
from arbmon.executor import TradeExecutor, TradeOutcome
from arbmon.pairs import PairConfig
from arbmon.price_oracle import PriceOracle, PriceQuote
from arbmon.profit import GasModel, estimate
from arbmon.stats import StatsTracker

logger = logging.getLogger(__name__)


class MonitorStatus(Enum):
    POLLING = "polling"
    BACKOFF = "backoff"


class OpportunityMonitor:
    """
    Polls both routers for every configured pair and trades when the spread
    and expected profit clear their thresholds.

    Without an executor the monitor only reports what it would trade.
    """

    def __init__(
        self,
        config: MonitorConfig,
        chain: ChainClient,
        oracle: PriceOracle,
        executor: Optional[TradeExecutor] = None,
        stats: Optional[StatsTracker] = None,
    ):
        self.config = config
        self.chain = chain
        self.oracle = oracle
        self.executor = executor
        self.stats = stats or StatsTracker()
        self.gas_model = GasModel(config.gas_units, config.eth_usd_price)

        self.status = MonitorStatus.POLLING
        self.cycles = 0
        self.consecutive_failures = 0
        self._stop_event = threading.Event()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self):
        """Ask the loop to finish; interrupts the inter-cycle wait"""
        self._stop_event.set()

    # -------------------------------------------------------------------------
    # Main loop
    # -------------------------------------------------------------------------

    def run(self, max_cycles: Optional[int] = None):
        state = self.stats.snapshot()
        logger.info("=" * 60)
        logger.info("🚀 Starting Arbitrage Monitoring")
        logger.info(f"Mode: {'execute' if self.executor else 'scan_only'}")
        logger.info(f"Pairs: {', '.join(p.label for p in self.config.pairs)}")
        logger.info(f"Spread threshold: {self.config.profit_threshold_percent}%")
        logger.info(
            f"Total Profits: ${state.total_profit_usd:.2f} | "
            f"Successful Trades: {state.successful_trades} | "
            f"Failed Trades: {state.failed_trades}"
        )
        logger.info("=" * 60)

        try:
            while not self.stopped:
                try:
                    self.run_cycle()
                    self.status = MonitorStatus.POLLING
                    self.consecutive_failures = 0

                except Exception as e:
                    self.status = MonitorStatus.BACKOFF
                    self.consecutive_failures += 1
                    logger.error(f"MONITOR ERROR: {e}", exc_info=True)

                    limit = self.config.max_consecutive_failures
                    if limit > 0 and self.consecutive_failures >= limit:
                        logger.critical(
                            f"❌ Too many consecutive failures ({self.consecutive_failures}). Stopping."
                        )
                        raise CircuitBreakerTripped(self.consecutive_failures, e) from e

                self.cycles += 1
                if max_cycles is not None and self.cycles >= max_cycles:
                    break

                self._stop_event.wait(self.config.retry_delay_seconds)
                self.status = MonitorStatus.POLLING

        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")

        finally:
            logger.info(self.stats.summary())
            logger.info("Monitor stopped.")

    def run_cycle(self) -> int:
        """One pass over every pair. Returns the number of trades attempted."""
        block_number = self.chain.block_number()
        logger.info(f"Checking Block #{block_number}")

        attempted = 0
        for pair in self.config.pairs:
            if self.stopped:
                logger.info("Stop requested, ending cycle early")
                break
            if self.process_pair(pair) is not None:
                attempted += 1
        return attempted

    # -------------------------------------------------------------------------
    # Per-pair pipeline
    # -------------------------------------------------------------------------

    def process_pair(self, pair: PairConfig) -> Optional[TradeOutcome]:
        try:
            quote = self.oracle.get_quote(pair)
        except QuoteFailure as e:
            logger.warning(f"Price fetch failed for {pair.label}: {e.cause}")
            return None

        est = estimate(quote, pair, self.gas_model)
        token_symbol = self.oracle.token_symbol(pair.token_address)
        base_symbol = self.oracle.token_symbol(pair.base_token_address)

        logger.info(
            f"Opportunity Details:\n"
            f"    Pair: {token_symbol}/{base_symbol}\n"
            f"    Input Amount: {pair.amount_human} {token_symbol}\n"
            f"    Uniswap Price: {quote.uni_price} {base_symbol}\n"
            f"    SushiSwap Price: {quote.sushi_price} {base_symbol}\n"
            f"    Price Difference: {est.spread_percent:.2f}%\n"
            f"    Gas Price: {quote.gas_price_gwei} Gwei\n"
            f"    Minimum Profit Required: ${pair.min_profit_usd}"
        )

        decision = evaluate(est, pair, self.config.profit_threshold_percent)
        if not decision.allowed:
            logger.debug(f"{pair.label} {decision}")
            return None

        logger.info(f"💰 PROFITABLE OPPORTUNITY FOUND - Expected Profit: ${est.expected_profit_usd:.2f}")

        if self.executor is None:
            logger.info("SCAN_ONLY mode - not executing")
            return None

        if self.config.requote_before_submit:
            quote = self._revalidate(pair)
            if quote is None:
                return None

        logger.info(
            f"=== EXECUTING ARBITRAGE TRADE ===\n"
            f"Pair: {token_symbol}/{base_symbol}\n"
            f"Input Amount: {pair.amount_human} {token_symbol}\n"
            f"Gas Price: {quote.gas_price_gwei} Gwei"
        )

        outcome = self.executor.execute(quote, pair)
        state = self.stats.record_outcome(outcome)

        if outcome.succeeded:
            logger.info(
                f"✅ TRADE SUCCESSFUL\n"
                f"Transaction Hash: {outcome.tx_hash}\n"
                f"Gas Used: {outcome.gas_used}\n"
                f"Actual Profit: ${outcome.actual_profit_usd:.2f}\n"
                f"Total Profits: ${state.total_profit_usd:.2f}\n"
                f"Total Successful Trades: {state.successful_trades}"
            )
        else:
            logger.warning(
                f"❌ TRADE FAILED\n"
                f"Error: {outcome.error}\n"
                f"Total Failed Trades: {state.failed_trades}"
            )
        return outcome

    def _revalidate(self, pair: PairConfig) -> Optional[PriceQuote]:
        """Re-quote right before submission; None if the edge is gone"""
        try:
            fresh = self.oracle.get_quote(pair)
        except QuoteFailure as e:
            logger.warning(f"Re-quote failed for {pair.label}, not submitting: {e.cause}")
            return None

        decision = evaluate(estimate(fresh, pair, self.gas_model), pair, self.config.profit_threshold_percent)
        if not decision.allowed:
            logger.info(f"Opportunity on {pair.label} vanished before submission: {decision.reason}")
            return None
        return fresh
