# arbmon/executor.py
"""
Trade Executor
Submits executeArbitrage on the arbitrage contract, waits for the receipt
and recovers realized profit from the ArbitrageExecuted event.
"""

import time
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from web3 import Web3

from arbmon.chain_client import ChainClient
from arbmon.dex.abis import ARBITRAGE_ABI
from arbmon.pairs import PairConfig
from arbmon.price_oracle import PriceQuote

logger = logging.getLogger(__name__)

PROFIT_EVENT = "ArbitrageExecuted"


@dataclass(frozen=True)
class TradeOutcome:
    """Result of one arbitrage attempt"""
    succeeded: bool
    tx_hash: Optional[str] = None
    gas_used: int = 0
    actual_profit_usd: Decimal = Decimal(0)
    error: str = ""
    execution_time_ms: float = 0


def decode_profit(event, logs: Iterable) -> Optional[Decimal]:
    """
    Try each receipt log against the profit event, first match wins.
    Logs from other contracts or events are skipped.
    """
    for log in logs:
        try:
            parsed = event.process_log(log)
        except Exception:
            continue
        if parsed["event"] == PROFIT_EVENT:
            return Web3.from_wei(parsed["args"]["profit"], "ether")
    return None


class TradeExecutor:
    def __init__(self, chain: ChainClient, contract_address: str, receipt_timeout: float = 120):
        self.chain = chain
        self.contract = chain.contract(contract_address, ARBITRAGE_ABI)
        self.receipt_timeout = receipt_timeout

    def execute(self, quote: PriceQuote, pair: PairConfig) -> TradeOutcome:
        """
        Submit one trade and block until its receipt is in.
        Never raises: every failure becomes TradeOutcome(succeeded=False).
        """
        start_time = time.time()
        tx_hash = None

        try:
            gas_price_wei = Web3.to_wei(quote.gas_price_gwei, "gwei")
            tx_hash = self.chain.send_transaction(
                self.contract.functions.executeArbitrage(list(quote.path), quote.raw_amount),
                gas_price_wei,
            )

            receipt = self.chain.wait_for_receipt(tx_hash, timeout=self.receipt_timeout)

            if receipt["status"] != 1:
                return TradeOutcome(
                    succeeded=False,
                    tx_hash=Web3.to_hex(tx_hash),
                    gas_used=receipt["gasUsed"],
                    error="Transaction reverted",
                    execution_time_ms=(time.time() - start_time) * 1000,
                )

            profit = decode_profit(self.contract.events.ArbitrageExecuted(), receipt["logs"])
            if profit is None:
                logger.warning(f"[{pair.label}] No {PROFIT_EVENT} event in receipt, profit recorded as 0")
                profit = Decimal(0)

            return TradeOutcome(
                succeeded=True,
                tx_hash=Web3.to_hex(tx_hash),
                gas_used=receipt["gasUsed"],
                actual_profit_usd=profit,
                execution_time_ms=(time.time() - start_time) * 1000,
            )

        except Exception as e:
            logger.error(f"[{pair.label}] Execution failed: {e}")
            return TradeOutcome(
                succeeded=False,
                tx_hash=Web3.to_hex(tx_hash) if tx_hash is not None else None,
                error=str(e),
                execution_time_ms=(time.time() - start_time) * 1000,
            )
