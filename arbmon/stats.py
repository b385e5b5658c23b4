# arbmon/stats.py
"""
Running trade statistics. In memory only: a restart starts from zero.
"""

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal

from arbmon.executor import TradeOutcome


@dataclass
class MonitorState:
    total_profit_usd: Decimal = Decimal(0)
    successful_trades: int = 0
    failed_trades: int = 0
    last_error: str = ""

    @property
    def trades_executed(self) -> int:
        return self.successful_trades + self.failed_trades


class StatsTracker:
    """Single entry point for MonitorState mutation"""

    def __init__(self):
        self.start_time = datetime.now()
        self._state = MonitorState()
        self._lock = threading.Lock()

    def record_outcome(self, outcome: TradeOutcome) -> MonitorState:
        with self._lock:
            if outcome.succeeded:
                self._state.successful_trades += 1
                self._state.total_profit_usd += outcome.actual_profit_usd
            else:
                self._state.failed_trades += 1
                self._state.last_error = outcome.error
            return replace(self._state)

    def snapshot(self) -> MonitorState:
        with self._lock:
            return replace(self._state)

    def summary(self) -> str:
        state = self.snapshot()
        runtime = datetime.now() - self.start_time
        success_rate = (
            state.successful_trades / state.trades_executed * 100
            if state.trades_executed > 0 else 0
        )

        return (
            f"\n{'='*60}\n"
            f"📊 MONITOR STATISTICS\n"
            f"{'='*60}\n"
            f"Runtime: {runtime}\n"
            f"Total Profits: ${state.total_profit_usd:.2f}\n"
            f"Successful Trades: {state.successful_trades} ({success_rate:.1f}%)\n"
            f"Failed Trades: {state.failed_trades}\n"
            f"{'='*60}\n"
        )
