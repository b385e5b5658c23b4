# arbmon/decision.py
"""
Decision Policy
A trade goes ahead only when BOTH the global spread threshold and the
pair's minimum USD profit are cleared.
"""

from dataclasses import dataclass
from decimal import Decimal

from arbmon.pairs import PairConfig
from arbmon.profit import ProfitEstimate


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str

    def __str__(self) -> str:
        status = "✅ ALLOWED" if self.allowed else "❌ REJECTED"
        return f"{status}: {self.reason}"


def evaluate(estimate: ProfitEstimate, pair: PairConfig, threshold_percent: Decimal) -> Decision:
    if not estimate.spread_percent > threshold_percent:
        return Decision(
            allowed=False,
            reason=f"Spread {estimate.spread_percent:.4f}% <= threshold {threshold_percent}%",
        )

    if estimate.expected_profit_usd < pair.min_profit_usd:
        return Decision(
            allowed=False,
            reason=f"Expected profit ${estimate.expected_profit_usd:.2f} < ${pair.min_profit_usd:.2f}",
        )

    return Decision(
        allowed=True,
        reason=f"Spread {estimate.spread_percent:.4f}%, expected profit ${estimate.expected_profit_usd:.2f}",
    )
