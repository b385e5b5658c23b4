# arbmon/exceptions.py
"""
Exception hierarchy for the arbitrage monitor.

Pair-level and trade-level faults are caught inside the loop; only
CircuitBreakerTripped is allowed to end a run.
"""

from typing import Any, Dict, Optional


class ArbMonitorError(Exception):
    """Base exception for all monitor errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(ArbMonitorError):
    """Raised when configuration is missing or malformed."""

    pass


class QuoteFailure(ArbMonitorError):
    """A router or gas-price read failed for one pair."""

    def __init__(self, pair_label: str, cause: BaseException):
        super().__init__(
            f"Quote failed for {pair_label}: {cause}",
            details={"pair": pair_label, "cause": repr(cause)},
        )
        self.pair_label = pair_label
        self.cause = cause


class CircuitBreakerTripped(ArbMonitorError):
    """Too many consecutive cycle-level failures."""

    def __init__(self, failures: int, last_error: Optional[BaseException] = None):
        super().__init__(
            f"Circuit breaker tripped after {failures} consecutive cycle failures",
            details={"failures": failures, "last_error": repr(last_error)},
        )
        self.failures = failures
        self.last_error = last_error
