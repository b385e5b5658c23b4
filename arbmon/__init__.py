# arbmon/__init__.py
"""
Two-Router DEX Arbitrage Monitor

Modules:
- config: Configuration and environment
- pairs: Token registry and pair configuration
- chain_client: JSON-RPC access
- price_oracle: Router quotes
- profit: Spread and profit estimation
- decision: Trade decision policy
- executor: Trade execution
- stats: Running statistics
- log_sink: Daily log file
- monitor: Opportunity loop
- main: Entry point
"""

__version__ = "1.0.0"

from arbmon.pairs import PairConfig, DEFAULT_PAIRS
from arbmon.config import MonitorConfig, load_config

__all__ = [
    "PairConfig",
    "DEFAULT_PAIRS",
    "MonitorConfig",
    "load_config",
]
