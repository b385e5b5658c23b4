# arbmon/config.py
"""
Monitor Configuration
Everything tunable is read from the environment (optionally a .env file)
and handed to the components as a single MonitorConfig.
"""

import os
import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv
from web3 import Web3

from arbmon.exceptions import ConfigurationError
from arbmon.pairs import DEFAULT_PAIRS, PairConfig, build_pair

BASE_DIR = Path(__file__).resolve().parent.parent

# -----------------------------
# Chain Configuration (Base)
# -----------------------------
DEFAULT_RPC_URL = "https://mainnet.base.org"
DEFAULT_CHAIN_ID = 8453

# -----------------------------
# DEX Routers (Base)
# -----------------------------
UNISWAP_ROUTER = "0x2626664c2603336E57B271c5C0b26F421741e481"
SUSHISWAP_ROUTER = "0x8d0A41961D9D80e00B665cB754174c5D4D736B6F"

# -----------------------------
# Trading Parameters
# -----------------------------
PROFIT_THRESHOLD_PERCENT = Decimal("0.5")  # spread in percent
RETRY_DELAY_SECONDS = 2.0                 # Base blocks are ~2s

# -----------------------------
# Gas Model
# -----------------------------
GAS_UNITS = 200_000
ETH_USD_PRICE = Decimal("3000")

# -----------------------------
# Safety
# -----------------------------
MAX_CONSECUTIVE_FAILURES = 5
RECEIPT_TIMEOUT_SECONDS = 120
RPC_TIMEOUT_SECONDS = 10

LOG_DIR = BASE_DIR / "logs"
ENV_PATH = BASE_DIR / ".env"


@dataclass(frozen=True)
class MonitorConfig:
    contract_address: str
    rpc_url: str = DEFAULT_RPC_URL
    chain_id: int = DEFAULT_CHAIN_ID
    uniswap_router: str = UNISWAP_ROUTER
    sushiswap_router: str = SUSHISWAP_ROUTER
    profit_threshold_percent: Decimal = PROFIT_THRESHOLD_PERCENT
    retry_delay_seconds: float = RETRY_DELAY_SECONDS
    gas_units: int = GAS_UNITS
    eth_usd_price: Decimal = ETH_USD_PRICE
    max_consecutive_failures: int = MAX_CONSECUTIVE_FAILURES
    receipt_timeout_seconds: float = RECEIPT_TIMEOUT_SECONDS
    rpc_timeout_seconds: float = RPC_TIMEOUT_SECONDS
    requote_before_submit: bool = True
    log_dir: Path = LOG_DIR
    public_address: Optional[str] = None
    private_key: Optional[str] = None
    pairs: Tuple[PairConfig, ...] = DEFAULT_PAIRS

    def require_signer(self):
        """Execution needs a key; scan-only mode does not"""
        if not self.private_key:
            raise ConfigurationError("PRIVATE_KEY not set")

    def check_signer_address(self, signer_address: str):
        """PUBLIC_ADDRESS is optional, but must match the key when given"""
        if self.public_address and self.public_address.lower() != signer_address.lower():
            raise ConfigurationError(
                f"PUBLIC_ADDRESS {self.public_address} does not match signing key address {signer_address}"
            )


# -----------------------------
# Parsing helpers
# -----------------------------

def _get(name: str, default=None):
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _address(name: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    value = _get(name, default)
    if value is None:
        if required:
            raise ConfigurationError(f"{name} not set")
        return None
    if not Web3.is_address(value):
        raise ConfigurationError(f"{name} is not a valid address: {value}")
    return Web3.to_checksum_address(value)


def _decimal(name: str, default: Decimal) -> Decimal:
    value = _get(name)
    if value is None:
        return default
    try:
        return Decimal(value)
    except InvalidOperation:
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def _number(name: str, default, cast):
    value = _get(name)
    if value is None:
        return default
    try:
        return cast(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def _flag(name: str, default: bool) -> bool:
    value = _get(name)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes", "on")


def load_pairs(path: Path) -> Tuple[PairConfig, ...]:
    """
    Load the pair list from JSON:

        [{"token": "WETH", "base_token": "USDC", "amount": "0.1",
          "min_profit_usd": 5, "decimals": 18, "quote_decimals": 6}, ...]

    token / base_token accept registry symbols or addresses.
    """
    try:
        raw = json.loads(Path(path).read_text())
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read pairs file {path}: {e}")

    if not isinstance(raw, list) or not raw:
        raise ConfigurationError(f"Pairs file {path} must contain a non-empty list")

    pairs = []
    for i, entry in enumerate(raw):
        try:
            pairs.append(build_pair(
                token=entry["token"],
                base_token=entry["base_token"],
                amount=entry["amount"],
                min_profit_usd=entry["min_profit_usd"],
                decimals=entry.get("decimals"),
                quote_decimals=entry.get("quote_decimals"),
            ))
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise ConfigurationError(f"Invalid pair #{i} in {path}: {e}")
    return tuple(pairs)


def load_config(env_path: Optional[Path] = None) -> MonitorConfig:
    """
    Build a MonitorConfig from the environment.
    Values already present in the environment win over the .env file.
    Without env_path the repo-root .env is used when present.
    """
    if env_path is not None:
        if not Path(env_path).exists():
            raise ConfigurationError(f".env file not found at {env_path}")
        load_dotenv(env_path)
    elif ENV_PATH.exists():
        load_dotenv(ENV_PATH)

    pairs_file = _get("PAIRS_FILE")
    pairs = load_pairs(Path(pairs_file)) if pairs_file else DEFAULT_PAIRS

    return MonitorConfig(
        contract_address=_address("ARBITRAGE_CONTRACT", required=True),
        rpc_url=_get("RPC_URL", DEFAULT_RPC_URL),
        chain_id=_number("CHAIN_ID", DEFAULT_CHAIN_ID, int),
        uniswap_router=_address("UNISWAP_ROUTER", UNISWAP_ROUTER),
        sushiswap_router=_address("SUSHISWAP_ROUTER", SUSHISWAP_ROUTER),
        profit_threshold_percent=_decimal("PROFIT_THRESHOLD_PERCENT", PROFIT_THRESHOLD_PERCENT),
        retry_delay_seconds=_number("RETRY_DELAY_SECONDS", RETRY_DELAY_SECONDS, float),
        gas_units=_number("GAS_UNITS", GAS_UNITS, int),
        eth_usd_price=_decimal("ETH_USD_PRICE", ETH_USD_PRICE),
        max_consecutive_failures=_number("MAX_CONSECUTIVE_FAILURES", MAX_CONSECUTIVE_FAILURES, int),
        receipt_timeout_seconds=_number("RECEIPT_TIMEOUT_SECONDS", RECEIPT_TIMEOUT_SECONDS, float),
        rpc_timeout_seconds=_number("RPC_TIMEOUT_SECONDS", RPC_TIMEOUT_SECONDS, float),
        requote_before_submit=_flag("REQUOTE_BEFORE_SUBMIT", True),
        log_dir=Path(_get("LOG_DIR", str(LOG_DIR))),
        public_address=_address("PUBLIC_ADDRESS"),
        private_key=_get("PRIVATE_KEY"),
        pairs=pairs,
    )
