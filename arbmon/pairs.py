# arbmon/pairs.py
"""
Token registry and pair configuration for Base mainnet
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional, Tuple, Union

from web3 import Web3

# =============================================================================
# TOKEN ADDRESSES (Base Mainnet - All Checksummed)
# =============================================================================

USDC = Web3.to_checksum_address("0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913")
WETH = Web3.to_checksum_address("0x4200000000000000000000000000000000000006")
DAI = Web3.to_checksum_address("0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb")
CBETH = Web3.to_checksum_address("0x2Ae3F1Ec7F1F5012CFEab0185bfc7aa3cf0DEc22")
USDBC = Web3.to_checksum_address("0xd9aAEc86B65D86f6A7B5B1b0c42FFA531710b6CA")


@dataclass(frozen=True)
class TokenInfo:
    address: str
    symbol: str
    decimals: int


TOKENS: Dict[str, TokenInfo] = {
    USDC: TokenInfo(USDC, "USDC", 6),
    WETH: TokenInfo(WETH, "WETH", 18),
    DAI: TokenInfo(DAI, "DAI", 18),
    CBETH: TokenInfo(CBETH, "cbETH", 18),
    USDBC: TokenInfo(USDBC, "USDbC", 6),
}

ADDRESS_BY_SYMBOL = {info.symbol.upper(): addr for addr, info in TOKENS.items()}


# =============================================================================
# PAIR CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class PairConfig:
    """One monitored pair. input_amount is in token base units."""
    token_address: str
    base_token_address: str
    input_amount: int
    decimals: int
    min_profit_usd: Decimal
    quote_decimals: Optional[int] = None

    @property
    def path(self) -> Tuple[str, str]:
        return (self.token_address, self.base_token_address)

    @property
    def output_decimals(self) -> int:
        if self.quote_decimals is None:
            return self.decimals
        return self.quote_decimals

    @property
    def amount_human(self) -> Decimal:
        return Decimal(self.input_amount) / (Decimal(10) ** self.decimals)

    @property
    def label(self) -> str:
        return f"{get_symbol(self.token_address)}/{get_symbol(self.base_token_address)}"


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def resolve_token(token: str) -> str:
    """Accept a registry symbol or an address, return a checksummed address"""
    addr = ADDRESS_BY_SYMBOL.get(token.upper())
    if addr:
        return addr
    if not Web3.is_address(token):
        raise ValueError(f"Unknown token: {token}")
    return Web3.to_checksum_address(token)


def get_token_info(address: str) -> Optional[TokenInfo]:
    if not Web3.is_address(address):
        return None
    return TOKENS.get(Web3.to_checksum_address(address))


def get_symbol(address: str) -> str:
    """Registry symbol, or a shortened address for unknown tokens"""
    info = get_token_info(address)
    return info.symbol if info else address[:6] + "..."


def to_base_units(amount: Union[str, int, float, Decimal], decimals: int) -> int:
    return int(Decimal(str(amount)) * (Decimal(10) ** decimals))


def build_pair(
    token: str,
    base_token: str,
    amount: Union[str, int, float, Decimal],
    min_profit_usd: Union[str, int, float, Decimal],
    decimals: Optional[int] = None,
    quote_decimals: Optional[int] = None,
) -> PairConfig:
    """
    Build a PairConfig from human-readable values.
    decimals defaults to the registry entry of the input token, else 18.
    """
    token_addr = resolve_token(token)
    base_addr = resolve_token(base_token)

    if decimals is None:
        info = get_token_info(token_addr)
        decimals = info.decimals if info else 18

    return PairConfig(
        token_address=token_addr,
        base_token_address=base_addr,
        input_amount=to_base_units(amount, decimals),
        decimals=decimals,
        min_profit_usd=Decimal(str(min_profit_usd)),
        quote_decimals=quote_decimals,
    )


DEFAULT_PAIRS: Tuple[PairConfig, ...] = (
    build_pair(WETH, USDC, "0.1", 5, quote_decimals=6),
    build_pair(CBETH, WETH, "0.1", 3),
    build_pair(DAI, USDBC, "1000", 10, quote_decimals=6),
)
