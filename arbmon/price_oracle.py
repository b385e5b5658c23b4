# arbmon/price_oracle.py
"""
Two-Router Price Oracle
Quotes the same (amount, path) on Uniswap and SushiSwap and reads gas price
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Sequence, Tuple

from arbmon.chain_client import ChainClient
from arbmon.dex.abis import ERC20_SYMBOL_ABI, ROUTER_ABI
from arbmon.exceptions import QuoteFailure
from arbmon.pairs import PairConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceQuote:
    """Fresh per pair per cycle, never persisted"""
    uni_price: Decimal
    sushi_price: Decimal
    raw_amount: int
    path: Tuple[str, str]
    gas_price_gwei: Decimal


def _amount_out(amounts: Sequence[int]) -> int:
    """Final element of a getAmountsOut result"""
    if not isinstance(amounts, (list, tuple)) or len(amounts) < 2:
        raise ValueError(f"Malformed getAmountsOut result: {amounts!r}")
    out = amounts[-1]
    if isinstance(out, bool) or not isinstance(out, int) or out < 0:
        raise ValueError(f"Malformed output amount: {out!r}")
    return out


def to_decimal(raw: int, decimals: int) -> Decimal:
    return Decimal(raw) / (Decimal(10) ** decimals)


class PriceOracle:
    def __init__(self, chain: ChainClient, uniswap_router: str, sushiswap_router: str):
        self.chain = chain
        self.uniswap = chain.contract(uniswap_router, ROUTER_ABI)
        self.sushiswap = chain.contract(sushiswap_router, ROUTER_ABI)
        self._symbol_cache: Dict[str, str] = {}

    def get_quote(self, pair: PairConfig) -> PriceQuote:
        """
        Quote one pair on both routers.
        Raises QuoteFailure on any revert, timeout or malformed result.
        """
        path = list(pair.path)
        try:
            uni_raw = _amount_out(
                self.uniswap.functions.getAmountsOut(pair.input_amount, path).call()
            )
            sushi_raw = _amount_out(
                self.sushiswap.functions.getAmountsOut(pair.input_amount, path).call()
            )
            gas_price_gwei = self.chain.gas_price_gwei()
        except Exception as e:
            raise QuoteFailure(pair.label, e) from e

        quote = PriceQuote(
            uni_price=to_decimal(uni_raw, pair.output_decimals),
            sushi_price=to_decimal(sushi_raw, pair.output_decimals),
            raw_amount=pair.input_amount,
            path=pair.path,
            gas_price_gwei=Decimal(gas_price_gwei),
        )

        logger.debug(
            f"Quote {pair.label}: amount_in={pair.amount_human} "
            f"uni_raw={uni_raw} sushi_raw={sushi_raw} gas={quote.gas_price_gwei} gwei"
        )
        return quote

    def token_symbol(self, address: str) -> str:
        """ERC-20 symbol(), shortened address if the call fails"""
        if address not in self._symbol_cache:
            try:
                token = self.chain.contract(address, ERC20_SYMBOL_ABI)
                self._symbol_cache[address] = token.functions.symbol().call()
            except Exception as e:
                logger.debug(f"symbol() failed for {address}: {e}")
                return address[:6] + "..."
        return self._symbol_cache[address]
