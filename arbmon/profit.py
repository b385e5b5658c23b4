# arbmon/profit.py
"""
Profit Estimator
Pure functions over a quote and pair config; no I/O.

    spread %        = |uni - sushi| / uni * 100
    gas cost (USD)  = gas_price_gwei * gas_units / 1e9 * eth_usd_price
    expected profit = |uni - sushi| * amount_in - gas cost
"""

from dataclasses import dataclass
from decimal import Decimal

from arbmon.pairs import PairConfig
from arbmon.price_oracle import PriceQuote

GWEI_PER_ETH = Decimal(10) ** 9


@dataclass(frozen=True)
class GasModel:
    """Assumed gas units per trade and ETH price; both supplied from config"""
    gas_units: int
    eth_usd_price: Decimal


@dataclass(frozen=True)
class ProfitEstimate:
    spread_percent: Decimal
    gas_cost_usd: Decimal
    expected_profit_usd: Decimal


def price_gap(quote: PriceQuote) -> Decimal:
    return abs(quote.uni_price - quote.sushi_price)


def spread_percent(quote: PriceQuote) -> Decimal:
    if quote.uni_price == 0:
        return Decimal(0)
    return price_gap(quote) / quote.uni_price * 100


def estimated_gas_cost_usd(gas_price_gwei: Decimal, gas_units: int, eth_usd_price: Decimal) -> Decimal:
    gas_cost_eth = Decimal(gas_price_gwei) * gas_units / GWEI_PER_ETH
    return gas_cost_eth * Decimal(eth_usd_price)


def expected_profit_usd(quote: PriceQuote, pair: PairConfig, gas_model: GasModel) -> Decimal:
    gas_cost = estimated_gas_cost_usd(quote.gas_price_gwei, gas_model.gas_units, gas_model.eth_usd_price)
    return price_gap(quote) * pair.amount_human - gas_cost


def estimate(quote: PriceQuote, pair: PairConfig, gas_model: GasModel) -> ProfitEstimate:
    return ProfitEstimate(
        spread_percent=spread_percent(quote),
        gas_cost_usd=estimated_gas_cost_usd(quote.gas_price_gwei, gas_model.gas_units, gas_model.eth_usd_price),
        expected_profit_usd=expected_profit_usd(quote, pair, gas_model),
    )
