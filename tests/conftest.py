"""Shared fakes for the chain client and router contracts"""

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from arbmon.config import MonitorConfig, SUSHISWAP_ROUTER, UNISWAP_ROUTER
from arbmon.executor import TradeOutcome
from arbmon.pairs import CBETH, DAI, USDBC, USDC, WETH, build_pair, get_symbol

CONTRACT = "0x1111111111111111111111111111111111111111"
ETH = 10 ** 18


class FakeRouter:
    """
    getAmountsOut keyed on the first token of the path.
    A value may be a raw output int, a full amounts list, an exception,
    or a callable producing one of those.
    """

    def __init__(self, outputs):
        self.outputs = dict(outputs)
        self.calls = []
        self.functions = SimpleNamespace(getAmountsOut=self._get_amounts_out)

    def _get_amounts_out(self, amount_in, path):
        self.calls.append((amount_in, list(path)))
        result = self.outputs[path[0]]

        def call():
            value = result() if callable(result) else result
            if isinstance(value, BaseException):
                raise value
            if isinstance(value, int):
                return [amount_in, value]
            return value

        return SimpleNamespace(call=call)


class FakeChain:
    def __init__(self, uni, sushi, gas_gwei=Decimal("0.01")):
        self.routers = {UNISWAP_ROUTER: uni, SUSHISWAP_ROUTER: sushi}
        self.gas_gwei = gas_gwei
        self.block_number = Mock(return_value=100)
        self.symbol_calls = 0

    def contract(self, address, abi):
        if address in self.routers:
            return self.routers[address]

        def symbol():
            self.symbol_calls += 1
            return get_symbol(address)

        return SimpleNamespace(
            functions=SimpleNamespace(symbol=lambda: SimpleNamespace(call=symbol))
        )

    def gas_price_gwei(self):
        if isinstance(self.gas_gwei, BaseException):
            raise self.gas_gwei
        return self.gas_gwei


@pytest.fixture
def weth_usdc():
    return build_pair(WETH, USDC, "0.1", 2)


@pytest.fixture
def three_pairs():
    return (
        build_pair(WETH, USDC, "0.1", 2),
        build_pair(CBETH, WETH, "0.1", 2),
        build_pair(DAI, USDBC, "1000", 2),
    )


def make_config(pairs, **overrides):
    values = dict(
        contract_address=CONTRACT,
        pairs=tuple(pairs),
        retry_delay_seconds=0,
        profit_threshold_percent=Decimal("0.5"),
    )
    values.update(overrides)
    return MonitorConfig(**values)


def success(profit="1"):
    return TradeOutcome(succeeded=True, tx_hash="ab" * 32, gas_used=150_000, actual_profit_usd=Decimal(profit))


def failure(error="execution reverted"):
    return TradeOutcome(succeeded=False, error=error)
