"""Tests for the opportunity loop"""

from decimal import Decimal
from unittest.mock import Mock

import pytest

from arbmon.exceptions import CircuitBreakerTripped
from arbmon.monitor import MonitorStatus, OpportunityMonitor
from arbmon.pairs import CBETH, DAI, USDC, WETH, build_pair
from arbmon.config import SUSHISWAP_ROUTER, UNISWAP_ROUTER
from arbmon.price_oracle import PriceOracle
from arbmon.stats import StatsTracker

from tests.conftest import ETH, FakeChain, FakeRouter, failure, make_config, success


def build(pairs, uni_outputs, sushi_outputs, executor=None, **config):
    uni = FakeRouter(uni_outputs)
    sushi = FakeRouter(sushi_outputs)
    chain = FakeChain(uni, sushi)
    oracle = PriceOracle(chain, UNISWAP_ROUTER, SUSHISWAP_ROUTER)
    monitor = OpportunityMonitor(make_config(pairs, **config), chain, oracle, executor)
    return monitor, chain, uni, sushi


def executor_returning(*outcomes):
    executor = Mock()
    executor.execute.side_effect = list(outcomes)
    return executor


# 1% spread on every pair
WIDE = ({WETH: 3000 * ETH, CBETH: 3000 * ETH, DAI: 3000 * ETH},
        {WETH: 3030 * ETH, CBETH: 3030 * ETH, DAI: 3030 * ETH})


class TestDecisionFlow:
    def test_profitable_pair_trades_exactly_once(self, weth_usdc):
        executor = executor_returning(success("2.5"))
        monitor, _, _, _ = build([weth_usdc], {WETH: 3000 * ETH}, {WETH: 3030 * ETH}, executor)

        assert monitor.run_cycle() == 1

        executor.execute.assert_called_once()
        quote, pair = executor.execute.call_args[0]
        assert pair is weth_usdc
        assert quote.sushi_price == Decimal(3030)

        state = monitor.stats.snapshot()
        assert state.successful_trades == 1
        assert state.total_profit_usd == Decimal("2.5")

    def test_six_decimal_quote_trades_once(self):
        pair = build_pair(WETH, USDC, "0.1", 2, quote_decimals=6)
        executor = executor_returning(success())
        monitor, _, _, _ = build([pair], {WETH: 3000 * 10 ** 6}, {WETH: 3030 * 10 ** 6}, executor)

        assert monitor.run_cycle() == 1

        quote = executor.execute.call_args[0][0]
        assert quote.uni_price == Decimal(3000)
        assert quote.sushi_price == Decimal(3030)

    def test_equal_prices_never_trade(self, weth_usdc):
        executor = Mock()
        monitor, _, _, _ = build(
            [weth_usdc], {WETH: 3000 * ETH}, {WETH: 3000 * ETH}, executor,
            profit_threshold_percent=Decimal(0),
        )

        assert monitor.run_cycle() == 0
        executor.execute.assert_not_called()

    def test_below_min_profit_does_not_trade(self, weth_usdc):
        executor = Mock()
        # spread 0.6% clears the threshold, but 18 * 0.1 - gas < $2
        monitor, _, _, _ = build([weth_usdc], {WETH: 3000 * ETH}, {WETH: 3018 * ETH}, executor)

        monitor.run_cycle()
        executor.execute.assert_not_called()

    def test_scan_only_mode_never_executes(self, weth_usdc):
        monitor, _, _, _ = build([weth_usdc], {WETH: 3000 * ETH}, {WETH: 3030 * ETH})

        assert monitor.run_cycle() == 0
        assert monitor.stats.snapshot().trades_executed == 0


class TestFaultIsolation:
    def test_quote_failure_skips_only_that_pair(self, three_pairs):
        uni_outputs, sushi_outputs = WIDE
        uni_outputs = dict(uni_outputs, **{WETH: ConnectionError("router call timed out")})
        executor = executor_returning(success(), success())
        monitor, _, uni, sushi = build(three_pairs, uni_outputs, sushi_outputs, executor)

        assert monitor.run_cycle() == 2

        quoted = [path[0] for _, path in uni.calls]
        assert CBETH in quoted and DAI in quoted
        traded = [call[0][1] for call in executor.execute.call_args_list]
        assert traded == list(three_pairs[1:])

    def test_trade_failure_does_not_stop_the_cycle(self, three_pairs):
        executor = executor_returning(failure(), success(), failure())
        monitor, _, _, _ = build(three_pairs, *WIDE, executor=executor)

        assert monitor.run_cycle() == 3

        state = monitor.stats.snapshot()
        assert state.successful_trades == 1
        assert state.failed_trades == 2

    def test_counts_match_executor_invocations(self, three_pairs):
        outcomes = [success(), failure(), success()] * 3
        executor = executor_returning(*outcomes)
        monitor, _, _, _ = build(three_pairs, *WIDE, executor=executor)

        monitor.run(max_cycles=3)

        state = monitor.stats.snapshot()
        assert state.successful_trades + state.failed_trades == executor.execute.call_count == 9


class TestRequote:
    def test_vanished_opportunity_is_not_submitted(self, weth_usdc):
        prices = iter([3030 * ETH, 3000 * ETH])
        executor = Mock()
        monitor, _, _, sushi = build(
            [weth_usdc], {WETH: 3000 * ETH}, {WETH: lambda: next(prices)}, executor,
        )

        assert monitor.run_cycle() == 0
        assert len(sushi.calls) == 2
        executor.execute.assert_not_called()
        assert monitor.stats.snapshot().trades_executed == 0

    def test_fresh_quote_is_submitted(self, weth_usdc):
        prices = iter([3030 * ETH, 3060 * ETH])
        executor = executor_returning(success())
        monitor, _, _, _ = build(
            [weth_usdc], {WETH: 3000 * ETH}, {WETH: lambda: next(prices)}, executor,
        )

        monitor.run_cycle()

        quote = executor.execute.call_args[0][0]
        assert quote.sushi_price == Decimal(3060)

    def test_requote_can_be_disabled(self, weth_usdc):
        executor = executor_returning(success())
        monitor, _, _, sushi = build(
            [weth_usdc], {WETH: 3000 * ETH}, {WETH: 3030 * ETH}, executor,
            requote_before_submit=False,
        )

        monitor.run_cycle()
        assert len(sushi.calls) == 1


class TestLoop:
    def test_cycle_failure_backs_off_and_recovers(self, weth_usdc):
        monitor, chain, _, _ = build([weth_usdc], {WETH: 3000 * ETH}, {WETH: 3000 * ETH})
        chain.block_number.side_effect = [ConnectionError("endpoint unreachable"), 101]

        monitor.run(max_cycles=2)

        assert monitor.cycles == 2
        assert monitor.status is MonitorStatus.POLLING
        assert monitor.consecutive_failures == 0

    def test_returns_to_polling_after_backoff_delay(self, weth_usdc):
        monitor, chain, _, _ = build([weth_usdc], {WETH: 3000 * ETH}, {WETH: 3000 * ETH})
        seen = []

        def block_number():
            seen.append(monitor.status)
            if len(seen) == 1:
                raise ConnectionError("endpoint unreachable")
            return 101

        chain.block_number.side_effect = block_number

        monitor.run(max_cycles=2)

        assert seen == [MonitorStatus.POLLING, MonitorStatus.POLLING]

    def test_backoff_state_after_failure(self, weth_usdc):
        monitor, chain, _, _ = build([weth_usdc], {WETH: 3000 * ETH}, {WETH: 3000 * ETH})
        chain.block_number.side_effect = ConnectionError("endpoint unreachable")

        monitor.run(max_cycles=1)

        assert monitor.status is MonitorStatus.BACKOFF
        assert monitor.consecutive_failures == 1

    def test_circuit_breaker_trips(self, weth_usdc):
        monitor, chain, _, _ = build(
            [weth_usdc], {WETH: 3000 * ETH}, {WETH: 3000 * ETH},
            max_consecutive_failures=3,
        )
        chain.block_number.side_effect = ConnectionError("endpoint unreachable")

        with pytest.raises(CircuitBreakerTripped) as exc_info:
            monitor.run()

        assert exc_info.value.failures == 3
        assert chain.block_number.call_count == 3

    def test_circuit_breaker_disabled(self, weth_usdc):
        monitor, chain, _, _ = build(
            [weth_usdc], {WETH: 3000 * ETH}, {WETH: 3000 * ETH},
            max_consecutive_failures=0,
        )
        chain.block_number.side_effect = ConnectionError("endpoint unreachable")

        monitor.run(max_cycles=10)

        assert monitor.consecutive_failures == 10

    def test_stop_is_checked_before_each_pair(self, three_pairs):
        executor = Mock()
        monitor, _, _, _ = build(three_pairs, *WIDE, executor=executor)

        def execute_then_stop(quote, pair):
            monitor.stop()
            return success()

        executor.execute.side_effect = execute_then_stop

        monitor.run()

        assert executor.execute.call_count == 1
        assert monitor.cycles == 1

    def test_stopped_monitor_does_not_poll(self, weth_usdc):
        monitor, chain, _, _ = build([weth_usdc], {WETH: 3000 * ETH}, {WETH: 3030 * ETH})
        monitor.stop()

        monitor.run()

        chain.block_number.assert_not_called()

    def test_state_starts_fresh_for_each_monitor(self, weth_usdc):
        executor = executor_returning(success("4"))
        first, _, _, _ = build([weth_usdc], {WETH: 3000 * ETH}, {WETH: 3030 * ETH}, executor)
        first.run_cycle()

        second, _, _, _ = build([weth_usdc], {WETH: 3000 * ETH}, {WETH: 3030 * ETH})

        assert first.stats.snapshot().total_profit_usd == Decimal(4)
        assert second.stats.snapshot() == StatsTracker().snapshot()
