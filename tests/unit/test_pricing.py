"""
Unit tests for price discovery and the shared integer math
"""

import pytest
from unittest.mock import AsyncMock, Mock

from conftest import CHEAP, MATURITY, WAD, FakePool
from fy_arbitrage.exceptions import TransientReadError
from fy_arbitrage.pricing import (
    PRICE_PROBE_AMOUNT,
    apply_slippage,
    calculate_profit,
    fetch_pool_state,
    marginal_price_base_per_fy,
    meets_edge_threshold,
    price_divergence_bps,
)
from fy_arbitrage.utils import U128_MAX


def mock_connector(fy_out, base_out, pool_id="pool"):
    connector = Mock()
    connector.pool_id = pool_id
    connector.preview_sell_base = AsyncMock(return_value=fy_out)
    connector.preview_sell_fy = AsyncMock(return_value=base_out)
    return connector


class TestMarginalPrice:
    """Two-sided probe midpoint"""

    @pytest.mark.asyncio
    async def test_midpoint_of_ask_and_bid(self):
        # ask: 1e15 base buys 1e15 * 100/102 FY; bid: 1e15 FY sells for 0.98e15 base
        connector = mock_connector(fy_out=10**15 * 100 // 102, base_out=98 * 10**13)

        price = await marginal_price_base_per_fy(connector)

        ask = PRICE_PROBE_AMOUNT * WAD // (10**15 * 100 // 102)
        bid = 98 * 10**13 * WAD // PRICE_PROBE_AMOUNT
        assert price == (ask + bid) // 2
        connector.preview_sell_base.assert_awaited_once_with(PRICE_PROBE_AMOUNT)
        connector.preview_sell_fy.assert_awaited_once_with(PRICE_PROBE_AMOUNT)

    @pytest.mark.asyncio
    async def test_par_pool(self):
        connector = mock_connector(fy_out=PRICE_PROBE_AMOUNT, base_out=PRICE_PROBE_AMOUNT)
        assert await marginal_price_base_per_fy(connector) == WAD

    @pytest.mark.asyncio
    async def test_zero_quotes_clamped(self):
        connector = mock_connector(fy_out=0, base_out=0)

        price = await marginal_price_base_per_fy(connector)

        # ask = probe * WAD / 1, bid = 1 * WAD / probe
        assert price == (PRICE_PROBE_AMOUNT * WAD + WAD // PRICE_PROBE_AMOUNT) // 2

    @pytest.mark.asyncio
    async def test_fake_pool_price_round_trips(self):
        pool = FakePool(CHEAP, 97 * WAD // 100)
        price = await marginal_price_base_per_fy(pool)
        assert price == pytest.approx(97 * WAD // 100, rel=1e-9)

    @pytest.mark.asyncio
    async def test_failure_wrapped_as_transient(self):
        connector = mock_connector(fy_out=1, base_out=1, pool_id="0xabc")
        connector.preview_sell_fy = AsyncMock(side_effect=RuntimeError("execution reverted"))

        with pytest.raises(TransientReadError) as exc_info:
            await marginal_price_base_per_fy(connector)

        assert exc_info.value.pool_id == "0xabc"
        assert exc_info.value.operation == "marginal_price"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_transient_error_passes_through(self):
        pool = FakePool(CHEAP, WAD)
        pool.fail_ops.add("sellBasePreview")

        with pytest.raises(TransientReadError) as exc_info:
            await marginal_price_base_per_fy(pool)

        assert exc_info.value.operation == "sellBasePreview"


class TestFetchPoolState:
    """Pool state snapshot"""

    @pytest.mark.asyncio
    async def test_snapshot(self):
        pool = FakePool(CHEAP, WAD, fee_bps=25)

        state = await fetch_pool_state(pool)

        assert state.pool_id == CHEAP
        assert state.base_reserves == 10**24
        assert state.fy_reserves == 10**24
        assert state.fee_bps == 25
        assert state.maturity == MATURITY

    @pytest.mark.asyncio
    async def test_failure(self):
        pool = FakePool(CHEAP, WAD)
        pool.fail_ops.add("maturity")

        with pytest.raises(TransientReadError):
            await fetch_pool_state(pool)


class TestDivergence:
    """Divergence in basis points and edge gating"""

    def test_rich(self):
        assert price_divergence_bps(1_010_000, 1_000_000) == 100

    def test_cheap(self):
        assert price_divergence_bps(995_000, 1_000_000) == 50

    def test_zero_target(self):
        assert price_divergence_bps(123_456, 0) == 0

    def test_floor(self):
        assert price_divergence_bps(1_000_199, 1_000_000) == 1

    def test_edge_inclusive(self):
        assert meets_edge_threshold(1_010_000, 1_000_000, 100) is True
        assert meets_edge_threshold(1_010_000, 1_000_000, 101) is False

    def test_zero_edge_always_met(self):
        assert meets_edge_threshold(1_000_000, 1_000_000, 0) is True


class TestSlippage:
    """Slippage buffers"""

    def test_max_in(self):
        assert apply_slippage(10_000, 100, is_max_in=True) == 10_100

    def test_min_out(self):
        assert apply_slippage(10_000, 100, is_max_in=False) == 9_900

    def test_zero_slippage(self):
        assert apply_slippage(12_345, 0, is_max_in=True) == 12_345
        assert apply_slippage(12_345, 0, is_max_in=False) == 12_345

    def test_saturates_high(self):
        assert apply_slippage(U128_MAX, 100, is_max_in=True) == U128_MAX

    def test_saturates_low(self):
        assert apply_slippage(10_000, 10_000, is_max_in=False) == 0
        assert apply_slippage(0, 500, is_max_in=False) == 0


class TestProfit:
    """Gross and net profit"""

    def test_positive(self):
        assert calculate_profit(1000, 1100, 20) == (100, 80)

    def test_gas_exceeds_gross(self):
        assert calculate_profit(1000, 1050, 100) == (50, -50)

    def test_gross_never_negative(self):
        gross, net = calculate_profit(1100, 1000, 5)
        assert gross == 0
        assert net == -5
