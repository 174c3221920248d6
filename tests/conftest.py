"""
Shared fixtures for FY arbitrage tests.
"""

import pytest
from prometheus_client import CollectorRegistry

from fy_arbitrage.config_loader import StrategyConfig
from fy_arbitrage.connectors import SimulatedPoolConnector
from fy_arbitrage.curve import CurveKnot, DayCount, DiscountCurve
from fy_arbitrage.exceptions import TransientReadError
from fy_arbitrage.metrics import StrategyMetrics
from fy_arbitrage.types import PoolState

WAD = 10**18

# Block timestamp used across tests; pools mature exactly one ACT/360 year later
NOW = 1_700_000_000
ONE_YEAR_ACT_360 = 360 * 86400
MATURITY = NOW + ONE_YEAR_ACT_360

CHEAP = "0x2222222222222222222222222222222222222222"
RICH = "0x3333333333333333333333333333333333333333"
OTHER = "0x4444444444444444444444444444444444444444"
ROUTER = "0x1111111111111111111111111111111111111111"


class FakePool:
    """
    Pool connector quoting a fixed base-per-FY price for every size.

    ``buy_price`` overrides the price used by ``preview_buy_fy`` so a test can
    make the cheap leg more expensive than it looks. Operations listed in
    ``fail_ops`` raise ``TransientReadError``.
    """

    def __init__(self, pool_id, price, buy_price=None, maturity=MATURITY, fee_bps=30):
        self.pool_id = pool_id
        self.price = price
        self.buy_price = price if buy_price is None else buy_price
        self.maturity = maturity
        self.fee_bps = fee_bps
        self.fail_ops = set()
        self.calls = []

    def _record(self, operation):
        self.calls.append(operation)
        if operation in self.fail_ops or "*" in self.fail_ops:
            raise TransientReadError(
                f"{operation} failed", pool_id=self.pool_id, operation=operation
            )

    async def preview_sell_base(self, base_in):
        self._record("sellBasePreview")
        return base_in * WAD // self.price

    async def preview_sell_fy(self, fy_in):
        self._record("sellFYTokenPreview")
        return fy_in * self.price // WAD

    async def preview_buy_fy(self, fy_out):
        self._record("buyFYTokenPreview")
        return fy_out * self.buy_price // WAD

    async def preview_buy_base(self, base_out):
        self._record("buyBasePreview")
        return base_out * WAD // self.price

    async def get_state(self):
        self._record("getCache")
        return 10**24, 10**24, self.fee_bps

    async def get_maturity(self):
        self._record("maturity")
        return self.maturity


def make_state(pool_id, maturity=MATURITY):
    return PoolState(
        pool_id=pool_id,
        base_reserves=10**24,
        fy_reserves=10**24,
        fee_bps=30,
        maturity=maturity,
    )


@pytest.fixture
def curve():
    """Two-knot ACT/360 curve: 4.5% at one year."""
    return DiscountCurve(
        knots=[CurveKnot(0.0028, 0.052), CurveKnot(1.0, 0.045)],
        day_count=DayCount.ACT_360,
    )


@pytest.fixture
def strategy_config():
    """Two-pool config sized so a 1,000 FY trade fits the base limit."""
    return StrategyConfig(
        router_id=ROUTER,
        pool_ids=(CHEAP, RICH),
        edge_bps=10,
        slippage_bps=50,
        max_fy_amount=1_000 * WAD,
        max_base_amount=50_000 * WAD,
        bid_percentage=80,
    )


@pytest.fixture
def simulated_pools():
    """Cheap pool at ~0.94 and rich pool at ~0.97 base per FY, no fee."""
    return {
        CHEAP: SimulatedPoolConnector(
            CHEAP, 940_000 * WAD, 1_000_000 * WAD, fee_bps=0, maturity=MATURITY
        ),
        RICH: SimulatedPoolConnector(
            RICH, 970_000 * WAD, 1_000_000 * WAD, fee_bps=0, maturity=MATURITY
        ),
    }


@pytest.fixture
def metrics():
    """StrategyMetrics on an isolated registry."""
    return StrategyMetrics(CollectorRegistry())
