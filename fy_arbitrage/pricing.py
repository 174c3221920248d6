"""
Pool price discovery and the integer math shared by scanner and evaluator.

Prices are base-per-FY at 10^18 scale. All amounts are integers in smallest
units; no floating point is used outside the discount curve.
"""

import asyncio
import logging

from .exceptions import TransientReadError
from .interfaces import PoolConnector
from .types import PoolState
from .utils import BPS_DENOMINATOR, U128_MAX, WAD

logger = logging.getLogger(__name__)

# 0.001 base tokens at 18 decimals; small next to reserves so the quote
# approximates the zero-size marginal price
PRICE_PROBE_AMOUNT = 10**15


async def marginal_price_base_per_fy(connector: PoolConnector) -> int:
    """
    Estimate the marginal price of a pool from two one-sided probe quotes.

    Probe 1 sells PRICE_PROBE_AMOUNT base and observes the FY received (ask
    side); probe 2 sells the same amount of FY and observes the base received
    (bid side). The result is the midpoint of the two.

    Args:
        connector: Pool to query

    Returns:
        Base-per-FY price at 10^18 scale

    Raises:
        TransientReadError: If either preview fails
    """
    try:
        fy_out, base_out = await asyncio.gather(
            connector.preview_sell_base(PRICE_PROBE_AMOUNT),
            connector.preview_sell_fy(PRICE_PROBE_AMOUNT),
        )
    except TransientReadError:
        raise
    except Exception as e:
        raise TransientReadError(
            f"Price probe failed for pool {connector.pool_id}: {e}",
            pool_id=connector.pool_id,
            operation="marginal_price",
        ) from e

    fy_out = max(int(fy_out), 1)
    base_out = max(int(base_out), 1)

    ask_price = PRICE_PROBE_AMOUNT * WAD // fy_out
    bid_price = base_out * WAD // PRICE_PROBE_AMOUNT

    logger.debug(
        f"Pool {connector.pool_id} probe: ask={ask_price} bid={bid_price}"
    )
    return (ask_price + bid_price) // 2


async def fetch_pool_state(connector: PoolConnector) -> PoolState:
    """Read reserves, fee and maturity of a pool into a PoolState snapshot."""
    try:
        (base_reserves, fy_reserves, fee_bps), maturity = await asyncio.gather(
            connector.get_state(), connector.get_maturity()
        )
    except TransientReadError:
        raise
    except Exception as e:
        raise TransientReadError(
            f"State query failed for pool {connector.pool_id}: {e}",
            pool_id=connector.pool_id,
            operation="get_state",
        ) from e

    return PoolState(
        pool_id=connector.pool_id,
        base_reserves=int(base_reserves),
        fy_reserves=int(fy_reserves),
        fee_bps=int(fee_bps),
        maturity=int(maturity),
    )


def price_divergence_bps(pool_price: int, target_price: int) -> int:
    """How many whole basis points ``pool_price`` sits away from ``target_price``."""
    if target_price == 0:
        return 0
    diff = abs(pool_price - target_price)
    return diff * BPS_DENOMINATOR // target_price


def meets_edge_threshold(pool_price: int, target_price: int, edge_bps: int) -> bool:
    """True when divergence is at least ``edge_bps`` (inclusive)."""
    return price_divergence_bps(pool_price, target_price) >= edge_bps


def apply_slippage(amount: int, slippage_bps: int, is_max_in: bool) -> int:
    """
    Widen an amount by a slippage buffer.

    Adds the buffer to a max-in bound and subtracts it from a min-out bound.
    Results saturate to the uint128 range instead of wrapping.
    """
    adjustment = amount * slippage_bps // BPS_DENOMINATOR
    if is_max_in:
        return min(amount + adjustment, U128_MAX)
    return max(amount - adjustment, 0)


def calculate_profit(base_spent: int, base_received: int, estimated_gas_cost: int):
    """
    Profit of a round trip in base token units.

    Returns:
        (gross_profit, net_profit) where gross is floored at zero and net is
        gross minus gas, possibly negative
    """
    gross_profit = max(base_received - base_spent, 0)
    net_profit = gross_profit - estimated_gas_cost
    return gross_profit, net_profit
