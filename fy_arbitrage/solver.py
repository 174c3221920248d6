"""
Trade sizer: bounded bisection for the FY amount to sell into the rich pool.

The search looks for the largest size at which the rich pool's price still
sits above the fair-value target. The price at each candidate size comes from
a ``PriceProbe``. The default live probe re-queries the pool's current
(pre-trade) marginal price and ignores the size: it is a proxy for the
post-trade price, not an exact solve. Swap in a probe built on the pool's own
reserve and fee formula to get a deterministic post-trade search.
"""

import logging
from typing import Callable, Optional

from .interfaces import PoolConnector, PriceProbe
from .pricing import marginal_price_base_per_fy

logger = logging.getLogger(__name__)

MAX_BISECTION_ITERATIONS = 25

# Stop once the bracket is narrower than this many smallest units
CONVERGENCE_TOLERANCE = 1000


def live_price_probe(connector: PoolConnector) -> PriceProbe:
    """Probe returning the pool's current marginal price for any size."""

    async def probe(size: int) -> int:
        return await marginal_price_base_per_fy(connector)

    return probe


async def solve_fy_amount_to_target(
    price_probe: PriceProbe,
    target_price: int,
    max_fy_amount: int,
) -> Optional[int]:
    """
    Bisection over [0, max_fy_amount] for the largest size priced above target.

    Args:
        price_probe: Price oracle for the rich pool
        target_price: Fair-value price at 10^18 scale
        max_fy_amount: Upper bound on the trade size

    Returns:
        Last size at which the observed price exceeded the target, or None
        when no such size was found

    Raises:
        TransientReadError: If the probe fails
    """
    lo = 0
    hi = max_fy_amount
    best = 0

    for iteration in range(MAX_BISECTION_ITERATIONS):
        if hi <= lo:
            break

        mid = (lo + hi) // 2
        if mid == 0:
            break

        current_price = await price_probe(mid)

        logger.debug(
            f"Bisection iteration {iteration}: mid={mid} "
            f"price={current_price} target={target_price}"
        )

        if current_price > target_price:
            # Still rich at this size, try selling more
            best = mid
            lo = mid + 1
        else:
            hi = mid - 1

        if hi - lo < CONVERGENCE_TOLERANCE:
            break

    if best == 0:
        return None
    return best


class TradeSizer:
    """
    Sizes a trade against the rich pool.

    Args:
        probe_factory: Builds the price probe for a pool connector; defaults
            to ``live_price_probe``
    """

    def __init__(
        self, probe_factory: Optional[Callable[[PoolConnector], PriceProbe]] = None
    ):
        self.probe_factory = probe_factory or live_price_probe

    async def size(
        self, rich_pool: PoolConnector, target_price: int, max_fy_amount: int
    ) -> Optional[int]:
        """Size a trade on ``rich_pool``; None when no positive size exists."""
        probe = self.probe_factory(rich_pool)
        return await solve_fy_amount_to_target(probe, target_price, max_fy_amount)
