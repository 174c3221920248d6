"""
Cross-pool opportunity scanner.

Prices every configured pool, picks the cheapest and richest, gates on the
edge against the curve's fair value, sizes the trade and derives its raw cash
flows. At most one candidate per cycle: the global cheap/rich extremal pair,
not an exhaustive search over pool pairs.
"""

import asyncio
import logging
from typing import List, Mapping, Optional, Tuple

from .config_loader import StrategyConfig
from .curve import DiscountCurve
from .economics import EconomicsEvaluator
from .exceptions import TransientReadError
from .interfaces import PoolConnector
from .metrics import StrategyMetrics
from .pricing import marginal_price_base_per_fy, meets_edge_threshold, price_divergence_bps
from .solver import TradeSizer
from .types import ArbOpportunity, PoolState, RejectReason, TradeCandidate

logger = logging.getLogger(__name__)


class OpportunityScanner:
    """
    Finds the best cheap/rich trade across the configured pools.

    Args:
        config: Strategy configuration
        curve: Reference discount curve
        connectors: Pool id -> connector
        sizer: Trade sizer; defaults to the live-probe bisection
        evaluator: Economics evaluator; defaults to one built from ``config``
        metrics: Optional metrics sink for read failures
    """

    def __init__(
        self,
        config: StrategyConfig,
        curve: DiscountCurve,
        connectors: Mapping[str, PoolConnector],
        sizer: Optional[TradeSizer] = None,
        evaluator: Optional[EconomicsEvaluator] = None,
        metrics: Optional[StrategyMetrics] = None,
    ):
        self.config = config
        self.curve = curve
        self.connectors = dict(connectors)
        self.sizer = sizer or TradeSizer()
        self.evaluator = evaluator or EconomicsEvaluator(config)
        self.metrics = metrics
        self.last_reject_reason: Optional[RejectReason] = None

    async def price_pools(
        self, pool_states: Mapping[str, PoolState]
    ) -> List[Tuple[str, int, PoolState]]:
        """
        Marginal price of every configured pool with a cached state.

        Pools whose query fails are logged and left out.
        """
        pool_ids = [
            pool_id
            for pool_id in self.config.pool_ids
            if pool_id in pool_states and pool_id in self.connectors
        ]

        results = await asyncio.gather(
            *(marginal_price_base_per_fy(self.connectors[p]) for p in pool_ids),
            return_exceptions=True,
        )

        priced = []
        for pool_id, result in zip(pool_ids, results):
            if isinstance(result, TransientReadError):
                logger.warning(f"Failed to get pool price for {pool_id}: {result}")
                self._record_read_failure(pool_id, "marginal_price")
                continue
            if isinstance(result, BaseException):
                raise result
            priced.append((pool_id, result, pool_states[pool_id]))

        return priced

    async def find_candidate(
        self, pool_states: Mapping[str, PoolState], current_ts: int
    ) -> Optional[TradeCandidate]:
        """Steps up to the raw cost/proceeds check. None when nothing qualifies."""
        self.last_reject_reason = None

        if len(pool_states) < 2:
            return self._reject(RejectReason.INSUFFICIENT_POOLS)

        priced = await self.price_pools(pool_states)
        if len(priced) < 2:
            logger.debug(f"Only {len(priced)} pool(s) priced this cycle")
            return self._reject(RejectReason.INSUFFICIENT_POOLS)

        cheap_id, cheap_price, _ = min(priced, key=lambda p: p[1])
        rich_id, rich_price, rich_state = max(priced, key=lambda p: p[1])

        if cheap_id == rich_id or cheap_price == rich_price:
            return self._reject(RejectReason.NO_SPREAD)

        ttm = self.curve.time_to_maturity(current_ts, rich_state.maturity)
        target_price = self.curve.target_price(ttm)

        logger.debug(
            f"Potential opportunity: cheap={cheap_id} ({cheap_price}) "
            f"rich={rich_id} ({rich_price}) target={target_price} ttm={ttm:.4f}y"
        )

        if not meets_edge_threshold(rich_price, target_price, self.config.edge_bps):
            logger.debug(
                f"Divergence {price_divergence_bps(rich_price, target_price)} bps "
                f"below edge {self.config.edge_bps} bps"
            )
            return self._reject(RejectReason.BELOW_EDGE)

        rich_pool = self.connectors[rich_id]
        cheap_pool = self.connectors[cheap_id]

        try:
            fy_amount = await self.sizer.size(
                rich_pool, target_price, self.config.max_fy_amount
            )
        except TransientReadError as e:
            logger.warning(f"Trade sizing failed on {rich_id}: {e}")
            self._record_read_failure(rich_id, e.operation or "trade_size")
            return self._reject(RejectReason.QUOTE_FAILED)

        if not fy_amount:
            logger.debug("Could not solve for FY amount")
            return self._reject(RejectReason.SOLVER_NO_SIZE)

        try:
            base_cost, base_proceeds = await asyncio.gather(
                cheap_pool.preview_buy_fy(fy_amount),
                rich_pool.preview_sell_fy(fy_amount),
            )
        except TransientReadError as e:
            logger.warning(f"Preview failed for {e.pool_id}: {e}")
            self._record_read_failure(e.pool_id or rich_id, e.operation or "preview")
            return self._reject(RejectReason.QUOTE_FAILED)
        except Exception as e:
            logger.warning(
                f"Preview failed for {cheap_id}/{rich_id}: {type(e).__name__}: {e}"
            )
            self._record_read_failure(rich_id, "preview")
            return self._reject(RejectReason.QUOTE_FAILED)

        if base_cost >= base_proceeds:
            logger.debug(
                f"Trade would be unprofitable before slippage: "
                f"cost={base_cost} proceeds={base_proceeds}"
            )
            return self._reject(RejectReason.UNPROFITABLE)

        return TradeCandidate(
            cheap_pool=cheap_id,
            rich_pool=rich_id,
            fy_amount=fy_amount,
            base_cost=int(base_cost),
            base_proceeds=int(base_proceeds),
            target_price=target_price,
            cheap_price=cheap_price,
            rich_price=rich_price,
        )

    async def find_best_opportunity(
        self, pool_states: Mapping[str, PoolState], current_ts: int
    ) -> Optional[ArbOpportunity]:
        """
        Run the full scan for one cycle.

        Args:
            pool_states: Cached pool snapshots keyed by pool id
            current_ts: Current Unix timestamp

        Returns:
            The accepted opportunity, or None; ``last_reject_reason`` tells
            why nothing was returned
        """
        candidate = await self.find_candidate(pool_states, current_ts)
        if candidate is None:
            return None

        opportunity = self.evaluator.evaluate(candidate)
        if opportunity is None:
            self.last_reject_reason = self.evaluator.last_reject_reason
        return opportunity

    def _record_read_failure(self, pool_id: str, operation: str) -> None:
        if self.metrics is not None:
            self.metrics.record_read_failure(pool_id, operation)

    def _reject(self, reason: RejectReason) -> None:
        self.last_reject_reason = reason
        return None
