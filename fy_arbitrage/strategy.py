"""
FY arbitrage strategy: the per-block evaluation cycle.

SYNC -> SCAN -> (none: END) | EVALUATE -> (rejected: END) | EMIT -> END

Only the pool state cache and the last processed block survive between
cycles. Nothing is retried inside a cycle.
"""

import asyncio
import time
from typing import Dict, List, Mapping, Optional

from .config_loader import StrategyConfig
from .curve import DiscountCurve
from .economics import EconomicsEvaluator
from .exceptions import TransientReadError
from .interfaces import PoolConnector
from .metrics import StrategyMetrics
from .pricing import fetch_pool_state
from .scanner import OpportunityScanner
from .solver import TradeSizer
from .types import ExecutionInstruction, NewBlockEvent, PoolState, RejectReason
from .utils import get_logger

logger = get_logger(__name__)


class FYArbStrategy:
    """
    Monitors FY pools and emits an instruction when a pool's price diverges
    from the curve's fair value by more than the configured edge.

    Args:
        config: Strategy configuration
        curve: Reference discount curve
        connectors: Pool id -> connector, one per configured pool
        sizer: Optional trade sizer override
        metrics: Optional metrics collector
    """

    def __init__(
        self,
        config: StrategyConfig,
        curve: DiscountCurve,
        connectors: Mapping[str, PoolConnector],
        sizer: Optional[TradeSizer] = None,
        metrics: Optional[StrategyMetrics] = None,
    ):
        self.config = config
        self.curve = curve
        self.connectors = dict(connectors)
        self.metrics = metrics

        self.evaluator = EconomicsEvaluator(config)
        self.scanner = OpportunityScanner(
            config,
            curve,
            self.connectors,
            sizer=sizer,
            evaluator=self.evaluator,
            metrics=metrics,
        )

        self.pool_states: Dict[str, PoolState] = {}
        self.last_block = 0
        self.last_reject_reason: Optional[RejectReason] = None

    async def sync_state(self) -> int:
        """
        Refresh the pool state cache.

        A pool whose query fails keeps its previous (stale) entry, or stays
        absent if it was never loaded.

        Returns:
            Number of pools refreshed this call
        """
        pool_ids = [p for p in self.config.pool_ids if p in self.connectors]
        results = await asyncio.gather(
            *(fetch_pool_state(self.connectors[p]) for p in pool_ids),
            return_exceptions=True,
        )

        refreshed = 0
        for pool_id, result in zip(pool_ids, results):
            if isinstance(result, TransientReadError):
                logger.warning(f"Failed to load pool state for {pool_id}: {result}")
                if self.metrics is not None:
                    self.metrics.record_read_failure(pool_id, "get_state")
                continue
            if isinstance(result, BaseException):
                raise result

            self.pool_states[pool_id] = result
            refreshed += 1
            logger.debug(
                f"Loaded pool state {pool_id}: base={result.base_reserves} "
                f"fy={result.fy_reserves} fee={result.fee_bps}bps "
                f"maturity={result.maturity}"
            )

        logger.debug(
            f"State sync complete: {refreshed}/{len(pool_ids)} refreshed, "
            f"{len(self.pool_states)} cached"
        )
        return refreshed

    async def evaluate_cycle(
        self, block_number: int, timestamp: int
    ) -> Optional[ExecutionInstruction]:
        """
        Run one full cycle for a block.

        Args:
            block_number: Block that triggered the cycle
            timestamp: Block timestamp (Unix seconds)

        Returns:
            ExecutionInstruction to emit, or None
        """
        self.last_reject_reason = None

        if block_number <= self.last_block:
            logger.debug(
                f"Skipping block {block_number}: already processed {self.last_block}"
            )
            return self._finish(RejectReason.STALE_BLOCK)

        self.last_block = block_number
        started = time.perf_counter()

        try:
            await self.sync_state()

            opportunity = await self.scanner.find_best_opportunity(
                self.pool_states, timestamp
            )
            if opportunity is None:
                logger.debug(
                    f"Block {block_number}: no opportunity "
                    f"({self.scanner.last_reject_reason})"
                )
                return self._finish(self.scanner.last_reject_reason)

            instruction = self.evaluator.build_instruction(
                opportunity, block_number=block_number
            )
            if self.metrics is not None:
                self.metrics.record_instruction(
                    instruction.cheap_pool_id,
                    instruction.rich_pool_id,
                    instruction.expected_profit,
                )
            return instruction
        finally:
            if self.metrics is not None:
                self.metrics.record_cycle(time.perf_counter() - started)

    async def process_event(self, event: NewBlockEvent) -> List[ExecutionInstruction]:
        """Scheduler entry point: zero or one instruction per block event."""
        instruction = await self.evaluate_cycle(event.block_number, event.timestamp)
        return [instruction] if instruction is not None else []

    def _finish(self, reason: Optional[RejectReason]) -> None:
        self.last_reject_reason = reason
        if reason is not None and self.metrics is not None:
            self.metrics.record_rejection(reason)
        return None
