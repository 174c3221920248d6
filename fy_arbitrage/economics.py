"""
Economics of a sized trade: slippage buffers, position limits, profit and the
gas-bid hint handed to the execution side.
"""

import logging
from typing import Optional

from .config_loader import StrategyConfig
from .pricing import apply_slippage, calculate_profit
from .types import ArbOpportunity, ExecutionInstruction, RejectReason, TradeCandidate
from .utils import format_wad

logger = logging.getLogger(__name__)


class EconomicsEvaluator:
    """Turns a raw trade candidate into an accepted opportunity or a rejection."""

    def __init__(self, config: StrategyConfig):
        self.config = config
        self.last_reject_reason: Optional[RejectReason] = None

    def evaluate(self, candidate: TradeCandidate) -> Optional[ArbOpportunity]:
        """
        Apply slippage buffers and limits to a candidate.

        The cost bound is inflated and the proceeds bound deflated by
        ``slippage_bps``. Expected profit is the spread between the two
        buffered bounds and must be strictly positive (and exceed the gas
        estimate when one is configured).

        Returns:
            ArbOpportunity, or None when the candidate is rejected
        """
        self.last_reject_reason = None

        max_base_in = apply_slippage(
            candidate.base_cost, self.config.slippage_bps, is_max_in=True
        )
        min_base_out = apply_slippage(
            candidate.base_proceeds, self.config.slippage_bps, is_max_in=False
        )

        if max_base_in > self.config.max_base_amount:
            logger.warning(
                f"Trade exceeds max base amount: max_base_in={max_base_in} "
                f"limit={self.config.max_base_amount}"
            )
            return self._reject(RejectReason.POSITION_LIMIT)

        expected_profit, net_profit = calculate_profit(
            max_base_in, min_base_out, self.config.gas_cost_estimate
        )

        if self.config.gas_cost_estimate > 0 and net_profit <= 0:
            logger.debug(
                f"Expected profit {expected_profit} does not cover gas "
                f"{self.config.gas_cost_estimate}"
            )
            return self._reject(RejectReason.GAS_EXCEEDS_PROFIT)

        if expected_profit <= 0:
            logger.debug(
                f"Slippage buffers consume the spread: max_base_in={max_base_in} "
                f"min_base_out={min_base_out}"
            )
            return self._reject(RejectReason.UNPROFITABLE)

        return ArbOpportunity(
            cheap_pool=candidate.cheap_pool,
            rich_pool=candidate.rich_pool,
            fy_amount=candidate.fy_amount,
            max_base_in=max_base_in,
            min_base_out=min_base_out,
            expected_profit=expected_profit,
            target_price=candidate.target_price,
            cheap_price=candidate.cheap_price,
            rich_price=candidate.rich_price,
        )

    def gas_bid_hint(self, opportunity: ArbOpportunity) -> int:
        """Share of expected profit offered as gas bid."""
        return opportunity.expected_profit * self.config.bid_percentage // 100

    def build_instruction(
        self,
        opportunity: ArbOpportunity,
        block_number: int = 0,
        recipient: Optional[str] = None,
    ) -> ExecutionInstruction:
        """Package an accepted opportunity for the execution sink."""
        instruction = ExecutionInstruction(
            cheap_pool_id=opportunity.cheap_pool,
            rich_pool_id=opportunity.rich_pool,
            fy_amount=opportunity.fy_amount,
            max_base_in=opportunity.max_base_in,
            min_base_out=opportunity.min_base_out,
            recipient=recipient or self.config.recipient,
            gas_bid_hint=self.gas_bid_hint(opportunity),
            block_number=block_number,
            expected_profit=opportunity.expected_profit,
        )

        logger.info(
            f"Arbitrage instruction: buy {format_wad(opportunity.fy_amount)} FY on "
            f"{opportunity.cheap_pool}, sell on {opportunity.rich_pool} | "
            f"expected profit {format_wad(opportunity.expected_profit)} | "
            f"bid {format_wad(instruction.gas_bid_hint)}"
        )
        return instruction

    def _reject(self, reason: RejectReason) -> None:
        self.last_reject_reason = reason
        return None
