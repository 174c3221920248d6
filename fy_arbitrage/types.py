"""
Core data types for FY arbitrage scanning.

All token amounts and prices are integers in on-chain smallest units; prices
are base-per-FY at 10^18 scale.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class PoolState:
    """
    Point-in-time snapshot of a pool, refreshed by the sync step.

    Attributes:
        pool_id: Pool identifier (checksummed address for on-chain pools)
        base_reserves: Base token reserves
        fy_reserves: FY token reserves
        fee_bps: Pool fee in basis points
        maturity: FY maturity as a Unix timestamp
    """

    pool_id: str
    base_reserves: int
    fy_reserves: int
    fee_bps: int
    maturity: int


@dataclass(frozen=True)
class TradeCandidate:
    """Raw cash flows of a sized cheap/rich trade, before slippage buffers."""

    cheap_pool: str
    rich_pool: str
    fy_amount: int
    base_cost: int  # base paid to buy fy_amount on the cheap pool
    base_proceeds: int  # base received selling fy_amount on the rich pool
    target_price: int
    cheap_price: int
    rich_price: int


@dataclass(frozen=True)
class ArbOpportunity:
    """An evaluated opportunity. Built and consumed within one cycle."""

    cheap_pool: str
    rich_pool: str
    fy_amount: int
    max_base_in: int
    min_base_out: int
    expected_profit: int
    target_price: int
    cheap_price: int
    rich_price: int

    def is_profitable(self, gas_cost: int) -> bool:
        """Check if the opportunity is still profitable after gas costs."""
        return self.expected_profit > gas_cost

    def net_profit(self, gas_cost: int) -> int:
        """Net profit after gas costs (may be negative)."""
        return self.expected_profit - gas_cost


@dataclass(frozen=True)
class ExecutionInstruction:
    """
    What the execution collaborator needs to submit a trade.

    Carries no gas mechanics beyond the bid hint; broadcast, retries and fee
    bumps belong to the sink.
    """

    cheap_pool_id: str
    rich_pool_id: str
    fy_amount: int
    max_base_in: int
    min_base_out: int
    recipient: Optional[str]
    gas_bid_hint: int
    block_number: int = 0
    expected_profit: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging and JSON serialization."""
        return {
            "cheap_pool_id": self.cheap_pool_id,
            "rich_pool_id": self.rich_pool_id,
            "fy_amount": str(self.fy_amount),
            "max_base_in": str(self.max_base_in),
            "min_base_out": str(self.min_base_out),
            "recipient": self.recipient,
            "gas_bid_hint": str(self.gas_bid_hint),
            "block_number": self.block_number,
            "expected_profit": str(self.expected_profit),
        }


@dataclass(frozen=True)
class NewBlockEvent:
    """Block notification delivered by the block feed."""

    block_number: int
    timestamp: int
    base_fee: Optional[int] = None


class RejectReason(Enum):
    """Why a cycle ended without an instruction."""

    INSUFFICIENT_POOLS = "insufficient_pools"
    NO_SPREAD = "no_spread"
    BELOW_EDGE = "below_edge"
    SOLVER_NO_SIZE = "solver_no_size"
    QUOTE_FAILED = "quote_failed"
    UNPROFITABLE = "unprofitable"
    POSITION_LIMIT = "position_limit"
    GAS_EXCEEDS_PROFIT = "gas_exceeds_profit"
    STALE_BLOCK = "stale_block"
