"""
Collaborator protocols consumed by the arbitrage core.

The core only talks to pools, block notifications and the execution side
through these protocols, so connectors can be swapped for simulated ones in
tests and paper runs.
"""

from typing import AsyncIterator, Awaitable, Callable, Protocol, Tuple, runtime_checkable

from .types import ExecutionInstruction, NewBlockEvent

# async (trade_size) -> base-per-FY price at 10^18 scale
PriceProbe = Callable[[int], Awaitable[int]]


@runtime_checkable
class PoolConnector(Protocol):
    """Read-only preview interface of a single pool.

    All methods are idempotent and may raise ``TransientReadError``.
    """

    pool_id: str

    async def preview_sell_base(self, base_in: int) -> int:
        """FY received for selling ``base_in`` base."""
        ...

    async def preview_sell_fy(self, fy_in: int) -> int:
        """Base received for selling ``fy_in`` FY."""
        ...

    async def preview_buy_fy(self, fy_out: int) -> int:
        """Base required to buy exactly ``fy_out`` FY."""
        ...

    async def preview_buy_base(self, base_out: int) -> int:
        """FY required to buy exactly ``base_out`` base."""
        ...

    async def get_state(self) -> Tuple[int, int, int]:
        """(base_reserves, fy_reserves, fee_bps)."""
        ...

    async def get_maturity(self) -> int:
        """FY maturity as a Unix timestamp."""
        ...


@runtime_checkable
class BlockFeed(Protocol):
    """Source of block notifications, monotonically increasing numbers."""

    def blocks(self) -> AsyncIterator[NewBlockEvent]:
        """Yield block notifications as they arrive."""
        ...


@runtime_checkable
class ExecutionSink(Protocol):
    """Fire-and-forget receiver of execution instructions."""

    async def submit(self, instruction: ExecutionInstruction) -> None:
        """Hand an instruction to the execution side."""
        ...
