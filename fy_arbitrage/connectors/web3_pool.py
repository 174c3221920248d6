"""
On-chain FY pool connector.

Wraps the pool's view functions behind the async ``PoolConnector``
interface. The synchronous web3 calls run in the default thread pool so they
do not block the event loop. Rate-limited calls are retried with
exponential backoff; every other failure surfaces as ``TransientReadError``.
"""

import asyncio
from typing import Any, Callable, Tuple

from web3 import Web3

from ..exceptions import TransientReadError
from ..utils import get_logger
from .abi import POOL_ABI


def is_rate_limit_error(error: Exception) -> bool:
    """Check for rate limit errors (common RPC provider patterns)."""
    error_msg = str(error)
    return (
        "429" in error_msg
        or "Too Many Requests" in error_msg
        or "-32005" in error_msg  # BSC/Ethereum rate limit code
        or "limit exceeded" in error_msg.lower()
    )


class Web3PoolConnector:
    """
    Read-only connector for a single FY pool contract.

    Args:
        web3: Web3 instance connected to the chain
        pool_address: Pool contract address
        max_retries: Attempts per call when rate limited
        backoff_base: Base delay in seconds for the exponential backoff
    """

    def __init__(
        self,
        web3: Web3,
        pool_address: str,
        max_retries: int = 3,
        backoff_base: float = 1.0,
    ):
        if not Web3.is_address(pool_address):
            raise ValueError(f"Invalid pool address: {pool_address}")

        self.web3 = web3
        self.pool_id = Web3.to_checksum_address(pool_address)
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.contract = web3.eth.contract(address=self.pool_id, abi=POOL_ABI)
        self.logger = get_logger(__name__, extra={"pool": self.pool_id})

    async def _call(self, operation: str, fn: Callable[[], Any]) -> Any:
        last_error = None

        for attempt in range(self.max_retries):
            try:
                loop = asyncio.get_event_loop()
                return await loop.run_in_executor(None, fn)
            except Exception as e:
                last_error = e

                if is_rate_limit_error(e) and attempt < self.max_retries - 1:
                    wait_time = self.backoff_base * (2**attempt)
                    self.logger.debug(
                        f"Rate limited on {operation}, retrying in {wait_time:.1f}s"
                    )
                    await asyncio.sleep(wait_time)
                    continue

                raise TransientReadError(
                    f"{operation} failed for pool {self.pool_id}: {e}",
                    pool_id=self.pool_id,
                    operation=operation,
                ) from e

        raise TransientReadError(
            f"{operation} failed for pool {self.pool_id} after "
            f"{self.max_retries} retries: {last_error}",
            pool_id=self.pool_id,
            operation=operation,
        ) from last_error

    async def preview_sell_base(self, base_in: int) -> int:
        fn = self.contract.functions.sellBasePreview(base_in).call
        return int(await self._call("sellBasePreview", fn))

    async def preview_sell_fy(self, fy_in: int) -> int:
        fn = self.contract.functions.sellFYTokenPreview(fy_in).call
        return int(await self._call("sellFYTokenPreview", fn))

    async def preview_buy_fy(self, fy_out: int) -> int:
        fn = self.contract.functions.buyFYTokenPreview(fy_out).call
        return int(await self._call("buyFYTokenPreview", fn))

    async def preview_buy_base(self, base_out: int) -> int:
        fn = self.contract.functions.buyBasePreview(base_out).call
        return int(await self._call("buyBasePreview", fn))

    async def get_state(self) -> Tuple[int, int, int]:
        base_reserves, fy_reserves, fee_bps = await self._call(
            "getCache", self.contract.functions.getCache().call
        )
        return int(base_reserves), int(fy_reserves), int(fee_bps)

    async def get_maturity(self) -> int:
        return int(await self._call("maturity", self.contract.functions.maturity().call))
