"""
In-memory FY pool for paper runs and tests.

A constant-product pool with the fee taken on the input side, evaluated in
integer smallest units the way on-chain previews are.
"""

from typing import Tuple

from ..exceptions import TransientReadError
from ..utils import BPS_DENOMINATOR


def swap_out(amount_in: int, reserve_in: int, reserve_out: int, fee_bps: int) -> int:
    """
    Output amount for an exact-input swap.

    Formula (with fee embedded):
        amountInWithFee = amountIn * (10000 - fee_bps)
        amountOut = amountInWithFee * reserveOut / (reserveIn * 10000 + amountInWithFee)
    """
    if amount_in <= 0:
        return 0
    if reserve_in <= 0 or reserve_out <= 0:
        raise ValueError(f"Reserves must be positive: in={reserve_in}, out={reserve_out}")

    amount_in_with_fee = amount_in * (BPS_DENOMINATOR - fee_bps)
    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in * BPS_DENOMINATOR + amount_in_with_fee
    return numerator // denominator


def swap_in(amount_out: int, reserve_in: int, reserve_out: int, fee_bps: int) -> int:
    """Input amount required for an exact-output swap, rounded up."""
    if amount_out <= 0:
        return 0
    if amount_out >= reserve_out:
        raise ValueError(
            f"Insufficient liquidity: want {amount_out}, reserve {reserve_out}"
        )

    numerator = reserve_in * amount_out * BPS_DENOMINATOR
    denominator = (reserve_out - amount_out) * (BPS_DENOMINATOR - fee_bps)
    return numerator // denominator + 1


class SimulatedPoolConnector:
    """
    PoolConnector backed by local reserves.

    Set ``fail`` to make every call raise ``TransientReadError``, which is
    how an unreachable pool looks to the core.
    """

    def __init__(
        self,
        pool_id: str,
        base_reserves: int,
        fy_reserves: int,
        fee_bps: int = 0,
        maturity: int = 0,
    ):
        self.pool_id = pool_id
        self.base_reserves = base_reserves
        self.fy_reserves = fy_reserves
        self.fee_bps = fee_bps
        self.maturity = maturity
        self.fail = False
        self.calls = 0

    def _check(self, operation: str) -> None:
        self.calls += 1
        if self.fail:
            raise TransientReadError(
                f"Simulated {operation} failure for pool {self.pool_id}",
                pool_id=self.pool_id,
                operation=operation,
            )

    def _quote(self, operation: str, fn, *args) -> int:
        self._check(operation)
        try:
            return fn(*args)
        except ValueError as e:
            raise TransientReadError(
                str(e), pool_id=self.pool_id, operation=operation
            ) from e

    async def preview_sell_base(self, base_in: int) -> int:
        return self._quote(
            "sellBasePreview", swap_out,
            base_in, self.base_reserves, self.fy_reserves, self.fee_bps,
        )

    async def preview_sell_fy(self, fy_in: int) -> int:
        return self._quote(
            "sellFYTokenPreview", swap_out,
            fy_in, self.fy_reserves, self.base_reserves, self.fee_bps,
        )

    async def preview_buy_fy(self, fy_out: int) -> int:
        return self._quote(
            "buyFYTokenPreview", swap_in,
            fy_out, self.base_reserves, self.fy_reserves, self.fee_bps,
        )

    async def preview_buy_base(self, base_out: int) -> int:
        return self._quote(
            "buyBasePreview", swap_in,
            base_out, self.fy_reserves, self.base_reserves, self.fee_bps,
        )

    async def get_state(self) -> Tuple[int, int, int]:
        self._check("getCache")
        return self.base_reserves, self.fy_reserves, self.fee_bps

    async def get_maturity(self) -> int:
        self._check("maturity")
        return self.maturity

    def set_reserves(self, base_reserves: int, fy_reserves: int) -> None:
        """Move the pool, e.g. to simulate another trader between blocks."""
        self.base_reserves = base_reserves
        self.fy_reserves = fy_reserves

    def __repr__(self) -> str:
        return (
            f"SimulatedPoolConnector({self.pool_id}, base={self.base_reserves}, "
            f"fy={self.fy_reserves}, fee={self.fee_bps}bps)"
        )
