"""
Execution sinks.

``PaperExecutionSink`` only logs. ``RouterExecutionSink`` encodes the
router's atomic buy-then-sell call, prices gas from the instruction's bid
hint, signs locally and broadcasts. Submission failures are logged and
never propagate back into the strategy.
"""

import asyncio
import logging
from typing import List, Optional

from eth_account import Account
from web3 import Web3

from ..exceptions import ExecutionError
from ..types import ExecutionInstruction
from ..utils import format_wad
from .abi import ROUTER_ABI

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 500_000

# Estimated gas is padded to this percentage
GAS_LIMIT_BUFFER_PCT = 120


class PaperExecutionSink:
    """Records instructions without touching the chain."""

    def __init__(self):
        self.submitted: List[ExecutionInstruction] = []

    async def submit(self, instruction: ExecutionInstruction) -> None:
        self.submitted.append(instruction)
        logger.info(
            f"[PAPER] block {instruction.block_number}: buy "
            f"{format_wad(instruction.fy_amount)} FY on {instruction.cheap_pool_id} "
            f"(max in {format_wad(instruction.max_base_in)}), sell on "
            f"{instruction.rich_pool_id} (min out {format_wad(instruction.min_base_out)})"
        )


class RouterExecutionSink:
    """
    Submits instructions to the arbitrage router contract.

    Args:
        web3: Web3 instance connected to the chain
        router_address: Router contract address
        private_key: Key of the sending account
    """

    def __init__(self, web3: Web3, router_address: str, private_key: str):
        if not Web3.is_address(router_address):
            raise ValueError(f"Invalid router address: {router_address}")

        self.web3 = web3
        self.router_address = Web3.to_checksum_address(router_address)
        self.router = web3.eth.contract(address=self.router_address, abi=ROUTER_ABI)
        self.account = Account.from_key(private_key)
        self.tx_hashes: List[str] = []
        self.failures: List[ExecutionError] = []

        logger.info(f"Router sink ready: {self.router_address} from {self.account.address}")

    def build_call(self, instruction: ExecutionInstruction):
        """Contract function call for an instruction."""
        recipient = instruction.recipient or self.account.address
        return self.router.functions.arbBuyFYThenSellFY(
            Web3.to_checksum_address(instruction.cheap_pool_id),
            Web3.to_checksum_address(instruction.rich_pool_id),
            instruction.fy_amount,
            instruction.max_base_in,
            instruction.min_base_out,
            Web3.to_checksum_address(recipient),
        )

    def estimate_gas_limit(self, call) -> int:
        """Estimated gas plus buffer, or the fixed fallback if estimation fails."""
        try:
            estimate = call.estimate_gas({"from": self.account.address})
            return int(estimate) * GAS_LIMIT_BUFFER_PCT // 100
        except Exception as e:
            logger.warning(f"Gas estimation failed, using {DEFAULT_GAS_LIMIT}: {e}")
            return DEFAULT_GAS_LIMIT

    def gas_price_for(self, instruction: ExecutionInstruction, gas_limit: int) -> int:
        """Spread the bid hint over the gas limit; node price when no bid."""
        if instruction.gas_bid_hint > 0 and gas_limit > 0:
            bid_price = instruction.gas_bid_hint // gas_limit
            if bid_price > 0:
                return bid_price
        return int(self.web3.eth.gas_price)

    def _send(self, instruction: ExecutionInstruction) -> str:
        call = self.build_call(instruction)
        gas_limit = self.estimate_gas_limit(call)
        gas_price = self.gas_price_for(instruction, gas_limit)

        tx = call.build_transaction(
            {
                "from": self.account.address,
                "nonce": self.web3.eth.get_transaction_count(self.account.address),
                "gas": gas_limit,
                "gasPrice": gas_price,
                "chainId": self.web3.eth.chain_id,
            }
        )

        signed_tx = self.account.sign_transaction(tx)
        tx_hash = self.web3.eth.send_raw_transaction(signed_tx.raw_transaction)
        return self.web3.to_hex(tx_hash)

    async def submit(self, instruction: ExecutionInstruction) -> Optional[str]:
        loop = asyncio.get_event_loop()
        try:
            tx_hash = await loop.run_in_executor(None, self._send, instruction)
        except Exception as e:
            error = ExecutionError(
                f"Router submission failed: {e}",
                cheap_pool=instruction.cheap_pool_id,
                rich_pool=instruction.rich_pool_id,
                details=instruction.to_dict(),
            )
            logger.error(f"{error} | {error.details}")
            self.failures.append(error)
            return None

        self.tx_hashes.append(tx_hash)
        logger.info(
            f"Submitted arbitrage tx {tx_hash} for block {instruction.block_number}"
        )
        return tx_hash
