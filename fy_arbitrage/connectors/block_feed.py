"""
Block notifications by polling the node.
"""

import asyncio
import logging
from typing import AsyncIterator, Iterable, Optional

from web3 import Web3

from ..types import NewBlockEvent

logger = logging.getLogger(__name__)


class Web3BlockFeed:
    """
    Polls ``eth.block_number`` and yields the head block whenever it moves.

    Skipped intermediate blocks are not replayed; the strategy only cares
    about the latest state.

    Args:
        web3: Web3 instance connected to the chain
        poll_interval_sec: Delay between polls
        max_blocks: Stop after this many events (None runs forever)
    """

    def __init__(
        self,
        web3: Web3,
        poll_interval_sec: float = 2.0,
        max_blocks: Optional[int] = None,
    ):
        self.web3 = web3
        self.poll_interval_sec = poll_interval_sec
        self.max_blocks = max_blocks
        self.last_block = 0

    async def _fetch_head(self) -> NewBlockEvent:
        loop = asyncio.get_event_loop()
        block = await loop.run_in_executor(None, self.web3.eth.get_block, "latest")
        return NewBlockEvent(
            block_number=int(block["number"]),
            timestamp=int(block["timestamp"]),
            base_fee=block.get("baseFeePerGas"),
        )

    async def blocks(self) -> AsyncIterator[NewBlockEvent]:
        emitted = 0

        while self.max_blocks is None or emitted < self.max_blocks:
            try:
                loop = asyncio.get_event_loop()
                head = await loop.run_in_executor(
                    None, lambda: self.web3.eth.block_number
                )
                if head > self.last_block:
                    event = await self._fetch_head()
                    if event.block_number > self.last_block:
                        self.last_block = event.block_number
                        emitted += 1
                        yield event
                        continue
            except Exception as e:
                logger.warning(f"Block poll failed: {e}")

            await asyncio.sleep(self.poll_interval_sec)


class StaticBlockFeed:
    """Replays a fixed sequence of block events; used for paper runs and tests."""

    def __init__(self, events: Iterable[NewBlockEvent], interval_sec: float = 0.0):
        self.events = list(events)
        self.interval_sec = interval_sec

    async def blocks(self) -> AsyncIterator[NewBlockEvent]:
        for event in self.events:
            yield event
            if self.interval_sec:
                await asyncio.sleep(self.interval_sec)
