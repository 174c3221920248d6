"""
Pool, block feed and execution connectors.
"""

from .block_feed import StaticBlockFeed, Web3BlockFeed
from .execution import PaperExecutionSink, RouterExecutionSink
from .simulated import SimulatedPoolConnector
from .web3_pool import Web3PoolConnector

__all__ = [
    "Web3PoolConnector",
    "SimulatedPoolConnector",
    "Web3BlockFeed",
    "StaticBlockFeed",
    "PaperExecutionSink",
    "RouterExecutionSink",
]
