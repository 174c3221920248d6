"""
FY arbitrage CLI and process wiring.

Builds connectors, strategy, block feed and execution sink from the runtime
configuration, then feeds every block into the strategy and forwards
emitted instructions to the sink.

Usage:
    python3 run_fy_arb.py --config configs/fy_arb.example.yaml --paper
    python3 run_fy_arb.py --config configs/fy_arb.example.yaml --paper --once
"""

import argparse
import asyncio
import os
import sys
import time
from dataclasses import replace
from typing import List, Optional, Tuple

from web3 import Web3

from . import logging_config
from .config_loader import RuntimeConfig, load_runtime_config
from .connectors import (
    PaperExecutionSink,
    RouterExecutionSink,
    Web3BlockFeed,
    Web3PoolConnector,
)
from .exceptions import ConfigurationError
from .interfaces import BlockFeed, ExecutionSink
from .metrics import StrategyMetrics, start_metrics_server
from .strategy import FYArbStrategy
from .utils import format_duration, get_logger

logger = get_logger(__name__)


async def run_strategy(
    strategy: FYArbStrategy,
    feed: BlockFeed,
    sink: ExecutionSink,
    max_blocks: Optional[int] = None,
) -> int:
    """
    Drive the strategy from a block feed.

    A cycle that blows up with an unexpected error is logged and the loop
    moves on to the next block.

    Args:
        strategy: Strategy to evaluate on every block
        feed: Block notifications
        sink: Receives emitted instructions
        max_blocks: Stop after this many blocks (None runs until the feed ends)

    Returns:
        Number of instructions submitted
    """
    submitted = 0
    processed = 0
    started = time.time()

    async for event in feed.blocks():
        try:
            instructions = await strategy.process_event(event)
        except Exception as e:
            logger.error(f"Cycle for block {event.block_number} failed: {e}", exc_info=True)
            instructions = []

        for instruction in instructions:
            await sink.submit(instruction)
            submitted += 1

        processed += 1
        if max_blocks is not None and processed >= max_blocks:
            break

    logger.info(
        f"Processed {processed} block(s), submitted {submitted} instruction(s) "
        f"in {format_duration(time.time() - started)}"
    )
    return submitted


def build_components(
    runtime: RuntimeConfig,
    paper: bool = False,
    metrics: Optional[StrategyMetrics] = None,
    max_blocks: Optional[int] = None,
) -> Tuple[FYArbStrategy, BlockFeed, ExecutionSink]:
    """
    Wire web3 connectors, strategy, feed and sink.

    Raises:
        ConfigurationError: If the RPC endpoint or signing key is missing
        ConnectionError: If the node cannot be reached
    """
    network = runtime.network
    if not network.rpc_url:
        raise ConfigurationError("No RPC URL configured (set RPC_URL or network.rpc_url)")

    web3 = Web3(
        Web3.HTTPProvider(
            network.rpc_url, request_kwargs={"timeout": network.request_timeout_sec}
        )
    )
    if not web3.is_connected():
        raise ConnectionError(f"Failed to connect to RPC at {network.rpc_url}")

    connectors = {
        pool_id: Web3PoolConnector(web3, pool_id, max_retries=network.max_retries)
        for pool_id in runtime.strategy.pool_ids
    }

    strategy = FYArbStrategy(
        runtime.strategy, runtime.curve, connectors, metrics=metrics
    )
    feed = Web3BlockFeed(
        web3, poll_interval_sec=network.poll_interval_sec, max_blocks=max_blocks
    )

    if paper:
        sink = PaperExecutionSink()
    else:
        private_key = os.getenv(network.private_key_env)
        if not private_key:
            raise ConfigurationError(
                f"Private key environment variable {network.private_key_env} not set "
                f"(use --paper to run without one)"
            )
        sink = RouterExecutionSink(web3, runtime.strategy.router_id, private_key)

    return strategy, feed, sink


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="FY token cross-pool arbitrage strategy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Paper run against live pools
  python3 run_fy_arb.py --config configs/fy_arb.example.yaml --paper

  # Evaluate a single block and exit
  python3 run_fy_arb.py --config configs/fy_arb.example.yaml --paper --once

  # Live execution with metrics on :9100
  python3 run_fy_arb.py --config configs/fy_arb.yaml --metrics-port 9100
        """,
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to config YAML file (default: environment variables only)",
    )
    parser.add_argument(
        "--rpc-url",
        default=None,
        help="JSON-RPC endpoint (overrides config and RPC_URL)",
    )
    parser.add_argument(
        "--paper",
        action="store_true",
        help="Log instructions instead of submitting transactions",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Evaluate a single block and exit",
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Expose Prometheus metrics on this port",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)
    logging_config.setup_from_name(args.log_level)

    try:
        runtime = load_runtime_config(args.config)
    except ConfigurationError as e:
        logger.error(f"Config error: {e}")
        return 1

    if args.rpc_url:
        runtime = replace(runtime, network=replace(runtime.network, rpc_url=args.rpc_url))

    metrics = None
    if args.metrics_port:
        metrics = StrategyMetrics()
        start_metrics_server(args.metrics_port)

    try:
        strategy, feed, sink = build_components(
            runtime,
            paper=args.paper,
            metrics=metrics,
            max_blocks=1 if args.once else None,
        )
    except (ConfigurationError, ConnectionError, ValueError) as e:
        logger.error(f"Initialization failed: {e}")
        return 1

    mode = "PAPER" if args.paper else "LIVE"
    logger.info(
        f"Starting FY arbitrage ({mode}) on {len(runtime.strategy.pool_ids)} pools, "
        f"edge {runtime.strategy.edge_bps} bps, slippage {runtime.strategy.slippage_bps} bps"
    )

    try:
        asyncio.run(run_strategy(strategy, feed, sink))
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        return 0

    return 0


if __name__ == "__main__":
    sys.exit(main())
