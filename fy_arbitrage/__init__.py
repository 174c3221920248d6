"""
FY Token Arbitrage.

Monitors fixed-yield token pools, prices each against a reference discount
curve and emits cross-pool arbitrage instructions when a pool trades rich
to fair value by more than the configured edge.
"""

PROJECT_NAME = "fy-arbitrage"
VERSION = "0.1.0"

from fy_arbitrage.config_loader import RuntimeConfig, StrategyConfig, load_runtime_config
from fy_arbitrage.curve import CurveKnot, DayCount, DiscountCurve
from fy_arbitrage.exceptions import (
    ConfigurationError,
    ExecutionError,
    FYArbitrageError,
    TransientReadError,
    ValidationError,
)
from fy_arbitrage.strategy import FYArbStrategy
from fy_arbitrage.types import (
    ArbOpportunity,
    ExecutionInstruction,
    NewBlockEvent,
    PoolState,
    RejectReason,
)

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "FYArbStrategy",
    "StrategyConfig",
    "RuntimeConfig",
    "load_runtime_config",
    "DiscountCurve",
    "CurveKnot",
    "DayCount",
    "PoolState",
    "ArbOpportunity",
    "ExecutionInstruction",
    "NewBlockEvent",
    "RejectReason",
    "FYArbitrageError",
    "ConfigurationError",
    "ValidationError",
    "TransientReadError",
    "ExecutionError",
]
