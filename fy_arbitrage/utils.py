"""
Common utilities for the FY arbitrage system.

Logging helper, duration and fixed-point formatting, and basis point
validation shared by the core and the connectors.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Union

# 10^18 fixed-point scale used for prices and token amounts
WAD = 10**18

# Largest value representable in an on-chain uint128
U128_MAX = 2**128 - 1

BPS_DENOMINATOR = 10_000


def format_duration(seconds: float) -> str:
    """Format duration in seconds to human-readable string."""
    if seconds < 60:
        return f"{seconds:.2f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.1f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.1f}h"


# Fixed-point utilities
def from_wad(amount: int, decimals: int = 18) -> Decimal:
    """Convert an integer amount in smallest units to a human Decimal."""
    return Decimal(amount) / (Decimal(10) ** decimals)


def format_wad(amount: int, places: int = 6) -> str:
    """Format a 10^18-scaled integer for log output."""
    return f"{from_wad(amount):,.{places}f}"


# Validation utilities
def is_valid_percentage(value: Any, allow_zero: bool = True) -> bool:
    """Check if value is a valid percentage (0-100)."""
    try:
        num = float(value)
        return (0 <= num <= 100) if allow_zero else (0 < num <= 100)
    except (ValueError, TypeError):
        return False


def is_valid_basis_points(value: Any) -> bool:
    """Check if value is valid basis points (0-10000)."""
    try:
        return 0 <= float(value) <= BPS_DENOMINATOR
    except (ValueError, TypeError):
        return False


# Logging utilities
def get_logger(
    name: str,
    level: Optional[Union[str, int]] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Union[logging.Logger, logging.LoggerAdapter]:
    """
    Get a logger with optional fixed context fields.

    Handlers are left to ``logging_config.setup()``; this only sets the level
    and, when ``extra`` is given, wraps the logger so every record carries
    those fields as ``extra_<key>`` attributes.

    Args:
        name: Logger name (typically __name__)
        level: Logging level; inherited from the parent when None
        extra: Additional context fields to attach to all log records

    Returns:
        Logger, or a LoggerAdapter when ``extra`` is given
    """
    logger = logging.getLogger(name)

    if level is not None:
        logger.setLevel(level)

    if extra:
        return logging.LoggerAdapter(
            logger, {"extra_" + k: v for k, v in extra.items()}
        )

    return logger
