"""
Exception hierarchy for the FY arbitrage system.

Only genuine failures are exceptions. A cycle that finds nothing to do is a
normal outcome and is reported as ``None`` plus a ``RejectReason``.
"""

from typing import Any, Dict, Optional


class FYArbitrageError(Exception):
    """Base exception for all FY arbitrage related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(FYArbitrageError):
    """Raised when the strategy configuration is malformed or incomplete."""

    pass


class ValidationError(FYArbitrageError):
    """Raised when validation of curve or pool data fails."""

    pass


class TransientReadError(FYArbitrageError):
    """Raised when a pool preview or state query fails.

    The pool it touches is excluded from the current cycle; the cycle itself
    carries on.
    """

    def __init__(
        self,
        message: str,
        pool_id: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.pool_id = pool_id
        self.operation = operation


class ExecutionError(FYArbitrageError):
    """Raised by execution sinks when an instruction cannot be submitted."""

    def __init__(
        self,
        message: str,
        cheap_pool: Optional[str] = None,
        rich_pool: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.cheap_pool = cheap_pool
        self.rich_pool = rich_pool
