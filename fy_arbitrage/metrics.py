"""
Prometheus metrics for the FY arbitrage strategy.

Counts cycles, rejections by reason, emitted instructions and pool read
failures. Uses an injectable registry so tests can inspect output in
isolation.
"""

import logging
from typing import Optional

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    start_http_server,
)

from .types import RejectReason

logger = logging.getLogger(__name__)


class StrategyMetrics:
    """Prometheus-compatible metrics for evaluation cycles."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or REGISTRY
        self._initialize_metrics()

    def _initialize_metrics(self):
        self.cycles_total = Counter(
            "fy_arbitrage_cycles_total",
            "Total number of evaluation cycles run",
            registry=self.registry,
        )

        self.rejections_total = Counter(
            "fy_arbitrage_rejections_total",
            "Cycles that ended without an instruction, by reason",
            ["reason"],
            registry=self.registry,
        )

        self.instructions_total = Counter(
            "fy_arbitrage_instructions_total",
            "Execution instructions emitted",
            ["cheap_pool", "rich_pool"],
            registry=self.registry,
        )

        self.pool_read_failures_total = Counter(
            "fy_arbitrage_pool_read_failures_total",
            "Pool preview or state queries that failed",
            ["pool", "operation"],
            registry=self.registry,
        )

        self.cycle_duration_seconds = Histogram(
            "fy_arbitrage_cycle_duration_seconds",
            "Wall time of a full SYNC/SCAN/EVALUATE cycle",
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
            registry=self.registry,
        )

        self.expected_profit_base = Histogram(
            "fy_arbitrage_expected_profit_base",
            "Expected profit of emitted instructions in whole base tokens",
            buckets=[0.1, 1, 10, 100, 1000, 10000],
            registry=self.registry,
        )

    def record_cycle(self, duration_seconds: float) -> None:
        self.cycles_total.inc()
        self.cycle_duration_seconds.observe(duration_seconds)

    def record_rejection(self, reason: RejectReason) -> None:
        self.rejections_total.labels(reason=reason.value).inc()

    def record_instruction(
        self, cheap_pool: str, rich_pool: str, expected_profit: int
    ) -> None:
        self.instructions_total.labels(cheap_pool=cheap_pool, rich_pool=rich_pool).inc()
        self.expected_profit_base.observe(expected_profit / 10**18)

    def record_read_failure(self, pool: str, operation: str) -> None:
        self.pool_read_failures_total.labels(pool=pool, operation=operation).inc()


def start_metrics_server(port: int, registry: Optional[CollectorRegistry] = None):
    """Expose metrics over HTTP on ``port``."""
    start_http_server(port, registry=registry or REGISTRY)
    logger.info(f"Metrics server listening on :{port}/metrics")
