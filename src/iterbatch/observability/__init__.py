"""Run ledgers and in-process metrics for batch executions."""

from iterbatch.observability.logger import BatchRunLogger
from iterbatch.observability.metrics import (
    AggregatedMetrics,
    MetricsRegistry,
    get_metrics_registry,
    reset_metrics,
)

__all__ = [
    "AggregatedMetrics",
    "BatchRunLogger",
    "MetricsRegistry",
    "get_metrics_registry",
    "reset_metrics",
]
