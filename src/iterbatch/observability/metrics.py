"""Lightweight in-process metrics aggregation for batch runs."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from iterbatch.batch.executor import BatchReport


@dataclass
class AggregatedMetrics:
    """Aggregated batch counters."""

    batches_total: int = 0
    batches_aborted: int = 0
    batches_cancelled: int = 0
    items_total: int = 0
    items_failed: int = 0
    duration_ms_total: float = 0.0

    def as_dict(self) -> dict[str, float | int]:
        failure_rate = (self.items_failed / self.items_total) if self.items_total else 0.0
        avg_duration = (self.duration_ms_total / self.batches_total) if self.batches_total else 0.0
        return {
            "batches_total": self.batches_total,
            "batches_aborted": self.batches_aborted,
            "batches_cancelled": self.batches_cancelled,
            "items_total": self.items_total,
            "items_failed": self.items_failed,
            "item_failure_rate": failure_rate,
            "duration_ms_total": self.duration_ms_total,
            "avg_batch_duration_ms": avg_duration,
        }


class MetricsRegistry:
    """Thread-safe accumulator for batch execution metrics."""

    def __init__(self) -> None:
        self._metrics = AggregatedMetrics()
        self._lock = threading.RLock()

    def record(self, report: "BatchReport") -> None:
        with self._lock:
            self._metrics.batches_total += 1
            if report.aborted:
                self._metrics.batches_aborted += 1
            if report.cancelled:
                self._metrics.batches_cancelled += 1
            self._metrics.items_total += report.processed
            self._metrics.items_failed += len(report.failures)
            self._metrics.duration_ms_total += max(
                0.0, (report.ended_at - report.started_at) * 1000.0
            )

    def snapshot(self) -> AggregatedMetrics:
        with self._lock:
            return AggregatedMetrics(**vars(self._metrics))


_GLOBAL_METRICS = MetricsRegistry()


def get_metrics_registry() -> MetricsRegistry:
    return _GLOBAL_METRICS


def reset_metrics() -> None:
    global _GLOBAL_METRICS
    _GLOBAL_METRICS = MetricsRegistry()


__all__ = ["AggregatedMetrics", "MetricsRegistry", "get_metrics_registry", "reset_metrics"]
