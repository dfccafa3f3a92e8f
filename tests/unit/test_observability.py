from __future__ import annotations

import json
from pathlib import Path

from iterbatch.batch.executor import BatchReport
from iterbatch.errors import ActionFailure
from iterbatch.observability.logger import BatchRunLogger
from iterbatch.observability.metrics import get_metrics_registry, reset_metrics


def test_run_logger_writes_events_and_summary(tmp_path: Path) -> None:
    logger = BatchRunLogger(run_id="batch-test", iterable="numbers", base_dir=tmp_path)

    logger.log("batch.start", {"iterable": "numbers"})
    logger.log("item.finish", {"index": 1})
    logger.finalize({"processed": 1})

    run_dir = tmp_path / "batch-test"
    events = [
        json.loads(line)
        for line in (run_dir / "events.jsonl").read_text(encoding="utf-8").splitlines()
    ]
    assert [event["event"] for event in events] == ["batch.start", "item.finish"]
    assert all(event["run_id"] == "batch-test" for event in events)

    summary = json.loads((run_dir / "summary.json").read_text(encoding="utf-8"))
    assert summary["processed"] == 1
    assert summary["total_logs"] == 2
    assert summary["iterable"] == "numbers"


def test_run_logger_generates_run_id(tmp_path: Path) -> None:
    logger = BatchRunLogger(base_dir=tmp_path)

    assert logger.run_id.startswith("batch-")
    assert logger.run_dir.is_dir()


def test_metrics_registry_aggregates_reports() -> None:
    registry = get_metrics_registry()
    ok = BatchReport(iterable="a", template="t", started_at=1.0, ended_at=1.5, processed=2)
    failed = BatchReport(
        iterable="b",
        template="t",
        started_at=2.0,
        ended_at=2.5,
        processed=2,
        failures=[ActionFailure(1, RuntimeError("x"))],
        aborted=True,
    )

    registry.record(ok)
    registry.record(failed)

    metrics = registry.snapshot().as_dict()
    assert metrics["batches_total"] == 2
    assert metrics["batches_aborted"] == 1
    assert metrics["items_total"] == 4
    assert metrics["items_failed"] == 1
    assert metrics["item_failure_rate"] == 0.25
    assert metrics["avg_batch_duration_ms"] == 500.0


def test_reset_metrics_starts_fresh() -> None:
    get_metrics_registry().record(
        BatchReport(iterable="a", template="t", started_at=0.0, ended_at=0.0)
    )

    reset_metrics()

    assert get_metrics_registry().snapshot().batches_total == 0
