"""Per-run JSONL ledger for batch executions."""

from __future__ import annotations

import json
import os
import tempfile
import time
import uuid
from pathlib import Path
from typing import Any, Dict, Optional


class BatchRunLogger:
    """Records batch events to ``<base_dir>/<run_id>/events.jsonl``.

    ``finalize`` writes ``summary.json`` next to the event log.
    """

    def __init__(
        self,
        run_id: Optional[str] = None,
        iterable: Optional[str] = None,
        base_dir: Optional[Path] = None,
    ) -> None:
        self.run_id = run_id or f"batch-{uuid.uuid4().hex[:12]}"
        self.iterable = iterable
        self.base_dir = base_dir or Path.cwd() / ".iterbatch" / "runs"
        self.run_dir = self.base_dir / self.run_id
        self.run_dir.mkdir(parents=True, exist_ok=True)
        self.logs: list[dict[str, Any]] = []
        self.started_at = time.time()

    def _atomic_write(self, path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", delete=False, dir=path.parent, encoding="utf-8"
        ) as tmp:
            tmp.write(payload)
            tmp_path = Path(tmp.name)
        os.replace(tmp_path, path)

    def log(self, event: str, data: Dict[str, Any]) -> None:
        """Append an event to the run ledger."""
        entry = {
            "run_id": self.run_id,
            "event": event,
            "timestamp": time.time(),
            "data": data,
        }
        self.logs.append(entry)
        with open(self.run_dir / "events.jsonl", "a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")

    def finalize(self, summary: Dict[str, Any]) -> None:
        """Write summary.json for the run."""
        payload: dict[str, Any] = {
            "run_id": self.run_id,
            "iterable": self.iterable,
            "started_at": self.started_at,
            "ended_at": time.time(),
            "total_logs": len(self.logs),
            "run_dir": str(self.run_dir),
            **summary,
        }
        self._atomic_write(
            self.run_dir / "summary.json",
            json.dumps(payload, ensure_ascii=False, indent=2, default=str) + "\n",
        )


__all__ = ["BatchRunLogger"]
