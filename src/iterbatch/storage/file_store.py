"""JSON file persistence for the definition store."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Iterator

try:
    import fcntl
except ImportError:  # pragma: no cover - non-POSIX platforms
    fcntl = None  # type: ignore[assignment]

from iterbatch.storage.definition_store import DefinitionStore

logger = logging.getLogger(__name__)

_GLOBAL_LOCKS: dict[str, threading.RLock] = {}
_GLOBAL_LOCKS_GUARD = threading.RLock()


def _shared_lock_for(path: Path) -> threading.RLock:
    """Return a process-wide lock for the given definitions file."""
    normalized = str(path.resolve())
    with _GLOBAL_LOCKS_GUARD:
        lock = _GLOBAL_LOCKS.get(normalized)
        if lock is None:
            lock = threading.RLock()
            _GLOBAL_LOCKS[normalized] = lock
        return lock


@contextlib.contextmanager
def _acquire_file_lock(path: Path) -> Iterator[None]:
    """Hold an exclusive flock on ``path`` where the platform has one.

    Without fcntl only the in-process lock from _shared_lock_for applies.
    """
    if fcntl is None:  # pragma: no cover - non-POSIX platforms
        yield
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a+b") as lock_handle:
        fcntl.flock(lock_handle.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(lock_handle.fileno(), fcntl.LOCK_UN)


class DefinitionFileStore:
    """Filesystem-backed persistence for a DefinitionStore."""

    def __init__(self, path: Path) -> None:
        self._path = path.resolve()
        self._lock = _shared_lock_for(self._path)
        self._lock_path = self._path.with_name(f".{self._path.name}.lock")

    @property
    def path(self) -> Path:
        return self._path

    @contextlib.contextmanager
    def _state_lock(self) -> Iterator[None]:
        with self._lock:
            with _acquire_file_lock(self._lock_path):
                yield

    def load(self, store: DefinitionStore) -> int:
        """Load persisted definitions into ``store``; return how many were loaded."""
        with self._state_lock():
            if not self._path.exists():
                store.deserialize(None)
                return 0
            try:
                raw = json.loads(self._path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                logger.warning("Ignoring unreadable definitions file %s: %s", self._path, exc)
                store.deserialize(None)
                return 0
        store.deserialize(raw if isinstance(raw, dict) else None)
        return len(store)

    def save(self, store: DefinitionStore) -> None:
        """Atomically write the serialized store to disk."""
        payload = json.dumps(store.serialize(), ensure_ascii=False, indent=2) + "\n"
        with self._state_lock():
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", delete=False, dir=self._path.parent, encoding="utf-8"
            ) as tmp:
                tmp.write(payload)
                tmp_path = Path(tmp.name)
            os.replace(tmp_path, self._path)


__all__ = ["DefinitionFileStore"]
