"""In-memory store of named iterable definitions."""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping, MutableMapping, Optional

from pydantic import ValidationError

from iterbatch.core.types import StoredIterable, utcnow
from iterbatch.errors import UndefinedIterable, UnknownProviderType
from iterbatch.providers.base import ProviderRegistry

logger = logging.getLogger(__name__)


class DefinitionStore:
    """Sole writer of StoredIterable records, keyed by name."""

    def __init__(self, registry: ProviderRegistry) -> None:
        self._registry = registry
        self._iterables: MutableMapping[str, StoredIterable] = {}
        self._lock = threading.RLock()

    def define(
        self,
        name: str,
        type_name: str,
        spec: Mapping[str, Any],
        description: str | None = None,
    ) -> StoredIterable:
        """Create or replace the definition stored under ``name``.

        A redefinition replaces type, spec and description but keeps the
        original ``created_at``.
        """
        if not self._registry.has(type_name):
            raise UnknownProviderType(type_name)

        now = utcnow()
        with self._lock:
            existing = self._iterables.get(name)
            record = StoredIterable(
                name=name,
                type=type_name,
                spec=dict(spec),
                description=description,
                created_at=existing.created_at if existing is not None else now,
                updated_at=now,
            )
            self._iterables[name] = record
        logger.debug("Defined iterable @%s (%s)", name, type_name)
        return record

    def get(self, name: str) -> Optional[StoredIterable]:
        with self._lock:
            return self._iterables.get(name)

    def require(self, name: str) -> StoredIterable:
        """Return the definition for ``name`` or raise UndefinedIterable."""
        record = self.get(name)
        if record is None:
            raise UndefinedIterable(name)
        return record

    def list(self) -> list[StoredIterable]:
        with self._lock:
            return list(self._iterables.values())

    def delete(self, name: str) -> bool:
        """Remove ``name``; return whether a record existed."""
        with self._lock:
            return self._iterables.pop(name, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._iterables)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._iterables

    def reset(self) -> None:
        """Definitions persist across session resets."""

    def serialize(self) -> dict[str, Any]:
        with self._lock:
            return {
                "iterables": [
                    record.model_dump(mode="json") for record in self._iterables.values()
                ]
            }

    def deserialize(self, data: Mapping[str, Any] | None) -> None:
        """Replace the store contents with serialized records.

        Provider types are not checked here; records whose provider has gone
        away surface later as DanglingProviderReference.
        """
        raw_items = (data or {}).get("iterables") or []
        loaded: dict[str, StoredIterable] = {}
        for raw in raw_items:
            try:
                record = StoredIterable.model_validate(raw)
            except ValidationError as exc:
                logger.warning("Skipping malformed iterable record: %s", exc)
                continue
            loaded[record.name] = record
        with self._lock:
            self._iterables = loaded

    def show(self) -> list[str]:
        records = self.list()
        return [
            f"Iterables: {len(records)}",
            *[f"  - {record.name} ({record.type})" for record in records],
        ]


__all__ = ["DefinitionStore"]
