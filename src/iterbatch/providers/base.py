"""Provider protocol and the type-keyed provider registry."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, AsyncIterator, Mapping, MutableMapping, Optional, Protocol

from iterbatch.core.types import IterableItem, ProviderArgsConfig
from iterbatch.errors import ProviderConflictError

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from iterbatch.context import ExecutionContext

logger = logging.getLogger(__name__)


class IterableProvider(Protocol):
    """Producer of items for one iterable type.

    Providers are stateless. Spec validation is their own business: the
    registry and the definition store never look inside a spec.
    """

    type: str
    description: str

    def args_config(self) -> ProviderArgsConfig:
        ...

    def generate(
        self, spec: Mapping[str, Any], context: "ExecutionContext"
    ) -> AsyncIterator[IterableItem]:
        ...


class ProviderRegistry:
    """Thread-safe registry of providers keyed by type identifier."""

    def __init__(self) -> None:
        self._providers: MutableMapping[str, IterableProvider] = {}
        self._lock = threading.RLock()

    def register(
        self,
        type_name: str,
        provider: IterableProvider,
        *,
        replace: bool = True,
    ) -> None:
        """Register ``provider`` under ``type_name``.

        The most recent registration wins. Pass ``replace=False`` to get a
        ProviderConflictError instead of overwriting an existing entry.
        """
        with self._lock:
            existing = self._providers.get(type_name)
            if existing is not None and existing is not provider:
                if not replace:
                    raise ProviderConflictError(type_name)
                logger.warning("Replacing provider registered for type '%s'", type_name)
            self._providers[type_name] = provider

    def get(self, type_name: str) -> Optional[IterableProvider]:
        with self._lock:
            return self._providers.get(type_name)

    def has(self, type_name: str) -> bool:
        with self._lock:
            return type_name in self._providers

    def unregister(self, type_name: str) -> bool:
        with self._lock:
            return self._providers.pop(type_name, None) is not None

    def list_types(self) -> list[str]:
        with self._lock:
            return sorted(self._providers.keys())

    def items(self) -> list[tuple[str, IterableProvider]]:
        with self._lock:
            return sorted(self._providers.items())


__all__ = ["IterableProvider", "ProviderRegistry"]
