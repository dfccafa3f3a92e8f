"""Iterable service: named definitions on top of pluggable providers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, AsyncIterator, Mapping, Optional

from iterbatch.core.types import IterableItem, StoredIterable
from iterbatch.errors import DanglingProviderReference
from iterbatch.providers.base import IterableProvider, ProviderRegistry
from iterbatch.storage.definition_store import DefinitionStore

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from iterbatch.context import ExecutionContext

logger = logging.getLogger(__name__)


class IterableService:
    """Manages named iterables for batch operations."""

    name = "IterableService"
    description = "Manages named iterables for batch operations"

    def __init__(
        self,
        registry: ProviderRegistry | None = None,
        store: DefinitionStore | None = None,
    ) -> None:
        self.registry = registry or ProviderRegistry()
        self.store = store or DefinitionStore(self.registry)

    def register_provider(
        self, type_name: str, provider: IterableProvider, *, replace: bool = True
    ) -> None:
        self.registry.register(type_name, provider, replace=replace)

    def get_provider(self, type_name: str) -> Optional[IterableProvider]:
        return self.registry.get(type_name)

    def provider_types(self) -> list[str]:
        return self.registry.list_types()

    def define(
        self,
        name: str,
        type_name: str,
        spec: Mapping[str, Any],
        description: str | None = None,
    ) -> StoredIterable:
        return self.store.define(name, type_name, spec, description)

    def get(self, name: str) -> Optional[StoredIterable]:
        return self.store.get(name)

    def list(self) -> list[StoredIterable]:
        return self.store.list()

    def delete(self, name: str) -> bool:
        return self.store.delete(name)

    def generate(self, name: str, context: "ExecutionContext") -> AsyncIterator[IterableItem]:
        """Return the provider's item sequence for the iterable ``name``.

        The definition and its provider are resolved immediately, so an
        unknown name fails here, before anything is pulled. The sequence
        itself is handed back exactly as the provider produced it: items are
        pulled lazily by the caller and provider errors surface unchanged.

        Raises:
            UndefinedIterable: If no iterable is defined under ``name``
            DanglingProviderReference: If the definition's provider is gone
        """
        iterable = self.store.require(name)
        provider = self.registry.get(iterable.type)
        if provider is None:
            raise DanglingProviderReference(name, iterable.type)

        logger.debug("Generating items for @%s via provider '%s'", name, iterable.type)
        return provider.generate(iterable.spec, context)


__all__ = ["IterableService"]
