"""Named iterables and checkpoint-isolated batch execution.

Public entry points:
- IterableService: define/get/list/delete/generate named iterables
- BatchExecutor: run a templated action once per generated item
- interpolate: resolve ``{path:default}`` tokens against item variables
"""

from __future__ import annotations

from iterbatch.batch.executor import BatchExecutor, BatchReport, parse_foreach_input
from iterbatch.context import Checkpoint, ExecutionContext
from iterbatch.core.types import ArgOption, IterableItem, ProviderArgsConfig, StoredIterable
from iterbatch.errors import (
    ActionFailure,
    DanglingProviderReference,
    GenerationFailure,
    IterbatchError,
    ProviderConflictError,
    ProviderLoadError,
    UndefinedIterable,
    UnknownProviderType,
    UsageError,
)
from iterbatch.providers.base import IterableProvider, ProviderRegistry
from iterbatch.service import IterableService
from iterbatch.storage.definition_store import DefinitionStore
from iterbatch.template import interpolate

__all__ = [
    "ActionFailure",
    "ArgOption",
    "BatchExecutor",
    "BatchReport",
    "Checkpoint",
    "DanglingProviderReference",
    "DefinitionStore",
    "ExecutionContext",
    "GenerationFailure",
    "IterableItem",
    "IterableProvider",
    "IterableService",
    "IterbatchError",
    "ProviderArgsConfig",
    "ProviderConflictError",
    "ProviderLoadError",
    "ProviderRegistry",
    "StoredIterable",
    "UndefinedIterable",
    "UnknownProviderType",
    "UsageError",
    "interpolate",
    "parse_foreach_input",
]
