"""Core data types shared by providers, storage and batch execution."""

from __future__ import annotations

from iterbatch.core.types import (
    ArgOption,
    IterableItem,
    ProviderArgsConfig,
    StoredIterable,
    utcnow,
)

__all__ = [
    "ArgOption",
    "IterableItem",
    "ProviderArgsConfig",
    "StoredIterable",
    "utcnow",
]
