"""Core data types for iterable definitions.

This module defines the records shared by providers, the definition store,
and the batch executor:
- ArgOption / ProviderArgsConfig: Option schema a provider accepts on define
- IterableItem: A single unit produced by a provider
- StoredIterable: A named, persisted iterable definition
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class ArgOption(BaseModel):
    """Single command-line option understood by a provider."""

    model_config = ConfigDict(frozen=True)

    type: Literal["string", "boolean"] = Field(..., description="Value type of the option")
    multiple: bool = Field(
        default=False, description="Whether the option may be repeated to build a list"
    )
    description: str | None = Field(default=None, description="Help text for the option")


class ProviderArgsConfig(BaseModel):
    """Argument schema a provider exposes for building its spec."""

    model_config = ConfigDict(frozen=True)

    options: dict[str, ArgOption] = Field(
        default_factory=dict, description="Option name to option descriptor"
    )


@dataclass(slots=True)
class IterableItem:
    """Item yielded by a provider: a raw value plus interpolation variables."""

    value: Any
    variables: Mapping[str, Any] = field(default_factory=dict)


class StoredIterable(BaseModel):
    """Named iterable definition owned by the definition store.

    Timestamps serialize to ISO-8601 strings and load back as datetimes.
    Legacy camelCase timestamp keys are accepted on load.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Unique definition name")
    type: str = Field(..., description="Provider type identifier")
    spec: dict[str, Any] = Field(
        default_factory=dict, description="Opaque provider-specific configuration"
    )
    description: str | None = Field(default=None, description="Optional human description")
    created_at: datetime = Field(
        ...,
        validation_alias=AliasChoices("created_at", "createdAt"),
        description="First definition time",
    )
    updated_at: datetime = Field(
        ...,
        validation_alias=AliasChoices("updated_at", "updatedAt"),
        description="Last (re)definition time",
    )

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_aware(cls, value: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


__all__ = [
    "ArgOption",
    "IterableItem",
    "ProviderArgsConfig",
    "StoredIterable",
    "utcnow",
]
