"""Execution context shared by providers and action runners.

The snapshot boundary is exactly the two fields this package owns:
``variables`` and ``messages``. Anything an action does outside them (files
written, processes started, definitions saved) is not rolled back.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping

from iterbatch.core.types import utcnow


@dataclass(frozen=True)
class Checkpoint:
    """Opaque snapshot of an execution context."""

    variables: Mapping[str, Any]
    messages: tuple[Mapping[str, Any], ...]
    taken_at: datetime = field(default_factory=utcnow)


class ExecutionContext:
    """Mutable state an action runner may touch while processing an item."""

    def __init__(
        self,
        variables: Mapping[str, Any] | None = None,
        messages: Iterable[Mapping[str, Any]] | None = None,
    ) -> None:
        self.variables: dict[str, Any] = dict(variables or {})
        self.messages: list[dict[str, Any]] = [dict(message) for message in messages or ()]

    def add_message(self, role: str, content: str, **extra: Any) -> None:
        """Append a message to the context history."""
        self.messages.append({"role": role, "content": content, **extra})

    def snapshot(self) -> Checkpoint:
        """Capture a deep copy of the context state."""
        return Checkpoint(
            variables=copy.deepcopy(self.variables),
            messages=tuple(copy.deepcopy(self.messages)),
        )

    def restore(self, checkpoint: Checkpoint) -> None:
        """Reset the context to a checkpoint.

        The checkpoint is copied again on every call, so it stays reusable.
        """
        self.variables = copy.deepcopy(dict(checkpoint.variables))
        self.messages = [copy.deepcopy(dict(message)) for message in checkpoint.messages]

    def reset(self) -> None:
        """Clear transient state."""
        self.variables.clear()
        self.messages.clear()

    def state(self) -> dict[str, Any]:
        return {
            "variables": copy.deepcopy(self.variables),
            "messages": copy.deepcopy(self.messages),
        }


__all__ = ["Checkpoint", "ExecutionContext"]
