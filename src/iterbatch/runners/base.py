"""Action runner protocol and the no-op runner."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, MutableMapping, Protocol

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from iterbatch.context import ExecutionContext


@dataclass(slots=True)
class ActionResult:
    """Outcome of running an action on one interpolated text."""

    text: str
    output: str = ""
    returncode: int = 0
    duration_ms: float = 0.0
    metadata: MutableMapping[str, Any] = field(default_factory=dict)


class ActionRunner(Protocol):
    """Executes the action for a single interpolated text.

    Implementations raise on failure; the batch executor isolates the error
    to the item being processed.
    """

    name: str

    async def invoke(self, text: str, context: "ExecutionContext") -> ActionResult:
        ...


@dataclass(slots=True)
class NoopActionRunner:
    """Runner that records each text and echoes it back."""

    name: str = "noop"
    calls: list[str] = field(default_factory=list)

    async def invoke(self, text: str, context: "ExecutionContext") -> ActionResult:
        self.calls.append(text)
        context.add_message("user", text)
        return ActionResult(text=text, output=text)


__all__ = ["ActionResult", "ActionRunner", "NoopActionRunner"]
