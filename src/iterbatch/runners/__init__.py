"""Action runners invoked once per batch item."""

from iterbatch.runners.base import ActionResult, ActionRunner, NoopActionRunner
from iterbatch.runners.command import (
    CommandActionRunner,
    CommandFailedError,
    CommandRunnerConfig,
)

__all__ = [
    "ActionResult",
    "ActionRunner",
    "CommandActionRunner",
    "CommandFailedError",
    "CommandRunnerConfig",
    "NoopActionRunner",
]
