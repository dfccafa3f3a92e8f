"""Shell command runner: one subprocess per interpolated text."""

from __future__ import annotations

import asyncio
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Mapping, Optional

from iterbatch.runners.base import ActionResult

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from iterbatch.context import ExecutionContext


class CommandFailedError(RuntimeError):
    """Raised when the action command exits non-zero or times out."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


@dataclass(slots=True)
class CommandRunnerConfig:
    """Configuration for invoking the action command."""

    command: str
    timeout_sec: int = 1800
    cwd: Optional[Path] = None
    env: Optional[Mapping[str, str]] = None


class CommandActionRunner:
    """Run a shell command with the text on stdin and in ITERBATCH_TEXT."""

    name = "command"

    def __init__(self, config: CommandRunnerConfig) -> None:
        self.config = config

    def _build_env(self, text: str) -> dict[str, str]:
        env = dict(os.environ if self.config.env is None else self.config.env)
        env["ITERBATCH_TEXT"] = text
        return env

    async def invoke(self, text: str, context: "ExecutionContext") -> ActionResult:
        started = time.perf_counter()
        process = await asyncio.create_subprocess_shell(
            self.config.command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=None if self.config.cwd is None else str(self.config.cwd),
            env=self._build_env(text),
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(text.encode("utf-8")),
                timeout=self.config.timeout_sec,
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.communicate()
            raise CommandFailedError(
                f"Action command timed out after {self.config.timeout_sec}s",
                returncode=process.returncode,
            ) from None

        duration_ms = (time.perf_counter() - started) * 1000
        stdout_text = stdout.decode("utf-8", errors="replace")
        stderr_text = stderr.decode("utf-8", errors="replace")

        if process.returncode != 0:
            detail = stderr_text.strip() or stdout_text.strip()
            message = f"Action command exited with status {process.returncode}"
            if detail:
                message = f"{message}: {detail}"
            raise CommandFailedError(message, returncode=process.returncode, stderr=stderr_text)

        context.add_message("user", text)
        context.add_message("assistant", stdout_text)
        return ActionResult(
            text=text,
            output=stdout_text,
            returncode=0,
            duration_ms=duration_ms,
            metadata={"command": self.config.command, "stderr": stderr_text},
        )


__all__ = ["CommandActionRunner", "CommandFailedError", "CommandRunnerConfig"]
