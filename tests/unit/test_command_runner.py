from __future__ import annotations

import pytest

from iterbatch.context import ExecutionContext
from iterbatch.runners.command import (
    CommandActionRunner,
    CommandFailedError,
    CommandRunnerConfig,
)


@pytest.mark.asyncio
async def test_command_receives_text_on_stdin() -> None:
    runner = CommandActionRunner(CommandRunnerConfig(command="cat"))
    context = ExecutionContext()

    result = await runner.invoke("hello world", context)

    assert result.output == "hello world"
    assert result.returncode == 0
    assert result.metadata["command"] == "cat"
    assert context.messages == [
        {"role": "user", "content": "hello world"},
        {"role": "assistant", "content": "hello world"},
    ]


@pytest.mark.asyncio
async def test_command_receives_text_in_environment() -> None:
    runner = CommandActionRunner(
        CommandRunnerConfig(command='printf "%s" "$ITERBATCH_TEXT"', env={"PATH": "/usr/bin:/bin"})
    )

    result = await runner.invoke("from env", ExecutionContext())

    assert result.output == "from env"


@pytest.mark.asyncio
async def test_nonzero_exit_raises_with_stderr() -> None:
    runner = CommandActionRunner(CommandRunnerConfig(command="echo broken >&2; exit 3"))
    context = ExecutionContext()

    with pytest.raises(CommandFailedError, match="status 3: broken") as excinfo:
        await runner.invoke("ignored", context)

    assert excinfo.value.returncode == 3
    assert "broken" in excinfo.value.stderr
    assert context.messages == []


@pytest.mark.asyncio
async def test_timeout_kills_command() -> None:
    runner = CommandActionRunner(CommandRunnerConfig(command="sleep 5", timeout_sec=1))

    with pytest.raises(CommandFailedError, match="timed out after 1s"):
        await runner.invoke("slow", ExecutionContext())
