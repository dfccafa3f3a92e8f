from __future__ import annotations

from iterbatch.context import ExecutionContext


def test_restore_returns_to_snapshot(context: ExecutionContext) -> None:
    checkpoint = context.snapshot()
    before = context.state()

    context.variables["nested"]["depth"] = 99
    context.variables["extra"] = True
    context.add_message("user", "hello")

    context.restore(checkpoint)

    assert context.state() == before


def test_checkpoint_is_reusable(context: ExecutionContext) -> None:
    checkpoint = context.snapshot()

    for attempt in range(3):
        context.add_message("user", f"attempt {attempt}")
        context.variables["nested"]["depth"] = attempt + 10
        context.restore(checkpoint)

    assert context.messages == [{"role": "system", "content": "baseline"}]
    assert context.variables["nested"] == {"depth": 1}


def test_snapshot_is_isolated_from_later_mutation(context: ExecutionContext) -> None:
    checkpoint = context.snapshot()

    context.messages[0]["content"] = "changed"

    assert checkpoint.messages[0]["content"] == "baseline"


def test_reset_clears_state(context: ExecutionContext) -> None:
    context.reset()

    assert context.state() == {"variables": {}, "messages": []}
