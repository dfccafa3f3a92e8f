"""Foreach engine: run an action once per item of a named iterable."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, AsyncIterator, Optional, Protocol

from iterbatch.core.types import IterableItem
from iterbatch.errors import ActionFailure, GenerationFailure, UsageError
from iterbatch.observability.logger import BatchRunLogger
from iterbatch.observability.metrics import get_metrics_registry
from iterbatch.runners.base import ActionResult, ActionRunner
from iterbatch.template import interpolate

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from iterbatch.context import ExecutionContext
    from iterbatch.service import IterableService

logger = logging.getLogger(__name__)

USAGE = "Usage: foreach @<iterable> <template>"

_QUOTES = "\"'"


class Reporter(Protocol):
    """Sink for user-facing progress and error lines."""

    def info(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class LoggingReporter:
    """Reporter that forwards lines to the module logger."""

    def info(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.error(message)


class CancelToken(Protocol):
    """Anything with ``is_set()``, e.g. asyncio.Event or anyio.Event."""

    def is_set(self) -> bool:
        ...


@dataclass(frozen=True)
class ForeachRequest:
    """Parsed ``@<iterable> <template>`` input."""

    iterable: str
    template: str


def _strip_quotes(text: str) -> str:
    if text[:1] in _QUOTES:
        text = text[1:]
    if text[-1:] in _QUOTES:
        text = text[:-1]
    return text


def parse_foreach_input(remainder: str | None) -> ForeachRequest:
    """Parse ``@name template`` into a ForeachRequest.

    One leading and one trailing quote are stripped from the template.

    Raises:
        UsageError: If the name or the template is missing
    """
    trimmed = (remainder or "").strip()
    if not trimmed.startswith("@"):
        raise UsageError(USAGE)

    name, _, rest = trimmed[1:].partition(" ")
    template = _strip_quotes(rest.strip())
    if not name or not template:
        raise UsageError(USAGE)
    return ForeachRequest(iterable=name, template=template)


@dataclass(slots=True)
class BatchReport:
    """Outcome of one foreach run."""

    iterable: str
    template: str
    started_at: float
    ended_at: float = 0.0
    processed: int = 0
    results: list[ActionResult] = field(default_factory=list)
    failures: list[ActionFailure] = field(default_factory=list)
    cancelled: bool = False
    aborted: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures and not self.aborted

    @property
    def succeeded(self) -> int:
        return self.processed - len(self.failures)

    def summary(self) -> dict[str, Any]:
        return {
            "iterable": self.iterable,
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": [
                {"index": failure.index, "error": str(failure.cause)} for failure in self.failures
            ],
            "cancelled": self.cancelled,
            "aborted": self.aborted,
            "duration_ms": max(0.0, (self.ended_at - self.started_at) * 1000.0),
        }


class BatchExecutor:
    """Drives the per-item loop with checkpoint isolation.

    The context is snapshotted once before the loop and restored after every
    item and again on exit, so each item runs against the same baseline.
    Action failures are reported and skipped; a failure raised by the
    provider's sequence aborts the run as GenerationFailure.
    """

    def __init__(
        self,
        service: "IterableService",
        runner: ActionRunner,
        *,
        reporter: Reporter | None = None,
        observer: BatchRunLogger | None = None,
    ) -> None:
        self._service = service
        self._runner = runner
        self._reporter: Reporter = reporter or LoggingReporter()
        self._observer = observer

    async def run(
        self,
        remainder: str,
        context: "ExecutionContext",
        *,
        cancel: Optional[CancelToken] = None,
    ) -> BatchReport:
        """Parse ``@name template`` and execute it."""
        request = parse_foreach_input(remainder)
        return await self.execute(request.iterable, request.template, context, cancel=cancel)

    async def execute(
        self,
        name: str,
        template: str,
        context: "ExecutionContext",
        *,
        cancel: Optional[CancelToken] = None,
    ) -> BatchReport:
        """Run ``template`` once per item of the iterable ``name``."""
        report = BatchReport(iterable=name, template=template, started_at=time.time())
        iterator: AsyncIterator[IterableItem] | None = None

        self._log(
            "batch.start",
            {"iterable": name, "template": template, "runner": self._runner.name},
        )
        checkpoint = context.snapshot()
        try:
            iterator = aiter(self._service.generate(name, context))
            while True:
                if cancel is not None and cancel.is_set():
                    report.cancelled = True
                    self._reporter.info(f"Cancelled after {report.processed} items")
                    break

                try:
                    item = await anext(iterator)
                except StopAsyncIteration:
                    break
                except Exception as exc:
                    raise GenerationFailure(name, report.processed, exc) from exc

                report.processed += 1
                await self._process_item(report.processed, item, template, context, report)
                context.restore(checkpoint)

            self._reporter.info(f"Processed {report.processed} items")
            return report
        except BaseException:
            report.aborted = True
            raise
        finally:
            # provider cleanup may touch the context, so close before restoring
            try:
                await self._close(iterator, report)
            finally:
                context.restore(checkpoint)
                report.ended_at = time.time()
                get_metrics_registry().record(report)
                self._log("batch.finish", report.summary())
                if self._observer is not None:
                    self._observer.finalize(report.summary())

    async def _close(
        self, iterator: AsyncIterator[IterableItem] | None, report: BatchReport
    ) -> None:
        aclose = getattr(iterator, "aclose", None)
        if aclose is None:
            return
        try:
            await aclose()
        except BaseException:
            report.aborted = True
            raise

    async def _process_item(
        self,
        index: int,
        item: IterableItem,
        template: str,
        context: "ExecutionContext",
        report: BatchReport,
    ) -> None:
        self._reporter.info(f"Processing item {index}...")
        text = interpolate(template, item.variables)
        self._log("item.start", {"index": index, "text": text})

        started = time.perf_counter()
        try:
            result = await self._runner.invoke(text, context)
        except Exception as exc:  # noqa: BLE001 - isolated per item
            failure = ActionFailure(index, exc)
            report.failures.append(failure)
            self._reporter.error(str(failure))
            self._log("item.error", {"index": index, "error": str(exc)})
            return

        report.results.append(result)
        self._log(
            "item.finish",
            {"index": index, "duration_ms": (time.perf_counter() - started) * 1000},
        )

    def _log(self, event: str, data: dict[str, Any]) -> None:
        if self._observer is not None:
            self._observer.log(event, data)


__all__ = [
    "BatchExecutor",
    "BatchReport",
    "CancelToken",
    "ForeachRequest",
    "LoggingReporter",
    "Reporter",
    "USAGE",
    "parse_foreach_input",
]
