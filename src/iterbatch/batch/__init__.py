"""Batch execution of templated actions over iterables."""

from iterbatch.batch.executor import (
    USAGE,
    BatchExecutor,
    BatchReport,
    CancelToken,
    ForeachRequest,
    LoggingReporter,
    Reporter,
    parse_foreach_input,
)

__all__ = [
    "USAGE",
    "BatchExecutor",
    "BatchReport",
    "CancelToken",
    "ForeachRequest",
    "LoggingReporter",
    "Reporter",
    "parse_foreach_input",
]
