"""Pytest configuration helpers."""

from __future__ import annotations

from typing import Any, AsyncIterator, Iterator, Mapping

import pytest

from iterbatch.context import ExecutionContext
from iterbatch.core.types import ArgOption, IterableItem, ProviderArgsConfig
from iterbatch.providers.base import ProviderRegistry
from iterbatch.service import IterableService


class RangeProvider:
    """Yields ``{"i": n}`` for n in ``range(start, stop)``."""

    type = "range"
    description = "Integers from start (inclusive) to stop (exclusive)"

    def __init__(self) -> None:
        self.pulled = 0

    def args_config(self) -> ProviderArgsConfig:
        return ProviderArgsConfig(
            options={
                "start": ArgOption(type="string"),
                "stop": ArgOption(type="string"),
            }
        )

    async def generate(
        self, spec: Mapping[str, Any], context: ExecutionContext
    ) -> AsyncIterator[IterableItem]:
        for i in range(int(spec.get("start", 0)), int(spec.get("stop", 3))):
            self.pulled += 1
            yield IterableItem(value=i, variables={"i": i})


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    """Clear cached settings between tests."""
    from iterbatch import settings

    settings.get_settings.cache_clear()
    try:
        yield
    finally:
        settings.get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_batch_metrics() -> Iterator[None]:
    from iterbatch.observability.metrics import reset_metrics

    reset_metrics()
    try:
        yield
    finally:
        reset_metrics()


@pytest.fixture
def range_provider() -> RangeProvider:
    return RangeProvider()


@pytest.fixture
def registry(range_provider: RangeProvider) -> ProviderRegistry:
    registry = ProviderRegistry()
    registry.register("range", range_provider)
    return registry


@pytest.fixture
def service(registry: ProviderRegistry) -> IterableService:
    return IterableService(registry=registry)


@pytest.fixture
def context() -> ExecutionContext:
    return ExecutionContext(
        variables={"project": "demo", "nested": {"depth": 1}},
        messages=[{"role": "system", "content": "baseline"}],
    )
