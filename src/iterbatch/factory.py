"""Factory helpers wiring providers, storage and runners from settings."""

from __future__ import annotations

import importlib
import inspect
import logging
from importlib.metadata import entry_points
from typing import Any, Iterable, Optional

from iterbatch.errors import ProviderLoadError
from iterbatch.providers.base import IterableProvider, ProviderRegistry
from iterbatch.runners.base import ActionRunner, NoopActionRunner
from iterbatch.runners.command import CommandActionRunner, CommandRunnerConfig
from iterbatch.service import IterableService
from iterbatch.settings import IterbatchSettings, get_settings
from iterbatch.storage.definition_store import DefinitionStore
from iterbatch.storage.file_store import DefinitionFileStore

logger = logging.getLogger(__name__)

PROVIDER_ENTRY_POINT_GROUP = "iterbatch.providers"


def _instantiate(target: Any, source: str) -> IterableProvider:
    """Turn a loaded entrypoint attribute into a provider instance.

    Classes and zero-argument factories are called; instances pass through.
    """
    if inspect.isclass(target):
        provider = target()
    elif callable(target) and not hasattr(target, "generate"):
        provider = target()
    else:
        provider = target

    type_name = getattr(provider, "type", None)
    if not isinstance(type_name, str) or not type_name:
        raise ProviderLoadError(f"Provider from '{source}' does not declare a 'type'")
    if not callable(getattr(provider, "generate", None)):
        raise ProviderLoadError(f"Provider from '{source}' has no generate() method")
    return provider


def resolve_provider(entrypoint: str) -> IterableProvider:
    """
    Resolve an entrypoint string to a provider instance.

    Args:
        entrypoint: Format "package.module:attribute"

    Returns:
        Provider instance

    Raises:
        ProviderLoadError: If the format is invalid or the target cannot be loaded
    """
    if ":" not in entrypoint:
        raise ProviderLoadError(
            f"Invalid provider entrypoint: {entrypoint} (expected 'module:attribute')"
        )

    module_name, attribute = entrypoint.rsplit(":", 1)
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ProviderLoadError(f"Cannot import provider module '{module_name}': {exc}") from exc

    if not hasattr(module, attribute):
        raise ProviderLoadError(f"Provider '{attribute}' not found in {module_name}")
    return _instantiate(getattr(module, attribute), entrypoint)


def discover_providers() -> list[IterableProvider]:
    """Load providers advertised in the ``iterbatch.providers`` entry point group."""
    providers: list[IterableProvider] = []
    for ep in entry_points().select(group=PROVIDER_ENTRY_POINT_GROUP):
        try:
            providers.append(_instantiate(ep.load(), ep.value))
        except ProviderLoadError:
            raise
        except Exception as exc:
            logger.error("Failed to load provider entry point '%s'", ep.name, exc_info=True)
            raise ProviderLoadError(f"Cannot load provider entry point '{ep.name}': {exc}") from exc
    return providers


def load_providers(
    registry: ProviderRegistry,
    entrypoints: Iterable[str] = (),
    *,
    discover: bool = True,
) -> list[str]:
    """Register configured and discovered providers; return the registered types."""
    providers = discover_providers() if discover else []
    providers.extend(resolve_provider(entrypoint) for entrypoint in entrypoints)

    registered: list[str] = []
    for provider in providers:
        registry.register(provider.type, provider)
        registered.append(provider.type)
    logger.debug("Registered providers: %s", ", ".join(registered) or "<none>")
    return registered


def build_service(
    settings: Optional[IterbatchSettings] = None,
    *,
    discover: bool = True,
) -> tuple[IterableService, DefinitionFileStore]:
    """Build an IterableService with providers registered and definitions loaded."""
    config = settings or get_settings()
    registry = ProviderRegistry()
    load_providers(registry, config.provider_entrypoints(), discover=discover)

    store = DefinitionStore(registry)
    file_store = DefinitionFileStore(config.store_path)
    file_store.load(store)
    return IterableService(registry=registry, store=store), file_store


def build_runner(
    settings: Optional[IterbatchSettings] = None,
    command: str | None = None,
) -> ActionRunner:
    """Instantiate the action runner for a foreach run."""
    config = settings or get_settings()
    resolved = command or config.ACTION_COMMAND
    if not resolved:
        return NoopActionRunner()
    return CommandActionRunner(
        CommandRunnerConfig(command=resolved, timeout_sec=config.ACTION_TIMEOUT_SEC)
    )


__all__ = [
    "PROVIDER_ENTRY_POINT_GROUP",
    "build_runner",
    "build_service",
    "discover_providers",
    "load_providers",
    "resolve_provider",
]
