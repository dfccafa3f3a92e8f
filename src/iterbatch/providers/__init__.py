"""Provider protocol and registry."""

from iterbatch.providers.base import IterableProvider, ProviderRegistry

__all__ = ["IterableProvider", "ProviderRegistry"]
