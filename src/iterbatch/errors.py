"""Error taxonomy for iterable definitions and batch execution."""

from __future__ import annotations


class IterbatchError(Exception):
    """Base exception for iterbatch."""

    pass


class UsageError(IterbatchError):
    """Raised when command input is malformed. No state has changed."""

    pass


class UnknownProviderType(IterbatchError):
    """Raised at define time when no provider is registered for a type."""

    def __init__(self, type_name: str) -> None:
        super().__init__(f"Unknown iterable type: {type_name}")
        self.type_name = type_name


class UndefinedIterable(IterbatchError):
    """Raised when a named iterable does not exist."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Iterable not found: @{name}")
        self.name = name


class DanglingProviderReference(IterbatchError):
    """Raised at generate time when a definition's provider is no longer registered."""

    def __init__(self, name: str, type_name: str) -> None:
        super().__init__(f"Provider not found for type: {type_name} (iterable @{name})")
        self.name = name
        self.type_name = type_name


class ProviderConflictError(IterbatchError):
    """Raised when registering a provider type that is already taken."""

    def __init__(self, type_name: str) -> None:
        super().__init__(f"Provider already registered for type: {type_name}")
        self.type_name = type_name


class ProviderLoadError(IterbatchError):
    """Raised when a configured provider entrypoint cannot be loaded."""

    pass


class ActionFailure(IterbatchError):
    """Failure of the action runner on a single item.

    The batch executor records these and moves on to the next item.
    """

    def __init__(self, index: int, cause: BaseException) -> None:
        super().__init__(f"Error processing item {index}: {cause}")
        self.index = index
        self.cause = cause


class GenerationFailure(IterbatchError):
    """Failure raised by a provider while producing items. Aborts the batch."""

    def __init__(self, name: str, processed: int, cause: BaseException) -> None:
        super().__init__(
            f"Generation failed for @{name} after {processed} item(s): {cause}"
        )
        self.name = name
        self.processed = processed
        self.cause = cause


__all__ = [
    "ActionFailure",
    "DanglingProviderReference",
    "GenerationFailure",
    "IterbatchError",
    "ProviderConflictError",
    "ProviderLoadError",
    "UndefinedIterable",
    "UnknownProviderType",
    "UsageError",
]
