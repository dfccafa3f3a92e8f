"""
Storage for iterable definitions.

DefinitionStore keeps records in memory; DefinitionFileStore persists a store
to a JSON file with ISO-8601 timestamps.
"""

from iterbatch.storage.definition_store import DefinitionStore
from iterbatch.storage.file_store import DefinitionFileStore

__all__ = ["DefinitionFileStore", "DefinitionStore"]
