"""
Port: EntityStore
Responsibility: enumerating and loading entity records from an external store,
fetching extended content for an entity, persisting newly authored records.
"""
from typing import Optional, Protocol, runtime_checkable

from contracts import CharacterRecord, Entity


class RecordParseError(Exception):
    """A single record could not be read or deserialized."""

    def __init__(self, record_ref: str, reason: str) -> None:
        super().__init__(f"{record_ref}: {reason}")
        self.record_ref = record_ref
        self.reason = reason


class StoreUnavailableError(Exception):
    """The store location cannot be enumerated at all (e.g. missing root)."""


class ContentNotFoundError(LookupError):
    """No extended content exists for the entity."""


class RecordValidationError(ValueError):
    """A record offered for saving is incomplete (e.g. blank name)."""


class RecordWriteError(Exception):
    """The store could not persist a record."""


@runtime_checkable
class EntityStore(Protocol):
    def list_record_refs(self) -> list[str]:
        """
        Returns references of every loadable record, in a stable order.
        Raises StoreUnavailableError if the store cannot be enumerated.
        """
        ...

    def load_record(self, record_ref: str) -> Entity:
        """Loads a single record. Raises RecordParseError on failure."""
        ...

    def load_extended_content(self, entity: Entity) -> str:
        """
        Returns free-text content associated with the entity.
        Raises ContentNotFoundError if there is none or it cannot be read.
        """
        ...

    def save_record(self, record: CharacterRecord, content: Optional[str] = None) -> str:
        """
        Persists the record (and its extended content) and returns its reference.
        Raises RecordValidationError for a blank name, RecordWriteError on I/O failure.
        The new record becomes visible to the catalog on its next reload.
        """
        ...
