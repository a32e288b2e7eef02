"""
InMemoryEntityStore - EntityStore kept in memory.
Used for seeding, demos and tests; interchangeable with JsonDirectoryEntityStore.
"""
from __future__ import annotations

from typing import Any, Iterable, Optional

from pydantic import ValidationError

from contracts import CharacterRecord, Entity, EntityType, is_blank
from ports.entity_store import (
    ContentNotFoundError,
    RecordParseError,
    RecordValidationError,
    StoreUnavailableError,
)


class InMemoryEntityStore:
    """
    Records are kept as raw dicts so that broken ones behave like broken files:
    they fail in load_record(), not at seeding time.
    """

    def __init__(self, records: Optional[Iterable[dict[str, Any]]] = None) -> None:
        # record_ref → raw record
        self._records: dict[str, dict[str, Any]] = {}
        # entity_id → extended content
        self._content: dict[str, str] = {}
        self.available = True

        for record in records or []:
            self.add_record(record)

    # ── write ─────────────────────────────────────────────────────────────────

    def add_record(self, record: dict[str, Any], record_ref: Optional[str] = None) -> str:
        ref = record_ref or f"mem:{len(self._records)}"
        self._records[ref] = dict(record)
        return ref

    def set_content(self, entity_id: str, content: str) -> None:
        self._content[entity_id] = content

    def clear(self) -> None:
        self._records.clear()
        self._content.clear()

    # ── EntityStore protocol ──────────────────────────────────────────────────

    def list_record_refs(self) -> list[str]:
        if not self.available:
            raise StoreUnavailableError("in-memory store marked unavailable")
        return list(self._records)

    def load_record(self, record_ref: str) -> Entity:
        try:
            raw = self._records[record_ref]
        except KeyError as exc:
            raise RecordParseError(record_ref, "no such record") from exc

        data = dict(raw)
        data.setdefault("entity_type", EntityType.CHARACTER)
        data.setdefault("source_ref", record_ref)
        try:
            return Entity.model_validate(data)
        except ValidationError as exc:
            raise RecordParseError(
                record_ref, f"invalid record ({exc.error_count()} errors)"
            ) from exc

    def load_extended_content(self, entity: Entity) -> str:
        try:
            return self._content[entity.id]
        except KeyError as exc:
            raise ContentNotFoundError(entity.id) from exc

    def save_record(self, record: CharacterRecord, content: Optional[str] = None) -> str:
        if is_blank(record.name):
            raise RecordValidationError("name is required")
        ref = self.add_record(record.model_dump(), record_ref=f"mem:{record.id}")
        if content is not None:
            self.set_content(record.id, content)
        return ref
