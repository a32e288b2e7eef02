"""
EntityCatalog - current in-memory snapshot of the codex entities.

reload() never mutates the live snapshot: a new CatalogSnapshot is built from
the store and swapped in with a single reference assignment, so a detection
pass that already holds a snapshot keeps seeing one consistent version.

Error policy on reload:
  - RecordParseError        → record skipped, warning logged, reload continues
  - StoreUnavailableError   → catalog becomes empty (valid initial state)
  - anything else           → CatalogReloadError, previous snapshot retained
  - listener exception      → logged, the swap stands and other listeners run
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Iterable, Iterator, Mapping, Optional

from contracts import CharacterRecord, Entity, ReloadReport, SkippedRecord, is_blank
from ports.entity_store import (
    ContentNotFoundError,
    EntityStore,
    RecordParseError,
    StoreUnavailableError,
)

logger = logging.getLogger("novel_codex.catalog")

WarningCallback = Callable[[SkippedRecord], None]
ReloadListener = Callable[["CatalogSnapshot"], None]


class CatalogReloadError(Exception):
    """The store failed in an unexpected way; the previous snapshot is kept."""


class CatalogSnapshot:
    """Immutable, indexed view of a set of entities."""

    __slots__ = ("_entities", "_by_id", "_by_term", "_version")

    def __init__(self, entities: Iterable[Entity] = (), version: int = 0) -> None:
        self._entities: tuple[Entity, ...] = tuple(entities)
        self._version = version

        by_id: dict[str, Entity] = {}
        by_term: dict[str, Entity] = {}
        for entity in self._entities:
            by_id.setdefault(entity.id, entity)
            # first entity in catalog order wins an ambiguous term
            for term in (entity.name, *entity.aliases):
                by_term.setdefault(term, entity)
        self._by_id: Mapping[str, Entity] = MappingProxyType(by_id)
        self._by_term: Mapping[str, Entity] = MappingProxyType(by_term)

    @property
    def entities(self) -> tuple[Entity, ...]:
        return self._entities

    @property
    def version(self) -> int:
        return self._version

    def find_by_exact_term(self, term: Optional[str]) -> Optional[Entity]:
        if is_blank(term):
            return None
        return self._by_term.get(term)

    def find_by_id(self, entity_id: str) -> Optional[Entity]:
        return self._by_id.get(entity_id)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities)

    def __len__(self) -> int:
        return len(self._entities)

    def __repr__(self) -> str:
        return f"CatalogSnapshot(version={self._version}, entities={len(self._entities)})"


class EntityCatalog:
    """
    Catalog of linkable entities backed by an EntityStore.

    Usage:
        catalog = EntityCatalog(JsonDirectoryEntityStore(Path("data")))
        report = catalog.reload()
        entity = catalog.find_by_exact_term("Elena")
    """

    def __init__(
        self,
        store: EntityStore,
        on_warning: Optional[WarningCallback] = None,
    ) -> None:
        self._store = store
        self._on_warning = on_warning
        self._listeners: list[ReloadListener] = []
        self._snapshot = CatalogSnapshot()

    # ── snapshot access ───────────────────────────────────────────────────────

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def entities(self) -> tuple[Entity, ...]:
        return self._snapshot.entities

    @property
    def version(self) -> int:
        return self._snapshot.version

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._snapshot)

    def __len__(self) -> int:
        return len(self._snapshot)

    # ── lookup ────────────────────────────────────────────────────────────────

    def find_by_exact_term(self, term: Optional[str]) -> Optional[Entity]:
        """Entity whose name or one of its aliases equals term exactly, else None."""
        return self._snapshot.find_by_exact_term(term)

    def find_by_id(self, entity_id: str) -> Optional[Entity]:
        return self._snapshot.find_by_id(entity_id)

    def load_extended_content(self, entity: Optional[Entity]) -> Optional[str]:
        """Extended free-text content of the entity, or None if there is none."""
        if entity is None:
            return None
        try:
            return self._store.load_extended_content(entity)
        except ContentNotFoundError:
            return None

    # ── reload ────────────────────────────────────────────────────────────────

    def subscribe(self, listener: ReloadListener) -> None:
        """Registers a callback invoked with the new snapshot after each reload."""
        self._listeners.append(listener)

    def reload(self) -> ReloadReport:
        next_version = self._snapshot.version + 1

        try:
            refs = self._store.list_record_refs()
        except StoreUnavailableError as exc:
            logger.info("Entity store unavailable, starting with an empty catalog: %s", exc)
            self._swap(CatalogSnapshot((), next_version))
            return ReloadReport(loaded=0, store_available=False, version=next_version)
        except Exception as exc:
            logger.error("Entity store enumeration failed, keeping previous catalog: %s", exc)
            raise CatalogReloadError(str(exc)) from exc

        entities: list[Entity] = []
        skipped: list[SkippedRecord] = []
        for ref in refs:
            try:
                entities.append(self._store.load_record(ref))
            except RecordParseError as exc:
                skip = SkippedRecord(record_ref=exc.record_ref, reason=exc.reason)
                skipped.append(skip)
                logger.warning("Skipping entity record %s: %s", exc.record_ref, exc.reason)
                if self._on_warning is not None:
                    self._on_warning(skip)

        self._swap(CatalogSnapshot(entities, next_version))
        logger.info(
            "Catalog v%d loaded: %d entities, %d skipped",
            next_version, len(entities), len(skipped),
        )
        return ReloadReport(loaded=len(entities), skipped=skipped, version=next_version)

    # alias used by the UI layer ("refresh after adding new characters")
    refresh = reload

    def _swap(self, snapshot: CatalogSnapshot) -> None:
        self._snapshot = snapshot
        # a failing listener is logged; the remaining listeners still run
        for listener in self._listeners:
            try:
                listener(snapshot)
            except Exception:
                logger.exception(
                    "Reload listener %r failed for catalog v%d", listener, snapshot.version
                )

    # ── authoring ─────────────────────────────────────────────────────────────

    def create_entity(
        self,
        name: str,
        aliases: Iterable[str] = (),
        tags: Iterable[str] = (),
        content: Optional[str] = None,
    ) -> Entity:
        """
        Saves a new character record through the store and reloads the catalog.
        Raises RecordValidationError (blank name) or RecordWriteError from the store,
        CatalogReloadError if the reload after saving fails.
        """
        record = CharacterRecord(
            name=name.strip() if name else "",
            aliases=[a for a in aliases if not is_blank(a)],
            tags=[t for t in tags if not is_blank(t)],
        )
        ref = self._store.save_record(record, content)
        logger.info("Created entity %s (%s) at %s", record.name, record.id, ref)
        self.reload()
        return self.find_by_id(record.id) or record.to_entity(source_ref=ref)
