"""
JsonDirectoryEntityStore - EntityStore adapter over a directory tree of JSON records.

Layout:
    <root>/characters/<anything>.json   → CharacterRecord → Entity(Character)
    <root>/characters/<anything>.md     → extended content of the record above

save_record() writes <Name>!<Id>.json plus a Markdown file with a front-matter
block next to it, the layout the desktop editor used.

Kind directories are configurable (kind → EntityType); a missing kind directory
simply yields no records. A missing root raises StoreUnavailableError.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Optional

from pydantic import ValidationError

from contracts import CharacterRecord, Entity, EntityType, is_blank
from ports.entity_store import (
    ContentNotFoundError,
    RecordParseError,
    RecordValidationError,
    RecordWriteError,
    StoreUnavailableError,
)

logger = logging.getLogger("novel_codex.entity_store")

DEFAULT_ENTITY_DIRS: dict[str, EntityType] = {"characters": EntityType.CHARACTER}

# characters that cannot appear in a file name on common file systems
_UNSAFE_FILENAME = re.compile(r'[\\/:*?"<>|\x00-\x1f]')

_CONTENT_TEMPLATE = """## Description
Add character description here...

## Backstory
Add character backstory here...

## Relationships
- Add relationships with other characters using [[Character Name]] links

## Notes
Additional notes about this character...
"""


class JsonDirectoryEntityStore:
    """
    Reads one entity per *.json file. Records are independent: a broken file
    raises RecordParseError for that reference only.
    """

    record_suffix = ".json"
    content_suffix = ".md"

    def __init__(
        self,
        root: Path,
        entity_dirs: Optional[Mapping[str, EntityType]] = None,
    ) -> None:
        self._root = Path(root)
        self._entity_dirs = dict(entity_dirs or DEFAULT_ENTITY_DIRS)

    # ── EntityStore protocol ──────────────────────────────────────────────────

    def list_record_refs(self) -> list[str]:
        if not self._root.is_dir():
            raise StoreUnavailableError(f"Entity store root does not exist: {self._root}")

        refs: list[str] = []
        for kind in self._entity_dirs:
            kind_dir = self._root / kind
            if not kind_dir.is_dir():
                logger.debug("No %s directory under %s", kind, self._root)
                continue
            refs.extend(str(p) for p in sorted(kind_dir.glob(f"*{self.record_suffix}")))
        return refs

    def load_record(self, record_ref: str) -> Entity:
        path = Path(record_ref)
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise RecordParseError(record_ref, f"cannot read file: {exc}") from exc

        try:
            record = CharacterRecord.model_validate_json(raw)
        except ValidationError as exc:
            raise RecordParseError(
                record_ref, f"invalid record ({exc.error_count()} errors)"
            ) from exc

        return record.to_entity(
            entity_type=self._entity_type_for(path),
            source_ref=record_ref,
        )

    def load_extended_content(self, entity: Entity) -> str:
        if not entity.source_ref:
            raise ContentNotFoundError(entity.id)
        content_path = Path(entity.source_ref).with_suffix(self.content_suffix)
        try:
            return content_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ContentNotFoundError(entity.id) from exc
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot read content file %s: %s", content_path, exc)
            raise ContentNotFoundError(entity.id) from exc

    def save_record(self, record: CharacterRecord, content: Optional[str] = None) -> str:
        if is_blank(record.name):
            raise RecordValidationError("name is required")

        kind_dir = self._root / self._kind_for(EntityType.CHARACTER)
        stem = f"{_safe_filename(record.name)}!{_safe_filename(record.id)}"
        json_path = kind_dir / f"{stem}{self.record_suffix}"
        content_path = kind_dir / f"{stem}{self.content_suffix}"
        try:
            kind_dir.mkdir(parents=True, exist_ok=True)
            json_path.write_text(record.model_dump_json(indent=2), encoding="utf-8")
            content_path.write_text(_markdown_document(record, content), encoding="utf-8")
        except OSError as exc:
            raise RecordWriteError(f"cannot write {json_path}: {exc}") from exc

        logger.info("Saved %s (%s) to %s", record.name, record.id, json_path)
        return str(json_path)

    # ── private ───────────────────────────────────────────────────────────────

    def _entity_type_for(self, path: Path) -> EntityType:
        return self._entity_dirs.get(path.parent.name, EntityType.CUSTOM)

    def _kind_for(self, entity_type: EntityType) -> str:
        for kind, kind_type in self._entity_dirs.items():
            if kind_type == entity_type:
                return kind
        return "characters"


def _safe_filename(part: str) -> str:
    return _UNSAFE_FILENAME.sub("_", part.strip())


def _markdown_document(record: CharacterRecord, content: Optional[str]) -> str:
    created = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    body = _CONTENT_TEMPLATE if content is None else content
    return (
        "---\n"
        f"id: {record.id}\n"
        "type: character\n"
        f"name: {record.name}\n"
        f"aliases: [{', '.join(record.aliases)}]\n"
        f"tags: [{', '.join(record.tags)}]\n"
        f"created: {created}\n"
        "---\n"
        "\n"
        f"# {record.name}\n"
        "\n"
        f"{body}"
    )
