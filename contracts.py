"""
contracts.py - single source of truth for the data types shared by NovelCodex.
Every module imports its types from here. Do not change without bumping the version.
"""
from __future__ import annotations

import re
import uuid
from enum import Enum
from typing import Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

CONTRACTS_VERSION = "1.0.0"


# ─────────────────────────── Helpers ─────────────────────────────────────

def _new_id() -> str:
    return str(uuid.uuid4())


def is_blank(term: Optional[str]) -> bool:
    """True for None, "" and whitespace-only strings."""
    return term is None or not term.strip()


_ALIAS_SEPARATORS = re.compile(r"[,\s]+")


def split_aliases(raw: Optional[str]) -> list[str]:
    """Splits on commas and whitespace: 'El, Ellie Voss' -> ['El', 'Ellie', 'Voss']."""
    return [a for a in _ALIAS_SEPARATORS.split(raw or "") if a]


def split_tags(raw: Optional[str]) -> list[str]:
    """Splits on commas only and trims: 'lead, night watch' -> ['lead', 'night watch']."""
    return [t.strip() for t in (raw or "").split(",") if t.strip()]


# ─────────────────────────── Entities ────────────────────────────────────

class EntityType(str, Enum):
    CHARACTER = "Character"
    LOCATION = "Location"
    EVENT = "Event"
    ITEM = "Item"
    CUSTOM = "Custom"


class Entity(BaseModel):
    """A named story element as seen by the linker. Immutable."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    aliases: tuple[str, ...] = ()
    entity_type: EntityType = EntityType.CHARACTER
    source_ref: Optional[str] = None   # opaque, e.g. path of the JSON record
    tags: tuple[str, ...] = ()

    @field_validator("name", mode="before")
    @classmethod
    def _none_name(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("aliases", "tags", mode="before")
    @classmethod
    def _none_seq(cls, v: Any) -> Any:
        return () if v is None else v

    def terms(self) -> list[str]:
        """Name (if non-blank) followed by every non-blank alias, in order."""
        out = [] if is_blank(self.name) else [self.name]
        out.extend(a for a in self.aliases if not is_blank(a))
        return out


class CharacterRecord(BaseModel):
    """
    On-disk shape of a character file (data/characters/<name>.json).
    Accepts both snake_case and the PascalCase keys written by the desktop app.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=_new_id, validation_alias=AliasChoices("id", "Id"))
    name: str = Field(default="", validation_alias=AliasChoices("name", "Name"))
    aliases: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("aliases", "Aliases")
    )
    tags: list[str] = Field(default_factory=list, validation_alias=AliasChoices("tags", "Tags"))

    @field_validator("name", mode="before")
    @classmethod
    def _none_name(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("aliases", "tags", mode="before")
    @classmethod
    def _none_list(cls, v: Any) -> Any:
        return [] if v is None else v

    def to_entity(
        self,
        entity_type: EntityType = EntityType.CHARACTER,
        source_ref: Optional[str] = None,
    ) -> Entity:
        return Entity(
            id=self.id,
            name=self.name,
            aliases=tuple(self.aliases),
            entity_type=entity_type,
            source_ref=source_ref,
            tags=tuple(self.tags),
        )


# ─────────────────────────── LinkDetector ────────────────────────────────

class DetectedLink(BaseModel):
    """One resolved occurrence; [start_index, end_index) into the scanned text."""

    model_config = ConfigDict(frozen=True)

    entity: Entity
    start_index: int = Field(ge=0)
    end_index: int = Field(ge=0)
    matched_text: str

    @model_validator(mode="after")
    def _check_span(self) -> "DetectedLink":
        if self.end_index < self.start_index:
            raise ValueError(
                f"end_index ({self.end_index}) < start_index ({self.start_index})"
            )
        return self

    def overlaps(self, start: int, end: int) -> bool:
        return start < self.end_index and end > self.start_index


# ─────────────────────────── EntityCatalog ───────────────────────────────

class SkippedRecord(BaseModel):
    record_ref: str
    reason: str


class ReloadReport(BaseModel):
    loaded: int = 0
    skipped: list[SkippedRecord] = Field(default_factory=list)
    store_available: bool = True
    version: int = 0
