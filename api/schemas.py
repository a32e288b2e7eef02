"""
schemas.py - FastAPI request/response models.
Kept apart from contracts.py so the API can evolve independently.
"""
from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

from contracts import DetectedLink, Entity, split_aliases, split_tags


# ─────────────────────────── /entities ───────────────────────────

class EntityListResponse(BaseModel):
    version: int
    count: int
    entities: list[Entity]


class EntityContentResponse(BaseModel):
    entity_id: str
    content: Optional[str] = None


class CreateEntityRequest(BaseModel):
    """
    New character. aliases / tags accept a list or the comma-separated text of the
    editor fields (aliases also split on spaces, tags only on commas).
    """

    name: str = Field(..., min_length=1)
    aliases: Union[list[str], str] = Field(default_factory=list)
    tags: Union[list[str], str] = Field(default_factory=list)
    content: Optional[str] = Field(
        default=None,
        description="Markdown body; a section template is written when omitted",
    )

    @field_validator("aliases", mode="after")
    @classmethod
    def _split_aliases(cls, v: Union[list[str], str]) -> list[str]:
        return split_aliases(v) if isinstance(v, str) else v

    @field_validator("tags", mode="after")
    @classmethod
    def _split_tags(cls, v: Union[list[str], str]) -> list[str]:
        return split_tags(v) if isinstance(v, str) else v


# ─────────────────────────── /links ──────────────────────────────

class DetectRequest(BaseModel):
    text: str = ""


class DetectResponse(BaseModel):
    count: int
    message: str
    links: list[DetectedLink]


# ─────────────────────────── /export ─────────────────────────────

class ExportRequest(BaseModel):
    text: str = ""
    title: str = ""
    links: Optional[list[DetectedLink]] = Field(
        default=None,
        description="Links to render; detected from the current catalog when omitted",
    )


# ─────────────────────────── /health ─────────────────────────────

class HealthResponse(BaseModel):
    status: str
    entities: int
    catalog_version: int
    version: str


def status_message(count: int) -> str:
    """Status-bar text shown after a detection pass."""
    if count > 0:
        return f"Found {count} linkable references"
    return "Found no linkable references"
