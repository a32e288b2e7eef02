"""
Port: LinkDetector
Responsibility: finding non-overlapping occurrences of known entity terms in text.
"""
from typing import Iterable, Protocol, Union, runtime_checkable

from contracts import DetectedLink, Entity


@runtime_checkable
class EntitySource(Protocol):
    @property
    def entities(self) -> tuple[Entity, ...]: ...


CatalogLike = Union[EntitySource, Iterable[Entity]]


@runtime_checkable
class LinkDetector(Protocol):
    def detect(self, text: str, catalog: CatalogLike) -> list[DetectedLink]:
        """
        Returns detected links sorted by start_index, pairwise non-overlapping.
        Must not raise for any str input; empty text or catalog gives [].
        """
        ...
