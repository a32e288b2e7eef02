"""
RegexLinkDetector - LinkDetector adapter: longest-match-first greedy span selection.

Pipeline per call (stateless, full re-scan):
  1. candidates = (term, entity) for every non-blank name/alias, catalog order
  2. stable sort by len(term), descending ("John Smith" before "John")
  3. per candidate: whole-word, case-sensitive occurrences of the escaped term
  4. accept an occurrence only if it overlaps no already accepted span
  5. return accepted links ordered by start_index

Complexity is O(terms × len(text)), fine for interactive document sizes.
"""
from __future__ import annotations

import re
from bisect import bisect_left, insort
from functools import lru_cache
from typing import Iterable

from contracts import DetectedLink, Entity
from ports.link_detector import CatalogLike

# No word character directly before or after the term. Unlike \b this also
# works for terms that begin or end with punctuation ("Dr.", "(Doc)").
_BOUNDARY_TEMPLATE = r"(?<!\w){term}(?!\w)"


@lru_cache(maxsize=4096)
def _term_pattern(term: str) -> re.Pattern[str]:
    return re.compile(_BOUNDARY_TEMPLATE.format(term=re.escape(term)))


def _entities_of(catalog: CatalogLike) -> tuple[Entity, ...]:
    # read the snapshot reference once so a concurrent reload cannot mix versions
    entities = getattr(catalog, "entities", None)
    if entities is None:
        entities = catalog
    return tuple(entities)


def build_candidates(entities: Iterable[Entity]) -> list[tuple[str, Entity]]:
    """(term, entity) pairs, longest term first; equal lengths keep catalog order."""
    candidates = [(term, entity) for entity in entities for term in entity.terms()]
    # sorted() is stable with reverse=True as well
    return sorted(candidates, key=lambda c: len(c[0]), reverse=True)


class _AcceptedSpans:
    """Non-overlapping spans kept sorted by start; ends are then sorted too."""

    __slots__ = ("_starts", "_ends")

    def __init__(self) -> None:
        self._starts: list[int] = []
        self._ends: list[int] = []

    def overlaps(self, start: int, end: int) -> bool:
        # the only candidate is the last span that starts before `end`
        idx = bisect_left(self._starts, end)
        return idx > 0 and self._ends[idx - 1] > start

    def add(self, start: int, end: int) -> None:
        insort(self._starts, start)
        insort(self._ends, end)


class RegexLinkDetector:
    """
    Case-sensitive, whole-word entity term detector.

    Usage:
        detector = RegexLinkDetector()
        links = detector.detect("Elena walked. El followed.", catalog)
    """

    name: str = "regex"

    def detect(self, text: str, catalog: CatalogLike) -> list[DetectedLink]:
        if not text or text.isspace():
            return []

        candidates = build_candidates(_entities_of(catalog))
        if not candidates:
            return []

        accepted = _AcceptedSpans()
        links: list[DetectedLink] = []
        for term, entity in candidates:
            for match in _term_pattern(term).finditer(text):
                start, end = match.span()
                if accepted.overlaps(start, end):
                    continue
                accepted.add(start, end)
                links.append(
                    DetectedLink(
                        entity=entity,
                        start_index=start,
                        end_index=end,
                        matched_text=match.group(0),
                    )
                )

        links.sort(key=lambda link: link.start_index)
        return links


_DEFAULT_DETECTOR = RegexLinkDetector()


def detect_links(text: str, catalog: CatalogLike) -> list[DetectedLink]:
    """Module-level shortcut for RegexLinkDetector().detect()."""
    return _DEFAULT_DETECTOR.detect(text, catalog)
