"""
Shared pieces of the markup renderers: style model, the segment walker and
the surrogate clean-up for UTF-8 documents.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, Iterator, Union

from pydantic import BaseModel, Field

from contracts import DetectedLink

logger = logging.getLogger("novel_codex.renderer")

Segment = Union[str, DetectedLink]


class RenderStyle(BaseModel):
    font_name: str = "Times New Roman"
    font_size: int = Field(default=24, gt=0)        # RTF half-points
    title_font_size: int = Field(default=32, gt=0)
    link_color: tuple[int, int, int] = (0, 0, 255)

    @classmethod
    def from_settings(cls, settings) -> "RenderStyle":
        return cls(
            font_name=settings.rtf_font_name,
            font_size=settings.rtf_font_size,
            title_font_size=settings.rtf_title_font_size,
            link_color=settings.rtf_link_color,
        )

    @property
    def link_color_hex(self) -> str:
        return "#{:02x}{:02x}{:02x}".format(*self.link_color)


def iter_segments(text: str, links: Iterable[DetectedLink]) -> Iterator[Segment]:
    """
    Yields plain-text pieces (str) and links in document order.

    Links are re-sorted by start_index. A link that starts before the end of
    the previous one, or reaches past the end of the text, is skipped.
    """
    cursor = 0
    for link in sorted(links, key=lambda l: l.start_index):
        if link.start_index < cursor or link.end_index > len(text):
            logger.debug(
                "Skipping link [%d, %d) for %r: overlaps or out of range",
                link.start_index, link.end_index, link.entity.id,
            )
            continue
        if link.start_index > cursor:
            yield text[cursor:link.start_index]
        yield link
        cursor = link.end_index

    if cursor < len(text):
        yield text[cursor:]


def link_label(text: str, link: DetectedLink) -> str:
    """The linked span as it appears in the rendered text."""
    return text[link.start_index:link.end_index]


_SURROGATE = re.compile("[\ud800-\udfff]")


def replace_surrogates(document: str) -> str:
    """
    Unpaired UTF-16 surrogates (possible in JSON input) cannot be encoded as UTF-8;
    text documents carry U+FFFD in their place. Length is preserved.
    """
    return _SURROGATE.sub("\ufffd", document)
