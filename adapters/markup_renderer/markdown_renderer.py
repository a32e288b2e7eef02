"""
MarkdownRenderer - MarkupRenderer adapter producing Markdown.
The prose is kept as written; links become [label](codex://<type>/<id>).
The prose right before a link is guarded so the link cannot turn into an
image ("![") or lose its opening bracket to a backslash escape ("\\[").
"""
from __future__ import annotations

import re
from typing import Iterable
from urllib.parse import quote

from contracts import DetectedLink

from .base import iter_segments, link_label, replace_surrogates

_LABEL_SPECIAL = re.compile(r"([\\\[\]])")
_TRAILING_ESCAPES = re.compile(r"(\\*)(!?)\Z")


def link_target(link: DetectedLink) -> str:
    entity = link.entity
    return f"codex://{entity.entity_type.value.lower()}/{quote(entity.id, safe='')}"


def guard_before_link(prose: str) -> str:
    """Escapes a trailing '!' or an odd trailing backslash so a following '[' opens a link."""
    m = _TRAILING_ESCAPES.search(prose)
    backslashes, bang = m.group(1), m.group(2)
    odd = len(backslashes) % 2 == 1
    if bang and not odd:
        return prose[:-1] + "\\!"
    if not bang and odd:
        return prose + "\\"
    return prose


class MarkdownRenderer:
    format_name: str = "md"
    media_type: str = "text/markdown"
    file_extension: str = ".md"

    def render(self, text: str, title: str, links: Iterable[DetectedLink]) -> str:
        text = text or ""
        out: list[str] = []
        if title:
            out.append(f"# {title}\n\n")

        for segment in iter_segments(text, links):
            if isinstance(segment, str):
                out.append(segment)
            else:
                if out:
                    out[-1] = guard_before_link(out[-1])
                label = _LABEL_SPECIAL.sub(r"\\\1", link_label(text, segment))
                out.append(f"[{label}]({link_target(segment)})")
        return replace_surrogates("".join(out))
