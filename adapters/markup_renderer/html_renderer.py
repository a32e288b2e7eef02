"""
HtmlRenderer - MarkupRenderer adapter producing a standalone HTML5 page.
Blank lines split paragraphs, single newlines become <br>; links become
<a class="codex-link"> elements carrying the entity id and type.
"""
from __future__ import annotations

import html
import re
from typing import Iterable, Optional

from contracts import DetectedLink

from .base import RenderStyle, iter_segments, link_label, replace_surrogates

_NEWLINES = re.compile(r"\r\n|\r")
_PARAGRAPH_BREAK = re.compile(r"\n[ \t]*\n\s*")


def _escape_text(text: str, allow_paragraphs: bool = True) -> str:
    """Blank lines close the paragraph; any other newline becomes <br>."""
    s = html.escape(_NEWLINES.sub("\n", text))
    if allow_paragraphs:
        parts = _PARAGRAPH_BREAK.split(s)
        return "</p>\n<p>".join(p.replace("\n", "<br>\n") for p in parts)
    return s.replace("\n", "<br>\n")


class HtmlRenderer:
    format_name: str = "html"
    media_type: str = "text/html"
    file_extension: str = ".html"

    def __init__(self, style: Optional[RenderStyle] = None) -> None:
        self._style = style or RenderStyle()

    def render(self, text: str, title: str, links: Iterable[DetectedLink]) -> str:
        text = text or ""
        st = self._style
        out: list[str] = [
            "<!DOCTYPE html>\n",
            "<html>\n",
            "<head>\n",
            f"<title>{html.escape(title or 'Document')}</title>\n",
            '<meta charset="UTF-8">\n',
            "<style>\n",
            f"body {{ font-family: '{html.escape(st.font_name)}', serif; line-height: 1.6; "
            "max-width: 800px; margin: 0 auto; padding: 20px; }\n",
            "h1 { text-align: center; }\n",
            "p { text-indent: 2em; margin: 1em 0; }\n",
            f".codex-link {{ color: {st.link_color_hex}; text-decoration: underline; }}\n",
            "</style>\n",
            "</head>\n",
            "<body>\n",
        ]
        if title:
            out.append(f"<h1>{html.escape(title)}</h1>\n")

        if text.strip():
            out.append("<p>")
            for segment in iter_segments(text, links):
                if isinstance(segment, str):
                    out.append(_escape_text(segment))
                else:
                    entity = segment.entity
                    out.append(
                        f'<a class="codex-link" data-entity-id="{html.escape(entity.id)}" '
                        f'data-entity-type="{entity.entity_type.value}">'
                        f"{_escape_text(link_label(text, segment), allow_paragraphs=False)}</a>"
                    )
            out.append("</p>\n")

        out.append("</body>\n")
        out.append("</html>\n")
        return replace_surrogates("".join(out))
