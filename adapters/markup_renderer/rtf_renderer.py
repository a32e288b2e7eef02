"""
RtfRenderer - MarkupRenderer adapter producing a standalone RTF document.

Document layout:
    {\\rtf1\\ansi\\deff0 {\\fonttbl{\\f0 <font>;}}
    {\\colortbl;\\red0\\green0\\blue0;\\red<r>\\green<g>\\blue<b>;}
    \\viewkind4\\uc1\\pard\\lang1033\\f0\\fs24
    \\qc\\b\\fs32 <title>\\b0\\fs24\\par        (only with a title)
    \\par
    \\ql <body with {\\cf2\\ul link\\cf0\\ulnone} groups>\\par}
"""
from __future__ import annotations

import re
from typing import Iterable, Optional

from contracts import DetectedLink

from .base import RenderStyle, iter_segments, link_label

_RTF_SPECIAL = re.compile(r"\r\n|[\\{}\t\r\n]|[^\x20-\x7e]")

_RTF_REPLACEMENTS = {
    "\\": "\\\\",
    "{": "\\{",
    "}": "\\}",
    "\t": "\\tab ",
    "\r\n": "\\par ",
    "\r": "\\par ",
    "\n": "\\par ",
}


def _rtf_unicode(code_unit: int) -> str:
    # \uN takes a signed 16-bit value; "?" is the \uc1 fallback character
    if code_unit > 0x7FFF:
        code_unit -= 0x10000
    return f"\\u{code_unit}?"


def _escape_char(match: re.Match[str]) -> str:
    token = match.group(0)
    replacement = _RTF_REPLACEMENTS.get(token)
    if replacement is not None:
        return replacement

    code = ord(token)
    if code < 0x20:
        return f"\\'{code:02x}"
    if code <= 0xFFFF:
        return _rtf_unicode(code)
    code -= 0x10000
    return _rtf_unicode(0xD800 + (code >> 10)) + _rtf_unicode(0xDC00 + (code & 0x3FF))


def escape_rtf(text: Optional[str]) -> str:
    """Escapes \\ { } and non-ASCII; CR, LF and CRLF become \\par."""
    if not text:
        return ""
    return _RTF_SPECIAL.sub(_escape_char, text)


class RtfRenderer:
    format_name: str = "rtf"
    media_type: str = "application/rtf"
    file_extension: str = ".rtf"

    def __init__(self, style: Optional[RenderStyle] = None) -> None:
        self._style = style or RenderStyle()

    def render(self, text: str, title: str, links: Iterable[DetectedLink]) -> str:
        text = text or ""
        st = self._style
        parts: list[str] = [self._header()]

        if title:
            parts.append(
                f"\\qc\\b\\fs{st.title_font_size} {escape_rtf(title)}"
                f"\\b0\\fs{st.font_size}\\par\n"
            )
            parts.append("\\par\n")

        parts.append("\\ql ")
        for segment in iter_segments(text, links):
            if isinstance(segment, str):
                parts.append(escape_rtf(segment))
            else:
                parts.append("{\\cf2\\ul ")
                parts.append(escape_rtf(link_label(text, segment)))
                parts.append("\\cf0\\ulnone}")

        parts.append("\\par}\n")
        return "".join(parts)

    def _header(self) -> str:
        st = self._style
        r, g, b = st.link_color
        font = escape_rtf(st.font_name.replace(";", ""))
        return (
            f"{{\\rtf1\\ansi\\deff0 {{\\fonttbl{{\\f0 {font};}}}}\n"
            f"{{\\colortbl;\\red0\\green0\\blue0;\\red{r}\\green{g}\\blue{b};}}\n"
            f"\\viewkind4\\uc1\\pard\\lang1033\\f0\\fs{st.font_size}\n"
        )
