from typing import Optional

from ports.markup_renderer import MarkupRenderer

from .base import RenderStyle, iter_segments, replace_surrogates
from .html_renderer import HtmlRenderer
from .markdown_renderer import MarkdownRenderer
from .rtf_renderer import RtfRenderer, escape_rtf

RENDERER_FORMATS = ("rtf", "html", "md")


def get_renderer(fmt: str, style: Optional[RenderStyle] = None) -> MarkupRenderer:
    """Returns the renderer for "rtf", "html" or "md". Raises KeyError otherwise."""
    if fmt == "rtf":
        return RtfRenderer(style)
    if fmt == "html":
        return HtmlRenderer(style)
    if fmt == "md":
        return MarkdownRenderer()
    raise KeyError(f"Unknown export format: {fmt!r}")


__all__ = [
    "HtmlRenderer",
    "MarkdownRenderer",
    "RENDERER_FORMATS",
    "RenderStyle",
    "RtfRenderer",
    "escape_rtf",
    "get_renderer",
    "iter_segments",
    "replace_surrogates",
]
