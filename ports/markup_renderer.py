"""
Port: MarkupRenderer
Responsibility: rendering text plus detected links into a self-contained export document.
"""
from typing import Iterable, Protocol, runtime_checkable

from contracts import DetectedLink


@runtime_checkable
class MarkupRenderer(Protocol):
    format_name: str     # "rtf", "html", "md"
    media_type: str
    file_extension: str

    def render(self, text: str, title: str, links: Iterable[DetectedLink]) -> str:
        """
        Returns the whole document. Links are consumed in start_index order;
        output stays valid for empty text, no links or a link covering all text.
        """
        ...
