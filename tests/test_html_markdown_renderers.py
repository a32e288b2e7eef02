from __future__ import annotations

import pytest

from adapters.link_detector import detect_links
from adapters.markup_renderer import HtmlRenderer, MarkdownRenderer, get_renderer
from adapters.markup_renderer.markdown_renderer import guard_before_link
from contracts import Entity, EntityType

_ELENA = Entity(id="elena", name="Elena", aliases=("El",))
_TOWER = Entity(id="tower 1", name="Black Tower", entity_type=EntityType.LOCATION)


def test_html_document_with_title_and_links():
    text = "Elena climbed the Black Tower."
    html_doc = HtmlRenderer().render(text, "Act <I>", detect_links(text, [_ELENA, _TOWER]))

    assert html_doc.startswith("<!DOCTYPE html>\n<html>\n<head>\n")
    assert "<title>Act &lt;I&gt;</title>" in html_doc
    assert "<h1>Act &lt;I&gt;</h1>" in html_doc
    assert (
        '<p><a class="codex-link" data-entity-id="elena" data-entity-type="Character">Elena</a>'
        ' climbed the '
        '<a class="codex-link" data-entity-id="tower 1" data-entity-type="Location">Black Tower</a>'
        ".</p>"
    ) in html_doc
    assert ".codex-link { color: #0000ff; text-decoration: underline; }" in html_doc
    assert html_doc.endswith("</body>\n</html>\n")


def test_html_escapes_content_splits_paragraphs_and_breaks_lines():
    text = "First <b>line</b> & more\nsame paragraph\r\n\r\nSecond"
    html_doc = HtmlRenderer().render(text, "", [])

    assert "<title>Document</title>" in html_doc
    assert "<h1>" not in html_doc
    assert (
        "<p>First &lt;b&gt;line&lt;/b&gt; &amp; more<br>\nsame paragraph</p>\n<p>Second</p>"
    ) in html_doc


def test_html_without_text_has_no_paragraph():
    html_doc = HtmlRenderer().render("", "", [])

    assert "<p>" not in html_doc
    assert "<body>\n</body>" in html_doc


def test_markdown_links_point_into_the_codex():
    text = "Elena climbed the Black Tower."
    md = MarkdownRenderer().render(text, "Act I", detect_links(text, [_ELENA, _TOWER]))

    assert md == (
        "# Act I\n\n"
        "[Elena](codex://character/elena) climbed the "
        "[Black Tower](codex://location/tower%201)."
    )


def test_markdown_escapes_brackets_in_labels_only():
    odd = Entity(id="x", name="[Redacted]")
    text = "See [Redacted] and [notes]."

    md = MarkdownRenderer().render(text, "", detect_links(text, [odd]))

    assert md == "See [\\[Redacted\\]](codex://character/x) and [notes]."


def test_markdown_prose_before_a_link_cannot_break_it():
    text = "Look!Elena and x\\Elena"
    links = detect_links(text, [Entity(id="e", name="Elena")])

    md = MarkdownRenderer().render(text, "", links)

    assert len(links) == 2
    assert md == "Look\\![Elena](codex://character/e) and x\\\\[Elena](codex://character/e)"


def test_guard_before_link_leaves_escaped_prose_alone():
    assert guard_before_link("Say \\!") == "Say \\!"
    assert guard_before_link("x\\\\") == "x\\\\"
    assert guard_before_link("x\\\\\\") == "x\\\\\\\\"
    assert guard_before_link("wow!!") == "wow!\\!"
    assert guard_before_link("line!\n") == "line!\n"
    assert guard_before_link("") == ""


def test_html_line_break_next_to_a_link():
    text = "Elena\nwalked"
    html_doc = HtmlRenderer().render(text, "", detect_links(text, [_ELENA]))

    assert (
        '<p><a class="codex-link" data-entity-id="elena" data-entity-type="Character">Elena</a>'
        "<br>\nwalked</p>"
    ) in html_doc


def test_lone_surrogates_are_replaced_in_text_documents():
    text = "El \ud800 walked"
    links = detect_links(text, [_ELENA])

    for renderer in (HtmlRenderer(), MarkdownRenderer()):
        doc = renderer.render(text, "T\udfff", links)
        assert "\ud800" not in doc and "\udfff" not in doc
        assert "\ufffd walked" in doc
        doc.encode("utf-8")


def test_get_renderer_by_format():
    assert get_renderer("rtf").format_name == "rtf"
    assert get_renderer("html").media_type == "text/html"
    assert get_renderer("md").file_extension == ".md"
    with pytest.raises(KeyError):
        get_renderer("docx")


def test_renderers_implement_the_port():
    from ports.markup_renderer import MarkupRenderer

    for fmt in ("rtf", "html", "md"):
        assert isinstance(get_renderer(fmt), MarkupRenderer)
