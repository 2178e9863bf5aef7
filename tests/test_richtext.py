"""Tests for the rich text composer."""

import pytest

from pagepress.models import RichTextSpan
from pagepress.pipeline.stage_richtext import (
    compose_rich_text,
    compose_span,
    escape_text,
    safe_href,
)


def span(text, href=None, **annotations):
    return RichTextSpan(text=text, href=href, annotations=annotations)


class TestComposeRichText:
    """Tests for span composition."""

    def test_empty_input(self):
        """Empty or missing span lists yield an empty string."""
        assert compose_rich_text([]) == ""
        assert compose_rich_text(None) == ""

    def test_plain_spans_concatenate(self):
        """Spans are joined in order without separators."""
        assert compose_rich_text([span("Hello, "), span("world")]) == "Hello, world"

    def test_fixed_nesting_order(self):
        """Monospace innermost, link outermost, regardless of subset."""
        html = compose_span(
            span(
                "x",
                href="https://example.com",
                bold=True,
                italic=True,
                strikethrough=True,
                underline=True,
                code=True,
            )
        )
        assert html == (
            '<a href="https://example.com"><u><s><em><strong><code>x</code>'
            "</strong></em></s></u></a>"
        )

    def test_subset_keeps_relative_order(self):
        """Italic + bold always nests bold inside italic."""
        assert compose_span(span("x", italic=True, bold=True)) == "<em><strong>x</strong></em>"

    def test_null_annotations_not_set(self):
        """Null annotation fields count as not set."""
        item = RichTextSpan(text="x", annotations={"bold": None, "italic": None})
        assert compose_span(item) == "x"
        assert compose_span(RichTextSpan(text="y", annotations=None)) == "y"

    def test_text_escaped(self):
        """Span text is escaped before formatting is applied."""
        html = compose_span(span("<script>alert(1)</script>", bold=True))
        assert "<script>" not in html
        assert html == "<strong>&lt;script&gt;alert(1)&lt;/script&gt;</strong>"

    def test_unsafe_link_rendered_as_label(self):
        """Script links are dropped; the label stays."""
        assert compose_span(span("click", href="javascript:alert(1)")) == "click"

    def test_relative_link_rendered_as_label(self):
        """Relative and fragment targets have no destination in a PDF."""
        assert compose_span(span("x", href="/abc#frag")) == "x"
        assert compose_span(span("y", href="#heading", bold=True)) == "<strong>y</strong>"
        assert compose_span(span("y", href="#heading", bold=True)) == "<strong>y</strong>"

    def test_from_api_item(self):
        """Content source rich text items map onto spans."""
        item = RichTextSpan.from_api(
            {
                "plain_text": "docs",
                "href": "https://example.com/docs",
                "annotations": {"code": True, "bold": False, "color": "red"},
            }
        )
        assert item.annotations.monospace is True
        assert compose_span(item) == '<a href="https://example.com/docs"><code>docs</code></a>'


class TestEscaping:
    """Tests for escaping helpers."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Tom & Jerry", "Tom &amp; Jerry"),
            ('say "hi"', "say &quot;hi&quot;"),
            ("it's", "it&#x27;s"),
            (None, ""),
        ],
    )
    def test_escape_text(self, raw, expected):
        assert escape_text(raw) == expected

    def test_ampersand_escaped_once(self):
        """Composing does not escape the same value twice."""
        html = compose_rich_text([span("R&D", bold=True)])
        assert "R&amp;D" in html
        assert "&amp;amp;" not in html

    def test_safe_href(self):
        assert safe_href("https://a.test/?q=1&r=2") == "https://a.test/?q=1&amp;r=2"
        assert safe_href("mailto:a@b.test") == "mailto:a@b.test"
        assert safe_href("/relative/path") is None
        assert safe_href("#section") is None
        assert safe_href("data:text/html,hi") is None
        assert safe_href("   ") is None
