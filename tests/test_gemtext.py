"""Tests for gemtext rendering."""

import re

from gemlark.config import RESET, StyleSet
from gemlark.core import Link
from gemlark.rendering import GemtextRenderer, LineType
from gemlark.rendering.gemtext import classify_line, parse_link

STYLES = StyleSet()


def plain(line: str) -> str:
    """A rendered line with every escape sequence removed."""
    return re.sub(r"\x1b\[[0-9;]*m", "", line)


class TestClassifyLine:
    def test_prefixes(self):
        assert classify_line("### c") is LineType.HEADER3
        assert classify_line("## b") is LineType.HEADER2
        assert classify_line("# a") is LineType.HEADER1
        assert classify_line("> q") is LineType.QUOTE
        assert classify_line("=>/x") is LineType.LINK
        assert classify_line("* i") is LineType.LIST_ITEM
        assert classify_line("#nospace") is LineType.PARAGRAPH
        assert classify_line("*bold*") is LineType.PARAGRAPH

    def test_parse_link(self):
        assert parse_link("=> /a Link A") == ("/a", "Link A")
        assert parse_link("=>/b") == ("/b", "/b")
        assert parse_link("=>\t/c\tTabbed  label ") == ("/c", "Tabbed  label")
        assert parse_link("=>   ") is None


class TestRender:
    def test_blocks_and_link_table(self):
        renderer = GemtextRenderer(STYLES, margin=2)
        result = renderer.render("# Title\n=> /a Link A\n=> /b\n* item\n", columns=40)

        assert result.links == [Link(1, "/a", "Link A"), Link(2, "/b", "/b")]
        assert [plain(line) for line in result.lines] == [
            "  # Title",
            "  [1] Link A",
            "  [2] /b",
            "  * item",
        ]
        assert result.title == "Title"

    def test_lines_carry_margin_style_and_reset(self):
        renderer = GemtextRenderer(STYLES, margin=3)
        result = renderer.render("## Head\n", columns=40)
        assert result.lines == ["   " + STYLES.sequence("header2") + "## Head" + RESET]

    def test_link_bullet_and_text_styles(self):
        renderer = GemtextRenderer(STYLES, margin=0)
        line = renderer.render("=> /a A\n", columns=40).lines[0]
        assert line == (
            STYLES.sequence("link-bullet") + "[1] " + RESET
            + STYLES.sequence("link-text") + "A" + RESET
        )

    def test_wraps_to_columns_minus_margins(self):
        renderer = GemtextRenderer(STYLES, margin=2)
        text = "word " * 20
        result = renderer.render(text + "\n", columns=24)
        assert len(result.lines) > 1
        for line in result.lines:
            body = plain(line)
            assert body.startswith("  ")
            assert len(body) <= 2 + 20

    def test_each_logical_line_wraps_independently(self):
        renderer = GemtextRenderer(STYLES, margin=0)
        result = renderer.render("aaa bbb\nccc\n", columns=5)
        assert [plain(line) for line in result.lines] == ["aaa", "bbb", "ccc"]

    def test_list_continuation_is_indented(self):
        renderer = GemtextRenderer(STYLES, margin=0)
        result = renderer.render("* aaa bbb\n", columns=6)
        assert [plain(line) for line in result.lines] == ["* aaa", "  bbb"]

    def test_quote_continuation_keeps_marker(self):
        renderer = GemtextRenderer(STYLES, margin=0)
        result = renderer.render("> aaa bbb\n", columns=6)
        assert [plain(line) for line in result.lines] == ["> aaa", "> bbb"]

    def test_preformatted_block(self):
        renderer = GemtextRenderer(STYLES, margin=2)
        text = "```\n# not a header\n=> /x not a link " + "y" * 60 + "\n```\nafter\n"
        result = renderer.render(text, columns=20)

        assert result.lines[0] == "  # not a header"
        assert result.lines[1] == "  => /x not a link " + "y" * 60
        assert plain(result.lines[2]) == "  after"
        assert result.links == []

    def test_toggle_line_alt_text_is_dropped(self):
        renderer = GemtextRenderer(STYLES, margin=0)
        result = renderer.render("```python\nx = 1\n```\n", columns=20)
        assert result.lines == ["x = 1"]

    def test_blank_lines_are_kept(self):
        renderer = GemtextRenderer(STYLES, margin=2)
        result = renderer.render("a\n\nb\n", columns=20)
        assert len(result.lines) == 3
        assert result.lines[1] == ""

    def test_crlf_line_endings(self):
        renderer = GemtextRenderer(STYLES, margin=0)
        result = renderer.render("# T\r\n=> /a\r\n", columns=20)
        assert result.links == [Link(1, "/a", "/a")]

    def test_link_indices_restart_per_document(self):
        renderer = GemtextRenderer(STYLES, margin=0)
        renderer.render("=> /a\n=> /b\n", columns=20)
        result = renderer.render("=> /c\n", columns=20)
        assert result.links == [Link(1, "/c", "/c")]

    def test_empty_style_has_no_prefix(self):
        renderer = GemtextRenderer(StyleSet(header1=""), margin=0)
        assert renderer.render("# T\n", columns=20).lines == ["# T" + RESET]

    def test_render_page(self, sample_gemtext):
        renderer = GemtextRenderer(STYLES, margin=1)
        page = renderer.render_page(sample_gemtext, columns=40, title="fallback")
        assert page.title == "Welcome"
        assert [link.target for link in page.links] == ["/docs", "gemini://other.example/"]
        assert " " + "  raw  text  " in page.lines
