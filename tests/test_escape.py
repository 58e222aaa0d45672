"""Tests for HTML escaping of <%= %> output."""

from __future__ import annotations

import pytest

from tagweave import escape, html_escape, render


class TestHtmlEscape:
    """html_escape() conversions."""

    def test_markup_characters(self):
        assert escape('<a href="x">&y</a>') == "&lt;a href=&quot;x&quot;&gt;&amp;y&lt;/a&gt;"

    def test_existing_entity_not_double_encoded(self):
        assert escape("&amp;") == "&amp;"

    @pytest.mark.parametrize(
        "entity",
        ["&lt;", "&copy;", "&nbsp;", "&amp;"],
    )
    def test_word_entities_kept(self, entity: str):
        assert html_escape(entity) == entity

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("a & b", "a &amp; b"),
            ("&", "&amp;"),
            ("&;", "&amp;;"),
            ("AT&T", "AT&amp;T"),
            ("&#x26;", "&amp;#x26;"),
            ("&#169;", "&amp;#169;"),
        ],
    )
    def test_bare_ampersands_escaped(self, text: str, expected: str):
        assert html_escape(text) == expected

    def test_single_quote_untouched(self):
        assert html_escape("it's") == "it's"

    def test_escape_is_stable(self):
        once = html_escape('<b class="x">Tom & Jerry</b>')
        assert html_escape(once) == once

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (42, "42"),
            (None, "None"),
            (1.5, "1.5"),
            (["<"], "['&lt;']"),
        ],
    )
    def test_non_string_values_converted(self, value: object, expected: str):
        assert html_escape(value) == expected

    def test_html_protocol_respected(self):
        class Safe:
            def __html__(self) -> str:
                return "<b>ok</b>"

        assert html_escape(Safe()) == "<b>ok</b>"


class TestOutputEscaping:
    """Escaping as applied by output tags."""

    def test_escaped_tag(self):
        assert render("<%= v %>", inputs={"v": "<script>"}) == "&lt;script&gt;"

    def test_raw_tag(self):
        assert render("<%- v %>", inputs={"v": "<script>"}) == "<script>"

    def test_literal_text_never_escaped(self):
        assert render('<p class="a">&amp; <%= v %></p>', inputs={"v": "&"}) == (
            '<p class="a">&amp; &amp;</p>'
        )
