"""Tests for error types, codes and messages."""

from __future__ import annotations

import pytest

import tagweave
from tagweave import (
    ConfigurationError,
    ErrorCode,
    SourceSnippet,
    TemplateError,
    TemplateSyntaxError,
    UndefinedError,
)
from tagweave.environment.exceptions import build_source_snippet
from tagweave.render_context import get_render_context


class TestHierarchy:
    @pytest.mark.parametrize("error_type", [ConfigurationError, TemplateSyntaxError, UndefinedError])
    def test_subclasses_template_error(self, error_type: type[Exception]):
        assert issubclass(error_type, TemplateError)

    def test_error_code_categories(self):
        assert ErrorCode.UNCLOSED_TAG.category == "lexer"
        assert ErrorCode.UNCLOSED_BLOCK.category == "parser"
        assert ErrorCode.UNDEFINED_VARIABLE.category == "runtime"
        assert ErrorCode.CACHE_REQUIRES_FILENAME.category == "configuration"


class TestUndefinedError:
    def test_name_and_location(self):
        with pytest.raises(UndefinedError) as exc_info:
            tagweave.render("line one\n<%= missing %>", filename="page.html")
        err = exc_info.value
        assert err.name == "missing"
        assert err.template == "page.html"
        assert err.lineno == 2
        assert err.code is ErrorCode.UNDEFINED_VARIABLE
        assert "Undefined variable 'missing' in page.html:2" in str(err)

    def test_suggestion(self):
        with pytest.raises(UndefinedError) as exc_info:
            tagweave.render("<%= usr %>", inputs={"user": "ana"})
        assert "Did you mean 'user'?" in str(exc_info.value)

    def test_no_suggestion_for_self(self):
        with pytest.raises(UndefinedError) as exc_info:
            tagweave.render("<%= slf %>")
        assert "Did you mean" not in str(exc_info.value)

    def test_snippet(self):
        source = "a\nb\n<%= nope %>\nc"
        with pytest.raises(UndefinedError) as exc_info:
            tagweave.render(source)
        err = exc_info.value
        assert err.source_snippet is not None
        assert err.source_snippet.error_line == 3
        assert ">" + " 3 | <%= nope %>" in str(err)

    def test_anonymous_template(self):
        with pytest.raises(UndefinedError) as exc_info:
            tagweave.render("<%= nope %>")
        assert "<template>:1" in str(exc_info.value)

    def test_undefined_in_loop_body(self):
        source = "<% for x in xs %>\n<%= x %><%= y %>\n<% end %>"
        with pytest.raises(UndefinedError) as exc_info:
            tagweave.render(source, inputs={"xs": [1]})
        assert exc_info.value.name == "y"
        assert exc_info.value.lineno == 2

    def test_undefined_in_elif_condition(self):
        source = "<% if a %>\nA\n<% elif missing %>\nB<% end %>"
        with pytest.raises(UndefinedError) as exc_info:
            tagweave.render(source, inputs={"a": False})
        assert exc_info.value.name == "missing"
        assert exc_info.value.lineno == 3

    def test_undefined_in_second_elif(self):
        source = "<% if a %>A\n<% elif b %>B\n<% elif c %>C<% end %>"
        with pytest.raises(UndefinedError) as exc_info:
            tagweave.render(source, inputs={"a": 0, "b": 0})
        assert exc_info.value.name == "c"
        assert exc_info.value.lineno == 3

    def test_render_context_reset_after_error(self):
        with pytest.raises(UndefinedError):
            tagweave.render("<%= nope %>")
        assert get_render_context() is None

    def test_python_builtins_unreachable(self):
        for name in ("open", "__import__", "eval", "getattr"):
            with pytest.raises((UndefinedError, TemplateSyntaxError)):
                tagweave.render(f"<%= {name} %>")


class TestTemplateSyntaxError:
    def test_unclosed_tag_location(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            tagweave.render("ok\n<p><% if user", filename="page.html")
        err = exc_info.value
        assert err.code is ErrorCode.UNCLOSED_TAG
        assert err.lineno == 2
        assert err.col_offset == 3
        message = str(err)
        assert message.startswith("T-LEX-001: ")
        assert "--> page.html:2:3" in message
        assert "<p><% if user" in message
        assert "   |    ^" in message

    def test_parse_error_from_render(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            tagweave.render("<% for x in %>")
        assert exc_info.value.code in (ErrorCode.INVALID_STATEMENT, ErrorCode.INVALID_EXPRESSION)

    def test_without_source(self):
        err = TemplateSyntaxError("bad", lineno=4, name="x.html", col_offset=1)
        assert str(err) == "T-PAR-004: bad\n  --> x.html:4:1"


class TestConfigurationError:
    def test_message_prefix(self):
        err = ConfigurationError("oops")
        assert str(err) == "T-CFG-001: oops"
        assert err.message == "oops"


class TestSourceSnippet:
    def test_build_and_format(self):
        snippet = build_source_snippet("one\ntwo\nthree\nfour", 2, context_lines=1, column=1)
        assert snippet == SourceSnippet(
            lines=((1, "one"), (2, "two"), (3, "three")), error_line=2, column=1
        )
        assert snippet.format() == "\n".join(
            ["   |", "  1 | one", "> 2 | two", "   |  ^", "  3 | three", "   |"]
        )
