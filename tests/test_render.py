"""End-to-end rendering tests through the public API."""

from __future__ import annotations

import traceback

import pytest

import tagweave
from tagweave import Environment, UndefinedError

from .conftest import assert_contains


class TestBasicRendering:
    def test_interpolation(self):
        assert tagweave.render("Hi <%= name %>!", inputs={"name": "World"}) == "Hi World!"

    def test_plain_text_unchanged(self):
        text = "no tags here\n  <b>bold</b> 100% & more"
        assert tagweave.render(text) == text

    def test_locals_alias(self):
        assert tagweave.render("<%= n %>", locals={"n": 7}) == "7"

    def test_options_mapping(self):
        assert tagweave.render("<%= n %>", {"inputs": {"n": 1}}) == "1"

    def test_newlines_preserved(self):
        source = "a\n<%= b %>\nc\n"
        assert tagweave.render(source, inputs={"b": "B"}) == "a\nB\nc\n"

    def test_carriage_return_renders_as_space(self):
        assert tagweave.render("a\r\nb\rc") == "a \nb c"

    def test_percent_and_angle_text(self):
        assert tagweave.render("50% <b> %> done") == "50% <b> %> done"

    def test_non_string_values(self):
        result = tagweave.render(
            "<%= n %>|<%= f %>|<%= b %>|<%= none %>",
            inputs={"n": 3, "f": 1.5, "b": True, "none": None},
        )
        assert result == "3|1.5|True|None"

    def test_multiline_tag(self):
        source = "<%=\n  a +\n  b\n%>"
        assert tagweave.render(source, inputs={"a": 1, "b": 2}) == "3"

    def test_idempotent(self):
        template = tagweave.compile("<% for i in range(n) %><%= i %>,<% end %>")
        first = template({"n": 4})
        assert first == "0,1,2,3,"
        assert template({"n": 4}) == first

    def test_kwargs_override_inputs(self):
        template = tagweave.compile("<%= a %><%= b %>")
        assert template.render({"a": 1, "b": 2}, b=3) == "13"

    def test_template_repr(self):
        assert repr(tagweave.compile("x", filename="page.html")) == "<Template 'page.html'>"


class TestEscaping:
    def test_escaped_vs_raw(self):
        inputs = {"v": "<b>&amp;</b>"}
        assert tagweave.render("<%= v %>", inputs=inputs) == "&lt;b&gt;&amp;&lt;/b&gt;"
        assert tagweave.render("<%- v %>", inputs=inputs) == "<b>&amp;</b>"

    def test_custom_escaper(self):
        env = Environment(escape=lambda value: str(value).upper())
        assert env.render("<%= v %>|<%- v %>", inputs={"v": "ab"}) == "AB|ab"


class TestIf:
    @pytest.mark.parametrize(("flag", "expected"), [(True, "Yes"), (False, "No")])
    def test_if_else(self, flag: bool, expected: str):
        source = "<% if flag %>Yes<% else %>No<% end %>"
        assert tagweave.render(source, inputs={"flag": flag}) == expected

    @pytest.mark.parametrize(("n", "expected"), [(1, "one"), (2, "two"), (5, "many")])
    def test_elif_chain(self, n: int, expected: str):
        source = "<% if n == 1 %>one<% elif n == 2 %>two<% else %>many<% endif %>"
        assert tagweave.render(source, inputs={"n": n}) == expected

    def test_if_without_else(self):
        assert tagweave.render("[<% if x %>x<% end %>]", inputs={"x": 0}) == "[]"

    def test_colon_form(self):
        assert tagweave.render("<% if 1 < 2: %>ok<% end %>") == "ok"


class TestFor:
    def test_loop(self):
        source = "<ul><% for u in users %><li><%= u %></li><% end %></ul>"
        result = tagweave.render(source, inputs={"users": ["ana", "<bo>"]})
        assert result == "<ul><li>ana</li><li>&lt;bo&gt;</li></ul>"

    def test_unpacking(self):
        source = "<% for k, v in items %><%= k %>=<%= v %>;<% end %>"
        result = tagweave.render(source, inputs={"items": {"a": 1, "b": 2}.items()})
        assert result == "a=1;b=2;"

    def test_empty_branch(self):
        source = "<% for x in xs %><%= x %><% else %>empty<% endfor %>"
        assert tagweave.render(source, inputs={"xs": []}) == "empty"
        assert tagweave.render(source, inputs={"xs": [1, 2]}) == "12"

    def test_nested_loops_with_else(self):
        source = (
            "<% for row in rows %>[<% for c in row %><%= c %><% else %>-<% end %>]"
            "<% else %>none<% end %>"
        )
        assert tagweave.render(source, inputs={"rows": [[1, 2], [], [3]]}) == "[12][-][3]"

    def test_break_and_continue(self):
        source = (
            "<% for i in range(10) %>"
            "<% if i == 1 %><% continue %><% end %>"
            "<% if i == 4 %><% break %><% end %>"
            "<%= i %><% end %>"
        )
        assert tagweave.render(source) == "023"

    def test_loop_variable_persists(self):
        assert tagweave.render("<% for i in range(3) %><% end %><%= i %>") == "2"

    def test_builtins_available(self):
        source = "<% for i, x in enumerate(sorted(xs)) %><%= i %><%= x %><% end %>"
        assert tagweave.render(source, inputs={"xs": ["b", "a"]}) == "0a1b"


class TestWhile:
    def test_counter(self):
        source = "<% n = 0 %><% while n < 3 %><%= n %><% n += 1 %><% end %>"
        assert tagweave.render(source) == "012"


class TestAssignment:
    def test_set(self):
        source = "<% set total = price * qty %><%= total %>"
        assert tagweave.render(source, inputs={"price": 3, "qty": 4}) == "12"

    def test_tuple_unpacking(self):
        assert tagweave.render("<% a, b = pair %><%= b %><%= a %>", inputs={"pair": (1, 2)}) == "21"

    def test_multiline_statement_tag(self):
        source = "<% a = 1\n   b = a + 1 %><%= a %><%= b %>"
        assert tagweave.render(source) == "12"

    def test_assignment_does_not_mutate_inputs(self):
        inputs = {"x": 1}
        assert tagweave.render("<% x = 2 %><%= x %>", inputs=inputs) == "2"
        assert inputs == {"x": 1}

    def test_input_shadows_builtin(self):
        assert tagweave.render("<%= len %>", inputs={"len": "mine"}) == "mine"

    def test_side_effect_statement(self):
        items: list[int] = []
        tagweave.render("<% items.append(1) %><% items.extend([2, 3]) %>", inputs={"items": items})
        assert items == [1, 2, 3]

    def test_augmented_undefined(self):
        with pytest.raises(UndefinedError):
            tagweave.render("<% total += 1 %>")


class TestExpressions:
    def test_comprehension(self):
        source = "<%= ', '.join([str(x * k) for x in xs]) %>"
        assert tagweave.render(source, inputs={"xs": [1, 2], "k": 10}) == "10, 20"

    def test_dict_comprehension(self):
        source = "<%= sorted({k: v for k, v in pairs}.items()) %>"
        result = tagweave.render(source, inputs={"pairs": [("b", 2), ("a", 1)]})
        assert result == "[('a', 1), ('b', 2)]"

    def test_fstring(self):
        assert tagweave.render("<%- f'{n:03d}' %>", inputs={"n": 7}) == "007"

    def test_conditional_expression(self):
        assert tagweave.render("<%= 'a' if x else 'b' %>", inputs={"x": 0}) == "b"

    def test_subscript_and_method_call(self):
        result = tagweave.render("<%= user['name'].title() %>", inputs={"user": {"name": "ana"}})
        assert result == "Ana"

    def test_generator_in_call(self):
        assert tagweave.render("<%= sum(x for x in xs) %>", inputs={"xs": [1, 2, 3]}) == "6"


class TestSelf:
    def test_context_visible_as_self(self):
        class Page:
            title = "Home"

        assert tagweave.render("<%= self.title %>", context=Page()) == "Home"

    def test_scope_alias(self):
        class Page:
            title = "About"

        assert tagweave.render("<%= self.title %>", scope=Page()) == "About"

    def test_context_wins_over_self_input(self):
        class Page:
            title = "Home"

        result = tagweave.render("<%= self.title %>", inputs={"self": 1}, context=Page())
        assert result == "Home"

    def test_self_defaults_to_none(self):
        assert tagweave.render("<%- self %>") == "None"


class TestErrorPropagation:
    def test_user_exception_unchanged(self):
        with pytest.raises(ZeroDivisionError):
            tagweave.render("<%= 1 / n %>", inputs={"n": 0})

    def test_attribute_error_unchanged(self):
        with pytest.raises(AttributeError):
            tagweave.render("<%= x.missing %>", inputs={"x": object()})

    def test_traceback_points_at_template_line(self):
        template = tagweave.compile("line1\nline2\n<%= 1 / n %>", filename="calc.html")
        with pytest.raises(ZeroDivisionError) as exc_info:
            template({"n": 0})
        frames = [f for f in traceback.extract_tb(exc_info.tb) if f.filename == "calc.html"]
        assert frames
        assert frames[-1].lineno == 3


class TestNestedRender:
    def test_tag_can_render_another_template(self):
        inner = tagweave.compile("<%= name %>", filename="inner.html")
        outer = tagweave.compile("[<%- inner({'name': '<x>'}) %>]", filename="outer.html")
        assert outer({"inner": inner}) == "[&lt;x&gt;]"

    def test_assert_contains_helper(self):
        result = tagweave.render("<p><%= a %></p><p><%= b %></p>", inputs={"a": 1, "b": 2})
        assert_contains(result, "<p>1</p>", "<p>2</p>")
