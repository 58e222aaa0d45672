"""Parser: token stream to template tree.

Consumes the lexer's flat token list and builds the nested node tree the
compiler works from. Output tags become ``Output`` nodes; statement tags are
classified into block keywords (``if``/``elif``/``else``/``for``/``while``/
``end``), loop control (``break``/``continue``), assignments and plain
side-effect expressions.

Block syntax:
    ```
    <% if user.admin %>...<% elif user %>...<% else %>...<% end %>
    <% for item in items %>...<% else %>(empty)<% end %>
    <% while n > 0 %>...<% n -= 1 %><% end %>
    ```

A trailing ``:`` on a statement is optional, so ``<% if x: %>`` and
``<% else: %>`` parse the same as their bare forms. ``end`` closes any
block; ``endif``, ``endfor`` and ``endwhile`` close only their own kind.

"""

from __future__ import annotations

import ast
import re
import textwrap
from collections.abc import Sequence

from tagweave._types import Token, TokenType
from tagweave.environment.exceptions import ErrorCode, TemplateSyntaxError
from tagweave.nodes import (
    Break,
    Continue,
    Data,
    Do,
    For,
    If,
    Node,
    Output,
    Set,
    Template,
    While,
)
from tagweave.parser.expressions import (
    ExpressionError,
    parse_expr,
    validate_expr,
    validate_target,
)

# Leading keyword of a statement tag and the rest of its text
_KEYWORD_RE = re.compile(r"(if|elif|else|for|while|break|continue)\b(.*)", re.DOTALL)
_END_RE = re.compile(r"end(if|for|while)?:?")
_SET_RE = re.compile(r"set\s+(?=\S)(.*)", re.DOTALL)

# Closing keyword -> the block keyword it may close (None closes any block)
_END_ALIASES: dict[str, str | None] = {
    "end": None,
    "endif": "if",
    "endfor": "for",
    "endwhile": "while",
}


class Parser:
    """Build a ``Template`` node from a token list.

    Attributes:
        tokens: Token list ending with EOF
        name: Template name for error messages
        source: Template source for error snippets
    """

    __slots__ = ("_loop_depth", "_pos", "name", "source", "tokens")

    def __init__(
        self,
        tokens: Sequence[Token],
        name: str | None = None,
        source: str | None = None,
    ):
        self.tokens = tokens
        self.name = name
        self.source = source
        self._pos = 0
        self._loop_depth = 0

    def parse(self) -> Template:
        """Parse the whole token stream."""
        body, _, _ = self._parse_body(block=None, opener=None, closers=())
        return Template(lineno=1, col_offset=0, body=tuple(body), name=self.name)

    # ------------------------------------------------------------------
    # Body parsing
    # ------------------------------------------------------------------

    def _parse_body(
        self,
        block: str | None,
        opener: Token | None,
        closers: Sequence[str],
    ) -> tuple[list[Node], str, Token]:
        """Parse nodes until one of ``closers`` (or ``end``) closes ``block``.

        Returns:
            (nodes, closing keyword, closing token). At top level the
            closing keyword is ``"eof"``.
        """
        nodes: list[Node] = []
        while True:
            token = self.tokens[self._pos]
            self._pos += 1

            if token.type is TokenType.EOF:
                if block is not None:
                    assert opener is not None
                    raise self._error(
                        f"Unclosed '{block}' block: missing '<% end %>'",
                        opener,
                        code=ErrorCode.UNCLOSED_BLOCK,
                    )
                return nodes, "eof", token

            if token.type is TokenType.DATA:
                # Carriage returns render as a space; newlines are kept as data
                nodes.append(Data(token.lineno, token.col_offset, token.value.replace("\r", " ")))
            elif token.type is TokenType.STATEMENT:
                closer = self._closing_keyword(token)
                if closer is not None:
                    if block is None or not self._closes(closer, block, closers):
                        raise self._error(
                            f"Unexpected '{closer}'"
                            + (f" inside '{block}' block" if block else ": no open block"),
                            token,
                            code=ErrorCode.UNEXPECTED_TOKEN,
                        )
                    return nodes, closer, token
                nodes.extend(self._parse_statement(token))
            else:
                nodes.append(
                    Output(
                        token.lineno,
                        token.col_offset,
                        expr=self._expr(token.value, token),
                        escape=token.type is TokenType.OUTPUT,
                    )
                )

    @staticmethod
    def _closes(closer: str, block: str, closers: Sequence[str]) -> bool:
        if closer in _END_ALIASES:
            target = _END_ALIASES[closer]
            return target is None or target == block
        return closer in closers

    def _closing_keyword(self, token: Token) -> str | None:
        """Return the keyword if ``token`` closes or continues a block."""
        text = token.value.strip()
        if _END_RE.fullmatch(text):
            return text.rstrip(":")
        match = _KEYWORD_RE.match(text)
        if match and match.group(1) in ("elif", "else"):
            return match.group(1)
        return None

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_statement(self, token: Token) -> list[Node]:
        text = token.value.strip()
        if not text:
            return []

        match = _KEYWORD_RE.match(text)
        if match:
            keyword, rest = match.group(1), _strip_colon(match.group(2))
            if keyword == "if":
                return [self._parse_if(token, rest)]
            if keyword == "for":
                return [self._parse_for(token, rest)]
            if keyword == "while":
                return [self._parse_while(token, rest)]
            if keyword in ("break", "continue"):
                return [self._parse_loop_control(token, keyword, rest)]

        set_match = _SET_RE.match(text)
        if set_match:
            nodes = self._parse_simple_statements(set_match.group(1), token)
            if len(nodes) != 1 or not isinstance(nodes[0], Set) or nodes[0].op is not None:
                raise self._error(
                    "Expected '<% set name = value %>'",
                    token,
                    code=ErrorCode.INVALID_STATEMENT,
                )
            return nodes

        return self._parse_simple_statements(token.value, token)

    def _parse_if(self, token: Token, rest: str) -> If:
        test = self._expr(rest, token)
        body, closer, closer_token = self._parse_body("if", token, ("elif", "else"))
        elif_: list[tuple[int, ast.expr, tuple[Node, ...]]] = []
        else_: list[Node] = []

        while closer == "elif":
            elif_token = closer_token
            elif_test = self._expr(_keyword_rest(elif_token), elif_token)
            elif_body, closer, closer_token = self._parse_body("if", token, ("elif", "else"))
            elif_.append((elif_token.lineno, elif_test, tuple(elif_body)))

        if closer == "else":
            self._expect_bare(closer_token, "else")
            else_, _, _ = self._parse_body("if", token, ())

        return If(
            token.lineno,
            token.col_offset,
            test=test,
            body=tuple(body),
            elif_=tuple(elif_),
            else_=tuple(else_),
        )

    def _parse_for(self, token: Token, rest: str) -> For:
        try:
            loop = ast.parse(f"for {rest}:\n    pass").body[0]
        except SyntaxError as e:
            raise self._syntax_error(e, token) from None
        if not isinstance(loop, ast.For):
            raise self._error("Expected '<% for name in iterable %>'", token)
        try:
            target = validate_target(loop.target)
            iter_ = validate_expr(loop.iter)
        except ExpressionError as e:
            raise self._expression_error(e, token) from None

        self._loop_depth += 1
        try:
            body, closer, closer_token = self._parse_body("for", token, ("else",))
        finally:
            self._loop_depth -= 1

        empty: list[Node] = []
        if closer == "else":
            self._expect_bare(closer_token, "else")
            empty, _, _ = self._parse_body("for", token, ())

        return For(
            token.lineno,
            token.col_offset,
            target=target,
            iter=iter_,
            body=tuple(body),
            empty=tuple(empty),
        )

    def _parse_while(self, token: Token, rest: str) -> While:
        test = self._expr(rest, token)
        self._loop_depth += 1
        try:
            body, _, _ = self._parse_body("while", token, ())
        finally:
            self._loop_depth -= 1
        return While(token.lineno, token.col_offset, test=test, body=tuple(body))

    def _parse_loop_control(self, token: Token, keyword: str, rest: str) -> Node:
        if rest:
            raise self._error(f"'{keyword}' takes no arguments", token)
        if not self._loop_depth:
            raise self._error(
                f"'{keyword}' outside of a loop",
                token,
                code=ErrorCode.UNEXPECTED_TOKEN,
            )
        node_type = Break if keyword == "break" else Continue
        return node_type(token.lineno, token.col_offset)

    def _parse_simple_statements(self, text: str, token: Token) -> list[Node]:
        """Parse assignments and side-effect expressions.

        Several statements may share one tag when separated by ``;`` or
        newlines.
        """
        # The first line follows the tag opener; later lines share their own indent
        first, newline, rest = text.partition("\n")
        text = first.lstrip() + newline + textwrap.dedent(rest)
        # Lines dropped by strip() still count towards statement line numbers
        leading = text[: len(text) - len(text.lstrip())].count("\n")
        try:
            module = ast.parse(text.strip())
        except SyntaxError as e:
            raise self._syntax_error(e, token, line_offset=leading) from None

        nodes: list[Node] = []
        for stmt in module.body:
            lineno = token.lineno + leading + stmt.lineno - 1
            try:
                if isinstance(stmt, ast.Assign):
                    if len(stmt.targets) != 1:
                        raise self._error("Chained assignment is not supported", token)
                    nodes.append(
                        Set(
                            lineno,
                            token.col_offset,
                            target=validate_target(stmt.targets[0]),
                            value=validate_expr(stmt.value),
                        )
                    )
                elif isinstance(stmt, ast.AugAssign):
                    if not isinstance(stmt.target, ast.Name):
                        raise self._error(
                            "Augmented assignment only supports plain names", token
                        )
                    nodes.append(
                        Set(
                            lineno,
                            token.col_offset,
                            target=validate_target(stmt.target),
                            value=validate_expr(stmt.value),
                            op=stmt.op,
                        )
                    )
                elif isinstance(stmt, ast.Expr):
                    nodes.append(Do(lineno, token.col_offset, expr=validate_expr(stmt.value)))
                elif isinstance(stmt, ast.Pass):
                    continue
                else:
                    raise self._error(
                        f"'{type(stmt).__name__}' statements are not allowed in templates",
                        token,
                    )
            except ExpressionError as e:
                raise self._expression_error(e, token, line_offset=leading) from None
        return nodes

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _expr(self, text: str, token: Token) -> ast.expr:
        if not text.strip():
            raise self._error(
                "Empty expression",
                token,
                code=ErrorCode.INVALID_EXPRESSION,
            )
        try:
            return parse_expr(text)
        except SyntaxError as e:
            raise self._syntax_error(e, token, code=ErrorCode.INVALID_EXPRESSION) from None
        except ExpressionError as e:
            raise self._expression_error(e, token) from None

    def _expect_bare(self, token: Token, keyword: str) -> None:
        if _keyword_rest(token):
            raise self._error(f"'{keyword}' takes no condition", token)

    def _error(
        self,
        message: str,
        token: Token,
        code: ErrorCode = ErrorCode.INVALID_STATEMENT,
        line_offset: int = 0,
    ) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            message,
            lineno=token.lineno + line_offset,
            name=self.name,
            source=self.source,
            col_offset=token.col_offset,
            code=code,
        )

    def _syntax_error(
        self,
        error: SyntaxError,
        token: Token,
        code: ErrorCode = ErrorCode.INVALID_STATEMENT,
        line_offset: int = 0,
    ) -> TemplateSyntaxError:
        return self._error(
            f"Invalid syntax in tag: {error.msg}",
            token,
            code=code,
            line_offset=line_offset + max((error.lineno or 1) - 1, 0),
        )

    def _expression_error(
        self,
        error: ExpressionError,
        token: Token,
        line_offset: int = 0,
    ) -> TemplateSyntaxError:
        return self._error(
            error.message,
            token,
            code=ErrorCode.INVALID_EXPRESSION,
            line_offset=line_offset + max(error.lineno - 1, 0),
        )


def _strip_colon(text: str) -> str:
    text = text.strip()
    return text[:-1].rstrip() if text.endswith(":") else text


def _keyword_rest(token: Token) -> str:
    """Text of a statement tag after its leading keyword."""
    match = _KEYWORD_RE.match(token.value.strip())
    return _strip_colon(match.group(2)) if match else ""


def parse(tokens: Sequence[Token], name: str | None = None, source: str | None = None) -> Template:
    """Parse a token list into a ``Template`` node."""
    return Parser(tokens, name=name, source=source).parse()
