"""Tag scanner for tagweave templates.

Splits template source into a flat token stream in a single left-to-right
pass. Literal text becomes ``DATA`` tokens; each ``<% ... %>`` region becomes
one tag token whose kind is chosen by the character after ``<%``:

    ```
    <%= expr %>   OUTPUT       value escaped on output
    <%- expr %>   RAW_OUTPUT   value written as is
    <%  stmt %>   STATEMENT    executed, no output
    ```

The inner text of a tag is copied verbatim; interpreting it is the
parser's job. A ``<%`` with no later ``%>`` is an ``UNCLOSED_TAG`` syntax
error; the scanner never reads past the end of input looking for one.

Example:
    >>> [t.type.name for t in tokenize("Hi <%= name %>!")]
    ['DATA', 'OUTPUT', 'DATA', 'EOF']

"""

from __future__ import annotations

from tagweave._types import Token, TokenType
from tagweave.environment.exceptions import ErrorCode, TemplateSyntaxError

TAG_START = "<%"
TAG_END = "%>"

# Character after "<%" -> token kind
_TAG_MARKERS: dict[str, TokenType] = {
    "=": TokenType.OUTPUT,
    "-": TokenType.RAW_OUTPUT,
}


class Lexer:
    """Single-pass scanner producing tokens with source positions.

    Attributes:
        source: Template source text
        name: Template name for error messages
    """

    __slots__ = ("_col", "_lineno", "_pos", "name", "source")

    def __init__(self, source: str, name: str | None = None):
        self.source = source
        self.name = name
        self._pos = 0
        self._lineno = 1
        self._col = 0

    def tokenize(self) -> list[Token]:
        """Scan the whole source and return the token list, ending with EOF."""
        source = self.source
        tokens: list[Token] = []

        while self._pos < len(source):
            start = source.find(TAG_START, self._pos)
            if start == -1:
                tokens.append(self._data_token(source[self._pos :]))
                break
            if start > self._pos:
                tokens.append(self._data_token(source[self._pos : start]))
            tokens.append(self._tag_token(start))

        tokens.append(Token(TokenType.EOF, "", self._lineno, self._col))
        return tokens

    def _data_token(self, text: str) -> Token:
        token = Token(TokenType.DATA, text, self._lineno, self._col)
        self._advance(text)
        return token

    def _tag_token(self, start: int) -> Token:
        """Consume the tag opening at ``start`` through its ``%>``."""
        lineno, col = self._lineno, self._col
        inner_start = start + len(TAG_START)
        kind = _TAG_MARKERS.get(self.source[inner_start : inner_start + 1], TokenType.STATEMENT)
        if kind is not TokenType.STATEMENT:
            inner_start += 1

        end = self.source.find(TAG_END, inner_start)
        if end == -1:
            raise TemplateSyntaxError(
                "Unterminated tag: '<%' has no closing '%>'",
                lineno=lineno,
                name=self.name,
                source=self.source,
                col_offset=col,
                code=ErrorCode.UNCLOSED_TAG,
            )

        stop = end + len(TAG_END)
        self._advance(self.source[start:stop])
        return Token(kind, self.source[inner_start:end], lineno, col)

    def _advance(self, text: str) -> None:
        self._pos += len(text)
        newlines = text.count("\n")
        if newlines:
            self._lineno += newlines
            self._col = len(text) - text.rfind("\n") - 1
        else:
            self._col += len(text)


def tokenize(source: str, name: str | None = None) -> list[Token]:
    """Tokenize template source.

    Raises:
        TemplateSyntaxError: If a tag is opened but never closed.
    """
    return Lexer(source, name).tokenize()
