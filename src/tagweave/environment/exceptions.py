"""Exceptions for the tagweave template compiler.

Exception Hierarchy:
TemplateError (base)
├── ConfigurationError        # Invalid render options (cache without filename)
├── TemplateSyntaxError       # Parse-time error (unterminated tag, bad statement)
└── UndefinedError            # Tag expression used a name with no value

Errors raised by user code inside a tag (``ZeroDivisionError``,
``AttributeError``, ...) are not wrapped: they reach the caller of
``render()`` unchanged.

Error Messages:
Syntax and undefined-name errors carry the template name, the line number
and, when the source is known, a snippet of the offending line:

    ```
    T-LEX-001: Unterminated tag: '<%' has no closing '%>'
      --> page.html:3:4
       |
     3 | <p><% if user
       |     ^
       |
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum


class ErrorCode(Enum):
    """Searchable error codes for tagweave errors.

    Format: T-{CATEGORY}-{NUMBER}
    Categories: CFG (configuration), LEX (lexer), PAR (parser), RUN (runtime)
    """

    # Configuration errors (T-CFG-xxx)
    CACHE_REQUIRES_FILENAME = "T-CFG-001"
    UNKNOWN_OPTION = "T-CFG-002"

    # Lexer errors (T-LEX-xxx)
    UNCLOSED_TAG = "T-LEX-001"

    # Parser errors (T-PAR-xxx)
    UNEXPECTED_TOKEN = "T-PAR-001"
    UNCLOSED_BLOCK = "T-PAR-002"
    INVALID_EXPRESSION = "T-PAR-003"
    INVALID_STATEMENT = "T-PAR-004"

    # Runtime errors (T-RUN-xxx)
    UNDEFINED_VARIABLE = "T-RUN-001"

    @property
    def category(self) -> str:
        """Error category (e.g., 'runtime', 'lexer', 'parser', 'configuration')."""
        prefix = self.value.split("-")[1]
        return {
            "CFG": "configuration",
            "LEX": "lexer",
            "PAR": "parser",
            "RUN": "runtime",
        }.get(prefix, "unknown")


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional column offset for caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        """Format snippet in a compiler-diagnostic style."""
        parts: list[str] = ["   |"]
        for lineno, content in self.lines:
            marker = ">" if lineno == self.error_line else " "
            parts.append(f"{marker}{lineno:>2} | {content}")
            if lineno == self.error_line and self.column is not None:
                parts.append(f"   | {' ' * self.column}^")
        parts.append("   |")
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional column offset for caret pointer.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


class TemplateError(Exception):
    """Base exception for all tagweave errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None


class ConfigurationError(TemplateError):
    """Render options are inconsistent.

    Raised before any compilation happens, e.g. when ``cache=True`` is
    requested without a ``filename`` to key the cache.

    Example:
            >>> render("Hi", cache=True)
        ConfigurationError: T-CFG-001: "cache" option requires "filename"
    """

    code: ErrorCode | None = ErrorCode.CACHE_REQUIRES_FILENAME

    def __init__(self, message: str, code: ErrorCode | None = None):
        self.message = message
        if code is not None:
            self.code = code
        prefix = f"{self.code.value}: " if self.code else ""
        super().__init__(f"{prefix}{message}")


class TemplateSyntaxError(TemplateError):
    """Parse-time syntax error in template source.

    Raised by the lexer for unterminated tags and by the parser for
    malformed statements, rejected expressions and unbalanced blocks.

    When ``source`` and ``lineno`` are provided, the error message includes
    a source snippet with the offending line.  If ``col_offset`` is also
    given, a caret (``^``) points at the exact column.
    """

    code: ErrorCode | None = ErrorCode.INVALID_STATEMENT

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.source = source
        self.col_offset = col_offset
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        location = self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
            if self.col_offset is not None:
                location += f":{self.col_offset}"

        prefix = f"{self.code.value}: " if self.code else ""
        header = f"{prefix}{self.message}\n  --> {location}"

        if self.source and self.lineno:
            lines = self.source.splitlines()
            if 0 < self.lineno <= len(lines):
                snippet = build_source_snippet(
                    self.source, self.lineno, context_lines=0, column=self.col_offset
                )
                return f"{header}\n{snippet.format()}"

        return header


class UndefinedError(TemplateError):
    """Raised when a tag expression references a name with no value.

    Names resolve against the render inputs, then the safe built-ins.
    When ``available_names`` is provided, a "Did you mean?" suggestion is
    included if a close match is found.

    Example:
            >>> render("<%= usr %>", inputs={"user": "ana"})
        UndefinedError: Undefined variable 'usr' in <template>:1. Did you mean 'user'?
    """

    code: ErrorCode | None = ErrorCode.UNDEFINED_VARIABLE

    def __init__(
        self,
        name: str,
        template: str | None = None,
        lineno: int | None = None,
        available_names: frozenset[str] | None = None,
        source_snippet: SourceSnippet | None = None,
    ):
        self.name = name
        self.template = template or "<template>"
        self.lineno = lineno
        self._available_names = available_names
        self.source_snippet = source_snippet
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        location = self.template
        if self.lineno:
            location += f":{self.lineno}"
        msg = f"Undefined variable '{self.name}' in {location}"

        if self._available_names:
            matches = get_close_matches(self.name, self._available_names, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"

        if self.source_snippet:
            msg += "\n" + self.source_snippet.format()

        return msg
