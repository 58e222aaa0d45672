"""Token types shared by the lexer and parser."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """Kinds of tokens produced by the tag scanner."""

    DATA = "data"  # literal text between tags
    OUTPUT = "output"  # <%= expr %>, escaped
    RAW_OUTPUT = "raw_output"  # <%- expr %>, not escaped
    STATEMENT = "statement"  # <% stmt %>, no output
    EOF = "eof"


@dataclass(frozen=True, slots=True)
class Token:
    """A lexical unit of a template.

    For tag tokens, ``value`` is the inner text between the tag's marker
    and ``%>``, copied verbatim. ``lineno`` and ``col_offset`` point at the
    opening ``<%`` (1-based line, 0-based column).
    """

    type: TokenType
    value: str
    lineno: int
    col_offset: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.lineno}:{self.col_offset})"
