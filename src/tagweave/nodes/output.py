"""Output nodes for the tagweave template tree."""

from __future__ import annotations

from dataclasses import dataclass

from tagweave.nodes.base import Expr, Node


@dataclass(frozen=True, slots=True)
class Data(Node):
    """Literal text between tags."""

    value: str


@dataclass(frozen=True, slots=True)
class Output(Node):
    """Output expression: <%= expr %> (escaped) or <%- expr %> (raw)"""

    expr: Expr
    escape: bool = True
