"""Assignment and side-effect nodes for the tagweave template tree."""

from __future__ import annotations

import ast
from dataclasses import dataclass

from tagweave.nodes.base import Expr, Node


@dataclass(frozen=True, slots=True)
class Set(Node):
    """Assignment: <% set x = expr %> or <% x = expr %>

    ``op`` holds the binary operator of an augmented assignment
    (<% x += 1 %>), otherwise None.
    """

    target: Expr
    value: Expr
    op: ast.operator | None = None


@dataclass(frozen=True, slots=True)
class Do(Node):
    """Expression evaluated for its side effects: <% items.append(x) %>"""

    expr: Expr
