"""Control flow nodes for the tagweave template tree."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from tagweave.nodes.base import Expr, Node


@dataclass(frozen=True, slots=True)
class If(Node):
    """Conditional: <% if cond %>...<% elif cond %>...<% else %>...<% end %>

    Each ``elif_`` branch is ``(lineno, test, body)``.
    """

    test: Expr
    body: Sequence[Node]
    elif_: Sequence[tuple[int, Expr, Sequence[Node]]] = ()
    else_: Sequence[Node] = ()


@dataclass(frozen=True, slots=True)
class For(Node):
    """For loop: <% for x in items %>...<% else %>...<% end %>

    The ``else`` body (``empty``) renders when the iterable yields nothing.
    """

    target: Expr
    iter: Expr
    body: Sequence[Node]
    empty: Sequence[Node] = ()


@dataclass(frozen=True, slots=True)
class While(Node):
    """While loop: <% while cond %>...<% end %>"""

    test: Expr
    body: Sequence[Node]


@dataclass(frozen=True, slots=True)
class Break(Node):
    """Break out of loop: <% break %>"""


@dataclass(frozen=True, slots=True)
class Continue(Node):
    """Skip to next iteration: <% continue %>"""
