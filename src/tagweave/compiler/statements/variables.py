"""Assignment compilation for the tagweave compiler.

Provides mixin for compiling set/assignment and side-effect statements.
Assigned names are stored in the render scope (``_ctx``), so later tags
see them as bare names just like render inputs.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tagweave.nodes import Do, Set


class VariableAssignmentMixin:
    """Mixin for compiling assignments and expression statements."""

    if TYPE_CHECKING:
        # From ExpressionCompilationMixin
        def _compile_expr(self, node: Any, lineno: int) -> ast.expr: ...
        def _compile_target(self, node: Any, lineno: int) -> ast.expr: ...

    def _compile_set(self, node: Set) -> list[ast.stmt]:
        """Compile <% set x = expr %>, <% a, b = pair %> and <% n += 1 %>.

        Augmented assignment reads the current value through ``_lookup`` so
        an undefined name raises UndefinedError rather than KeyError.
        """
        value = self._compile_expr(node.value, node.lineno)
        if node.op is not None:
            current = self._compile_expr(node.target, node.lineno)
            value = ast.BinOp(left=_as_load(current), op=node.op, right=value)

        return [
            ast.Assign(
                targets=[self._compile_target(node.target, node.lineno)],
                value=value,
            )
        ]

    def _compile_do(self, node: Do) -> list[ast.stmt]:
        """Compile a side-effect expression: <% items.append(x) %>"""
        return [ast.Expr(value=self._compile_expr(node.expr, node.lineno))]


def _as_load(node: ast.expr) -> ast.expr:
    """Turn a compiled store target (``_ctx['n']``) into a lookup call."""
    if isinstance(node, ast.Subscript) and isinstance(node.ctx, ast.Store):
        key = node.slice
        return ast.Call(
            func=ast.Name(id="_lookup", ctx=ast.Load()),
            args=[node.value, key],
            keywords=[],
        )
    return node
