"""Basic statement compilation for the tagweave compiler.

Provides mixin for compiling output statements (data, output).
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tagweave.nodes import Data, Output


class BasicStatementMixin:
    """Mixin for compiling literal text and output tags."""

    if TYPE_CHECKING:
        # From ExpressionCompilationMixin
        def _compile_expr(self, node: Any, lineno: int) -> ast.expr: ...

        # From Compiler core
        def _emit_output(self, value_expr: ast.expr) -> ast.stmt: ...

    def _compile_data(self, node: Data) -> list[ast.stmt]:
        """Compile literal text: _append('text')"""
        if not node.value:
            return []
        return [self._emit_output(ast.Constant(value=node.value))]

    def _compile_output(self, node: Output) -> list[ast.stmt]:
        """Compile <%= expr %> / <%- expr %>.

        Escaped: _append(escape(expr))
        Raw:     _append(_str(expr))
        """
        expr = self._compile_expr(node.expr, node.lineno)
        func = "escape" if node.escape else "_str"
        return [
            self._emit_output(
                ast.Call(
                    func=ast.Name(id=func, ctx=ast.Load()),
                    args=[expr],
                    keywords=[],
                )
            )
        ]
