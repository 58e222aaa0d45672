"""Control flow statement compilation for the tagweave compiler.

Provides mixin for compiling if, for, while, break and continue.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tagweave.nodes import For, If, Node, While


class ControlFlowMixin:
    """Mixin for compiling control flow statements."""

    if TYPE_CHECKING:
        # Host attributes (from Compiler.__init__)
        _block_counter: int

        # From ExpressionCompilationMixin
        def _compile_expr(self, node: Any, lineno: int) -> ast.expr: ...
        def _compile_target(self, node: Any, lineno: int) -> ast.expr: ...

        # From Compiler core
        def _compile_node(self, node: Node) -> list[ast.stmt]: ...
        def _make_line_marker(self, lineno: int) -> ast.stmt: ...

    def _compile_body(self, nodes: Sequence[Node]) -> list[ast.stmt]:
        """Compile a block body; empty bodies become ``pass``."""
        stmts: list[ast.stmt] = []
        for child in nodes:
            stmts.extend(self._compile_node(child))
        return stmts or [ast.Pass()]

    def _compile_if(self, node: If) -> list[ast.stmt]:
        """Compile <% if %> with its elif chain and else body."""
        orelse: list[ast.stmt] = self._compile_body(node.else_) if node.else_ else []

        # Build the elif chain inside-out so each test nests in the previous orelse
        for lineno, elif_test, elif_body in reversed(node.elif_):
            orelse = [
                self._make_line_marker(lineno),
                ast.If(
                    test=self._compile_expr(elif_test, lineno),
                    body=self._compile_body(elif_body),
                    orelse=orelse,
                )
            ]

        return [
            ast.If(
                test=self._compile_expr(node.test, node.lineno),
                body=self._compile_body(node.body),
                orelse=orelse,
            )
        ]

    def _compile_for(self, node: For) -> list[ast.stmt]:
        """Compile <% for target in iter %>.

        With an ``else`` body, a flag records whether the loop ran:

            _iterated_1 = False
            for _ctx['item'] in _lookup(_ctx, 'items'):
                _iterated_1 = True
                ...
            if not _iterated_1:
                ... else body ...
        """
        target = self._compile_target(node.target, node.lineno)
        iter_expr = self._compile_expr(node.iter, node.lineno)
        body = self._compile_body(node.body)

        if not node.empty:
            return [ast.For(target=target, iter=iter_expr, body=body, orelse=[])]

        self._block_counter += 1
        flag = f"_iterated_{self._block_counter}"
        return [
            ast.Assign(
                targets=[ast.Name(id=flag, ctx=ast.Store())],
                value=ast.Constant(value=False),
            ),
            ast.For(
                target=target,
                iter=iter_expr,
                body=[
                    ast.Assign(
                        targets=[ast.Name(id=flag, ctx=ast.Store())],
                        value=ast.Constant(value=True),
                    ),
                    *body,
                ],
                orelse=[],
            ),
            ast.If(
                test=ast.UnaryOp(op=ast.Not(), operand=ast.Name(id=flag, ctx=ast.Load())),
                body=self._compile_body(node.empty),
                orelse=[],
            ),
        ]

    def _compile_while(self, node: While) -> list[ast.stmt]:
        """Compile <% while cond %>...<% end %>"""
        return [
            ast.While(
                test=self._compile_expr(node.test, node.lineno),
                body=self._compile_body(node.body),
                orelse=[],
            )
        ]

    def _compile_break(self, node: Any) -> list[ast.stmt]:
        return [ast.Break()]

    def _compile_continue(self, node: Any) -> list[ast.stmt]:
        return [ast.Continue()]
