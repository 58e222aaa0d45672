"""Expression compilation for the tagweave compiler.

Rewrites validated tag expressions so that free names resolve through the
render scope instead of Python's global namespace:

    ```
    user.name              ->  _lookup(_ctx, 'user').name
    [x * k for x in xs]    ->  [x * _lookup(_ctx, 'k') for x in _lookup(_ctx, 'xs')]
    <% total = a + 1 %>    ->  _ctx['total'] = _lookup(_ctx, 'a') + 1
    ```

Names bound by a comprehension stay plain Python locals inside it.
"""

from __future__ import annotations

import ast
import copy
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tagweave.nodes import Expr

SCOPE_NAME = "_ctx"
LOOKUP_NAME = "_lookup"


def _target_names(target: ast.expr) -> set[str]:
    return {node.id for node in ast.walk(target) if isinstance(node, ast.Name)}


class _ScopeRewriter(ast.NodeTransformer):
    """Route free names through ``_lookup`` / ``_ctx[...]``."""

    def __init__(self) -> None:
        self._bound: list[set[str]] = []

    def visit_Name(self, node: ast.Name) -> ast.expr:
        if any(node.id in scope for scope in self._bound):
            return node
        if isinstance(node.ctx, ast.Store):
            return ast.Subscript(
                value=ast.Name(id=SCOPE_NAME, ctx=ast.Load()),
                slice=ast.Constant(value=node.id),
                ctx=ast.Store(),
            )
        return ast.Call(
            func=ast.Name(id=LOOKUP_NAME, ctx=ast.Load()),
            args=[ast.Name(id=SCOPE_NAME, ctx=ast.Load()), ast.Constant(value=node.id)],
            keywords=[],
        )

    def _visit_comprehension(self, node: ast.AST, fields: tuple[str, ...]) -> ast.AST:
        generators: list[ast.comprehension] = node.generators  # type: ignore[attr-defined]
        # The first iterable is evaluated in the enclosing scope
        generators[0].iter = self.visit(generators[0].iter)

        bound: set[str] = set()
        for generator in generators:
            bound |= _target_names(generator.target)

        self._bound.append(bound)
        try:
            for i, generator in enumerate(generators):
                if i:
                    generator.iter = self.visit(generator.iter)
                generator.ifs = [self.visit(test) for test in generator.ifs]
            for field in fields:
                setattr(node, field, self.visit(getattr(node, field)))
        finally:
            self._bound.pop()
        return node

    def visit_ListComp(self, node: ast.ListComp) -> ast.AST:
        return self._visit_comprehension(node, ("elt",))

    def visit_SetComp(self, node: ast.SetComp) -> ast.AST:
        return self._visit_comprehension(node, ("elt",))

    def visit_GeneratorExp(self, node: ast.GeneratorExp) -> ast.AST:
        return self._visit_comprehension(node, ("elt",))

    def visit_DictComp(self, node: ast.DictComp) -> ast.AST:
        return self._visit_comprehension(node, ("key", "value"))


def locate(node: ast.AST, lineno: int) -> ast.AST:
    """Point every node in ``node`` at template line ``lineno``.

    Tracebacks through compiled templates then report template lines.
    """
    for child in ast.walk(node):
        if "lineno" in child._attributes:
            child.lineno = lineno
            child.end_lineno = lineno
            child.col_offset = 0
            child.end_col_offset = 0
    return node


class ExpressionCompilationMixin:
    """Mixin compiling tag expressions and assignment targets."""

    def _compile_expr(self, node: Expr, lineno: int) -> ast.expr:
        """Compile a load-context expression.

        The node tree is copied first; template nodes are never mutated.
        """
        rewritten = _ScopeRewriter().visit(copy.deepcopy(node))
        return locate(rewritten, lineno)  # type: ignore[return-value]

    def _compile_target(self, node: Expr, lineno: int) -> ast.expr:
        """Compile an assignment or loop target (names become ``_ctx`` keys)."""
        return self._compile_expr(node, lineno)
