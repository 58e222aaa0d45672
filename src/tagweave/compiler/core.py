"""tagweave Compiler Core — main Compiler class.

The Compiler transforms the template node tree into a Python ``ast.Module``
and compiles it to a code object. Uses a mixin-based design: expression
rewriting and each statement family live in their own module.

Generated Code:
Every template becomes one function:

    ```python
    def render(inputs, escape, this=None):
        _ctx = {**inputs, 'self': this}
        _buf = []
        _append = _buf.append
        _rc = _get_render_ctx()
        _append('Hi ')
        _rc.line = 1
        _append(escape(_lookup(_ctx, 'name')))
        _append('!')
        return ''.join(_buf)
    ```

- ``_ctx`` is the render scope: input keys are visible to tags as bare
  names, assignments and loop variables are stored back into it.
  ``self`` is always the receiver, even if an input uses that key.
- ``escape`` is bound by the caller; it is the escaper for ``<%= %>``.
- ``_rc.line`` tracks the current template line for error messages.

``generate()`` returns the module; ``ast.unparse()`` of it is the generated
source shown by ``parse()`` and by the ``debug`` option.

"""

from __future__ import annotations

import ast
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from tagweave.compiler.expressions import SCOPE_NAME, ExpressionCompilationMixin
from tagweave.compiler.statements import StatementCompilationMixin

if TYPE_CHECKING:
    import types

    from tagweave.nodes import Node
    from tagweave.nodes import Template as TemplateNode

logger = logging.getLogger(__name__)

RENDER_FUNCTION = "render"


class Compiler(ExpressionCompilationMixin, StatementCompilationMixin):
    """Compile a template node tree to Python code objects.

    Attributes:
        _block_counter: Counter for unique helper variable names

    Node Dispatch:
        Uses O(1) dict lookup for node type → handler:
            ```python
            handler = dispatch[type(node).__name__]
            ```

    Example:
            >>> from tagweave.lexer import tokenize
            >>> from tagweave.parser import parse
            >>> tree = parse(tokenize("Hello, <%= name %>!"))
            >>> code = Compiler().compile(tree, name="greeting.html")

    """

    __slots__ = ("_block_counter", "_node_dispatch")

    # Node types that evaluate expressions and should track line numbers
    _LINE_TRACKED_NODES = frozenset({"Output", "If", "For", "While", "Set", "Do"})

    def __init__(self) -> None:
        self._block_counter: int = 0

    def generate(self, node: TemplateNode) -> ast.Module:
        """Build the Python module for ``node``."""
        self._block_counter = 0

        module = ast.Module(body=[self._make_render_function(node)], type_ignores=[])
        return ast.fix_missing_locations(module)

    def compile(self, node: TemplateNode, name: str | None = None) -> types.CodeType:
        """Compile a template tree to a code object ready for ``exec()``.

        Args:
            node: Root Template node
            name: Template name; appears as the filename in tracebacks
        """
        return self.compile_module(self.generate(node), name or node.name)

    def compile_module(self, module: ast.Module, name: str | None = None) -> types.CodeType:
        """Compile a module from ``generate()`` to a code object."""
        filename = name or "<template>"
        logger.debug("Compiling template %s", filename)
        return compile(module, filename, "exec")

    def _emit_output(self, value_expr: ast.expr) -> ast.stmt:
        """Generate ``_append(value)``; all output flows through here."""
        return ast.Expr(
            value=ast.Call(
                func=ast.Name(id="_append", ctx=ast.Load()),
                args=[value_expr],
                keywords=[],
            ),
        )

    def _make_render_function(self, node: TemplateNode) -> ast.FunctionDef:
        """Generate ``render(inputs, escape, this=None)``."""
        body: list[ast.stmt] = [
            # _ctx = {**inputs, 'self': this}
            ast.Assign(
                targets=[ast.Name(id=SCOPE_NAME, ctx=ast.Store())],
                value=ast.Dict(
                    keys=[None, ast.Constant(value="self")],
                    values=[
                        ast.Name(id="inputs", ctx=ast.Load()),
                        ast.Name(id="this", ctx=ast.Load()),
                    ],
                ),
            ),
            # _buf = []
            ast.Assign(
                targets=[ast.Name(id="_buf", ctx=ast.Store())],
                value=ast.List(elts=[], ctx=ast.Load()),
            ),
            # _append = _buf.append
            ast.Assign(
                targets=[ast.Name(id="_append", ctx=ast.Store())],
                value=ast.Attribute(
                    value=ast.Name(id="_buf", ctx=ast.Load()),
                    attr="append",
                    ctx=ast.Load(),
                ),
            ),
            # _rc = _get_render_ctx()
            ast.Assign(
                targets=[ast.Name(id="_rc", ctx=ast.Store())],
                value=ast.Call(
                    func=ast.Name(id="_get_render_ctx", ctx=ast.Load()),
                    args=[],
                    keywords=[],
                ),
            ),
        ]

        for child in node.body:
            body.extend(self._compile_node(child))

        # return ''.join(_buf)
        body.append(
            ast.Return(
                value=ast.Call(
                    func=ast.Attribute(
                        value=ast.Constant(value=""),
                        attr="join",
                        ctx=ast.Load(),
                    ),
                    args=[ast.Name(id="_buf", ctx=ast.Load())],
                    keywords=[],
                ),
            )
        )

        return ast.FunctionDef(
            name=RENDER_FUNCTION,
            args=ast.arguments(
                posonlyargs=[],
                args=[ast.arg(arg="inputs"), ast.arg(arg="escape"), ast.arg(arg="this")],
                vararg=None,
                kwonlyargs=[],
                kw_defaults=[],
                kwarg=None,
                defaults=[ast.Constant(value=None)],
            ),
            body=body,
            decorator_list=[],
            returns=None,
            type_params=[],
        )

    def _make_line_marker(self, lineno: int) -> ast.stmt:
        """Generate ``_rc.line = lineno`` for error tracking."""
        return ast.Assign(
            targets=[
                ast.Attribute(
                    value=ast.Name(id="_rc", ctx=ast.Load()),
                    attr="line",
                    ctx=ast.Store(),
                )
            ],
            value=ast.Constant(value=lineno),
        )

    def _compile_node(self, node: Node) -> list[ast.stmt]:
        """Compile a single node to Python statements.

        Nodes that evaluate expressions are preceded by a line marker.
        """
        node_type = type(node).__name__

        stmts: list[ast.stmt] = []
        if node_type in self._LINE_TRACKED_NODES:
            stmts.append(self._make_line_marker(node.lineno))

        handler = self._get_node_dispatch()[node_type]
        stmts.extend(handler(node))
        return stmts

    def _get_node_dispatch(self) -> dict[str, Callable[..., list[ast.stmt]]]:
        """Get node type dispatch table (cached on first call)."""
        if not hasattr(self, "_node_dispatch"):
            self._node_dispatch = {
                "Data": self._compile_data,
                "Output": self._compile_output,
                "If": self._compile_if,
                "For": self._compile_for,
                "While": self._compile_while,
                "Break": self._compile_break,
                "Continue": self._compile_continue,
                "Set": self._compile_set,
                "Do": self._compile_do,
            }
        return self._node_dispatch


def generate_source(node: TemplateNode) -> str:
    """Return the Python source text generated for ``node``."""
    return ast.unparse(Compiler().generate(node))


