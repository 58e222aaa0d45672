"""tagweave Template — compiled template object ready for rendering.

The Template class is the executable unit: it wraps the code object built
by the compiler, extracts the generated ``render`` function once, and binds
it to the escaper.

Architecture:
    ```
    Template
    ├── _code: code object              # Compiled Python bytecode
    ├── _render_func: callable          # render(inputs, escape, this=None)
    ├── _escape: callable               # Escaper for <%= %> tags
    └── _name, _source                  # For error messages
    ```

Thread-Safety:
- Templates are immutable after construction
- ``render()`` creates only local state (scope dict, output buffer)
- Multiple threads can call ``render()`` concurrently

"""

from __future__ import annotations

import ast
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from tagweave.compiler import RENDER_FUNCTION
from tagweave.render_context import render_context
from tagweave.template.helpers import STATIC_NAMESPACE
from tagweave.utils.html import html_escape

if TYPE_CHECKING:
    import types


class Template:
    """Compiled template ready for rendering.

    Calling the template (or its ``render`` method) with an inputs mapping
    returns the rendered string. Keyword arguments are merged over the
    mapping. ``context`` is the execution receiver, visible to tags as
    ``self``.

    Errors raised while evaluating a tag propagate unchanged.

    Example:
            >>> from tagweave import compile
            >>> t = compile("Hello, <%= name %>!")
            >>> t({"name": "World"})
            'Hello, World!'
            >>> t.render(name="<World>")
            'Hello, &lt;World&gt;!'

    """

    __slots__ = (
        "_code",
        "_escape",
        "_generated_source",
        "_module",
        "_name",
        "_render_func",
        "_source",
    )

    def __init__(
        self,
        code: types.CodeType,
        name: str | None = None,
        source: str | None = None,
        module: ast.Module | None = None,
        escape: Callable[[Any], str] = html_escape,
    ):
        """Initialize template with compiled code.

        Args:
            code: Compiled Python code object defining ``render``
            name: Template name (for error messages)
            source: Template source (for error snippets)
            module: Python AST the code was compiled from; kept for
                ``generated_source``
            escape: Escaper bound to ``<%= %>`` output
        """
        self._code = code
        self._name = name
        self._source = source
        self._module = module
        self._escape = escape
        self._generated_source: str | None = None

        namespace = dict(STATIC_NAMESPACE)
        exec(code, namespace)
        self._render_func: Callable[..., str] = namespace[RENDER_FUNCTION]

    @property
    def name(self) -> str | None:
        """Template name (the cache key when compiled with a filename)."""
        return self._name

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def generated_source(self) -> str | None:
        """Python source of the generated render function, if available."""
        if self._generated_source is None and self._module is not None:
            self._generated_source = ast.unparse(self._module)
        return self._generated_source

    def render(
        self,
        inputs: Mapping[str, Any] | None = None,
        context: Any = None,
        **kwargs: Any,
    ) -> str:
        """Render the template.

        Args:
            inputs: Names visible to tag expressions
            context: Execution receiver, visible as ``self``
            **kwargs: Extra inputs, overriding keys of ``inputs``

        Raises:
            UndefinedError: A tag referenced a name with no value.
        """
        scope: dict[str, Any] = dict(inputs) if inputs else {}
        if kwargs:
            scope.update(kwargs)

        with render_context(template_name=self._name, source=self._source):
            return self._render_func(scope, self._escape, context)

    __call__ = render

    def __repr__(self) -> str:
        return f"<Template {self._name or '<string>'!r}>"
