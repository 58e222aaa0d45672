"""tagweave — compile ``<% %>`` templates into reusable Python renderers.

A template is literal text with embedded tags:

    ```
    <%= expr %>   evaluate, HTML-escape, append to output
    <%- expr %>   evaluate, append to output unescaped
    <% stmt %>    run a statement (if/for/while/end, assignment, call)
    ```

Quickstart:
    >>> import tagweave
    >>> tagweave.render("Hi <%= name %>!", inputs={"name": "World"})
    'Hi World!'
    >>> tagweave.render("<% if flag %>Yes<% else %>No<% end %>", locals={"flag": True})
    'Yes'

Reusable templates:
    >>> page = tagweave.compile("<% for u in users %><li><%= u %></li><% end %>")
    >>> page({"users": ["<ana>", "bo"]})
    '<li>&lt;ana&gt;</li><li>bo</li>'

Caching:
    ``render(source, cache=True, filename="page.html")`` compiles once per
    filename and reuses the result until ``clear_cache()``. The cached
    template is returned even if a later call passes different source.

Architecture:
Template Source → Lexer → Parser → Node tree → Compiler → Python AST → exec()

1. **Lexer**: splits source into DATA and tag tokens; unterminated tags fail
2. **Parser**: builds the node tree, validating tag expressions
3. **Compiler**: emits a ``render(inputs, escape, this=None)`` function
4. **Template**: binds the escaper and exposes ``render()``

Tag expressions are Python expressions restricted to a safe subset. Free
names resolve against the inputs, then a small set of built-ins; anything
else raises ``UndefinedError``.

"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tagweave._types import Token, TokenType
from tagweave.environment import (
    ConfigurationError,
    Environment,
    ErrorCode,
    RenderOptions,
    SourceSnippet,
    TemplateCache,
    TemplateError,
    TemplateSyntaxError,
    UndefinedError,
)
from tagweave.lexer import tokenize
from tagweave.template import Template
from tagweave.utils.html import html_escape

__version__ = "0.1.0"

escape = html_escape

# Process-wide default cache and environment behind the module-level API
default_cache = TemplateCache()
_default_env = Environment(cache=default_cache)


def parse(source: str) -> str:
    """Return the Python source of the render function generated for ``source``."""
    return _default_env.parse(source)


def compile(
    source: str,
    options: RenderOptions | Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> Template:
    """Compile ``source`` into a reusable Template (no caching)."""
    return _default_env.compile(source, options, **kwargs)


def render(
    source: str,
    options: RenderOptions | Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> str:
    """Render ``source``.

    Options (mapping or keywords): ``inputs``/``locals``, ``cache``,
    ``filename``, ``context``/``scope``, ``debug``.
    """
    return _default_env.render(source, options, **kwargs)


def clear_cache() -> None:
    """Clear the process-wide template cache."""
    default_cache.clear()


__all__ = [
    "ConfigurationError",
    "Environment",
    "ErrorCode",
    "RenderOptions",
    "SourceSnippet",
    "Template",
    "TemplateCache",
    "TemplateError",
    "TemplateSyntaxError",
    "Token",
    "TokenType",
    "UndefinedError",
    "__version__",
    "clear_cache",
    "compile",
    "default_cache",
    "escape",
    "html_escape",
    "parse",
    "render",
    "tokenize",
]
