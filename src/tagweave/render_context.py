"""tagweave RenderContext — per-render state isolated from user inputs.

Compiled templates record the template line they are evaluating so that
an ``UndefinedError`` can point at it. That position lives in a
``ContextVar`` rather than in the user's input mapping:

    - No internal keys leak into the render scope
    - Thread-safe: each thread/async task sees its own RenderContext
    - Nested renders (a tag rendering another template) restore the
      outer context on exit

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass


@dataclass
class RenderContext:
    """Per-render state.

    Attributes:
        template_name: Current template name for error messages
        source: Template source for error snippets
        line: Current line number (updated during render by generated code)
    """

    template_name: str | None = None
    source: str | None = None
    line: int = 0


_render_context: ContextVar[RenderContext | None] = ContextVar(
    "tagweave_render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Get current render context (None if not in render)."""
    return _render_context.get()


def current_render_context() -> RenderContext:
    """Get current render context, or a detached one outside render().

    Used by generated code for line tracking, so a render function called
    directly still runs; its line updates are simply discarded.
    """
    ctx = _render_context.get()
    if ctx is None:
        return RenderContext()
    return ctx


@contextmanager
def render_context(
    template_name: str | None = None,
    source: str | None = None,
) -> Iterator[RenderContext]:
    """Context manager for render-scoped state.

    Creates a new RenderContext and sets it as the current context for
    the duration of the with block, restoring the previous one on exit.

    Example:
        with render_context(template_name="page.html") as ctx:
            html = render_func(inputs, escape)
            # ctx.line updated during render for error tracking
    """
    ctx = RenderContext(template_name=template_name, source=source)
    token: Token[RenderContext | None] = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)
