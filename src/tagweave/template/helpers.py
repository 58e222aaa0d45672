"""Runtime helpers injected into the compiled template namespace.

Compiled templates run with an empty ``__builtins__``: the only callables
they can reach are the helpers in ``STATIC_NAMESPACE`` and whatever the
caller passes in as inputs. Free names in tag expressions resolve through
``lookup()``: the render scope first, then ``SAFE_BUILTINS``, then
``UndefinedError``.

Thread-Safety:
All functions are stateless; the namespace dicts are read-only after
module load.

"""

from __future__ import annotations

from typing import Any

from tagweave.render_context import current_render_context, get_render_context

# Built-ins visible to tag expressions by bare name. Inputs with the same
# name shadow them.
SAFE_BUILTINS: dict[str, Any] = {
    "abs": abs,
    "all": all,
    "any": any,
    "bool": bool,
    "dict": dict,
    "enumerate": enumerate,
    "float": float,
    "int": int,
    "isinstance": isinstance,
    "len": len,
    "list": list,
    "max": max,
    "min": min,
    "range": range,
    "reversed": reversed,
    "round": round,
    "set": set,
    "sorted": sorted,
    "str": str,
    "sum": sum,
    "tuple": tuple,
    "zip": zip,
}


def lookup(ctx: dict[str, Any], var_name: str) -> Any:
    """Look up a free name from a tag expression.

    Resolution order: render scope (inputs, assignments, loop variables),
    then ``SAFE_BUILTINS``.

    Raises:
        UndefinedError: If the name is in neither table; carries the
            template name, current line and a source snippet.
    """
    try:
        return ctx[var_name]
    except KeyError:
        pass
    try:
        return SAFE_BUILTINS[var_name]
    except KeyError:
        from tagweave.environment.exceptions import UndefinedError, build_source_snippet

        render_ctx = get_render_context()
        template_name = render_ctx.template_name if render_ctx else None
        lineno = render_ctx.line if render_ctx else None
        source = render_ctx.source if render_ctx else None
        snippet = build_source_snippet(source, lineno) if source and lineno else None
        raise UndefinedError(
            var_name,
            template_name,
            lineno,
            available_names=frozenset(k for k in ctx if k != "self"),
            source_snippet=snippet,
        ) from None


STATIC_NAMESPACE: dict[str, Any] = {
    "__builtins__": {},
    "_str": str,
    "_lookup": lookup,
    "_get_render_ctx": current_render_context,
}
