"""Render configuration.

``RenderOptions`` is the per-call options record accepted by ``render()``
and ``compile()``. It is built from keyword arguments or a plain mapping;
the alias spellings ``locals`` (for ``inputs``) and ``scope`` (for
``context``) are accepted as well:

    >>> RenderOptions.from_mapping({"locals": {"name": "x"}, "cache": True, "filename": "a"})
    RenderOptions(inputs={'name': 'x'}, cache=True, filename='a', context=None, debug=False)

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from tagweave.environment.exceptions import ConfigurationError, ErrorCode

# Alias -> canonical option name
_ALIASES = {
    "locals": "inputs",
    "scope": "context",
}

_FIELDS = frozenset({"inputs", "cache", "filename", "context", "debug"})


@dataclass(frozen=True, slots=True)
class RenderOptions:
    """Options for a single render or compile call.

    Attributes:
        inputs: Names visible to tag expressions
        cache: Reuse a compiled template keyed by ``filename``
        filename: Cache key; also names the template in error messages
        context: Execution receiver, visible to tags as ``self``
        debug: Log the generated code and keep it on the template
    """

    inputs: Mapping[str, Any] = field(default_factory=dict)
    cache: bool = False
    filename: str | None = None
    context: Any = None
    debug: bool = False

    def validate(self) -> None:
        """Check option consistency.

        Raises:
            ConfigurationError: If ``cache`` is set without ``filename``.
        """
        if self.cache and not self.filename:
            raise ConfigurationError(
                '"cache" option requires "filename"',
                code=ErrorCode.CACHE_REQUIRES_FILENAME,
            )

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None = None, **kwargs: Any) -> RenderOptions:
        """Build options from a mapping and/or keyword arguments.

        Aliases are resolved separately in each source, so a keyword
        argument overrides the mapping under either spelling. Within one
        source canonical names win over their aliases; ``None`` values are
        treated as unset.

        Raises:
            ConfigurationError: On an unknown option name.
        """
        values = _canonical(options or {})
        values.update(_canonical(kwargs))
        return cls(**values)


def _canonical(options: Mapping[str, Any]) -> dict[str, Any]:
    """Map option names to canonical fields, dropping ``None`` values."""
    values: dict[str, Any] = {}
    for key, value in options.items():
        name = _ALIASES.get(key, key)
        if name not in _FIELDS:
            raise ConfigurationError(
                f"Unknown render option {key!r}",
                code=ErrorCode.UNKNOWN_OPTION,
            )
        if value is None:
            continue
        if name in values and key in _ALIASES:
            continue
        values[name] = value
    return values
