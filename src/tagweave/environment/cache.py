"""Compiled-template cache.

Maps a caller-chosen key (usually the template's file name) to a compiled
``Template``. A hit returns the stored template unconditionally; there is
no staleness check against the source passed in, so callers must keep one
key per distinct source. Entries live until ``clear()``: no eviction, TTL
or size bound.

Thread-Safety:
Reads are lock-free dict lookups. Mutation is guarded by a lock. Two
threads missing on the same key may both compile; the last store wins,
which is harmless because both templates come from the same source.

"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tagweave.template import Template

logger = logging.getLogger(__name__)


class TemplateCache:
    """Key → compiled Template mapping with an explicit clear.

    Construct one per application (or per test) and hand it to an
    ``Environment``; the module-level ``render()`` uses a process-wide
    default instance.

    Example:
            >>> cache = TemplateCache()
            >>> env = Environment(cache=cache)
            >>> env.render("Hi <%= n %>", cache=True, filename="hi", inputs={"n": 1})
            'Hi 1'
            >>> "hi" in cache
            True

    """

    __slots__ = ("_entries", "_lock")

    def __init__(self) -> None:
        self._entries: dict[str, Template] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Template | None:
        """Return the template stored under ``key``, or None."""
        return self._entries.get(key)

    def get_or_compile(
        self,
        key: str,
        source: str,
        compile_func: Callable[[str], Template],
    ) -> Template:
        """Return the cached template for ``key``, compiling ``source`` on a miss.

        Args:
            key: Cache key
            source: Template source, only used on a miss
            compile_func: Builds a Template from source
        """
        template = self._entries.get(key)
        if template is not None:
            logger.debug("Template cache hit: %s", key)
            return template

        logger.debug("Template cache miss: %s", key)
        template = compile_func(source)
        with self._lock:
            self._entries[key] = template
        return template

    def set(self, key: str, template: Template) -> None:
        """Store ``template`` under ``key``, replacing any previous entry."""
        with self._lock:
            self._entries[key] = template

    def clear(self) -> None:
        """Discard all entries; later lookups recompile from scratch."""
        with self._lock:
            count = len(self._entries)
            self._entries = {}
        logger.debug("Template cache cleared (%d entries)", count)

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __repr__(self) -> str:
        return f"<TemplateCache entries={len(self._entries)}>"
