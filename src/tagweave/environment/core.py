"""tagweave Environment — compile, cache and render templates.

The Environment ties the pipeline together:

    ```
    source ─► Lexer ─► Parser ─► Compiler ─► Template ─► render(inputs)
                                                │
                                   TemplateCache (cache=True, keyed by filename)
    ```

Each Environment owns a ``TemplateCache``. Pass one in to share it, or to
isolate tests; the module-level helpers in ``tagweave`` use a default
Environment backed by a process-wide cache.

Example:
    >>> env = Environment()
    >>> env.render("Hi <%= name %>!", inputs={"name": "World"})
    'Hi World!'
    >>> env.render("<% if flag %>Yes<% else %>No<% end %>", locals={"flag": False})
    'No'

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import fields
from typing import Any

from tagweave.compiler import Compiler, generate_source
from tagweave.environment.cache import TemplateCache
from tagweave.environment.options import RenderOptions
from tagweave.lexer import tokenize
from tagweave.nodes import Template as TemplateNode
from tagweave.parser import Parser
from tagweave.template import Template
from tagweave.utils.html import html_escape

logger = logging.getLogger(__name__)


class Environment:
    """Compilation settings plus the template cache.

    Attributes:
        cache: TemplateCache used for ``cache=True`` renders
        debug: Default for the ``debug`` option
        escape: Escaper bound to ``<%= %>`` output in compiled templates

    Thread-Safety:
        Compilation is pure; the only shared state is the cache, which
        guards its own mutations.
    """

    __slots__ = ("cache", "debug", "escape")

    def __init__(
        self,
        cache: TemplateCache | None = None,
        debug: bool = False,
        escape: Callable[[Any], str] = html_escape,
    ):
        self.cache = cache if cache is not None else TemplateCache()
        self.debug = debug
        self.escape = escape

    def parse(self, source: str, name: str | None = None) -> str:
        """Return the Python source generated for ``source``.

        Raises:
            TemplateSyntaxError: On an unterminated tag or invalid statement.
        """
        return generate_source(self._parse_tree(source, name))

    def compile(
        self,
        source: str,
        options: RenderOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Template:
        """Compile ``source`` into a reusable Template.

        Never consults the cache. ``filename`` names the template in error
        messages and tracebacks; ``debug`` logs the generated code.

        Raises:
            TemplateSyntaxError: If the template cannot be parsed.
        """
        return self._compile(source, self._options(options, kwargs))

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Compile ``source``; shorthand for ``compile(source, filename=name)``."""
        return self._compile(source, RenderOptions(filename=name))

    def get_or_compile(
        self,
        key: str,
        source: str,
        options: RenderOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Template:
        """Return the cached Template for ``key``, compiling ``source`` on a miss.

        A hit ignores ``source`` entirely.
        """
        opts = self._options(options, kwargs)
        return self.cache.get_or_compile(key, source, lambda text: self._compile(text, opts))

    def render(
        self,
        source: str,
        options: RenderOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> str:
        """Render ``source`` with the given options.

        With ``cache=True`` the compiled template is stored under
        ``filename`` and reused on later calls, even if ``source`` changes.

        Raises:
            ConfigurationError: ``cache`` without ``filename`` (before compiling).
            TemplateSyntaxError: If the template cannot be parsed.
            UndefinedError: A tag referenced a name with no value.
        """
        opts = self._options(options, kwargs)
        opts.validate()

        if opts.cache:
            assert opts.filename is not None
            template = self.cache.get_or_compile(
                opts.filename, source, lambda text: self._compile(text, opts)
            )
        else:
            template = self._compile(source, opts)

        return template.render(opts.inputs, opts.context)

    def clear_cache(self) -> None:
        """Discard every cached template."""
        self.cache.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _options(
        options: RenderOptions | Mapping[str, Any] | None,
        kwargs: Mapping[str, Any],
    ) -> RenderOptions:
        if isinstance(options, RenderOptions):
            if not kwargs:
                return options
            options = {f.name: getattr(options, f.name) for f in fields(options)}
        return RenderOptions.from_mapping(options, **kwargs)

    def _parse_tree(self, source: str, name: str | None) -> TemplateNode:
        tokens = tokenize(source, name)
        return Parser(tokens, name=name, source=source).parse()

    def _compile(self, source: str, options: RenderOptions) -> Template:
        name = options.filename
        compiler = Compiler()
        module = compiler.generate(self._parse_tree(source, name))
        code = compiler.compile_module(module, name)
        template = Template(code, name=name, source=source, module=module, escape=self.escape)

        if options.debug or self.debug:
            logger.info(
                "Generated code for %s:\n%s",
                name or "<template>",
                template.generated_source,
            )
        return template
