"""tagweave environment: configuration, caching, errors and the render entry point.

Exceptions are imported first: the lexer and parser depend on them while
``Environment`` depends on the lexer and parser.
"""

from tagweave.environment.exceptions import (
    ConfigurationError,
    ErrorCode,
    SourceSnippet,
    TemplateError,
    TemplateSyntaxError,
    UndefinedError,
    build_source_snippet,
)
from tagweave.environment.options import RenderOptions
from tagweave.environment.cache import TemplateCache
from tagweave.environment.core import Environment

__all__ = [
    "ConfigurationError",
    "Environment",
    "ErrorCode",
    "RenderOptions",
    "SourceSnippet",
    "TemplateCache",
    "TemplateError",
    "TemplateSyntaxError",
    "UndefinedError",
    "build_source_snippet",
]
