"""tagweave compiler: template node tree to Python code objects."""

from tagweave.compiler.core import RENDER_FUNCTION, Compiler, generate_source

__all__ = ["RENDER_FUNCTION", "Compiler", "generate_source"]
