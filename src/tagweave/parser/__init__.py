"""Template parser.

Turns the lexer's token stream into the node tree in ``tagweave.nodes``,
validating every tag expression against the allowed Python subset.
"""

from tagweave.parser.core import Parser, parse
from tagweave.parser.expressions import ExpressionError, parse_expr

__all__ = ["ExpressionError", "Parser", "parse", "parse_expr"]
