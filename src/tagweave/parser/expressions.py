"""Tag expression parsing and validation.

Tag expressions use Python expression syntax, restricted to a whitelist of
node types. Everything that could define code, suspend execution or reach
private attributes is rejected at parse time:

- ``lambda``, ``:=``, ``await``, ``yield``
- names and attributes starting with ``_`` (reserved for generated code)

Allowed constructs include literals, names, attribute and item access,
calls, arithmetic, comparisons, boolean logic, conditional expressions,
container displays, f-strings and comprehensions.

Statement targets (``for`` targets, assignment left-hand sides) are
restricted further to names, tuples/lists of targets, starred names,
attributes and subscripts.
"""

from __future__ import annotations

import ast

_ALLOWED_EXPR_NODES: tuple[type[ast.AST], ...] = (
    # Atoms
    ast.Constant,
    ast.Name,
    ast.Attribute,
    ast.Subscript,
    ast.Slice,
    ast.Starred,
    # Calls
    ast.Call,
    ast.keyword,
    # Operators
    ast.BinOp,
    ast.UnaryOp,
    ast.BoolOp,
    ast.Compare,
    ast.IfExp,
    ast.operator,
    ast.unaryop,
    ast.boolop,
    ast.cmpop,
    # Displays
    ast.List,
    ast.Tuple,
    ast.Set,
    ast.Dict,
    ast.JoinedStr,
    ast.FormattedValue,
    # Comprehensions
    ast.ListComp,
    ast.SetComp,
    ast.DictComp,
    ast.GeneratorExp,
    ast.comprehension,
    # Contexts
    ast.expr_context,
)

_TARGET_NODES: tuple[type[ast.AST], ...] = (
    ast.Name,
    ast.Tuple,
    ast.List,
    ast.Starred,
    ast.Attribute,
    ast.Subscript,
)


class ExpressionError(ValueError):
    """An expression uses syntax outside the allowed subset.

    Carries the offending node's position (relative to the tag text) so
    the parser can report it against the template.
    """

    def __init__(self, message: str, node: ast.AST | None = None):
        super().__init__(message)
        self.message = message
        self.lineno: int = getattr(node, "lineno", 1)
        self.col_offset: int = getattr(node, "col_offset", 0)


def validate_expr(node: ast.AST) -> ast.AST:
    """Check that every node in ``node`` is in the allowed subset.

    Returns the node unchanged for chaining.

    Raises:
        ExpressionError: On the first disallowed construct.
    """
    for child in ast.walk(node):
        if not isinstance(child, _ALLOWED_EXPR_NODES):
            raise ExpressionError(f"'{_describe(child)}' is not allowed in templates", child)
        if isinstance(child, ast.Name) and child.id.startswith("_"):
            raise ExpressionError(
                f"Name '{child.id}' is reserved: names starting with '_' are not allowed",
                child,
            )
        if isinstance(child, ast.Attribute) and child.attr.startswith("_"):
            raise ExpressionError(
                f"Attribute '{child.attr}' is private: attributes starting with '_' "
                "are not allowed",
                child,
            )
        if isinstance(child, ast.comprehension) and child.is_async:
            raise ExpressionError("'async for' is not allowed in templates", child.target)
    return node


def validate_target(node: ast.expr) -> ast.expr:
    """Check an assignment or loop target.

    Raises:
        ExpressionError: If the target is not assignable in templates.
    """
    if not isinstance(node, _TARGET_NODES):
        raise ExpressionError(f"Cannot assign to {_describe(node)}", node)
    if isinstance(node, (ast.Tuple, ast.List)):
        for elt in node.elts:
            validate_target(elt)
    elif isinstance(node, ast.Starred):
        validate_target(node.value)
    else:
        validate_expr(node)
    return node


def parse_expr(text: str) -> ast.expr:
    """Parse and validate a single tag expression.

    Raises:
        SyntaxError: If ``text`` is not a Python expression.
        ExpressionError: If it uses a disallowed construct.
    """
    text = text.strip()
    try:
        tree = ast.parse(text, mode="eval")
    except SyntaxError as e:
        if "\n" not in text:
            raise
        # Tags may spread an expression over several lines
        try:
            tree = ast.parse(f"(\n{text}\n)", mode="eval")
        except SyntaxError:
            raise e from None
        ast.increment_lineno(tree, -1)
    validate_expr(tree.body)
    return tree.body


def _describe(node: ast.AST) -> str:
    return {
        "Lambda": "lambda",
        "NamedExpr": ":=",
        "Await": "await",
        "Yield": "yield",
        "YieldFrom": "yield from",
    }.get(type(node).__name__, type(node).__name__)
