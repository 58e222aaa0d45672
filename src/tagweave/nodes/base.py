"""Base node class for the tagweave template tree."""

from __future__ import annotations

import ast
from dataclasses import dataclass
from typing import TypeAlias

# Tag expressions are kept as validated Python expression trees
Expr: TypeAlias = ast.expr


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all template nodes.

    All nodes track their source location for error reporting.
    Nodes are immutable for thread-safety.

    """

    lineno: int
    col_offset: int
