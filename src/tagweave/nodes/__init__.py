"""Template tree produced by the parser and consumed by the compiler.

Nodes are frozen dataclasses. Tag expressions are stored as validated
Python ``ast.expr`` trees; the compiler rewrites copies of them, never the
originals.
"""

from tagweave.nodes.base import Expr, Node
from tagweave.nodes.control_flow import Break, Continue, For, If, While
from tagweave.nodes.output import Data, Output
from tagweave.nodes.structure import Template
from tagweave.nodes.variables import Do, Set

__all__ = [
    "Break",
    "Continue",
    "Data",
    "Do",
    "Expr",
    "For",
    "If",
    "Node",
    "Output",
    "Set",
    "Template",
    "While",
]
