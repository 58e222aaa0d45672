"""Statement compilation for the tagweave compiler.

The statements package is organized into logical modules:
- basic: literal text and output tags
- control_flow: if, for, while, break, continue
- variables: assignments and side-effect expressions
"""

from __future__ import annotations

from tagweave.compiler.statements.basic import BasicStatementMixin
from tagweave.compiler.statements.control_flow import ControlFlowMixin
from tagweave.compiler.statements.variables import VariableAssignmentMixin


class StatementCompilationMixin(
    BasicStatementMixin,
    ControlFlowMixin,
    VariableAssignmentMixin,
):
    """Combined mixin for compiling all statement types."""
