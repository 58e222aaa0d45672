"""Template root node."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from tagweave.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Template(Node):
    """Root node: the whole template body in source order."""

    body: Sequence[Node]
    name: str | None = None
