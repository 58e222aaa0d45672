"""tagweave Template package — compiled templates ready for rendering."""

from tagweave.template.core import Template
from tagweave.template.helpers import SAFE_BUILTINS, lookup

__all__ = ["SAFE_BUILTINS", "Template", "lookup"]
