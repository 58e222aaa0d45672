"""HTML escaping for rendered output.

``html_escape`` is the escape routine bound into every compiled template.
It escapes ``<``, ``>`` and ``"`` unconditionally and ``&`` only when it
does not already start a character entity, so text that was escaped once
stays stable when escaped again.

    >>> html_escape('<a href="x">&y</a>')
    '&lt;a href=&quot;x&quot;&gt;&amp;y&lt;/a&gt;'
    >>> html_escape("&amp; &copy; &#169;")
    '&amp; &copy; &amp;#169;'

Thread-Safety:
Pure functions over module-level constants; safe for concurrent use.

"""

from __future__ import annotations

import re
from typing import Any

# "&" not followed by word characters and ";" (e.g. "&amp;", "&copy;")
_BARE_AMPERSAND_RE = re.compile(r"&(?!\w+;)")

# "&" is handled by the regex above and must run first
_ESCAPE_TABLE = str.maketrans(
    {
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
    }
)


def html_escape(value: Any) -> str:
    """Convert ``value`` to text and escape markup-significant characters.

    Objects implementing ``__html__`` are already safe and are returned
    as their ``__html__()`` text unchanged.
    """
    if hasattr(value, "__html__"):
        return value.__html__()
    text = value if isinstance(value, str) else str(value)
    if "&" in text:
        text = _BARE_AMPERSAND_RE.sub("&amp;", text)
    return text.translate(_ESCAPE_TABLE)
