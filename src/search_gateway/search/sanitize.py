"""Wrapping of untrusted web content before it reaches a model.

Text that originates from third-party pages (titles, snippets, synthesized
answers) is fenced with explicit markers so downstream prompts can tell it
apart from instructions. Marker look-alikes inside the content are
neutralised first so a page cannot close the fence early.
"""

from __future__ import annotations

import re
from collections.abc import Callable

START_MARKER = "<<<EXTERNAL_UNTRUSTED_CONTENT>>>"
END_MARKER = "<<<END_EXTERNAL_UNTRUSTED_CONTENT>>>"
MARKER_REPLACEMENT = "[[MARKER_SANITIZED]]"

_MARKER_PATTERN = re.compile(r"<<<\s*(?:END_)?EXTERNAL_UNTRUSTED_CONTENT\s*>>>", re.IGNORECASE)

SOURCE_LABELS = {
    "web_search": "Web Search",
    "web_fetch": "Web Fetch",
}

Sanitizer = Callable[[str], str]


def wrap_web_content(content: str, source: str = "web_search") -> str:
    """Fence untrusted text with start/end markers.

    Args:
        content: Text received from an external source
        source: Origin label (``web_search`` or ``web_fetch``)

    Returns:
        The wrapped text
    """
    label = SOURCE_LABELS.get(source, source)
    cleaned = _MARKER_PATTERN.sub(MARKER_REPLACEMENT, content)
    return f"{START_MARKER}\nSource: {label}\n---\n{cleaned}\n{END_MARKER}"
