"""Recency filter parsing.

Two grammars are accepted, depending on the provider family:

- Brave: ``pd``, ``pw``, ``pm``, ``py`` (case-insensitive) or a date range
  ``YYYY-MM-DDtoYYYY-MM-DD``.
- Bocha: ``noLimit``, ``pd``, ``pw``, ``pm``, ``py`` (exact spelling) or the
  same date range form.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime

from .base import SearchProviderType

BRAVE_FRESHNESS_SHORTCUTS = frozenset({"pd", "pw", "pm", "py"})
BOCHA_FRESHNESS_TOKENS = frozenset({"noLimit", "pd", "pw", "pm", "py"})
BOCHA_NO_LIMIT = "noLimit"

_FRESHNESS_RANGE = re.compile(r"^(\d{4}-\d{2}-\d{2})to(\d{4}-\d{2}-\d{2})$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

FRESHNESS_GUIDANCE = {
    SearchProviderType.BRAVE: (
        "freshness must be one of pd, pw, pm, py, or a range like YYYY-MM-DDtoYYYY-MM-DD."
    ),
    SearchProviderType.BOCHA: (
        "freshness must be one of 'noLimit', 'pd', 'pw', 'pm', 'py', "
        "or a date range like YYYY-MM-DDtoYYYY-MM-DD."
    ),
}


def is_valid_iso_date(value: str) -> bool:
    """Check that ``value`` is a real calendar date in ``YYYY-MM-DD`` form.

    The parts are rebuilt as a UTC date and compared back, so impossible
    dates such as ``2024-02-30`` are rejected.
    """
    if not _ISO_DATE.match(value):
        return False
    year, month, day = (int(part) for part in value.split("-"))
    try:
        date = datetime(year, month, day, tzinfo=UTC)
    except ValueError:
        return False
    return (date.year, date.month, date.day) == (year, month, day)


def normalize_date_range(value: str) -> str | None:
    """Validate a ``YYYY-MM-DDtoYYYY-MM-DD`` range.

    Returns:
        The canonical range string, or None if malformed, invalid or reversed
    """
    match = _FRESHNESS_RANGE.match(value)
    if not match:
        return None

    start, end = match.groups()
    if not is_valid_iso_date(start) or not is_valid_iso_date(end):
        return None
    # Fixed-width ISO dates order lexicographically
    if start > end:
        return None

    return f"{start}to{end}"


def normalize_freshness(value: str | None) -> str | None:
    """Normalize a Brave-style freshness value.

    Returns:
        A lower-case shortcut, a canonical date range, or None when the value
        is empty or not accepted
    """
    if not value:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None

    lower = trimmed.lower()
    if lower in BRAVE_FRESHNESS_SHORTCUTS:
        return lower

    return normalize_date_range(trimmed)


def normalize_bocha_freshness(value: str | None) -> str | None:
    """Normalize a Bocha-style freshness value (adds ``noLimit``, case-sensitive tokens)."""
    if not value:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None

    if trimmed in BOCHA_FRESHNESS_TOKENS:
        return trimmed

    return normalize_date_range(trimmed)


def normalize_provider_freshness(
    value: str | None,
    provider: SearchProviderType,
) -> str | None:
    """Dispatch to the freshness grammar of ``provider``'s family."""
    if provider == SearchProviderType.BOCHA:
        return normalize_bocha_freshness(value)
    return normalize_freshness(value)
