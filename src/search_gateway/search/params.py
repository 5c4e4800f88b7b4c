"""Parameter normalization and provider compatibility checks.

Every check here runs before any network call, so a rejected request never
spends provider quota. Rejections are returned as ``SearchRejection`` values.
"""

from __future__ import annotations

import math
from typing import Any

from .base import SearchProviderType, SearchRejection, SearchRequest
from .freshness import FRESHNESS_GUIDANCE, normalize_provider_freshness

DEFAULT_SEARCH_COUNT = 5
MAX_SEARCH_COUNT = 10
MAX_BOCHA_SEARCH_COUNT = 50

_PROVIDER_LABELS = {
    SearchProviderType.BRAVE: "Brave",
    SearchProviderType.PERPLEXITY: "Perplexity",
    SearchProviderType.BOCHA: "Bocha",
}

# Optional fields accepted only by a subset of providers
FIELD_PROVIDERS: dict[str, frozenset[SearchProviderType]] = {
    "country": frozenset({SearchProviderType.BRAVE}),
    "search_lang": frozenset({SearchProviderType.BRAVE}),
    "ui_lang": frozenset({SearchProviderType.BRAVE}),
    "site": frozenset({SearchProviderType.BOCHA}),
    "summary": frozenset({SearchProviderType.BOCHA}),
    "freshness": frozenset({SearchProviderType.BRAVE, SearchProviderType.BOCHA}),
}


def max_count_for(provider: SearchProviderType) -> int:
    """Upper bound on ``count`` for ``provider``."""
    if provider == SearchProviderType.BOCHA:
        return MAX_BOCHA_SEARCH_COUNT
    return MAX_SEARCH_COUNT


def _finite_number(value: Any) -> float | None:
    # bool is an int subclass but never a meaningful count
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not math.isfinite(value):
        return None
    return value


def resolve_search_count(
    value: Any,
    fallback: int = DEFAULT_SEARCH_COUNT,
    provider: SearchProviderType = SearchProviderType.BRAVE,
) -> int:
    """Clamp the requested result count into ``[1, max_count_for(provider)]``.

    Args:
        value: Requested count; anything that is not a finite number is ignored
        fallback: Count used when ``value`` is unusable
        provider: Active provider

    Returns:
        The clamped integer count
    """
    parsed = _finite_number(value)
    if parsed is None:
        parsed = fallback
    return max(1, min(max_count_for(provider), math.floor(parsed)))


def resolve_timeout_seconds(value: Any, fallback: int) -> int:
    """Floor a configured timeout to whole seconds, never below one."""
    parsed = _finite_number(value)
    if parsed is None:
        return fallback
    return max(1, math.floor(parsed))


def provider_label(provider: SearchProviderType) -> str:
    return _PROVIDER_LABELS[provider]


def unsupported_field_rejection(field: str) -> SearchRejection:
    """Build the rejection for ``field`` being sent to a provider that ignores it."""
    supported = [p for p in SearchProviderType if p in FIELD_PROVIDERS[field]]
    names = " and ".join(provider_label(p) for p in supported)
    noun = "provider" if len(supported) == 1 else "providers"
    return SearchRejection(
        error=f"unsupported_{field}",
        message=f"{field} is only supported by the {names} web_search {noun}.",
    )


def invalid_freshness_rejection(provider: SearchProviderType) -> SearchRejection:
    return SearchRejection(error="invalid_freshness", message=FRESHNESS_GUIDANCE[provider])


def _clean_string(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def validate_search_params(
    provider: SearchProviderType,
    query: Any,
    count: Any = None,
    *,
    default_count: int | None = None,
    country: Any = None,
    search_lang: Any = None,
    ui_lang: Any = None,
    freshness: Any = None,
    site: Any = None,
    summary: Any = None,
) -> SearchRequest | SearchRejection:
    """Turn raw tool arguments into a provider-scoped ``SearchRequest``.

    Args:
        provider: Active provider
        query: Search query
        count: Requested number of results
        default_count: Configured default count (falls back to 5)
        country: Region code (Brave only)
        search_lang: Result language (Brave only)
        ui_lang: UI language (Brave only)
        freshness: Recency filter (Brave and Bocha)
        site: Domain restriction (Bocha only)
        summary: Whether to request a text summary (Bocha only)

    Returns:
        A validated request, or the first rejection encountered
    """
    clean_query = _clean_string(query)
    if clean_query is None:
        return SearchRejection(
            error="invalid_query",
            message="web_search needs a non-empty query string.",
        )

    fields: dict[str, Any] = {
        "country": _clean_string(country),
        "search_lang": _clean_string(search_lang),
        "ui_lang": _clean_string(ui_lang),
        "site": _clean_string(site),
        "summary": None if summary is None else bool(summary),
        "freshness": _clean_string(freshness),
    }

    for field, value in fields.items():
        if value is not None and provider not in FIELD_PROVIDERS[field]:
            return unsupported_field_rejection(field)

    if fields["freshness"] is not None:
        normalized = normalize_provider_freshness(fields["freshness"], provider)
        if normalized is None:
            return invalid_freshness_rejection(provider)
        fields["freshness"] = normalized

    fallback = default_count if default_count is not None else DEFAULT_SEARCH_COUNT
    return SearchRequest(
        provider=provider,
        query=clean_query,
        count=resolve_search_count(count, fallback, provider),
        **fields,
    )
