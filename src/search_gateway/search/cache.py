"""Search result caching to avoid repeated paid API calls."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from ..core.config import DEFAULT_CACHE_TTL_MINUTES
from ..core.logger import get_logger
from .base import SearchPayload, SearchProviderType, SearchRequest

logger = get_logger("search.cache")

KEY_PLACEHOLDER = "default"


@dataclass
class CacheEntry:
    """A cached payload and the moment it goes stale."""

    key: str
    value: SearchPayload
    expires_at: datetime


def normalize_cache_key(raw: str) -> str:
    return raw.strip().lower()


def make_cache_key(request: SearchRequest, model: str | None = None) -> str:
    """Build the cache fingerprint for ``request``.

    Every field that changes what the provider returns is part of the key;
    absent optional fields are written as ``default`` so that positions
    never shift. A set field whose value is itself ``default`` (in any case)
    is written as ``=default``.

    Args:
        request: Validated search request
        model: Perplexity model (ignored for other providers)

    Returns:
        Normalized cache key
    """

    def part(value: str | None) -> str:
        if not value:
            return KEY_PLACEHOLDER
        if value.strip().lower() == KEY_PLACEHOLDER:
            return f"={value}"
        return value

    provider = request.provider
    head = [provider.value, request.query, str(request.count)]

    if provider == SearchProviderType.BRAVE:
        tail = [
            part(request.country),
            part(request.search_lang),
            part(request.ui_lang),
            part(request.freshness),
        ]
    elif provider == SearchProviderType.BOCHA:
        tail = [
            part(request.freshness),
            part(request.site),
            str(bool(request.summary)).lower(),
        ]
    else:
        tail = [part(model)]

    return normalize_cache_key(":".join(head + tail))


class SearchCache:
    """In-memory cache for search payloads with TTL support.

    Entries are checked for staleness when read; nothing is evicted in the
    background. Stale entries stay in the map until overwritten or until
    ``cleanup_expired`` is called. ``max_entries`` optionally bounds the map
    by dropping the entry closest to expiry on insert.
    """

    def __init__(
        self,
        ttl_minutes: float = DEFAULT_CACHE_TTL_MINUTES,
        max_entries: int | None = None,
    ) -> None:
        """Initialize search cache.

        Args:
            ttl_minutes: Time-to-live for cached payloads in minutes (negative means 0)
            max_entries: Maximum number of entries, None for unbounded
        """
        self._entries: dict[str, CacheEntry] = {}
        self._ttl = timedelta(minutes=max(0.0, ttl_minutes))
        self._max_entries = max_entries
        self._hits = 0
        self._misses = 0
        logger.debug(
            "SearchCache initialized (ttl=%.1f min, max_entries=%s)",
            self._ttl.total_seconds() / 60,
            max_entries,
        )

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def get(self, key: str) -> SearchPayload | None:
        """Get a cached payload if present and not stale.

        Args:
            key: Cache key from ``make_cache_key``

        Returns:
            A copy of the payload marked ``cached=True``, or None on a miss
        """
        entry = self._entries.get(key)
        if entry is None or datetime.now(UTC) >= entry.expires_at:
            self._misses += 1
            return None

        self._hits += 1
        logger.debug("Cache hit: %s", key[:80])
        return entry.value.model_copy(update={"cached": True})

    def set(self, key: str, payload: SearchPayload) -> None:
        """Store ``payload`` under ``key``, replacing any previous entry.

        Args:
            key: Cache key from ``make_cache_key``
            payload: Freshly assembled payload
        """
        if (
            self._max_entries is not None
            and key not in self._entries
            and len(self._entries) >= self._max_entries
        ):
            self._evict_oldest()

        self._entries[key] = CacheEntry(
            key=key,
            value=payload,
            expires_at=datetime.now(UTC) + self._ttl,
        )
        logger.debug("Cached payload: %s", key[:80])

    def _evict_oldest(self) -> None:
        if not self._entries:
            return
        oldest_key = min(self._entries, key=lambda k: self._entries[k].expires_at)
        del self._entries[oldest_key]
        logger.debug("Evicted oldest cache entry")

    def cleanup_expired(self) -> int:
        """Remove stale entries.

        Returns:
            Number of entries removed
        """
        now = datetime.now(UTC)
        expired_keys = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired_keys:
            del self._entries[key]

        if expired_keys:
            logger.info("Cleaned up %d expired cache entries", len(expired_keys))

        return len(expired_keys)

    def clear(self) -> None:
        """Clear all cached payloads and reset statistics."""
        self._entries.clear()
        self._hits = 0
        self._misses = 0
        logger.info("Search cache cleared")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        total = self._hits + self._misses
        hit_rate = (self._hits / total * 100) if total > 0 else 0.0

        return {
            "size": len(self._entries),
            "max_entries": self._max_entries,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate_percent": round(hit_rate, 2),
            "ttl_minutes": self._ttl.total_seconds() / 60,
        }
