"""Search gateway: one search operation dispatched to the configured provider."""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

from ..core.config import DEFAULT_TIMEOUT_SECONDS, WebSearchConfig
from ..core.logger import get_logger
from .assembler import ResultAssembler
from .base import (
    ProviderCredential,
    SearchProvider,
    SearchProviderType,
    SearchRejection,
)
from .cache import SearchCache, make_cache_key
from .credentials import CredentialResolver, missing_key_rejection
from .params import resolve_timeout_seconds, validate_search_params
from .providers import BochaSearchProvider, BraveSearchProvider, PerplexitySearchProvider
from .sanitize import Sanitizer, wrap_web_content

logger = get_logger("search.gateway")

_PROVIDER_CLASSES: dict[SearchProviderType, type[SearchProvider]] = {
    SearchProviderType.BRAVE: BraveSearchProvider,
    SearchProviderType.PERPLEXITY: PerplexitySearchProvider,
    SearchProviderType.BOCHA: BochaSearchProvider,
}


def create_provider(provider: SearchProviderType, timeout: float) -> SearchProvider:
    """Instantiate the executor for ``provider``."""
    return _PROVIDER_CLASSES[provider](timeout=timeout)


class SearchGateway:
    """Unified entry point for web search.

    The flow of one call is: resolve credential, validate parameters, look
    up the cache, run the provider on a miss, assemble the payload and write
    it back to the cache. Missing credentials and incompatible parameters are
    returned as structured error dicts without any network traffic. Transport
    failures propagate as ``SearchError`` subclasses.

    Concurrent identical calls that both miss the cache each hit the
    provider; the later write replaces the earlier one.
    """

    def __init__(
        self,
        config: WebSearchConfig | None = None,
        cache: SearchCache | None = None,
        sanitizer: Sanitizer = wrap_web_content,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the search gateway.

        Args:
            config: Web search configuration (defaults apply when None)
            cache: Cache service (a private cache built from config when None)
            sanitizer: Wrapper applied to untrusted text fields
            environ: Environment mapping for credential lookup (``os.environ`` when None)
        """
        self._config = config or WebSearchConfig()
        self._provider_type = SearchProviderType(self._config.provider)
        if cache is None:
            cache = SearchCache(
                ttl_minutes=self._config.cache_ttl_minutes,
                max_entries=self._config.cache_max_entries,
            )
        self._cache = cache
        self._resolver = CredentialResolver(self._config, environ=environ)
        self._assembler = ResultAssembler(sanitizer)
        self._timeout = resolve_timeout_seconds(
            self._config.timeout_seconds, DEFAULT_TIMEOUT_SECONDS
        )
        self._provider = create_provider(self._provider_type, self._timeout)

        # Statistics
        self._total_searches = 0
        self._successful_searches = 0
        self._failed_searches = 0
        self._rejected_searches = 0
        self._cache_hits = 0

        logger.info(
            "SearchGateway initialized (provider=%s, timeout=%ds, cache_ttl=%.1f min)",
            self._provider_type.value,
            self._timeout,
            self._cache.ttl.total_seconds() / 60,
        )

    @property
    def provider_type(self) -> SearchProviderType:
        return self._provider_type

    @property
    def provider(self) -> SearchProvider:
        return self._provider

    @property
    def cache(self) -> SearchCache:
        return self._cache

    @property
    def config(self) -> WebSearchConfig:
        return self._config

    def resolve_credential(
        self, provider: SearchProviderType | None = None
    ) -> ProviderCredential:
        """Resolve the credential for ``provider`` (the active one by default)."""
        return self._resolver.resolve(provider or self._provider_type)

    def _reject(self, rejection: SearchRejection) -> dict[str, Any]:
        self._rejected_searches += 1
        logger.info("Search rejected before dispatch: %s", rejection.error)
        return rejection.to_dict()

    async def search(
        self,
        query: Any,
        count: Any = None,
        *,
        country: Any = None,
        search_lang: Any = None,
        ui_lang: Any = None,
        freshness: Any = None,
        site: Any = None,
        summary: Any = None,
    ) -> dict[str, Any]:
        """Perform a web search with the configured provider.

        Args:
            query: Search query string
            count: Number of results (clamped per provider)
            country: Region code (Brave only)
            search_lang: Result language (Brave only)
            ui_lang: UI language (Brave only)
            freshness: Recency filter (Brave and Bocha)
            site: Domain restriction (Bocha only)
            summary: Request a text summary (Bocha only)

        Returns:
            The payload dict, or a structured error dict with ``error`` and ``message``

        Raises:
            SearchError: If the provider call fails
        """
        self._total_searches += 1
        provider = self._provider_type

        credential = self._resolver.resolve(provider)
        if not credential.is_present:
            return self._reject(missing_key_rejection(provider))

        validated = validate_search_params(
            provider,
            query,
            count,
            default_count=self._config.max_results,
            country=country,
            search_lang=search_lang,
            ui_lang=ui_lang,
            freshness=freshness,
            site=site,
            summary=summary,
        )
        if isinstance(validated, SearchRejection):
            return self._reject(validated)
        request = validated

        cache_key = make_cache_key(request, model=credential.model)
        cached = self._cache.get(cache_key)
        if cached is not None:
            self._cache_hits += 1
            self._successful_searches += 1
            logger.info("Returning cached results for: %s", request.query[:50])
            return cached.to_dict()

        logger.info(
            "Searching %s for: %s (count=%d, credential_source=%s)",
            provider.value,
            request.query[:100],
            request.count,
            credential.source.value,
        )

        start = time.monotonic()
        try:
            output = await self._provider.execute(request, credential)
        except Exception:
            self._failed_searches += 1
            raise
        took_ms = round((time.monotonic() - start) * 1000)

        payload = self._assembler.assemble(request, output, took_ms)
        self._cache.set(cache_key, payload)
        self._successful_searches += 1

        logger.info(
            "Search completed: %s results from %s in %dms",
            payload.count if payload.count is not None else "synthesized",
            provider.value,
            took_ms,
        )
        return payload.to_dict()

    def get_stats(self) -> dict[str, Any]:
        """Get gateway statistics.

        Returns:
            Dictionary with statistics
        """
        completed = self._successful_searches + self._failed_searches
        success_rate = self._successful_searches / completed * 100 if completed > 0 else 0.0

        return {
            "provider": self._provider_type.value,
            "total_searches": self._total_searches,
            "successful_searches": self._successful_searches,
            "failed_searches": self._failed_searches,
            "rejected_searches": self._rejected_searches,
            "success_rate_percent": round(success_rate, 2),
            "cache_hits": self._cache_hits,
            "provider_stats": self._provider.get_stats(),
            "cache_stats": self._cache.get_stats(),
        }

    def clear_cache(self) -> None:
        """Clear the search cache."""
        self._cache.clear()
