"""Brave search provider - independent web index with region/language filters."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from ...core.logger import get_logger
from ..base import (
    BraveOutput,
    ProviderCredential,
    SearchProvider,
    SearchProviderType,
    SearchRequest,
    WebHit,
    text_or_none,
)

logger = get_logger("search.brave")

BRAVE_SEARCH_ENDPOINT = "https://api.search.brave.com/res/v1/web/search"


def resolve_site_name(url: str | None) -> str | None:
    """Return the host of ``url``, or None if it cannot be parsed."""
    if not url:
        return None
    try:
        return urlparse(url).hostname or None
    except ValueError:
        return None


class BraveSearchProvider(SearchProvider):
    """Brave Search provider.

    Sends one GET to the web search endpoint. ``country``, ``search_lang``,
    ``ui_lang`` and ``freshness`` are forwarded only when set.
    """

    @property
    def name(self) -> str:
        return "Brave"

    @property
    def provider_type(self) -> SearchProviderType:
        return SearchProviderType.BRAVE

    async def execute(
        self,
        request: SearchRequest,
        credential: ProviderCredential,
    ) -> BraveOutput:
        """Search using the Brave web search API.

        Args:
            request: Validated search request
            credential: Resolved Brave credential

        Returns:
            BraveOutput with unsanitized hits
        """
        params: dict[str, Any] = {"q": request.query, "count": request.count}
        for field in ("country", "search_lang", "ui_lang", "freshness"):
            value = getattr(request, field)
            if value:
                params[field] = value

        headers = {
            "Accept": "application/json",
            "X-Subscription-Token": credential.api_key or "",
        }

        logger.info(
            "Brave search request: %s (count=%d, country=%s, search_lang=%s, "
            "ui_lang=%s, freshness=%s)",
            request.query[:100],
            request.count,
            request.country,
            request.search_lang,
            request.ui_lang,
            request.freshness,
        )

        status, data = await self._send(
            "GET",
            BRAVE_SEARCH_ENDPOINT,
            headers=headers,
            params=params,
        )

        web = data.get("web")
        raw_results = web.get("results") if isinstance(web, dict) else None
        if not isinstance(raw_results, list):
            raw_results = []

        results: list[WebHit] = []
        for item in raw_results:
            if not isinstance(item, dict):
                continue
            # Non-string fields are treated as absent
            url = text_or_none(item.get("url")) or ""
            results.append(
                WebHit(
                    title=text_or_none(item.get("title")) or "",
                    url=url,
                    description=text_or_none(item.get("description")) or "",
                    published=text_or_none(item.get("age")),
                    site_name=resolve_site_name(url),
                )
            )

        logger.info("Brave search response: status=%d, results=%d", status, len(results))
        return BraveOutput(results=results)
