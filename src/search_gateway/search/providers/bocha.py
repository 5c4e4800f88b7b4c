"""Bocha search provider - web results with images, site filter and summaries."""

from __future__ import annotations

from typing import Any

from ...core.logger import get_logger
from ..base import (
    BochaOutput,
    ProviderCredential,
    SearchProvider,
    SearchProviderType,
    SearchRequest,
    WebHit,
    text_or_none,
)
from ..freshness import BOCHA_NO_LIMIT

logger = get_logger("search.bocha")

BOCHA_SEARCH_ENDPOINT = "https://api.bocha.cn/v1/web-search"


def _values(section: Any) -> list[dict[str, Any]]:
    """Extract ``section.value`` as a list of dicts, tolerating missing pieces."""
    if not isinstance(section, dict):
        return []
    value = section.get("value")
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def build_image_index(images: list[dict[str, Any]]) -> dict[str, str]:
    """Map each image's host page URL to its thumbnail URL."""
    index: dict[str, str] = {}
    for image in images:
        host_page = text_or_none(image.get("hostPageUrl"))
        thumbnail = text_or_none(image.get("thumbnailUrl"))
        if host_page and thumbnail:
            index[host_page] = thumbnail
    return index


class BochaSearchProvider(SearchProvider):
    """Bocha web search provider.

    Web pages and images come back as separate lists; a page gets an
    ``image_url`` only when an image's host page URL equals the page URL.
    """

    @property
    def name(self) -> str:
        return "Bocha"

    @property
    def provider_type(self) -> SearchProviderType:
        return SearchProviderType.BOCHA

    async def execute(
        self,
        request: SearchRequest,
        credential: ProviderCredential,
    ) -> BochaOutput:
        """Search using the Bocha web search API.

        Args:
            request: Validated search request
            credential: Resolved Bocha credential

        Returns:
            BochaOutput with unsanitized hits and optional summary
        """
        body: dict[str, Any] = {
            "query": request.query,
            "count": request.count,
            "freshness": request.freshness or BOCHA_NO_LIMIT,
        }
        if request.summary is not None:
            body["summary"] = request.summary
        if request.site:
            body["site"] = request.site

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential.api_key or ''}",
        }

        logger.info(
            "Bocha search request: %s (count=%d, freshness=%s, site=%s, summary=%s)",
            request.query[:100],
            request.count,
            body["freshness"],
            request.site,
            request.summary,
        )

        status, data = await self._send(
            "POST",
            BOCHA_SEARCH_ENDPOINT,
            headers=headers,
            json_body=body,
        )

        payload = data.get("data")
        payload = payload if isinstance(payload, dict) else {}
        pages = _values(payload.get("webPages"))
        image_index = build_image_index(_values(payload.get("images")))

        results: list[WebHit] = []
        for page in pages:
            url = text_or_none(page.get("url")) or ""
            results.append(
                WebHit(
                    title=text_or_none(page.get("name")) or "",
                    url=url,
                    description=text_or_none(page.get("snippet")) or "",
                    published=text_or_none(page.get("datePublished")),
                    site_name=text_or_none(page.get("siteName")),
                    site_icon=text_or_none(page.get("siteIcon")),
                    image_url=image_index.get(url) if url else None,
                )
            )

        summary = data.get("summary")
        summary = summary if isinstance(summary, str) and summary else None

        logger.info(
            "Bocha search response: status=%d, results=%d, images=%d, summary=%s",
            status,
            len(results),
            len(image_index),
            summary is not None,
        )
        return BochaOutput(results=results, summary=summary)
