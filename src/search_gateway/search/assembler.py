"""Assemble provider outputs into the uniform ``SearchPayload``.

Free text from the web (titles, descriptions, synthesized answers, summaries)
is passed through the sanitizer. Result URLs are left untouched so a caller
can feed them directly into a fetch tool.
"""

from __future__ import annotations

from .base import (
    BochaOutput,
    BraveOutput,
    NormalizedResult,
    PerplexityOutput,
    SearchPayload,
    SearchRequest,
    WebHit,
)
from .sanitize import Sanitizer, wrap_web_content


class ResultAssembler:
    """Map each provider output variant into a ``SearchPayload``.

    Args:
        sanitizer: Callable wrapping untrusted text
    """

    def __init__(self, sanitizer: Sanitizer = wrap_web_content) -> None:
        self._sanitize = sanitizer

    def _wrap(self, text: str | None) -> str:
        return self._sanitize(text) if text else ""

    def normalize_hit(self, hit: WebHit) -> NormalizedResult:
        return NormalizedResult(
            title=self._wrap(hit.title),
            url=hit.url,
            description=self._wrap(hit.description),
            published=hit.published or None,
            site_name=hit.site_name or None,
            site_icon=hit.site_icon or None,
            image_url=hit.image_url or None,
        )

    def _from_brave(
        self, request: SearchRequest, output: BraveOutput, took_ms: int
    ) -> SearchPayload:
        results = [self.normalize_hit(hit) for hit in output.results]
        return SearchPayload(
            query=request.query,
            provider=request.provider,
            count=len(results),
            took_ms=took_ms,
            results=results,
        )

    def _from_bocha(
        self, request: SearchRequest, output: BochaOutput, took_ms: int
    ) -> SearchPayload:
        results = [self.normalize_hit(hit) for hit in output.results]
        return SearchPayload(
            query=request.query,
            provider=request.provider,
            count=len(results),
            took_ms=took_ms,
            results=results,
            summary=self._wrap(output.summary) or None,
        )

    def _from_perplexity(
        self, request: SearchRequest, output: PerplexityOutput, took_ms: int
    ) -> SearchPayload:
        return SearchPayload(
            query=request.query,
            provider=request.provider,
            took_ms=took_ms,
            model=output.model,
            content=self._wrap(output.content),
            citations=list(output.citations),
        )

    def assemble(
        self,
        request: SearchRequest,
        output: BraveOutput | PerplexityOutput | BochaOutput,
        took_ms: int,
    ) -> SearchPayload:
        """Build the payload for ``output``.

        Args:
            request: The request that produced ``output``
            output: Provider output variant
            took_ms: Provider call duration in milliseconds

        Returns:
            SearchPayload ready to cache and return
        """
        if isinstance(output, BraveOutput):
            return self._from_brave(request, output, took_ms)
        if isinstance(output, BochaOutput):
            return self._from_bocha(request, output, took_ms)
        if isinstance(output, PerplexityOutput):
            return self._from_perplexity(request, output, took_ms)
        raise TypeError(f"Unsupported provider output: {type(output).__name__}")
