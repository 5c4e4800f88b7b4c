"""Perplexity provider - AI-synthesized answers with citations.

Talks to an OpenAI-compatible chat-completions endpoint, either Perplexity
itself or the OpenRouter proxy, depending on the resolved credential.
"""

from __future__ import annotations

from ...core.logger import get_logger
from ..base import (
    PerplexityOutput,
    ProviderCredential,
    SearchProvider,
    SearchProviderType,
    SearchRequest,
)
from ..credentials import DEFAULT_PERPLEXITY_BASE_URL, DEFAULT_PERPLEXITY_MODEL

logger = get_logger("search.perplexity")

NO_RESPONSE_CONTENT = "No response"
REQUEST_TITLE = "Web Search Gateway"


def chat_completions_endpoint(base_url: str) -> str:
    return f"{base_url.rstrip('/')}/chat/completions"


class PerplexitySearchProvider(SearchProvider):
    """Perplexity Sonar search provider.

    The query is sent verbatim as the single user message; the response is
    prose plus a list of citation URLs rather than discrete hits.
    """

    @property
    def name(self) -> str:
        return "Perplexity"

    @property
    def provider_type(self) -> SearchProviderType:
        return SearchProviderType.PERPLEXITY

    async def execute(
        self,
        request: SearchRequest,
        credential: ProviderCredential,
    ) -> PerplexityOutput:
        """Ask Perplexity for a synthesized answer.

        Args:
            request: Validated search request
            credential: Resolved credential carrying base URL and model

        Returns:
            PerplexityOutput with raw content and citations
        """
        base_url = credential.base_url or DEFAULT_PERPLEXITY_BASE_URL
        model = credential.model or DEFAULT_PERPLEXITY_MODEL
        endpoint = chat_completions_endpoint(base_url)

        body = {
            "model": model,
            "messages": [{"role": "user", "content": request.query}],
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential.api_key or ''}",
            "X-Title": REQUEST_TITLE,
        }

        logger.info(
            "Perplexity search request: %s (model=%s, endpoint=%s, source=%s)",
            request.query[:100],
            model,
            endpoint,
            credential.source.value,
        )

        status, data = await self._send("POST", endpoint, headers=headers, json_body=body)

        content = NO_RESPONSE_CONTENT
        choices = data.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            message = choices[0].get("message")
            if isinstance(message, dict) and isinstance(message.get("content"), str):
                content = message["content"]

        raw_citations = data.get("citations")
        citations = (
            [c for c in raw_citations if isinstance(c, str)]
            if isinstance(raw_citations, list)
            else []
        )

        logger.info(
            "Perplexity search response: status=%d, content_length=%d, citations=%d",
            status,
            len(content),
            len(citations),
        )
        return PerplexityOutput(content=content, citations=citations, model=model)
