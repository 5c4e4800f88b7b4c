"""Base classes, models and errors shared by the search gateway."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from enum import Enum
from typing import Annotated, Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

BODY_SNIPPET_LIMIT = 500


class SearchError(Exception):
    """Base exception for search-related errors."""

    def __init__(self, message: str, provider: str | None = None) -> None:
        """Initialize search error.

        Args:
            message: Error message
            provider: Name of the provider that raised the error
        """
        self.provider = provider
        super().__init__(message)


class SearchTransportError(SearchError):
    """The provider answered with a non-success status or could not be reached."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
        body_snippet: str | None = None,
    ) -> None:
        """Initialize transport error.

        Args:
            message: Error message
            provider: Name of the provider that raised the error
            status_code: HTTP status code, when a response was received
            body_snippet: Leading part of the response body
        """
        self.status_code = status_code
        self.body_snippet = body_snippet
        super().__init__(message, provider=provider)


class SearchTimeoutError(SearchTransportError):
    """The request was cancelled after exceeding its timeout."""

    pass


class SearchResponseError(SearchError):
    """The provider returned a body that could not be parsed."""

    pass


class SearchProviderType(str, Enum):
    """Supported search provider types."""

    BRAVE = "brave"
    PERPLEXITY = "perplexity"
    BOCHA = "bocha"


class CredentialSource(str, Enum):
    """Where a provider credential was found."""

    CONFIG = "config"
    PROVIDER_ENV = "provider_env"
    ALT_ENV = "alt_env"
    NONE = "none"


class ProviderCredential(BaseModel):
    """Resolved credential for the active provider.

    The key is kept out of ``repr`` so it never ends up in log lines or
    tracebacks; only ``source`` is meant to be logged.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str | None = Field(default=None, repr=False)
    source: CredentialSource = CredentialSource.NONE
    base_url: str | None = None
    model: str | None = None

    @property
    def is_present(self) -> bool:
        return bool(self.api_key)


class SearchRequest(BaseModel):
    """Validated, provider-scoped search parameters for one invocation."""

    model_config = ConfigDict(frozen=True)

    provider: SearchProviderType
    query: str
    count: int = Field(ge=1)
    country: str | None = None
    search_lang: str | None = None
    ui_lang: str | None = None
    freshness: str | None = None
    site: str | None = None
    summary: bool | None = None


class SearchRejection(BaseModel):
    """Structured pre-flight rejection returned instead of calling a provider."""

    model_config = ConfigDict(frozen=True)

    error: str = Field(description="Stable error code")
    message: str = Field(description="Human-readable remediation hint")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()


class WebHit(BaseModel):
    """A single web result as returned by a provider, before sanitization."""

    title: str = ""
    url: str = ""
    description: str = ""
    published: str | None = None
    site_name: str | None = None
    site_icon: str | None = None
    image_url: str | None = None


class BraveOutput(BaseModel):
    kind: Literal["brave"] = "brave"
    results: list[WebHit] = Field(default_factory=list)


class PerplexityOutput(BaseModel):
    kind: Literal["perplexity"] = "perplexity"
    content: str
    citations: list[str] = Field(default_factory=list)
    model: str


class BochaOutput(BaseModel):
    kind: Literal["bocha"] = "bocha"
    results: list[WebHit] = Field(default_factory=list)
    summary: str | None = None


ProviderOutput = Annotated[
    BraveOutput | PerplexityOutput | BochaOutput,
    Field(discriminator="kind"),
]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class NormalizedResult(_CamelModel):
    """Provider-neutral search hit.

    ``url`` is the literal source string so it can be handed straight to a
    follow-up fetch; the free-text fields have already been sanitized.
    """

    title: str
    url: str
    description: str
    published: str | None = None
    site_name: str | None = None
    site_icon: str | None = None
    image_url: str | None = None


class SearchPayload(_CamelModel):
    """Uniform result of a search invocation.

    Attributes:
        query: Original search query
        provider: Provider that produced the payload
        count: Number of results (web providers only)
        took_ms: Wall-clock time of the provider call in milliseconds
        results: Normalized results (web providers only)
        model: Model used (Perplexity only)
        content: Synthesized answer (Perplexity only)
        citations: Citation URLs (Perplexity only)
        summary: Text summary (Bocha only, when requested)
        cached: True when served from cache
    """

    query: str
    provider: SearchProviderType
    count: int | None = None
    took_ms: int
    results: list[NormalizedResult] | None = None
    model: str | None = None
    content: str | None = None
    citations: list[str] | None = None
    summary: str | None = None
    cached: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def text_or_none(value: Any) -> str | None:
    """Return ``value`` if it is a non-empty string, otherwise None."""
    return value if isinstance(value, str) and value else None


class SearchProvider(ABC):
    """Abstract base class for search provider executors.

    An executor performs exactly one HTTP call per invocation and translates
    the provider's response into a ``ProviderOutput`` variant.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        """Initialize the search provider.

        Args:
            timeout: Request timeout in seconds
        """
        self.timeout = timeout
        self._request_count = 0
        self._error_count = 0

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the provider name."""
        pass

    @property
    @abstractmethod
    def provider_type(self) -> SearchProviderType:
        """Get the provider type."""
        pass

    @abstractmethod
    async def execute(
        self,
        request: SearchRequest,
        credential: ProviderCredential,
    ) -> BraveOutput | PerplexityOutput | BochaOutput:
        """Run the search against the provider.

        Args:
            request: Validated search request
            credential: Resolved credential for this provider

        Returns:
            Provider-specific intermediate output

        Raises:
            SearchTransportError: On non-success status or connection failure
            SearchTimeoutError: When the request exceeds its timeout
            SearchResponseError: When the body is not valid JSON
        """
        pass

    async def _send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> tuple[int, dict[str, Any]]:
        """Send one request and decode the JSON body.

        Returns:
            Tuple of (status code, decoded body)
        """
        self._increment_request()
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method,
                    url,
                    headers=headers,
                    params=params,
                    json=json_body,
                )
        except httpx.TimeoutException as exc:
            self._increment_error()
            raise SearchTimeoutError(
                f"{self.name} request timed out after {self.timeout:g}s",
                provider=self.name,
            ) from exc
        except httpx.HTTPError as exc:
            self._increment_error()
            raise SearchTransportError(
                f"{self.name} request failed: {exc}",
                provider=self.name,
            ) from exc

        if not response.is_success:
            self._increment_error()
            snippet = response.text[:BODY_SNIPPET_LIMIT]
            raise SearchTransportError(
                f"{self.name} API error ({response.status_code}): "
                f"{snippet or response.reason_phrase}",
                provider=self.name,
                status_code=response.status_code,
                body_snippet=snippet,
            )

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            self._increment_error()
            raise SearchResponseError(
                f"{self.name} returned invalid JSON",
                provider=self.name,
            ) from exc

        if not isinstance(data, dict):
            self._increment_error()
            raise SearchResponseError(
                f"{self.name} returned unexpected JSON ({type(data).__name__})",
                provider=self.name,
            )

        return response.status_code, data

    def get_stats(self) -> dict[str, Any]:
        """Get provider statistics.

        Returns:
            Dictionary with provider statistics
        """
        return {
            "name": self.name,
            "type": self.provider_type.value,
            "request_count": self._request_count,
            "error_count": self._error_count,
            "error_rate": (
                self._error_count / self._request_count if self._request_count > 0 else 0.0
            ),
        }

    def _increment_request(self) -> None:
        """Increment request counter."""
        self._request_count += 1

    def _increment_error(self) -> None:
        """Increment error counter."""
        self._error_count += 1
