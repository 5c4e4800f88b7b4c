"""Web search for tool-calling agents.

One logical search operation dispatched to one of several providers:
- Brave (independent web index, region and language filters)
- Perplexity (synthesized answers with citations, direct or via OpenRouter)
- Bocha (web results with images, site filter and optional summary)

Features:
- Credential resolution from config and environment with provenance
- Provider-aware parameter validation before any network call
- Uniform, sanitized result payloads
- Result caching with TTL
"""

from .base import (
    CredentialSource,
    NormalizedResult,
    ProviderCredential,
    SearchError,
    SearchPayload,
    SearchProvider,
    SearchProviderType,
    SearchRejection,
    SearchRequest,
    SearchResponseError,
    SearchTimeoutError,
    SearchTransportError,
)
from .cache import SearchCache, make_cache_key
from .credentials import CredentialResolver
from .gateway import SearchGateway
from .sanitize import wrap_web_content

__all__ = [
    "CredentialResolver",
    "CredentialSource",
    "NormalizedResult",
    "ProviderCredential",
    "SearchCache",
    "SearchError",
    "SearchGateway",
    "SearchPayload",
    "SearchProvider",
    "SearchProviderType",
    "SearchRejection",
    "SearchRequest",
    "SearchResponseError",
    "SearchTimeoutError",
    "SearchTransportError",
    "make_cache_key",
    "wrap_web_content",
]
