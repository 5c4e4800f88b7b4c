"""Credential resolution for search providers.

Each provider has an ordered list of credential sources. The first source
holding a non-empty value wins and its label is recorded as the credential's
provenance. For Perplexity the provenance also decides which endpoint the
key belongs to (Perplexity directly, or the OpenRouter proxy).
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from ..core.config import WebSearchConfig
from ..core.logger import get_logger
from .base import CredentialSource, ProviderCredential, SearchProviderType, SearchRejection

logger = get_logger("search.credentials")

BRAVE_API_KEY_ENV = "BRAVE_API_KEY"
BOCHA_API_KEY_ENV = "BOCHA_API_KEY"
PERPLEXITY_API_KEY_ENV = "PERPLEXITY_API_KEY"
OPENROUTER_API_KEY_ENV = "OPENROUTER_API_KEY"

PERPLEXITY_DIRECT_BASE_URL = "https://api.perplexity.ai"
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_PERPLEXITY_BASE_URL = OPENROUTER_BASE_URL
DEFAULT_PERPLEXITY_MODEL = "perplexity/sonar-pro"

PERPLEXITY_KEY_PREFIXES = ("pplx-",)
OPENROUTER_KEY_PREFIXES = ("sk-or-",)


@dataclass(frozen=True)
class KeySource:
    """One place a credential may come from."""

    label: CredentialSource
    read: Callable[[], str | None]


def normalize_api_key(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def first_present(sources: list[KeySource]) -> tuple[str | None, CredentialSource]:
    """Evaluate ``sources`` in order and return the first non-empty key and its label."""
    for source in sources:
        key = normalize_api_key(source.read())
        if key:
            return key, source.label
    return None, CredentialSource.NONE


def infer_perplexity_base_url(api_key: str | None) -> str | None:
    """Guess the endpoint from a key's prefix.

    Returns:
        The direct or OpenRouter base URL, or None if the prefix is unknown
    """
    if not api_key:
        return None
    normalized = api_key.lower()
    if normalized.startswith(PERPLEXITY_KEY_PREFIXES):
        return PERPLEXITY_DIRECT_BASE_URL
    if normalized.startswith(OPENROUTER_KEY_PREFIXES):
        return OPENROUTER_BASE_URL
    return None


def resolve_perplexity_base_url(
    configured: str | None,
    source: CredentialSource,
    api_key: str | None,
) -> str:
    """Pick the Perplexity chat-completions base URL.

    An explicitly configured URL always wins. Otherwise environment keys map
    to their own endpoint, and configured keys are classified by prefix.
    """
    explicit = (configured or "").strip()
    if explicit:
        return explicit
    if source == CredentialSource.PROVIDER_ENV:
        return PERPLEXITY_DIRECT_BASE_URL
    if source == CredentialSource.ALT_ENV:
        return OPENROUTER_BASE_URL
    if source == CredentialSource.CONFIG:
        inferred = infer_perplexity_base_url(api_key)
        if inferred:
            return inferred
    return DEFAULT_PERPLEXITY_BASE_URL


class CredentialResolver:
    """Resolve the API key (and Perplexity endpoint) for a provider.

    Args:
        config: Web search configuration
        environ: Environment mapping (defaults to ``os.environ``)
    """

    def __init__(
        self,
        config: WebSearchConfig,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._config = config
        self._environ = environ if environ is not None else os.environ

    def _env(self, name: str) -> Callable[[], str | None]:
        return lambda: self._environ.get(name)

    def sources_for(self, provider: SearchProviderType) -> list[KeySource]:
        """Ordered credential sources for ``provider``."""
        if provider == SearchProviderType.PERPLEXITY:
            return [
                KeySource(CredentialSource.CONFIG, lambda: self._config.perplexity.api_key),
                KeySource(CredentialSource.PROVIDER_ENV, self._env(PERPLEXITY_API_KEY_ENV)),
                KeySource(CredentialSource.ALT_ENV, self._env(OPENROUTER_API_KEY_ENV)),
            ]
        env_name = BOCHA_API_KEY_ENV if provider == SearchProviderType.BOCHA else BRAVE_API_KEY_ENV
        return [
            KeySource(CredentialSource.CONFIG, lambda: self._config.api_key),
            KeySource(CredentialSource.PROVIDER_ENV, self._env(env_name)),
        ]

    def resolve(self, provider: SearchProviderType) -> ProviderCredential:
        """Resolve the credential for ``provider``.

        Returns:
            ProviderCredential; ``api_key`` is None when no source had a value
        """
        api_key, source = first_present(self.sources_for(provider))

        if provider != SearchProviderType.PERPLEXITY:
            logger.debug("Resolved %s credential (source=%s)", provider.value, source.value)
            return ProviderCredential(api_key=api_key, source=source)

        perplexity = self._config.perplexity
        base_url = resolve_perplexity_base_url(perplexity.base_url, source, api_key)
        model = perplexity.model or DEFAULT_PERPLEXITY_MODEL
        logger.debug(
            "Resolved perplexity credential (source=%s, base_url=%s, model=%s)",
            source.value,
            base_url,
            model,
        )
        return ProviderCredential(api_key=api_key, source=source, base_url=base_url, model=model)


def missing_key_rejection(provider: SearchProviderType) -> SearchRejection:
    """Structured result returned when no credential is available."""
    if provider == SearchProviderType.PERPLEXITY:
        return SearchRejection(
            error="missing_perplexity_api_key",
            message=(
                "web_search (perplexity) needs an API key. Set "
                f"{PERPLEXITY_API_KEY_ENV} or {OPENROUTER_API_KEY_ENV} in the environment, "
                "or configure web_search.perplexity.api_key."
            ),
        )
    if provider == SearchProviderType.BOCHA:
        return SearchRejection(
            error="missing_bocha_api_key",
            message=(
                "web_search (bocha) needs a Bocha API key. Set "
                f"{BOCHA_API_KEY_ENV} in the environment, or configure web_search.api_key."
            ),
        )
    return SearchRejection(
        error="missing_brave_api_key",
        message=(
            "web_search needs a Brave Search API key. Set "
            f"{BRAVE_API_KEY_ENV} in the environment, or configure web_search.api_key."
        ),
    )
