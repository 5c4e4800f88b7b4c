"""Tests for credential resolution.

Tests cover:
- Precedence of config over environment
- Provenance labels
- Perplexity endpoint inference
- Missing key rejections
"""

from __future__ import annotations

import pytest

from search_gateway.core.config import PerplexityConfig, WebSearchConfig
from search_gateway.search.base import CredentialSource, SearchProviderType
from search_gateway.search.credentials import (
    DEFAULT_PERPLEXITY_MODEL,
    OPENROUTER_BASE_URL,
    PERPLEXITY_DIRECT_BASE_URL,
    CredentialResolver,
    infer_perplexity_base_url,
    missing_key_rejection,
    resolve_perplexity_base_url,
)

# ==============================================================================
# Brave and Bocha
# ==============================================================================


class TestWebProviderCredentials:
    """Tests for Brave and Bocha key resolution."""

    def test_config_key_wins_over_env(self) -> None:
        """A configured key shadows the environment."""
        resolver = CredentialResolver(
            WebSearchConfig(api_key="from-config"),
            environ={"BRAVE_API_KEY": "from-env"},
        )
        credential = resolver.resolve(SearchProviderType.BRAVE)
        assert credential.api_key == "from-config"
        assert credential.source == CredentialSource.CONFIG

    def test_env_key_used_when_config_blank(self) -> None:
        """Blank config keys fall through to the environment."""
        resolver = CredentialResolver(
            WebSearchConfig(api_key="   "),
            environ={"BRAVE_API_KEY": "  from-env  "},
        )
        credential = resolver.resolve(SearchProviderType.BRAVE)
        assert credential.api_key == "from-env"
        assert credential.source == CredentialSource.PROVIDER_ENV

    def test_bocha_reads_its_own_env(self) -> None:
        """Bocha reads BOCHA_API_KEY, not BRAVE_API_KEY."""
        resolver = CredentialResolver(
            WebSearchConfig(provider="bocha"),
            environ={"BRAVE_API_KEY": "brave", "BOCHA_API_KEY": "bocha"},
        )
        credential = resolver.resolve(SearchProviderType.BOCHA)
        assert credential.api_key == "bocha"
        assert credential.source == CredentialSource.PROVIDER_ENV

    def test_missing_key(self) -> None:
        """No source yields an absent credential."""
        resolver = CredentialResolver(WebSearchConfig(), environ={"BRAVE_API_KEY": ""})
        credential = resolver.resolve(SearchProviderType.BRAVE)
        assert credential.api_key is None
        assert credential.source == CredentialSource.NONE
        assert credential.is_present is False

    def test_process_environment_is_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without an explicit mapping the process environment is read."""
        monkeypatch.setenv("BRAVE_API_KEY", "process-env-key")
        credential = CredentialResolver(WebSearchConfig()).resolve(SearchProviderType.BRAVE)
        assert credential.api_key == "process-env-key"

    def test_key_not_in_repr(self) -> None:
        """The key value never appears in the credential repr."""
        resolver = CredentialResolver(WebSearchConfig(api_key="super-secret-value"), environ={})
        credential = resolver.resolve(SearchProviderType.BRAVE)
        assert "super-secret-value" not in repr(credential)


# ==============================================================================
# Perplexity
# ==============================================================================


class TestPerplexityCredentials:
    """Tests for Perplexity key and endpoint resolution."""

    def test_config_key_precedes_env(self) -> None:
        """config > PERPLEXITY_API_KEY > OPENROUTER_API_KEY."""
        config = WebSearchConfig(
            provider="perplexity", perplexity=PerplexityConfig(api_key="pplx-config")
        )
        environ = {"PERPLEXITY_API_KEY": "pplx-env", "OPENROUTER_API_KEY": "sk-or-env"}
        credential = CredentialResolver(config, environ=environ).resolve(
            SearchProviderType.PERPLEXITY
        )
        assert credential.api_key == "pplx-config"
        assert credential.source == CredentialSource.CONFIG
        assert credential.base_url == PERPLEXITY_DIRECT_BASE_URL

    def test_perplexity_env_is_direct(self) -> None:
        """PERPLEXITY_API_KEY maps to the direct endpoint."""
        environ = {"PERPLEXITY_API_KEY": "anything", "OPENROUTER_API_KEY": "sk-or-env"}
        credential = CredentialResolver(
            WebSearchConfig(provider="perplexity"), environ=environ
        ).resolve(SearchProviderType.PERPLEXITY)
        assert credential.api_key == "anything"
        assert credential.source == CredentialSource.PROVIDER_ENV
        assert credential.base_url == PERPLEXITY_DIRECT_BASE_URL

    def test_openrouter_env_is_proxy(self) -> None:
        """OPENROUTER_API_KEY maps to OpenRouter."""
        credential = CredentialResolver(
            WebSearchConfig(provider="perplexity"),
            environ={"OPENROUTER_API_KEY": "sk-or-env"},
        ).resolve(SearchProviderType.PERPLEXITY)
        assert credential.source == CredentialSource.ALT_ENV
        assert credential.base_url == OPENROUTER_BASE_URL
        assert credential.model == DEFAULT_PERPLEXITY_MODEL

    def test_explicit_base_url_and_model(self) -> None:
        """Configured base URL and model always win."""
        config = WebSearchConfig(
            provider="perplexity",
            perplexity=PerplexityConfig(
                api_key="pplx-abc",
                base_url="https://proxy.example.com/v1",
                model="sonar",
            ),
        )
        credential = CredentialResolver(config, environ={}).resolve(SearchProviderType.PERPLEXITY)
        assert credential.base_url == "https://proxy.example.com/v1"
        assert credential.model == "sonar"

    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("pplx-123", PERPLEXITY_DIRECT_BASE_URL),
            ("PPLX-123", PERPLEXITY_DIRECT_BASE_URL),
            ("sk-or-v1-123", OPENROUTER_BASE_URL),
            ("other-123", None),
            (None, None),
        ],
    )
    def test_infer_base_url(self, key: str | None, expected: str | None) -> None:
        """Key prefixes decide the endpoint."""
        assert infer_perplexity_base_url(key) == expected

    def test_unknown_config_prefix_defaults_to_openrouter(self) -> None:
        """An unrecognised configured key uses the default endpoint."""
        url = resolve_perplexity_base_url(None, CredentialSource.CONFIG, "custom-key")
        assert url == OPENROUTER_BASE_URL


class TestMissingKeyRejection:
    """Tests for missing key rejections."""

    @pytest.mark.parametrize(
        ("provider", "code", "env_name"),
        [
            (SearchProviderType.BRAVE, "missing_brave_api_key", "BRAVE_API_KEY"),
            (SearchProviderType.BOCHA, "missing_bocha_api_key", "BOCHA_API_KEY"),
            (SearchProviderType.PERPLEXITY, "missing_perplexity_api_key", "PERPLEXITY_API_KEY"),
        ],
    )
    def test_rejection_names_env_var(
        self, provider: SearchProviderType, code: str, env_name: str
    ) -> None:
        """Each rejection carries its code and remediation hint."""
        rejection = missing_key_rejection(provider)
        assert rejection.error == code
        assert env_name in rejection.message
