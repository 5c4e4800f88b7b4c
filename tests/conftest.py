"""Test configuration hooks."""

from __future__ import annotations

import pytest

from search_gateway.core.config import PerplexityConfig, WebSearchConfig
from search_gateway.search.credentials import (
    BOCHA_API_KEY_ENV,
    BRAVE_API_KEY_ENV,
    OPENROUTER_API_KEY_ENV,
    PERPLEXITY_API_KEY_ENV,
)

PROVIDER_ENV_VARS = (
    BRAVE_API_KEY_ENV,
    BOCHA_API_KEY_ENV,
    PERPLEXITY_API_KEY_ENV,
    OPENROUTER_API_KEY_ENV,
)


# Configure anyio to only use asyncio backend (skip trio tests)
@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio to use only asyncio backend."""
    return "asyncio"


@pytest.fixture(autouse=True)
def clean_provider_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep credentials from the developer's shell out of every test."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def brave_config() -> WebSearchConfig:
    """Brave config with a configured key."""
    return WebSearchConfig(provider="brave", api_key="brave-test-key")


@pytest.fixture
def bocha_config() -> WebSearchConfig:
    """Bocha config with a configured key."""
    return WebSearchConfig(provider="bocha", api_key="bocha-test-key")


@pytest.fixture
def perplexity_config() -> WebSearchConfig:
    """Perplexity config with a direct Perplexity key."""
    return WebSearchConfig(
        provider="perplexity",
        perplexity=PerplexityConfig(api_key="pplx-test-key"),
    )
