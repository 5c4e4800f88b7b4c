"""Configuration management for the web search gateway.

This module provides configuration models and loading functionality using Pydantic
for validation and type safety.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DOTENV_LOADED = False

SEARCH_PROVIDERS = ("brave", "perplexity", "bocha")

DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_CACHE_TTL_MINUTES = 15


def _load_env_once() -> None:
    """Load environment variables from a .env file exactly once."""

    global _DOTENV_LOADED
    if not _DOTENV_LOADED:
        load_dotenv()
        _DOTENV_LOADED = True


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in configuration data."""

    if isinstance(data, str):
        return os.path.expandvars(data)
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    return data


def _strip_or_none(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip() or None
    return value


class PerplexityConfig(BaseModel):
    """Perplexity-specific search settings.

    Attributes:
        api_key: Perplexity or OpenRouter API key
        base_url: Explicit chat-completions base URL (overrides inference)
        model: Model name sent with each request
    """

    api_key: str | None = Field(default=None, repr=False, description="Perplexity API key")
    base_url: str | None = Field(
        default=None,
        description="Base URL (e.g. https://api.perplexity.ai or https://openrouter.ai/api/v1)",
    )
    model: str | None = Field(default=None, description="Model name (default: perplexity/sonar-pro)")

    @field_validator("api_key", "base_url", "model", mode="before")
    @classmethod
    def _strip_values(cls, value: Any) -> Any:
        return _strip_or_none(value)


class WebSearchConfig(BaseModel):
    """Configuration for the web search tool.

    Attributes:
        enabled: Whether the web_search tool is exposed at all
        provider: Active search backend (brave, perplexity, bocha)
        api_key: API key for Brave or Bocha
        max_results: Default result count when a call does not pass one
        timeout_seconds: Per-request HTTP timeout in seconds
        cache_ttl_minutes: Lifetime of cached responses in minutes
        cache_max_entries: Optional bound on cached responses (None = unbounded)
        perplexity: Perplexity settings
    """

    enabled: bool = Field(default=True, description="Enable web search")
    provider: Literal["brave", "perplexity", "bocha"] = Field(
        default="brave",
        description="Search provider (brave, perplexity, bocha)",
    )
    api_key: str | None = Field(
        default=None,
        repr=False,
        description="API key for the Brave or Bocha provider",
    )
    max_results: int | None = Field(
        default=None,
        description="Default number of results (clamped per provider)",
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        description="HTTP timeout in seconds",
    )
    cache_ttl_minutes: float = Field(
        default=DEFAULT_CACHE_TTL_MINUTES,
        description="Cache TTL in minutes",
    )
    cache_max_entries: int | None = Field(
        default=None,
        ge=1,
        description="Maximum cached responses (unbounded when unset)",
    )
    perplexity: PerplexityConfig = Field(
        default_factory=PerplexityConfig,
        description="Perplexity provider settings",
    )

    @field_validator("provider", mode="before")
    @classmethod
    def _normalise_provider(cls, value: Any) -> str:
        """Lower-case the provider name; anything unrecognised means Brave."""
        raw = value.strip().lower() if isinstance(value, str) else ""
        return raw if raw in SEARCH_PROVIDERS else "brave"

    @field_validator("api_key", mode="before")
    @classmethod
    def _normalise_api_key(cls, value: Any) -> Any:
        return _strip_or_none(value)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format for file output",
    )
    log_file: str | None = Field(default=None, description="Log file path")
    max_bytes: int = Field(default=10485760, description="Max log file size (10MB)")
    backup_count: int = Field(default=5, description="Number of backup files")
    show_path: bool = Field(default=False, description="Show source path in console output")

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class GatewayConfig(BaseSettings):
    """Root configuration for the web search gateway."""

    model_config = SettingsConfigDict(
        env_prefix="SEARCH_GATEWAY_",
        env_nested_delimiter="__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    web_search: WebSearchConfig = Field(
        default_factory=WebSearchConfig,
        description="Web search tool configuration",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> GatewayConfig:
        """Load configuration from a YAML file."""

        _load_env_once()
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, encoding="utf-8") as handle:
            try:
                config_data = yaml.safe_load(handle)
            except yaml.YAMLError as exc:
                raise ValueError(f"Invalid YAML in config file: {exc}") from exc

        if not config_data:
            config_data = {}

        config_data = _expand_env_vars(config_data)
        return cls(**config_data)

    @classmethod
    def from_json(cls, path: str | Path) -> GatewayConfig:
        """Load configuration from a JSON file."""

        _load_env_once()
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, encoding="utf-8") as handle:
            try:
                config_data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid JSON in config file: {exc}") from exc

        config_data = _expand_env_vars(config_data)
        return cls(**config_data)

    @classmethod
    def from_file(cls, path: str | Path) -> GatewayConfig:
        """Load configuration from a YAML or JSON file based on its suffix."""

        if Path(path).suffix.lower() == ".json":
            return cls.from_json(path)
        return cls.from_yaml(path)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""

        return self.model_dump()
