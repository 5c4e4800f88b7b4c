"""Core modules for the web search gateway.

This package contains:
- Configuration management
- Logging utilities
"""

from .config import (
    DEFAULT_CACHE_TTL_MINUTES,
    DEFAULT_TIMEOUT_SECONDS,
    GatewayConfig,
    LoggingConfig,
    PerplexityConfig,
    WebSearchConfig,
)
from .logger import get_logger, log_exception, setup_logging

__all__ = [
    "DEFAULT_CACHE_TTL_MINUTES",
    "DEFAULT_TIMEOUT_SECONDS",
    "GatewayConfig",
    "LoggingConfig",
    "PerplexityConfig",
    "WebSearchConfig",
    "get_logger",
    "log_exception",
    "setup_logging",
]
