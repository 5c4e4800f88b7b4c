"""Web Search Gateway.

A multi-provider web search tool for agents with:
- Brave, Perplexity and Bocha backends behind one operation
- Credential resolution from config or environment
- Provider-aware parameter validation
- Sanitized, uniform result payloads and response caching

Example:
    ```python
    import asyncio

    from search_gateway import SearchGateway, WebSearchConfig

    gateway = SearchGateway(WebSearchConfig(provider="brave"))
    payload = asyncio.run(gateway.search("python asyncio", count=3))
    ```
"""

from importlib.metadata import PackageNotFoundError, version

from .core import GatewayConfig, WebSearchConfig, get_logger, setup_logging
from .search import SearchError, SearchGateway
from .tools import ToolRegistry, WebSearchTool, build_web_search_tool, register_default_tools

__all__ = [
    "__version__",
    "GatewayConfig",
    "WebSearchConfig",
    "SearchGateway",
    "SearchError",
    "ToolRegistry",
    "WebSearchTool",
    "build_web_search_tool",
    "register_default_tools",
    "get_logger",
    "setup_logging",
]

try:  # pragma: no cover - best-effort during development
    __version__ = version("web-search-gateway")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
