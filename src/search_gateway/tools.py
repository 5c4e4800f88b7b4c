"""Tool registry and the web_search tool exposed to agents."""

from __future__ import annotations

import inspect
import json
import math
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from .core.config import WebSearchConfig
from .core.logger import get_logger, log_exception
from .search.base import SearchProviderType
from .search.gateway import SearchGateway
from .search.params import MAX_BOCHA_SEARCH_COUNT

logger = get_logger("tools")

WEB_SEARCH_TOOL_NAME = "web_search"

TOOL_DESCRIPTIONS = {
    SearchProviderType.BRAVE: (
        "Search the web using Brave Search API. Supports region-specific and localized "
        "search via country and language parameters. Returns titles, URLs, and snippets "
        "for fast research."
    ),
    SearchProviderType.PERPLEXITY: (
        "Search the web using Perplexity Sonar (direct or via OpenRouter). Returns "
        "AI-synthesized answers with citations from real-time web search."
    ),
    SearchProviderType.BOCHA: (
        "Search the web using Bocha Search API. Supports natural language queries, time "
        "range filtering, site-specific search, and text summaries. Returns up to 50 "
        "results with titles, URLs, descriptions, site names, icons, publish dates, and "
        "image links."
    ),
}

WEB_SEARCH_PARAMETERS: dict[str, Any] = {
    "type": "object",
    "properties": {
        "query": {"type": "string", "description": "Search query string."},
        "count": {
            "type": "number",
            "description": "Number of results to return (1-10 for brave/perplexity, 1-50 for bocha).",
            "minimum": 1,
            "maximum": MAX_BOCHA_SEARCH_COUNT,
        },
        "country": {
            "type": "string",
            "description": (
                "2-letter country code for region-specific results (e.g., 'DE', 'US', "
                "'ALL'). Default: 'US' (Brave only)."
            ),
        },
        "search_lang": {
            "type": "string",
            "description": "ISO language code for search results (e.g., 'de', 'en', 'fr') (Brave only).",
        },
        "ui_lang": {
            "type": "string",
            "description": "ISO language code for UI elements (Brave only).",
        },
        "freshness": {
            "type": "string",
            "description": (
                "Filter results by discovery time. For Brave: 'pd' (past 24h), 'pw' (past "
                "week), 'pm' (past month), 'py' (past year), or date range "
                "'YYYY-MM-DDtoYYYY-MM-DD'. For Bocha: 'noLimit', 'pd', 'pw', 'pm', 'py', or "
                "date range 'YYYY-MM-DDtoYYYY-MM-DD'."
            ),
        },
        "site": {
            "type": "string",
            "description": "Limit search to specific website/domain (Bocha only, e.g., 'example.com').",
        },
        "summary": {
            "type": "boolean",
            "description": "Return text summary of search results (Bocha only, default: false).",
        },
    },
    "required": ["query"],
}


class ToolRegistry:
    """Registry for agent tools with usage and error statistics.

    Sync and async tools are both accepted; a tool whose call returns an
    awaitable is awaited before the result is handed back.
    """

    def __init__(self) -> None:
        """Initialize the tool registry."""
        self._tools: dict[str, Callable[..., Any]] = {}
        self._tool_metadata: dict[str, dict[str, Any]] = {}
        self._usage_stats: dict[str, int] = {}
        self._error_counts: dict[str, int] = {}
        logger.info("ToolRegistry initialized")

    def register(
        self,
        name: str,
        func: Callable[..., Any],
        description: str | None = None,
        category: str = "general",
        requires_permission: bool = False,
        parameters: dict[str, Any] | None = None,
    ) -> None:
        """Register a tool with metadata.

        Args:
            name: Name of the tool
            func: Callable implementing the tool
            description: Human-readable description of the tool
            category: Tool category (e.g., 'search', 'utility')
            requires_permission: Whether this tool requires special permission
            parameters: JSON schema of the tool arguments
        """
        self._tools[name] = func
        self._tool_metadata[name] = {
            "description": description or func.__doc__ or "No description available",
            "category": category,
            "requires_permission": requires_permission,
            "parameters": parameters,
            "registered_at": datetime.now(UTC).isoformat(),
        }
        self._usage_stats[name] = 0
        self._error_counts[name] = 0
        logger.debug("Registered tool: %s (category: %s)", name, category)

    def get_tool(self, name: str) -> Callable[..., Any] | None:
        return self._tools.get(name)

    async def execute_tool(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Execute a tool and track usage statistics.

        Args:
            name: Name of the tool to execute
            *args: Positional arguments for the tool
            **kwargs: Keyword arguments for the tool

        Returns:
            Tool execution result

        Raises:
            ValueError: If tool is not found
        """
        tool = self.get_tool(name)
        if not tool:
            raise ValueError(f"Tool '{name}' not found in registry")

        try:
            self._usage_stats[name] = self._usage_stats.get(name, 0) + 1
            logger.debug("Executing tool: %s (usage count: %d)", name, self._usage_stats[name])

            result = tool(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result

        except Exception as exc:
            self._error_counts[name] = self._error_counts.get(name, 0) + 1
            log_exception(logger, exc, context=f"Tool execution failed: {name}")
            raise

    def list_tools(self) -> list[str]:
        return list(self._tools.keys())

    def get_tool_info(self, name: str) -> dict[str, Any] | None:
        """Get detailed information about a tool.

        Args:
            name: Name of the tool

        Returns:
            Tool metadata including description, category, schema and usage stats
        """
        if name not in self._tools:
            return None

        metadata = self._tool_metadata.get(name, {})
        return {
            "name": name,
            "description": metadata.get("description", "No description"),
            "category": metadata.get("category", "general"),
            "requires_permission": metadata.get("requires_permission", False),
            "parameters": metadata.get("parameters"),
            "registered_at": metadata.get("registered_at"),
            "usage_count": self._usage_stats.get(name, 0),
            "error_count": self._error_counts.get(name, 0),
        }

    def get_tools_by_category(self, category: str) -> list[str]:
        return [
            name
            for name, metadata in self._tool_metadata.items()
            if metadata.get("category") == category
        ]

    def get_stats(self) -> dict[str, Any]:
        """Get overall tool registry statistics.

        Returns:
            Dictionary with registry statistics
        """
        total_usage = sum(self._usage_stats.values())
        total_errors = sum(self._error_counts.values())
        error_rate = (total_errors / total_usage * 100) if total_usage > 0 else 0

        most_used = sorted(self._usage_stats.items(), key=lambda x: x[1], reverse=True)[:5]

        return {
            "total_tools": len(self._tools),
            "total_usage": total_usage,
            "total_errors": total_errors,
            "error_rate_percent": round(error_rate, 2),
            "most_used_tools": [{"name": name, "count": count} for name, count in most_used],
            "categories": sorted({m.get("category", "general") for m in self._tool_metadata.values()}),
        }

    def tool(
        self,
        name: str | None = None,
        description: str | None = None,
        category: str = "custom",
        requires_permission: bool = False,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator registering the wrapped function with this registry.

        Example:
            @registry.tool(name="echo", description="Echo the input")
            async def echo(text: str) -> str:
                return text
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            tool_name = name or func.__name__
            tool_desc = description or func.__doc__ or "No description"
            self.register(tool_name, func, tool_desc, category, requires_permission)
            return func

        return decorator


def _read_string(args: Mapping[str, Any], key: str) -> str | None:
    value = args.get(key)
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _read_integer(args: Mapping[str, Any], key: str) -> int | None:
    """Read a number (or numeric string) and truncate it toward zero."""
    value = args.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, int | float) or not math.isfinite(value):
        return None
    return math.trunc(value)


class WebSearchTool:
    """The ``web_search`` tool bound to a gateway.

    Arguments arrive as a loosely typed mapping from the tool runtime;
    strings are trimmed and ``count`` may be given as a numeric string.
    """

    name = WEB_SEARCH_TOOL_NAME

    def __init__(self, gateway: SearchGateway) -> None:
        self.gateway = gateway
        self.description = TOOL_DESCRIPTIONS[gateway.provider_type]
        self.parameters = WEB_SEARCH_PARAMETERS

    async def execute(self, args: Mapping[str, Any]) -> str:
        """Run one search.

        Args:
            args: Raw tool arguments

        Returns:
            JSON string with the payload or a structured error

        Raises:
            SearchError: If the provider call fails
        """
        summary = args.get("summary")
        result = await self.gateway.search(
            _read_string(args, "query"),
            _read_integer(args, "count"),
            country=_read_string(args, "country"),
            search_lang=_read_string(args, "search_lang"),
            ui_lang=_read_string(args, "ui_lang"),
            freshness=_read_string(args, "freshness"),
            site=_read_string(args, "site"),
            summary=None if summary is None else bool(summary),
        )
        return json.dumps(result, indent=2, ensure_ascii=False)

    async def __call__(self, **kwargs: Any) -> str:
        return await self.execute(kwargs)


def build_web_search_tool(
    config: WebSearchConfig | None = None,
    gateway: SearchGateway | None = None,
) -> WebSearchTool | None:
    """Create the web_search tool for ``config``.

    Args:
        config: Web search configuration (the gateway's config when omitted)
        gateway: Existing gateway to bind (one is built from ``config`` otherwise)

    Returns:
        The tool, or None when web search is disabled
    """
    if config is None:
        config = gateway.config if gateway is not None else WebSearchConfig()
    if not config.enabled:
        logger.info("Web search disabled; web_search tool not created")
        return None
    return WebSearchTool(gateway or SearchGateway(config))


def register_default_tools(registry: ToolRegistry, gateway: SearchGateway) -> None:
    """Register the search tools backed by ``gateway``.

    Args:
        registry: Tool registry to register tools with
        gateway: Gateway serving searches and owning the cache
    """
    web_search = build_web_search_tool(gateway=gateway)
    if web_search is not None:
        registry.register(
            web_search.name,
            web_search,
            description=web_search.description,
            category="search",
            parameters=web_search.parameters,
        )

    async def get_search_cache_stats() -> str:
        """Get statistics about the search cache."""
        return json.dumps(gateway.cache.get_stats(), indent=2)

    async def clear_search_cache() -> str:
        """Clear the search result cache."""
        gateway.clear_cache()
        return "Search cache cleared successfully"

    registry.register(
        "get_search_cache_stats",
        get_search_cache_stats,
        description="Get statistics about the search result cache",
        category="utility",
    )
    registry.register(
        "clear_search_cache",
        clear_search_cache,
        description="Clear the search result cache",
        category="utility",
        requires_permission=True,
    )
    logger.info(
        "Registered %d default tools (provider=%s)",
        len(registry.list_tools()),
        gateway.provider_type.value,
    )
