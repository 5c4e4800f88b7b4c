"""Tests for the tool registry and the web_search tool.

Tests cover:
- ToolRegistry registration, execution and statistics
- build_web_search_tool (disabled config, provider descriptions, schema)
- WebSearchTool argument reading
- register_default_tools wiring
"""

from __future__ import annotations

import json
import logging

import pytest
from pytest_httpx import HTTPXMock

from search_gateway.core.config import WebSearchConfig
from search_gateway.search.base import SearchTransportError
from search_gateway.search.gateway import SearchGateway
from search_gateway.tools import (
    TOOL_DESCRIPTIONS,
    WEB_SEARCH_PARAMETERS,
    ToolRegistry,
    WebSearchTool,
    build_web_search_tool,
    register_default_tools,
)

# ==============================================================================
# ToolRegistry Tests
# ==============================================================================


class TestToolRegistry:
    """Tests for ToolRegistry."""

    @pytest.mark.asyncio
    async def test_register_and_execute(self) -> None:
        """Sync and async tools are both executed."""
        registry = ToolRegistry()

        def double(value: int) -> int:
            return value * 2

        async def shout(text: str) -> str:
            return text.upper()

        registry.register("double", double, category="math")
        registry.register("shout", shout)

        assert await registry.execute_tool("double", 4) == 8
        assert await registry.execute_tool("shout", text="hi") == "HI"
        assert registry.get_tools_by_category("math") == ["double"]
        assert registry.get_stats()["total_usage"] == 2

    @pytest.mark.asyncio
    async def test_unknown_tool(self) -> None:
        """Unknown tools raise ValueError."""
        registry = ToolRegistry()
        with pytest.raises(ValueError, match="not found"):
            await registry.execute_tool("missing")

    @pytest.mark.asyncio
    async def test_errors_counted_and_reraised(self, caplog: pytest.LogCaptureFixture) -> None:
        """Tool failures are counted and propagate."""
        registry = ToolRegistry()

        async def broken() -> None:
            raise RuntimeError("boom")

        registry.register("broken", broken)

        with caplog.at_level(logging.ERROR), pytest.raises(RuntimeError, match="boom"):
            await registry.execute_tool("broken")

        assert "Tool execution failed: broken" in caplog.text

        info = registry.get_tool_info("broken")
        assert info is not None
        assert info["error_count"] == 1
        assert info["usage_count"] == 1

    def test_decorator(self) -> None:
        """The tool decorator registers the function."""
        registry = ToolRegistry()

        @registry.tool(description="Echo text")
        async def echo(text: str) -> str:
            return text

        info = registry.get_tool_info("echo")
        assert info is not None
        assert info["description"] == "Echo text"
        assert info["category"] == "custom"

    def test_tool_info_missing(self) -> None:
        assert ToolRegistry().get_tool_info("nope") is None


# ==============================================================================
# web_search tool
# ==============================================================================


class TestBuildWebSearchTool:
    """Tests for build_web_search_tool."""

    def test_disabled_returns_none(self) -> None:
        """No tool when web search is disabled."""
        assert build_web_search_tool(WebSearchConfig(enabled=False)) is None

    @pytest.mark.parametrize("provider", ["brave", "perplexity", "bocha"])
    def test_description_per_provider(self, provider: str) -> None:
        """The description reflects the active provider."""
        tool = build_web_search_tool(WebSearchConfig(provider=provider))
        assert isinstance(tool, WebSearchTool)
        assert tool.name == "web_search"
        assert tool.description == TOOL_DESCRIPTIONS[tool.gateway.provider_type]
        assert provider.capitalize() in tool.description

    def test_schema(self) -> None:
        """The schema requires only the query."""
        tool = build_web_search_tool(WebSearchConfig())
        assert tool is not None
        assert tool.parameters is WEB_SEARCH_PARAMETERS
        assert tool.parameters["required"] == ["query"]
        assert set(tool.parameters["properties"]) == {
            "query",
            "count",
            "country",
            "search_lang",
            "ui_lang",
            "freshness",
            "site",
            "summary",
        }


class TestWebSearchToolExecute:
    """Tests for WebSearchTool.execute."""

    @pytest.mark.asyncio
    async def test_returns_json_payload(self, httpx_mock: HTTPXMock) -> None:
        """Arguments are trimmed and numeric strings accepted for count."""
        httpx_mock.add_response(json={"web": {"results": []}})
        gateway = SearchGateway(WebSearchConfig(api_key="k"), environ={})
        tool = WebSearchTool(gateway)

        text = await tool.execute({"query": "  python  ", "count": "3.7", "country": " US "})

        data = json.loads(text)
        assert data["query"] == "python"
        assert data["provider"] == "brave"
        params = httpx_mock.get_requests()[0].url.params
        assert params["count"] == "3"
        assert params["country"] == "US"

    @pytest.mark.asyncio
    async def test_returns_structured_error(self, httpx_mock: HTTPXMock) -> None:
        """Rejections are returned as JSON, not raised."""
        gateway = SearchGateway(WebSearchConfig(provider="bocha", api_key="k"), environ={})
        tool = WebSearchTool(gateway)

        text = await tool.execute({"query": "q", "country": "US"})

        assert json.loads(text)["error"] == "unsupported_country"
        assert httpx_mock.get_requests() == []

    @pytest.mark.asyncio
    async def test_non_string_fields_ignored(self, httpx_mock: HTTPXMock) -> None:
        """Non-string optional fields are treated as absent."""
        httpx_mock.add_response(json={"data": {}})
        gateway = SearchGateway(WebSearchConfig(provider="bocha", api_key="k"), environ={})

        text = await WebSearchTool(gateway).execute({"query": "q", "country": 12, "count": True})

        data = json.loads(text)
        assert data["provider"] == "bocha"
        body = json.loads(httpx_mock.get_requests()[0].content)
        assert body["count"] == 5


# ==============================================================================
# register_default_tools
# ==============================================================================


class TestRegisterDefaultTools:
    """Tests for register_default_tools."""

    def test_registers_search_tools(self) -> None:
        """web_search and the cache tools are registered."""
        registry = ToolRegistry()
        gateway = SearchGateway(WebSearchConfig(), environ={})

        register_default_tools(registry, gateway)

        assert set(registry.list_tools()) == {
            "web_search",
            "get_search_cache_stats",
            "clear_search_cache",
        }
        info = registry.get_tool_info("web_search")
        assert info is not None
        assert info["category"] == "search"
        assert info["parameters"] is WEB_SEARCH_PARAMETERS
        clear_info = registry.get_tool_info("clear_search_cache")
        assert clear_info is not None
        assert clear_info["requires_permission"] is True

    def test_disabled_search_skips_web_search(self) -> None:
        """Only the cache tools are registered when search is disabled."""
        registry = ToolRegistry()
        gateway = SearchGateway(WebSearchConfig(enabled=False), environ={})

        register_default_tools(registry, gateway)

        assert "web_search" not in registry.list_tools()

    @pytest.mark.asyncio
    async def test_execute_through_registry(self, httpx_mock: HTTPXMock) -> None:
        """The registry runs web_search and the cache tools share its cache."""
        httpx_mock.add_response(json={"web": {"results": []}})
        registry = ToolRegistry()
        gateway = SearchGateway(WebSearchConfig(api_key="k"), environ={})
        register_default_tools(registry, gateway)

        first = json.loads(await registry.execute_tool("web_search", query="q"))
        second = json.loads(await registry.execute_tool("web_search", query="q"))
        stats = json.loads(await registry.execute_tool("get_search_cache_stats"))
        cleared = await registry.execute_tool("clear_search_cache")

        assert "cached" not in first
        assert second["cached"] is True
        assert stats["size"] == 1
        assert cleared == "Search cache cleared successfully"
        assert len(gateway.cache) == 0

    @pytest.mark.asyncio
    async def test_provider_errors_propagate(self, httpx_mock: HTTPXMock) -> None:
        """Transport failures are re-raised by the registry."""
        httpx_mock.add_response(status_code=503, text="unavailable")
        registry = ToolRegistry()
        register_default_tools(registry, SearchGateway(WebSearchConfig(api_key="k"), environ={}))

        with pytest.raises(SearchTransportError):
            await registry.execute_tool("web_search", query="q")

        info = registry.get_tool_info("web_search")
        assert info is not None
        assert info["error_count"] == 1
