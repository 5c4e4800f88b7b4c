#!/usr/bin/env python3
"""Tool Registry Example.

This example demonstrates how an agent runtime consumes the gateway:
- Building a gateway from a config file
- Registering the search tools
- Inspecting tool metadata and the JSON schema
- Executing web_search and the cache tools

Set BRAVE_API_KEY (or configure another provider) before running.
"""

import asyncio
import json
from pathlib import Path

from search_gateway import GatewayConfig, SearchGateway, ToolRegistry, register_default_tools
from search_gateway.core import get_logger, setup_logging

CONFIG_PATH = Path(__file__).parent / "config.yaml"


async def main() -> None:
    config = GatewayConfig.from_yaml(CONFIG_PATH)
    setup_logging(config.logging)
    logger = get_logger("example")

    gateway = SearchGateway(config.web_search)
    registry = ToolRegistry()
    register_default_tools(registry, gateway)

    print("Registered tools:")
    for name in registry.list_tools():
        info = registry.get_tool_info(name) or {}
        print(f"  - {name} [{info.get('category')}]: {info.get('description')}")

    info = registry.get_tool_info("web_search")
    if info is None:
        logger.warning("web_search is disabled in %s", CONFIG_PATH)
        return
    print("\nweb_search schema:")
    print(json.dumps(info["parameters"], indent=2))

    query = "python asyncio tutorial"
    print("\nFirst call:")
    print(await registry.execute_tool("web_search", query=query, count=3))

    print("\nSecond call (served from cache):")
    result = json.loads(await registry.execute_tool("web_search", query=query, count=3))
    print(f"cached={result.get('cached', False)}")

    print("\nCache statistics:")
    print(await registry.execute_tool("get_search_cache_stats"))


if __name__ == "__main__":
    asyncio.run(main())
