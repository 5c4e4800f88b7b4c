"""Command-line interface for the web search gateway."""

from __future__ import annotations

import argparse
import asyncio
import json
from collections.abc import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .core import GatewayConfig, get_logger, setup_logging
from .core.config import SEARCH_PROVIDERS
from .search import CredentialResolver, SearchError, SearchGateway, SearchProviderType

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Returns:
        ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="search-gateway",
        description="Web Search Gateway - one search operation over Brave, Perplexity and Bocha",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search with the configured provider
  search-gateway search "python asyncio" --count 3

  # Use Bocha with a site filter and summary
  search-gateway search "release notes" --provider bocha --site python.org --summary

  # Show where each provider's credential comes from
  search-gateway providers -c config.yaml
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s v{__version__}",
        help="Show program's version number and exit",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to a YAML or JSON configuration file (default: environment only)",
    )
    common.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    common.add_argument(
        "--provider",
        choices=SEARCH_PROVIDERS,
        default=None,
        help="Override the configured search provider",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    search_parser = subparsers.add_parser("search", parents=[common], help="Run a web search")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument("-n", "--count", type=float, default=None, help="Number of results")
    search_parser.add_argument("--country", default=None, help="Region code (Brave only)")
    search_parser.add_argument(
        "--search-lang", dest="search_lang", default=None, help="Result language (Brave only)"
    )
    search_parser.add_argument(
        "--ui-lang", dest="ui_lang", default=None, help="UI language (Brave only)"
    )
    search_parser.add_argument(
        "--freshness",
        default=None,
        help="Recency filter: pd, pw, pm, py, noLimit (Bocha) or YYYY-MM-DDtoYYYY-MM-DD",
    )
    search_parser.add_argument("--site", default=None, help="Restrict to a domain (Bocha only)")
    search_parser.add_argument(
        "--summary",
        action="store_true",
        default=None,
        help="Request a text summary (Bocha only)",
    )

    subparsers.add_parser(
        "providers",
        parents=[common],
        help="Show the credential source of each provider",
    )

    return parser


def _load_config(args: argparse.Namespace) -> GatewayConfig:
    config = GatewayConfig.from_file(args.config) if args.config else GatewayConfig()

    if args.debug:
        config.logging = config.logging.model_copy(update={"level": "DEBUG"})
    if args.provider:
        config.web_search = config.web_search.model_copy(update={"provider": args.provider})
    return config


def cmd_search(args: argparse.Namespace) -> int:
    """Handle the search command.

    Args:
        args: Parsed arguments

    Returns:
        Exit code (0 for a payload, 2 for a structured rejection, 1 on failure)
    """
    try:
        config = _load_config(args)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}")
        return 1

    setup_logging(config.logging)

    if not config.web_search.enabled:
        Console().print("[yellow]Web search is disabled in the configuration.[/]")
        return 1

    gateway = SearchGateway(config.web_search)
    try:
        result = asyncio.run(
            gateway.search(
                args.query,
                args.count,
                country=args.country,
                search_lang=args.search_lang,
                ui_lang=args.ui_lang,
                freshness=args.freshness,
                site=args.site,
                summary=args.summary,
            )
        )
    except SearchError as exc:
        logger.error("Search failed: %s", exc)
        Console().print(
            Panel(str(exc), title=f"[bold red]{exc.provider or 'Search'} error[/]", expand=False)
        )
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 2 if "error" in result else 0


def cmd_providers(args: argparse.Namespace) -> int:
    """Handle the providers command.

    Only the credential source label is shown, never the key itself.
    """
    try:
        config = _load_config(args)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}")
        return 1

    setup_logging(config.logging)
    resolver = CredentialResolver(config.web_search)
    active = config.web_search.provider

    table = Table(title="Search Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Active")
    table.add_column("Credential")

    for provider in SearchProviderType:
        credential = resolver.resolve(provider)
        source = credential.source.value
        table.add_row(
            provider.value,
            "[green]yes[/]" if provider.value == active else "-",
            source if credential.is_present else f"[red]{source}[/]",
        )

    Console().print(table)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point.

    Args:
        argv: Optional sequence of CLI arguments (without the program name).

    Returns:
        Process exit code. 0 for success.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        raise SystemExit(0)

    handlers = {
        "search": cmd_search,
        "providers": cmd_providers,
    }

    handler = handlers.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
