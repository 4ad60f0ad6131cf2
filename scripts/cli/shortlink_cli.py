#!/usr/bin/env python3
"""
Command-line interface for the short link service.

Talks to the link store directly (no HTTP), using the same configuration as
the server.

Usage:
    python shortlink_cli.py shorten <url>
    python shortlink_cli.py resolve <short_code>
    python shortlink_cli.py info <short_code>
    python shortlink_cli.py health
"""

import argparse
import asyncio
import json
import sys
from typing import Optional

from app import build_service
from config import load_config
from shortlink.exceptions import ShortLinkError
from shortlink.common.logging_config import setup_logging


class ShortLinkCLI:
    """Command-line interface for the short link service."""

    def __init__(self, mode: Optional[str] = None, database_url: Optional[str] = None, verbose: bool = False):
        """Initialize CLI."""
        overrides = {"mode": mode}
        if database_url:
            overrides["database_url"] = database_url
            overrides["test_database_url"] = database_url
        self.config = load_config(**overrides)
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING")
        self.service = None

    async def initialize(self):
        """Connect to the store and build the service."""
        self.service = await build_service(self.config, self.logger)

    async def cleanup(self):
        """Cleanup resources."""
        if self.service:
            await self.service.close()

    def _print_error(self, error: ShortLinkError) -> int:
        print(json.dumps({"success": False, **error.to_dict()}, indent=2), file=sys.stderr)
        return 1

    async def shorten(self, url: str) -> int:
        """Shorten a URL."""
        try:
            link = await self.service.shorten(url)
        except ShortLinkError as e:
            return self._print_error(e)

        print(json.dumps({"success": True, **link.to_dict()}, indent=2))
        return 0

    async def resolve(self, short_code: str) -> int:
        """Print the long URL for a short code."""
        try:
            long_url = await self.service.resolve(short_code)
        except ShortLinkError as e:
            return self._print_error(e)

        print(json.dumps({"success": True, "short_code": short_code, "long_url": long_url}, indent=2))
        return 0

    async def info(self, short_code: str) -> int:
        """Print the stored link for a short code."""
        try:
            link = await self.service.get_link(short_code)
        except ShortLinkError as e:
            return self._print_error(e)

        print(json.dumps({"success": True, **link.to_dict()}, indent=2))
        return 0

    async def health(self) -> int:
        """Check store health."""
        health_status = await self.service.health_check()
        print(json.dumps({"success": health_status["overall"], "health": health_status}, indent=2))
        return 0 if health_status["overall"] else 1


async def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Url shortener CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Shorten a URL
  %(prog)s shorten https://example.com/long/url

  # Get the long URL behind a code
  %(prog)s resolve k3x9qa

  # Show the stored link
  %(prog)s info k3x9qa

  # Check health
  %(prog)s health
        """,
    )

    parser.add_argument("--mode", choices=["test", "production"], default=None, help="Store to target")
    parser.add_argument("--db-url", default=None, help="Override the store URL for the selected mode")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    shorten_parser = subparsers.add_parser("shorten", help="Shorten a URL")
    shorten_parser.add_argument("url", help="URL to shorten")

    resolve_parser = subparsers.add_parser("resolve", help="Get the long URL for a code")
    resolve_parser.add_argument("short_code", help="Short code to look up")

    info_parser = subparsers.add_parser("info", help="Show the stored link")
    info_parser.add_argument("short_code", help="Short code to look up")

    subparsers.add_parser("health", help="Check store health")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    cli = ShortLinkCLI(mode=args.mode, database_url=args.db_url, verbose=args.verbose)

    try:
        await cli.initialize()

        if args.command == "shorten":
            return await cli.shorten(args.url)
        elif args.command == "resolve":
            return await cli.resolve(args.short_code)
        elif args.command == "info":
            return await cli.info(args.short_code)
        elif args.command == "health":
            return await cli.health()
        parser.print_help()
        return 1

    except ShortLinkError as e:
        return cli._print_error(e)
    finally:
        await cli.cleanup()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
