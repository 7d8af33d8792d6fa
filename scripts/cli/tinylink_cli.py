#!/usr/bin/env python3
"""
Command-line interface for the TinyLink service.

Usage:
    python tinylink_cli.py create <target_url> [--code CODE] [--owner OWNER]
    python tinylink_cli.py inspect <code>
    python tinylink_cli.py resolve <code>
    python tinylink_cli.py claim <owner> <code> [<code> ...]
    python tinylink_cli.py list <owner>
    python tinylink_cli.py delete <code> --owner OWNER
    python tinylink_cli.py health
"""

import argparse
import asyncio
import json
import sys
import os
from typing import List, Optional

# Add parent directories to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from config import Config
from tinylink.errors import LinkError
from tinylink.resolver import ResolveStatus
from tinylink.service import build_service
from tinylink.common.logging_config import setup_logging


def _print_success(payload: dict):
    print(json.dumps({"success": True, **payload}, indent=2))


def _print_error(message: str, kind: Optional[str] = None):
    body = {"success": False, "error": message}
    if kind:
        body["kind"] = kind
    print(json.dumps(body, indent=2), file=sys.stderr)


class TinyLinkCLI:
    """Command-line interface for TinyLink."""

    def __init__(self, config: Config, verbose: bool = False):
        """Initialize CLI."""
        self.config = config
        self.verbose = verbose
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING")
        self.service = None

    async def initialize(self):
        """Initialize store and service."""
        self.logger.info("Initializing TinyLink...")
        self.service = await build_service(self.config, logger=self.logger)
        self.logger.info("Initialization complete")

    async def cleanup(self):
        """Cleanup resources."""
        if self.service:
            await self.service.close()

    async def create(self, target_url: str, code: Optional[str] = None, owner: Optional[str] = None):
        """Create a short link."""
        try:
            link = await self.service.create_link(target_url, code=code, owner_id=owner)
            _print_success({
                "link": link.to_dict(),
                "message": f"Created short link: {link.code}",
            })
            return 0
        except LinkError as e:
            _print_error(e.message, e.kind)
            return 1

    async def inspect(self, code: str):
        """Show a link without counting a click."""
        try:
            link = await self.service.inspect(code)
            _print_success({
                "link": link.to_dict(),
                "is_expired": link.is_expired(self.service.clock()),
            })
            return 0
        except LinkError as e:
            _print_error(e.message, e.kind)
            return 1

    async def resolve(self, code: str):
        """Resolve a code the way a visitor would. Counts a click."""
        try:
            outcome = await self.service.resolve(code)
        except LinkError as e:
            _print_error(e.message, e.kind)
            return 1

        if outcome.status is ResolveStatus.FOUND:
            _print_success({
                "code": code,
                "target_url": outcome.target_url,
                "total_clicks": outcome.link.total_clicks,
            })
            return 0

        _print_error(f"Code '{code}' is {outcome.status.value.replace('_', ' ')}", outcome.status.value)
        return 1

    async def claim(self, owner: str, codes: List[str]):
        """Claim anonymous links for an owner."""
        try:
            count = await self.service.claim_links(codes, owner)
            _print_success({"owner_id": owner, "transferred_count": count})
            return 0
        except LinkError as e:
            _print_error(e.message, e.kind)
            return 1

    async def list_links(self, owner: str):
        """List an owner's links."""
        try:
            links = await self.service.list_links(owner)
            _print_success({
                "count": len(links),
                "links": [link.to_dict() for link in links],
            })
            return 0
        except LinkError as e:
            _print_error(e.message, e.kind)
            return 1

    async def delete(self, code: str, owner: str):
        """Delete an owned link."""
        try:
            await self.service.delete_link(code, owner)
            _print_success({"code": code, "message": f"Deleted link: {code}"})
            return 0
        except LinkError as e:
            _print_error(e.message, e.kind)
            return 1

    async def health(self):
        """Check service health."""
        health_status = await self.service.health_check()
        _print_success({"health": health_status})
        return 0 if health_status["overall"] else 1


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="TinyLink CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create an anonymous link
  %(prog)s create https://example.com/long/url

  # Create an owned link with a custom code
  %(prog)s create https://example.com/long/url --code abc123 --owner user-1

  # Inspect without counting a click
  %(prog)s inspect abc123

  # Claim anonymous links
  %(prog)s claim user-1 abc123 xyz789

  # Check health
  %(prog)s health
        """
    )

    parser.add_argument(
        "--store",
        choices=["postgres", "memory"],
        default=None,
        help="Link store backend (default: from STORE_BACKEND env or postgres)"
    )

    parser.add_argument(
        "--db-url",
        default=None,
        help="PostgreSQL connection URL (default: from DATABASE_URL env)"
    )

    parser.add_argument(
        "--redis-url",
        default=None,
        help="Redis connection URL (optional, default: from REDIS_URL env)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    create_parser = subparsers.add_parser("create", help="Create a short link")
    create_parser.add_argument("target_url", help="URL to shorten")
    create_parser.add_argument("--code", help="Custom short code (6-8 alphanumeric characters)")
    create_parser.add_argument("--owner", help="Owner id; omit for an anonymous link")

    inspect_parser = subparsers.add_parser("inspect", help="Show link details")
    inspect_parser.add_argument("code", help="Short code to inspect")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve a code and count a click")
    resolve_parser.add_argument("code", help="Short code to resolve")

    claim_parser = subparsers.add_parser("claim", help="Claim anonymous links")
    claim_parser.add_argument("owner", help="Owner id receiving the links")
    claim_parser.add_argument("codes", nargs="+", help="Codes to claim")

    list_parser = subparsers.add_parser("list", help="List an owner's links")
    list_parser.add_argument("owner", help="Owner id")

    delete_parser = subparsers.add_parser("delete", help="Delete an owned link")
    delete_parser.add_argument("code", help="Short code to delete")
    delete_parser.add_argument("--owner", required=True, help="Owner id of the link")

    subparsers.add_parser("health", help="Check service health")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    overrides = {}
    if args.store:
        overrides["store_backend"] = args.store
    if args.db_url:
        overrides["database_url"] = args.db_url
    if args.redis_url:
        overrides["redis_url"] = args.redis_url

    cli = TinyLinkCLI(config=Config(**overrides), verbose=args.verbose)

    try:
        await cli.initialize()

        # Execute command
        if args.command == "create":
            return await cli.create(args.target_url, args.code, args.owner)
        elif args.command == "inspect":
            return await cli.inspect(args.code)
        elif args.command == "resolve":
            return await cli.resolve(args.code)
        elif args.command == "claim":
            return await cli.claim(args.owner, args.codes)
        elif args.command == "list":
            return await cli.list_links(args.owner)
        elif args.command == "delete":
            return await cli.delete(args.code, args.owner)
        elif args.command == "health":
            return await cli.health()
        else:
            parser.print_help()
            return 1

    finally:
        await cli.cleanup()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
