#!/usr/bin/env python3
"""
itemcontext - command-line interface.

Folder-like URLs for items placed in a site plan:
- assemble: Build a URL from an item context, item type and alias
- disassemble: Parse a URL back into its parameters
- breadcrumb: Compute a node's item context from a site plan
- resolve: Resolve a URL's aliases to node / item ids
- config: Show the effective configuration

Usage:
    itemcontext assemble --context company/media --type Policy --alias logo-full
    itemcontext assemble --context home --type Page --alias home --variant 2
    itemcontext disassemble /cs/Satellite/company/media/policies/logo-full
    itemcontext disassemble URI --format json
    itemcontext breadcrumb --site-plan site.yaml 11 --locale en_US
    itemcontext resolve --site-plan site.yaml URI --format json
    itemcontext config                          # Effective configuration (YAML)
    itemcontext --config other.yaml config      # Explicit configuration file
    itemcontext --verbose disassemble URI       # Debug logging on stderr
    itemcontext --help                          # Show help
"""

import argparse
import logging
import sys
from pathlib import Path

from itemcontext import __version__
from itemcontext.aliasing.base import AliasingError
from itemcontext.commands.codec import CodecCommand
from itemcontext.commands.siteplan import SitePlanCommand
from itemcontext.siteplan.tree import SitePlanError
from itemcontext.utils.config import ConfigError, load_config, load_config_file


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="itemcontext",
        description="Folder-like URLs for items placed in a site plan",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  itemcontext assemble --context company/media --type Policy --alias logo-full
  itemcontext disassemble /cs/Satellite/company/media/policies/logo-full
  itemcontext breadcrumb --site-plan site.yaml 11
  itemcontext resolve --site-plan site.yaml /cs/Satellite/company/media
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="Configuration file (default: .itemcontext/config.yaml, searched upward)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ----- assemble -----
    assemble_parser = subparsers.add_parser("assemble", help="Build a URL for an item in its context")
    assemble_parser.add_argument("--context", required=True, help="Item context (breadcrumb), e.g. company/media")
    assemble_parser.add_argument("--type", required=True, dest="item_type", help="Item type, e.g. Policy")
    assemble_parser.add_argument("--alias", required=True, help="Item alias, e.g. logo-full")
    assemble_parser.add_argument("--variant", type=int, help="Variant number (non-negative)")
    assemble_parser.add_argument(
        "--param",
        action="append",
        metavar="NAME=VALUE",
        help="Extra query parameter (repeatable)",
    )

    # ----- disassemble -----
    disassemble_parser = subparsers.add_parser("disassemble", help="Parse a URL into its parameters")
    disassemble_parser.add_argument("uri", help="URL or path to parse")
    disassemble_parser.add_argument("--format", choices=["text", "json"], default="text", help="Output format")

    # ----- breadcrumb -----
    breadcrumb_parser = subparsers.add_parser("breadcrumb", help="Compute a node's item context")
    breadcrumb_parser.add_argument("--site-plan", required=True, type=Path, help="Site plan YAML file")
    breadcrumb_parser.add_argument("node", help="Node id, e.g. 11 or Page:11")
    breadcrumb_parser.add_argument("--locale", help="Locale to compute aliases in, e.g. en_US")

    # ----- resolve -----
    resolve_parser = subparsers.add_parser("resolve", help="Resolve a URL's aliases to ids")
    resolve_parser.add_argument("--site-plan", required=True, type=Path, help="Site plan YAML file")
    resolve_parser.add_argument("uri", help="URL or path to resolve")
    resolve_parser.add_argument("--locale", help="Locale used for candidates without one")
    resolve_parser.add_argument("--format", choices=["text", "json"], default="text", help="Output format")

    # ----- config -----
    subparsers.add_parser("config", help="Show the effective configuration")

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    if not args.command:
        parser.print_help()
        return 0

    try:
        config = load_config_file(Path(args.config)) if args.config else load_config()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.command in ("assemble", "disassemble", "config"):
        cmd = CodecCommand(config)
        if args.command == "assemble":
            return cmd.assemble(
                context=args.context,
                item_type=args.item_type,
                alias=args.alias,
                variant=args.variant,
                params=args.param,
            )
        elif args.command == "disassemble":
            return cmd.disassemble(args.uri, format=args.format)
        else:
            return cmd.show_config()

    try:
        cmd = SitePlanCommand(config, args.site_plan)
    except (SitePlanError, AliasingError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command == "breadcrumb":
        return cmd.breadcrumb(args.node, locale=args.locale)
    return cmd.resolve(args.uri, locale=args.locale, format=args.format)


def cli() -> int:
    """CLI entry point for the console script."""
    return main()


if __name__ == "__main__":
    sys.exit(cli())
