"""
Codec CLI Command
=================
CLI interface for the item context path codec.

Commands:
- assemble: Build a folder-like URL from an item context and item alias
- disassemble: Parse a folder-like URL back into its parameters
- config: Print the effective configuration

Usage:
    itemcontext assemble --context company/media --type Policy --alias logo-full
    itemcontext assemble --context company/media --type Page --alias media --variant 2
    itemcontext disassemble /cs/Satellite/company/media/policies/logo-full --format json
    itemcontext config
"""
from __future__ import annotations

import json
import sys
from typing import List, Optional

import yaml

from itemcontext.codec.address import Address, Definition
from itemcontext.codec.assembler import ItemContextAssembler
from itemcontext.codec.query import QueryStringError
from itemcontext.utils.config import ItemContextConfig


def parse_param_pairs(pairs: Optional[List[str]]) -> dict:
    """Turn ["k=v", "k=w"] into {"k": ["v", "w"]}."""
    params: dict = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise ValueError(f"Expected name=value, got {pair!r}")
        params.setdefault(name, []).append(value)
    return params


class CodecCommand:
    """CLI command handler for assembling and disassembling URLs."""

    def __init__(self, config: ItemContextConfig):
        self.config = config
        self.assembler = ItemContextAssembler(config.codec)

    def assemble(
        self,
        context: str,
        item_type: str,
        alias: str,
        variant: Optional[int] = None,
        params: Optional[List[str]] = None,
    ) -> int:
        """
        Print the URL for an item placed in a context.

        Returns:
            Exit code (0 for success, 1 if the assembler declines)
        """
        try:
            address = Address.from_item_context(
                context, item_type, alias, variant=variant, params=parse_param_pairs(params)
            )
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        uri = self.assembler.assemble_address(address)
        if uri is None:
            print(
                "Not assembled: the address cannot be expressed as an item context URL "
                "(run with --verbose for details)",
                file=sys.stderr,
            )
            return 1

        print(uri)
        return 0

    def disassemble(self, uri: str, format: str = "text") -> int:
        """
        Print the parameters encoded in a URL.

        Returns:
            Exit code (0 for success, 1 if the URL is not recognized)
        """
        try:
            definition = self.assembler.disassemble(uri)
        except QueryStringError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        if definition is None:
            print(f"Not recognized as an item context URL: {uri}", file=sys.stderr)
            return 1

        if format == "json":
            print(json.dumps(definition_to_dict(definition), indent=2))
        else:
            print_definition(definition)
        return 0

    def show_config(self) -> int:
        """Print the effective configuration as YAML."""
        print(yaml.dump(self.config.to_dict(), default_flow_style=False, sort_keys=False), end="")
        return 0


def definition_to_dict(definition: Definition) -> dict:
    data = {"parameters": {name: list(values) for name, values in definition.parameters.items()}}
    for key in ("scheme", "authority", "fragment"):
        value = getattr(definition, key)
        if value:
            data[key] = value
    return data


def print_definition(definition: Definition) -> None:
    for key in ("scheme", "authority", "fragment"):
        value = getattr(definition, key)
        if value:
            print(f"{key}: {value}")
    for name, values in definition.parameters.items():
        for value in values:
            print(f"{name}={value}")
