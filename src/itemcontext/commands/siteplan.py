"""
Site Plan CLI Command
=====================
CLI interface for breadcrumb computation and resolution against a site plan
YAML file.

Commands:
- breadcrumb: Compute the item context of a node
- resolve: Disassemble a URL and resolve its aliases to ids (p / cid)

Usage:
    itemcontext breadcrumb --site-plan site.yaml 11 --locale en_US
    itemcontext resolve --site-plan site.yaml /cs/Satellite/company/media/policies/logo-full
"""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

from itemcontext.aliasing.base import AliasingError
from itemcontext.aliasing.registry import StrategyRegistry
from itemcontext.codec.assembler import ItemContextAssembler
from itemcontext.codec.query import QueryStringError
from itemcontext.siteplan.resolver import HierarchyResolver, ResolutionError
from itemcontext.siteplan.tree import SitePlanError, YamlSitePlan, parse_item_ref
from itemcontext.utils.config import ItemContextConfig


class SitePlanCommand:
    """
    CLI command handler for site plan operations.

    Loads the site plan and instantiates the configured aliasing strategy
    once per invocation.
    """

    def __init__(self, config: ItemContextConfig, site_plan: Path):
        self.config = config
        self.plan = YamlSitePlan.from_file(site_plan, node_type=config.resolver.node_type)
        self.strategy = StrategyRegistry().create(
            config.resolver.aliasing_strategy, self.plan, config.resolver
        )
        self.resolver = HierarchyResolver(self.plan, self.strategy, config.resolver)

    def breadcrumb(self, node: str, locale: Optional[str] = None) -> int:
        """
        Print the item context of a node ("11" or "Page:11").

        Returns:
            Exit code (0 for success, 1 if the node has no item context)
        """
        try:
            node_id = parse_item_ref(node, self.config.resolver.node_type)
            item_context = self.resolver.compute_item_context(node_id, locale)
        except (SitePlanError, ResolutionError, AliasingError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        if item_context is None:
            print(f"No item context available for {node_id}", file=sys.stderr)
            return 1

        print(item_context)
        return 0

    def resolve(self, uri: str, locale: Optional[str] = None, format: str = "text") -> int:
        """
        Disassemble a URL and resolve item-context / item-alias to ids.

        Returns:
            Exit code (0 for success, 1 on declination or resolution failure)
        """
        assembler = ItemContextAssembler(self.config.codec)
        try:
            definition = assembler.disassemble(uri)
        except QueryStringError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        if definition is None:
            print(f"Not recognized as an item context URL: {uri}", file=sys.stderr)
            return 1

        params = {name: values[0] for name, values in definition.parameters.items() if values}
        try:
            resolution = self.resolver.resolve_parameters(params, locale)
        except (ResolutionError, AliasingError, SitePlanError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        if format == "json":
            print(json.dumps(resolution.to_dict(), indent=2))
        else:
            print(f"node:   {resolution.node_id}")
            print(f"item:   {resolution.item_id}")
            print(f"locale: {resolution.locale or '-'}")
        return 0
