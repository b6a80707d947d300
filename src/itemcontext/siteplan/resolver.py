"""
Hierarchy Resolver
==================
Computes item contexts (breadcrumbs) for nodes of the site plan and resolves
them back to node ids, plus leaf item aliases within a node.

Usage:
    resolver = HierarchyResolver(plan, strategy, config.resolver)
    resolver.compute_item_context(ItemId("Page", 12), "en_US")   # "company/media"
    resolver.resolve_node_for_item_context("company/media")      # ItemId("Page", 12)
    resolver.resolve_item_id("Policy", "logo-full", ItemId("Page", 13))

Architecture:
- breadcrumb_chain: ancestor walk, reverse, prune, append target
- compute_item_context: chain -> aliases -> "a/b/c" (None if any alias is missing)
- resolve_item_context: rightmost-segment candidates, verified by recomputation
- resolve_item_id: leaf alias lookup, disambiguated by the node's children
- resolve_parameters: fills p / cid into a decoded parameter mapping
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from itemcontext.aliasing.base import AliasingStrategy, CandidateInfo, ItemId
from itemcontext.codec.address import CID, ITEM_ALIAS, ITEM_CONTEXT, ITEM_TYPE, C, P, is_digits
from itemcontext.siteplan.tree import SitePlanTree
from itemcontext.utils.config import ResolverConfig

logger = logging.getLogger(__name__)


class ResolutionError(Exception):
    """Raised when an item context or alias cannot be resolved."""


@dataclass
class AddressResolution:
    """
    Result of resolving the aliases of a decoded address.

    Attributes:
        params: Parameters with p / cid filled in
        node_id: Resolved context node, if an item context was resolved
        item_id: Resolved item, if an item alias was resolved
        locale: Locale of the item that matched the breadcrumb, if known
    """

    params: Dict[str, str] = field(default_factory=dict)
    node_id: Optional[ItemId] = None
    item_id: Optional[ItemId] = None
    locale: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "params": dict(self.params),
            "node_id": str(self.node_id) if self.node_id else None,
            "item_id": str(self.item_id) if self.item_id else None,
            "locale": self.locale,
        }


class HierarchyResolver:
    """
    Breadcrumb computation and resolution over a site plan tree.

    Stateless beyond its collaborators and immutable configuration.
    """

    def __init__(
        self,
        tree: SitePlanTree,
        strategy: AliasingStrategy,
        config: Optional[ResolverConfig] = None,
    ):
        self.tree = tree
        self.strategy = strategy
        self.config = config or ResolverConfig()

    @property
    def node_type(self) -> str:
        return self.config.node_type

    def compute_alias(self, item_id: ItemId, locale: Optional[str] = None) -> Optional[str]:
        logger.debug("Computing alias for %s-%s", item_id, locale)
        result = self.strategy.compute_alias(item_id, locale)
        logger.debug("Computed alias for %s-%s: %s", item_id, locale, result)
        return result

    def breadcrumb_chain(self, node_id: ItemId) -> List[ItemId]:
        """
        Node ids from the configured depth down to node_id, root-most first.

        Raises:
            ResolutionError: If the walk meets an ordinary node that is not
                of the node type
        """
        ancestors: List[ItemId] = []
        for node in self.tree.ancestors(node_id):
            if node.is_root_marker:
                logger.debug("Hit root marker %s above %s", node.item_id, node_id)
                break
            if node.item_id.type != self.node_type:
                raise ResolutionError(f"Invalid node type found in site plan: {node.item_id}")
            ancestors.append(node.item_id)
        ancestors.reverse()

        depth = self.config.lowest_level_to_include
        if len(ancestors) >= depth:
            ancestors = ancestors[depth:]
        else:
            logger.debug(
                "Lowest level to include (%d) exceeds the %d ancestors of %s, dropping all",
                depth, len(ancestors), node_id,
            )
            ancestors = []

        ancestors.append(node_id)
        return ancestors

    def compute_item_context(self, node_id: ItemId, locale: Optional[str] = None) -> Optional[str]:
        """
        Breadcrumb string for a node, or None when any node in the chain
        cannot be aliased.
        """
        logger.debug(
            "Computing item context for %s-%s with lowest level to include %d",
            node_id, locale, self.config.lowest_level_to_include,
        )
        aliases = []
        for item_id in self.breadcrumb_chain(node_id):
            alias = self.compute_alias(item_id, locale)
            if alias is None:
                logger.debug("No alias for %s, so no item context for %s", item_id, node_id)
                return None
            aliases.append(alias)

        result = "/".join(aliases) or None
        logger.debug("Computed item context for %s: %s", node_id, result)
        return result

    def resolve_item_context(self, item_context: str, locale: Optional[str] = None) -> CandidateInfo:
        """
        Find the node whose breadcrumb is exactly item_context.

        Raises:
            ValueError: If item_context is empty
            ResolutionError: If no candidate's breadcrumb matches
        """
        if not item_context:
            raise ValueError("Empty item context not allowed")

        last = item_context.split("/")[-1]
        candidates = self.strategy.find_candidates_for_alias(self.node_type, last)
        logger.debug("Candidates for item context %s: %s", item_context, [str(c) for c in candidates])

        for candidate in candidates:
            candidate_locale = candidate.locale if candidate.locale is not None else locale
            computed = self.compute_item_context(candidate.item_id, candidate_locale)
            if computed == item_context:
                logger.debug("Resolved item context %s to %s", item_context, candidate)
                return candidate
            logger.debug("Candidate %s has item context %s, not %s", candidate, computed, item_context)

        raise ResolutionError(f"No node found that matches the item context: {item_context}")

    def resolve_node_for_item_context(self, item_context: str, locale: Optional[str] = None) -> ItemId:
        return self.resolve_item_context(item_context, locale).item_id

    def resolve_locale_for_item_context(self, item_context: str, locale: Optional[str] = None) -> Optional[str]:
        return self.resolve_item_context(item_context, locale).locale

    def resolve_item_id(self, item_type: str, alias: str, context_id: ItemId) -> ItemId:
        """
        Resolve a leaf item alias placed on context_id.

        Raises:
            ResolutionError: If no item of item_type has the alias
        """
        if item_type == self.node_type:
            return context_id

        candidates = self.strategy.find_candidates_for_alias(item_type, alias)
        if not candidates:
            raise ResolutionError(f"Could not locate any {item_type} with an alias matching: {alias}")
        if len(candidates) == 1:
            return candidates[0].item_id

        children = set(self.tree.children(context_id))
        matches = [c.item_id for c in candidates if c.item_id in children]
        if len(matches) == 1:
            return matches[0]
        if not matches:
            logger.warning(
                "No %s matching alias %s were found on %s but %d were found matching the alias. "
                "Returning the first one: %s",
                item_type, alias, context_id, len(candidates), candidates[0].item_id,
            )
            return candidates[0].item_id

        logger.warning(
            "Found multiple %s matching alias %s (%s) placed on %s. Returning the first match: %s",
            item_type, alias, [str(m) for m in matches], context_id, matches[0],
        )
        return matches[0]

    def resolve_parameters(
        self,
        params: Mapping[str, str],
        locale: Optional[str] = None,
    ) -> AddressResolution:
        """
        Resolve item-context into p and item-alias into cid.

        An explicit p or cid already present in params is kept.
        """
        resolution = AddressResolution(params=dict(params))
        self._resolve_context(resolution, resolution.params.get(ITEM_CONTEXT), locale)
        self._resolve_alias(resolution)
        return resolution

    def _resolve_context(self, resolution: AddressResolution, item_context: Optional[str], locale: Optional[str]) -> None:
        params = resolution.params
        if item_context:
            if P in params:
                logger.warning(
                    "Both %s and %s were specified. Ignoring %s=%s in favour of %s=%s",
                    ITEM_CONTEXT, P, ITEM_CONTEXT, item_context, P, params[P],
                )
            else:
                candidate = self.resolve_item_context(item_context, locale)
                resolution.locale = candidate.locale
                params[P] = str(candidate.item_id.id)
        if P in params and is_digits(params[P]):
            resolution.node_id = ItemId(self.node_type, int(params[P]))

    def _resolve_alias(self, resolution: AddressResolution) -> None:
        params = resolution.params
        item_alias = params.get(ITEM_ALIAS)
        if not item_alias:
            return
        item_type = params.get(ITEM_TYPE) or params.get(C)
        if CID in params:
            logger.warning(
                "Both %s and %s were specified. Ignoring %s=%s in favour of %s=%s",
                ITEM_ALIAS, CID, ITEM_ALIAS, item_alias, CID, params[CID],
            )
        elif not item_type:
            raise ResolutionError(f"No item type given for item alias: {item_alias}")
        elif resolution.node_id is None:
            raise ResolutionError(f"No context node to resolve item alias {item_alias} against")
        else:
            resolution.item_id = self.resolve_item_id(item_type, item_alias, resolution.node_id)
            params[CID] = str(resolution.item_id.id)
        if CID in params and resolution.item_id is None and item_type and is_digits(params[CID]):
            resolution.item_id = ItemId(item_type, int(params[CID]))
