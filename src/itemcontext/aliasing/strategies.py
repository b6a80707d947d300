"""
Aliasing Strategies
===================
Concrete implementations of the AliasingStrategy contract.

- IdAliasingStrategy: the alias is the numeric id (no store needed)
- NameAliasingStrategy: the alias is the item's `name` attribute
- PathAliasingStrategy: the alias is the item's `path` attribute
- AssociatedItemAliasingStrategy: a node's alias is the path alias of the one
  item linked to it through an association (e.g. a page's metadata article);
  other items use their own path alias
- MultilingualAssociatedItemAliasingStrategy: as above, translating the
  associated item into the requested locale first
"""
from __future__ import annotations

import logging
from typing import List, Optional

from itemcontext.aliasing.base import (
    BaseAliasingStrategy,
    CandidateInfo,
    ItemId,
    ItemStore,
)
from itemcontext.codec.address import is_digits
from itemcontext.utils.config import (
    DEFAULT_ASSOCIATED_ITEM_TYPE,
    DEFAULT_ASSOCIATION_NAME,
    DEFAULT_NODE_TYPE,
)

logger = logging.getLogger(__name__)


class IdAliasingStrategy:
    """Uses the numeric id as the alias. Aliases are unique per type."""

    name = "id"

    def compute_alias(self, item_id: ItemId, locale: Optional[str] = None) -> Optional[str]:
        return str(item_id.id)

    def find_candidates_for_alias(self, item_type: str, alias: str) -> List[CandidateInfo]:
        if not is_digits(alias):
            logger.debug("Alias %r is not a numeric id, no candidates", alias)
            return []
        return [CandidateInfo(ItemId(item_type, int(alias)), None)]

    def __repr__(self) -> str:
        return "IdAliasingStrategy()"


class AttributeAliasingStrategy(BaseAliasingStrategy):
    """Uses the value of one item attribute as the alias."""

    attribute_name = ""

    @property
    def name(self) -> str:
        return self.attribute_name

    def compute_alias(self, item_id: ItemId, locale: Optional[str] = None) -> Optional[str]:
        result = self.store.attribute(item_id, self.attribute_name)
        logger.debug("Computed %s alias for %s (%s): %s", self.attribute_name, item_id, locale, result)
        return result

    def find_candidates_for_alias(self, item_type: str, alias: str) -> List[CandidateInfo]:
        self._validate_lookup(item_type, alias)

        result = []
        for item_id in self.store.find_by_attribute(item_type, self.attribute_name, alias):
            candidate = CandidateInfo(item_id, self.store.locale_of(item_id))
            logger.debug("Found possible match for %s:%s: %s", item_type, alias, candidate)
            result.append(candidate)

        if not result:
            logger.debug("No items of type %s with %s %r", item_type, self.attribute_name, alias)
        return result


class NameAliasingStrategy(AttributeAliasingStrategy):
    """Alias is the `name` attribute."""

    attribute_name = "name"


class PathAliasingStrategy(AttributeAliasingStrategy):
    """Alias is the `path` attribute."""

    attribute_name = "path"


class AssociatedItemAliasingStrategy(BaseAliasingStrategy):
    """
    Aliases nodes through an associated item.

    A node (page) has no path of its own; its alias is the path of the single
    item linked to it through `association_name`. Nodes with no such item, or
    with more than one, cannot be aliased.
    """

    name = "associated-item"

    def __init__(
        self,
        store: ItemStore,
        node_type: str = DEFAULT_NODE_TYPE,
        association_name: str = DEFAULT_ASSOCIATION_NAME,
        associated_item_type: str = DEFAULT_ASSOCIATED_ITEM_TYPE,
    ):
        super().__init__(store)
        self.node_type = node_type
        self.association_name = association_name
        self.associated_item_type = associated_item_type
        self.paths = PathAliasingStrategy(store)

    def compute_alias(self, item_id: ItemId, locale: Optional[str] = None) -> Optional[str]:
        if item_id.type != self.node_type:
            return self.paths.compute_alias(item_id)

        associated = self.store.associated(item_id, self.association_name)
        if not associated:
            logger.debug("No association named %s found on %s", self.association_name, item_id)
            return None
        if len(associated) > 1:
            logger.warning(
                "More than one association named %s found for %s when only one was expected: %s",
                self.association_name, item_id, [str(a) for a in associated],
            )
            return None

        target = self._localize(associated[0], locale)
        if target is None:
            return None
        result = self.paths.compute_alias(target)
        logger.debug("Computed alias for %s (%s) from %s: %s", item_id, locale, target, result)
        return result

    def _localize(self, item_id: ItemId, locale: Optional[str]) -> Optional[ItemId]:
        """The associated item to take the alias from."""
        return item_id

    def find_candidates_for_alias(self, item_type: str, alias: str) -> List[CandidateInfo]:
        if item_type != self.node_type:
            return self.paths.find_candidates_for_alias(item_type, alias)

        matches = self.paths.find_candidates_for_alias(self.associated_item_type, alias)
        if not matches:
            logger.debug(
                "No %s with path %r, so no %s can have that alias",
                self.associated_item_type, alias, self.node_type,
            )

        candidates: List[CandidateInfo] = []
        for match in matches:
            nodes = self.store.association_parents(match.item_id, self.node_type, self.association_name)
            if not nodes:
                nodes = self._nodes_of_translations(match.item_id)
            # the locale of the item that produced the alias is the one that matters
            candidates.extend(CandidateInfo(node, match.locale) for node in nodes)

        logger.debug("Found candidates for %s:%s: %s", item_type, alias, [str(c) for c in candidates])
        return candidates

    def _nodes_of_translations(self, item_id: ItemId) -> List[ItemId]:
        return []


class MultilingualAssociatedItemAliasingStrategy(AssociatedItemAliasingStrategy):
    """
    Associated-item aliasing with translation.

    The node's associated item is translated into the requested locale before
    its path is read. On lookup, an item that is not itself associated to a
    node is traced through its translations, since nodes are usually linked
    to one locale's copy only.
    """

    name = "multilingual-associated-item"

    def _localize(self, item_id: ItemId, locale: Optional[str]) -> Optional[ItemId]:
        if locale is None or self.store.locale_of(item_id) == locale:
            return item_id

        translated = self.store.translation(item_id, locale)
        if translated is None:
            logger.debug("No translation of %s into %s", item_id, locale)
        return translated

    def _nodes_of_translations(self, item_id: ItemId) -> List[ItemId]:
        nodes: List[ItemId] = []
        for translation in self.store.translations(item_id):
            nodes.extend(
                self.store.association_parents(translation, self.node_type, self.association_name)
            )
        return nodes
