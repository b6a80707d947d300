"""
Site Plan Tree
==============
The ownership tree the hierarchy resolver walks, and an in-memory
implementation loaded from YAML.

Architecture:
- NodeKind / HierarchyNode: what an ancestor walk yields
- SitePlanTree: Protocol for the tree-walk collaborator
- YamlSitePlan: in-memory SitePlanTree + ItemStore for local sites and tests

YAML format:
    publication: 1                    # root marker id (optional)
    items:
      - {type: Page, id: 10, name: company, path: company}
      - {type: Page, id: 11, parent: 10, name: media, path: media}
      - {type: Policy, id: 50, parent: 11, path: logo-full, locale: en_US}
      - {type: Article, id: 70, path: about, locale: en_US, translation_group: about}
    associations:
      - {from: "Page:10", name: MetadataArticle, to: "Article:70"}

Item references are "Type:id" strings; a bare integer parent refers to a node
(page) id. Keys other than type/id/parent/locale/translation_group are
attributes. Documents are checked against site_plan.schema.json on load.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Protocol, Tuple, Union

import yaml
from jsonschema import Draft7Validator

from itemcontext.aliasing.base import ItemId
from itemcontext.utils.config import DEFAULT_NODE_TYPE

logger = logging.getLogger(__name__)

ROOT_MARKER_TYPE = "Publication"

SCHEMA_PATH = Path(__file__).parent / "site_plan.schema.json"

_RESERVED_KEYS = {"type", "id", "parent", "locale", "translation_group"}


class SitePlanError(Exception):
    """Raised when a site plan document is malformed."""


class NodeKind(Enum):
    """Kinds of nodes met while walking up the tree."""

    ORDINARY = "ordinary"
    ROOT_MARKER = "root_marker"  # top of the tree (publication), never aliased


@dataclass(frozen=True)
class HierarchyNode:
    """
    A node of the ownership tree.

    Attributes:
        item_id: The node's identifier
        parent_id: Identifier of its parent, None at the root
        kind: Ordinary node or root marker
    """

    item_id: ItemId
    parent_id: Optional[ItemId] = None
    kind: NodeKind = NodeKind.ORDINARY

    @property
    def is_root_marker(self) -> bool:
        return self.kind is NodeKind.ROOT_MARKER


class SitePlanTree(Protocol):
    """Protocol for the tree-walk collaborator."""

    def ancestors(self, node_id: ItemId) -> Iterable[HierarchyNode]:
        """Ancestors of node_id, parent first, walking toward the root."""
        ...

    def children(self, node_id: ItemId) -> List[ItemId]:
        """Items placed directly under node_id."""
        ...


def parse_item_ref(ref: Union[str, int, None], default_type: str) -> Optional[ItemId]:
    """Parse "Type:id" (or a bare id of default_type) into an ItemId."""
    if ref is None:
        return None
    if isinstance(ref, int):
        return ItemId(default_type, ref)
    text = str(ref).strip()
    if ":" in text:
        item_type, _, raw_id = text.rpartition(":")
    else:
        item_type, raw_id = default_type, text
    try:
        return ItemId(item_type, int(raw_id))
    except ValueError:
        raise SitePlanError(f"Invalid item reference: {ref!r}")


class YamlSitePlan:
    """
    In-memory site plan: tree walk plus item store.

    Lookups return items in document order, which stands in for repository
    query order.
    """

    def __init__(
        self,
        items: Optional[List[Dict[str, Any]]] = None,
        associations: Optional[List[Dict[str, Any]]] = None,
        publication: Optional[int] = None,
        node_type: str = DEFAULT_NODE_TYPE,
    ):
        self.node_type = node_type
        self.publication = (
            ItemId(ROOT_MARKER_TYPE, int(publication)) if publication is not None else None
        )
        self._order: List[ItemId] = []
        self._parents: Dict[ItemId, Optional[ItemId]] = {}
        self._attributes: Dict[ItemId, Dict[str, str]] = {}
        self._locales: Dict[ItemId, Optional[str]] = {}
        self._groups: Dict[ItemId, Optional[str]] = {}
        self._associations: List[Tuple[ItemId, str, ItemId]] = []

        for entry in items or []:
            self._add_item(entry)
        for entry in associations or []:
            self._add_association(entry)
        self._check_parents()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], node_type: str = DEFAULT_NODE_TYPE) -> "YamlSitePlan":
        """
        Build from a parsed site plan document.

        Raises:
            SitePlanError: If the document does not match site_plan.schema.json
                or references unknown parents
        """
        data = data or {}
        with SCHEMA_PATH.open() as f:
            validator = Draft7Validator(json.load(f))
        errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
        if errors:
            location = "/".join(str(p) for p in errors[0].path) or "(root)"
            raise SitePlanError(f"Invalid site plan at {location}: {errors[0].message}")
        return cls(
            items=data.get("items"),
            associations=data.get("associations"),
            publication=data.get("publication"),
            node_type=node_type,
        )

    @classmethod
    def from_file(cls, path: Path, node_type: str = DEFAULT_NODE_TYPE) -> "YamlSitePlan":
        """Load a site plan YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise SitePlanError(f"Could not load site plan {path}: {e}") from e
        plan = cls.from_dict(data, node_type=node_type)
        logger.debug("Loaded site plan %s with %d items", path, len(plan._order))
        return plan

    def _add_item(self, entry: Dict[str, Any]) -> None:
        if not isinstance(entry, dict) or "type" not in entry or "id" not in entry:
            raise SitePlanError(f"Site plan items need 'type' and 'id': {entry!r}")
        item_id = ItemId(str(entry["type"]), int(entry["id"]))
        if item_id in self._parents:
            raise SitePlanError(f"Duplicate item in site plan: {item_id}")

        self._order.append(item_id)
        self._parents[item_id] = parse_item_ref(entry.get("parent"), self.node_type)
        self._locales[item_id] = entry.get("locale")
        self._groups[item_id] = entry.get("translation_group")
        self._attributes[item_id] = {
            key: str(value)
            for key, value in entry.items()
            if key not in _RESERVED_KEYS and value is not None
        }

    def _add_association(self, entry: Dict[str, Any]) -> None:
        try:
            source = parse_item_ref(entry["from"], self.node_type)
            target = parse_item_ref(entry["to"], self.node_type)
            name = str(entry["name"])
        except (KeyError, TypeError) as e:
            raise SitePlanError(f"Associations need 'from', 'name' and 'to': {entry!r}") from e
        self._associations.append((source, name, target))

    def _check_parents(self) -> None:
        for item_id, parent in self._parents.items():
            if parent is not None and parent not in self._parents:
                raise SitePlanError(f"Parent {parent} of {item_id} is not in the site plan")

    # -------------------------------------------------------------------------
    # SitePlanTree
    # -------------------------------------------------------------------------

    def ancestors(self, node_id: ItemId) -> Iterator[HierarchyNode]:
        seen = {node_id}
        current = self._parents.get(node_id)
        while current is not None:
            if current in seen:
                raise SitePlanError(f"Cycle in site plan at {current}")
            seen.add(current)
            parent = self._parents.get(current)
            yield HierarchyNode(current, parent or self.publication, NodeKind.ORDINARY)
            current = parent
        if self.publication is not None:
            yield HierarchyNode(self.publication, None, NodeKind.ROOT_MARKER)

    def children(self, node_id: ItemId) -> List[ItemId]:
        return [item_id for item_id in self._order if self._parents[item_id] == node_id]

    # -------------------------------------------------------------------------
    # ItemStore
    # -------------------------------------------------------------------------

    def attribute(self, item_id: ItemId, name: str) -> Optional[str]:
        return self._attributes.get(item_id, {}).get(name)

    def find_by_attribute(self, item_type: str, name: str, value: str) -> List[ItemId]:
        return [
            item_id
            for item_id in self._order
            if item_id.type == item_type and self._attributes[item_id].get(name) == value
        ]

    def locale_of(self, item_id: ItemId) -> Optional[str]:
        return self._locales.get(item_id)

    def associated(self, item_id: ItemId, association: str) -> List[ItemId]:
        return [t for s, n, t in self._associations if s == item_id and n == association]

    def association_parents(self, item_id: ItemId, parent_type: str, association: str) -> List[ItemId]:
        return [
            s for s, n, t in self._associations
            if t == item_id and n == association and s.type == parent_type
        ]

    def translation(self, item_id: ItemId, locale: str) -> Optional[ItemId]:
        for other in self.translations(item_id):
            if self._locales.get(other) == locale:
                return other
        return None

    def translations(self, item_id: ItemId) -> List[ItemId]:
        group = self._groups.get(item_id)
        if group is None:
            return []
        return [
            other for other in self._order
            if other != item_id and other.type == item_id.type and self._groups[other] == group
        ]

    def __contains__(self, item_id: ItemId) -> bool:
        return item_id in self._parents
