"""
Aliasing Contracts
==================
Types shared by every aliasing strategy.

A strategy translates an item identifier into a string usable as a URL path
element, and back:
- compute_alias(item_id, locale) -> alias or None ("cannot be aliased")
- find_candidates_for_alias(item_type, alias) -> list of CandidateInfo (never None)

Architecture:
- ItemId / CandidateInfo: value types
- AliasingStrategy: Protocol every strategy satisfies
- ItemStore: Protocol for the repository the store-backed strategies query
- BaseAliasingStrategy: ABC with input validation shared by store-backed strategies
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Protocol


class AliasingError(Exception):
    """Raised for invalid aliasing inputs or unknown strategy names."""


@dataclass(frozen=True)
class ItemId:
    """Identifier of a content item: type name plus numeric id."""

    type: str
    id: int

    def __str__(self) -> str:
        return f"{self.type}:{self.id}"


@dataclass(frozen=True)
class CandidateInfo:
    """
    An item whose alias matched a lookup.

    Attributes:
        item_id: The matching item
        locale: Locale of the item that produced the alias, if known
    """

    item_id: ItemId
    locale: Optional[str] = None

    def __post_init__(self):
        if self.item_id is None:
            raise ValueError("Null item id not allowed")

    def __str__(self) -> str:
        return f"{{{self.item_id}-{self.locale or 'no_LOCALE'}}}"


class AliasingStrategy(Protocol):
    """Protocol for pluggable aliasing strategies."""

    def compute_alias(self, item_id: ItemId, locale: Optional[str] = None) -> Optional[str]:
        """Compute the alias for an item, or None if it has none."""
        ...

    def find_candidates_for_alias(self, item_type: str, alias: str) -> List[CandidateInfo]:
        """Return every item of the given type whose alias matches."""
        ...


class ItemStore(Protocol):
    """
    Protocol for the content repository behind store-backed strategies.

    Implementations own their I/O and thread-safety.
    """

    def attribute(self, item_id: ItemId, name: str) -> Optional[str]:
        """Value of a named attribute, or None."""
        ...

    def find_by_attribute(self, item_type: str, name: str, value: str) -> List[ItemId]:
        """Items of a type whose attribute equals value, in repository order."""
        ...

    def locale_of(self, item_id: ItemId) -> Optional[str]:
        """Locale of an item, or None if it is not localized."""
        ...

    def associated(self, item_id: ItemId, association: str) -> List[ItemId]:
        """Items linked from item_id through a named association."""
        ...

    def association_parents(self, item_id: ItemId, parent_type: str, association: str) -> List[ItemId]:
        """Items of parent_type linking to item_id through a named association."""
        ...

    def translation(self, item_id: ItemId, locale: str) -> Optional[ItemId]:
        """The translation of item_id into locale, or None."""
        ...

    def translations(self, item_id: ItemId) -> List[ItemId]:
        """Every translation of item_id (excluding itself)."""
        ...


class BaseAliasingStrategy(ABC):
    """Base class for store-backed strategies with common validation."""

    def __init__(self, store: ItemStore):
        self.store = store

    @property
    @abstractmethod
    def name(self) -> str:
        """Registered name of this strategy."""
        pass

    @abstractmethod
    def compute_alias(self, item_id: ItemId, locale: Optional[str] = None) -> Optional[str]:
        pass

    @abstractmethod
    def find_candidates_for_alias(self, item_type: str, alias: str) -> List[CandidateInfo]:
        pass

    def _validate_lookup(self, item_type: str, alias: str) -> None:
        """Reject empty inputs before querying the store."""
        if not item_type:
            raise AliasingError(f"Invalid item type specified in {self.name} lookup: {item_type!r}")
        if not alias:
            raise AliasingError(f"Invalid alias specified in {self.name} lookup: {alias!r}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
