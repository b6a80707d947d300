"""Pluggable aliasing strategies: item identifiers <-> URL-safe aliases."""

from itemcontext.aliasing.base import (
    AliasingError,
    AliasingStrategy,
    BaseAliasingStrategy,
    CandidateInfo,
    ItemId,
    ItemStore,
)
from itemcontext.aliasing.registry import StrategyRegistry
from itemcontext.aliasing.strategies import (
    AssociatedItemAliasingStrategy,
    IdAliasingStrategy,
    MultilingualAssociatedItemAliasingStrategy,
    NameAliasingStrategy,
    PathAliasingStrategy,
)

__all__ = [
    "AliasingError",
    "AliasingStrategy",
    "BaseAliasingStrategy",
    "CandidateInfo",
    "ItemId",
    "ItemStore",
    "StrategyRegistry",
    "AssociatedItemAliasingStrategy",
    "IdAliasingStrategy",
    "MultilingualAssociatedItemAliasingStrategy",
    "NameAliasingStrategy",
    "PathAliasingStrategy",
]
