"""
Strategy Registry
=================
Selects the aliasing strategy named in configuration.

Usage:
    registry = StrategyRegistry()
    strategy = registry.create("path", store, resolver_config)

    # custom strategies
    registry.register("slug", lambda store, config: SlugStrategy(store))
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from itemcontext.aliasing.base import AliasingError, AliasingStrategy, ItemStore
from itemcontext.aliasing.strategies import (
    AssociatedItemAliasingStrategy,
    IdAliasingStrategy,
    MultilingualAssociatedItemAliasingStrategy,
    NameAliasingStrategy,
    PathAliasingStrategy,
)
from itemcontext.utils.config import ResolverConfig

logger = logging.getLogger(__name__)

StrategyFactory = Callable[[Optional[ItemStore], ResolverConfig], AliasingStrategy]


def _requires_store(name: str, store: Optional[ItemStore]) -> ItemStore:
    if store is None:
        raise AliasingError(f"Aliasing strategy '{name}' needs an item store")
    return store


class StrategyRegistry:
    """
    Registry of aliasing strategy factories keyed by configured name.

    Factories take (store, resolver_config) and return a strategy.
    """

    def __init__(self):
        self._factories: Dict[str, StrategyFactory] = {}
        self._register_default_strategies()

    def _register_default_strategies(self) -> None:
        """Register the built-in strategies."""
        self.register("id", lambda store, config: IdAliasingStrategy())
        self.register(
            "name",
            lambda store, config: NameAliasingStrategy(_requires_store("name", store)),
        )
        self.register(
            "path",
            lambda store, config: PathAliasingStrategy(_requires_store("path", store)),
        )
        self.register(
            "associated-item",
            lambda store, config: AssociatedItemAliasingStrategy(
                _requires_store("associated-item", store),
                node_type=config.node_type,
                association_name=config.association_name,
                associated_item_type=config.associated_item_type,
            ),
        )
        self.register(
            "multilingual-associated-item",
            lambda store, config: MultilingualAssociatedItemAliasingStrategy(
                _requires_store("multilingual-associated-item", store),
                node_type=config.node_type,
                association_name=config.association_name,
                associated_item_type=config.associated_item_type,
            ),
        )

    def register(self, name: str, factory: StrategyFactory) -> None:
        """Register a strategy factory under a name."""
        self._factories[name] = factory

    def create(
        self,
        name: str,
        store: Optional[ItemStore] = None,
        config: Optional[ResolverConfig] = None,
    ) -> AliasingStrategy:
        """
        Instantiate a registered strategy.

        Raises:
            AliasingError: If no strategy is registered under name
        """
        factory = self._factories.get(name)
        if factory is None:
            raise AliasingError(
                f"No aliasing strategy registered as '{name}'. "
                f"Known strategies: {', '.join(self.names)}"
            )
        strategy = factory(store, config or ResolverConfig())
        logger.debug("Instantiated aliasing strategy %s: %r", name, strategy)
        return strategy

    @property
    def names(self) -> List[str]:
        """Return registered strategy names."""
        return sorted(self._factories)
