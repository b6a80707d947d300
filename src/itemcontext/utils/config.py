"""
itemcontext Configuration Loader.

Loads configuration from .itemcontext/config.yaml for the path codec and the
site plan resolver.

Example config:
    codec:
      base_prefix: /cs/Satellite
      wrapper_pagename: FSII/Wrapper
      template_pagename: FSII/Layout
      item_types:
        Policy: policies
      unpacked_args:
        - rendermode
    resolver:
      lowest_level_to_include: 1
      aliasing_strategy: path
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from itemcontext.utils.repo import CONFIG_DIR_NAME, find_config_root

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.yaml"

DEFAULT_CONTEXT_ITEM_TYPE = "Page"
DEFAULT_NODE_TYPE = "Page"
DEFAULT_LOWEST_LEVEL_TO_INCLUDE = 1
DEFAULT_ALIASING_STRATEGY = "id"
DEFAULT_ASSOCIATION_NAME = "MetadataArticle"
DEFAULT_ASSOCIATED_ITEM_TYPE = "Article"

# Characters that break alias rendering in links (whitespace, brackets, punctuation)
DEFAULT_ILLEGAL_ALIAS_CHARACTERS = " \t\r\n\"#%&'()*+,;<=>?[\\]^`{|}!$@"


class ConfigError(Exception):
    """Raised when the configuration file is malformed or has invalid values."""


def _frozen(mapping: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class CodecConfig:
    """
    Settings for the item context path codec.

    Attributes:
        base_prefix: Path prefix every handled URL starts with (servlet mount point)
        wrapper_pagename: Expected value of the `pagename` routing marker
        template_pagename: Expected value of the `childpagename` routing marker
        context_item_type: Item type used when a URL carries no type/alias pair
        append_base_prefix: Whether assembled paths start with base_prefix
        item_types: Item type name -> path alias token (assembly direction)
        type_aliases: Path alias token -> item type name (disassembly direction)
        illegal_alias_characters: Aliases containing any of these are not assembled
        unpacked_args: Names always promoted from packedargs to the query string
    """

    base_prefix: str = ""
    wrapper_pagename: Optional[str] = None
    template_pagename: Optional[str] = None
    context_item_type: str = DEFAULT_CONTEXT_ITEM_TYPE
    append_base_prefix: bool = True
    item_types: Mapping[str, str] = field(default_factory=lambda: _frozen({}))
    type_aliases: Mapping[str, str] = field(default_factory=lambda: _frozen({}))
    illegal_alias_characters: str = DEFAULT_ILLEGAL_ALIAS_CHARACTERS
    unpacked_args: Tuple[str, ...] = ()

    @property
    def normalized_prefix(self) -> str:
        """Base prefix without trailing slashes ("" for a root mount)."""
        return self.base_prefix.rstrip("/")

    def alias_for_type(self, item_type: str) -> Optional[str]:
        """Return the path token for an item type, or None if not enabled."""
        return self.item_types.get(item_type)

    def type_for_alias(self, token: str) -> Optional[str]:
        """Return the item type for a path token, or None if not registered."""
        return self.type_aliases.get(token)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CodecConfig":
        """Build from the `codec` section of the config file."""
        data = _section(data, "codec")

        item_types = _string_map(data.get("item_types"), "codec.item_types")
        if "type_aliases" in data:
            type_aliases = _string_map(data.get("type_aliases"), "codec.type_aliases")
        else:
            type_aliases = {token: item_type for item_type, token in item_types.items()}

        unpacked = data.get("unpacked_args") or []
        if isinstance(unpacked, str):
            unpacked = [name.strip() for name in unpacked.split(",")]
        if not isinstance(unpacked, list):
            raise ConfigError("codec.unpacked_args must be a list of names")

        illegal = data.get("illegal_alias_characters", DEFAULT_ILLEGAL_ALIAS_CHARACTERS)
        if not isinstance(illegal, str):
            raise ConfigError("codec.illegal_alias_characters must be a string")

        return cls(
            base_prefix=str(data.get("base_prefix") or ""),
            wrapper_pagename=_optional_str(data.get("wrapper_pagename")),
            template_pagename=_optional_str(data.get("template_pagename")),
            context_item_type=str(data.get("context_item_type") or DEFAULT_CONTEXT_ITEM_TYPE),
            append_base_prefix=bool(data.get("append_base_prefix", True)),
            item_types=_frozen(item_types),
            type_aliases=_frozen(type_aliases),
            illegal_alias_characters=illegal,
            unpacked_args=tuple(str(name) for name in unpacked if name),
        )


@dataclass(frozen=True)
class ResolverConfig:
    """
    Settings for the site plan hierarchy resolver.

    Attributes:
        node_type: Item type of site plan nodes (pages)
        lowest_level_to_include: Number of root-most levels pruned from breadcrumbs
        aliasing_strategy: Registered name of the aliasing strategy to use
        association_name: Association linking a node to its alias-bearing item
        associated_item_type: Item type on the far side of that association
    """

    node_type: str = DEFAULT_NODE_TYPE
    lowest_level_to_include: int = DEFAULT_LOWEST_LEVEL_TO_INCLUDE
    aliasing_strategy: str = DEFAULT_ALIASING_STRATEGY
    association_name: str = DEFAULT_ASSOCIATION_NAME
    associated_item_type: str = DEFAULT_ASSOCIATED_ITEM_TYPE

    def __post_init__(self):
        if self.lowest_level_to_include < 0:
            raise ConfigError(
                f"resolver.lowest_level_to_include must be non-negative, "
                f"got {self.lowest_level_to_include}"
            )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ResolverConfig":
        """Build from the `resolver` section of the config file."""
        data = _section(data, "resolver")

        depth = data.get("lowest_level_to_include", DEFAULT_LOWEST_LEVEL_TO_INCLUDE)
        try:
            depth = int(depth)
        except (TypeError, ValueError):
            raise ConfigError(f"resolver.lowest_level_to_include must be an integer, got {depth!r}")

        return cls(
            node_type=str(data.get("node_type") or DEFAULT_NODE_TYPE),
            lowest_level_to_include=depth,
            aliasing_strategy=str(data.get("aliasing_strategy") or DEFAULT_ALIASING_STRATEGY),
            association_name=str(data.get("association_name") or DEFAULT_ASSOCIATION_NAME),
            associated_item_type=str(data.get("associated_item_type") or DEFAULT_ASSOCIATED_ITEM_TYPE),
        )


@dataclass(frozen=True)
class ItemContextConfig:
    """Complete configuration: codec and resolver sections."""

    codec: CodecConfig = field(default_factory=CodecConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ItemContextConfig":
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a mapping")
        return cls(
            codec=CodecConfig.from_dict(data.get("codec")),
            resolver=ResolverConfig.from_dict(data.get("resolver")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain dicts for YAML output."""
        codec = {
            f.name: getattr(self.codec, f.name) for f in fields(self.codec)
        }
        codec["item_types"] = dict(self.codec.item_types)
        codec["type_aliases"] = dict(self.codec.type_aliases)
        codec["unpacked_args"] = list(self.codec.unpacked_args)
        return {"codec": codec, "resolver": asdict(self.resolver)}


def load_config_file(config_path: Path) -> ItemContextConfig:
    """
    Load configuration from an explicit YAML file.

    Args:
        config_path: Path to the YAML file

    Returns:
        Parsed configuration, or defaults if the file doesn't exist

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values
    """
    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return ItemContextConfig()

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {config_path}: {e}") from e

    config = ItemContextConfig.from_dict(data)
    logger.debug("Loaded configuration from %s", config_path)
    return config


def load_config(root: Optional[Path] = None) -> ItemContextConfig:
    """
    Load .itemcontext/config.yaml from the config root.

    Args:
        root: Directory holding .itemcontext/ (default: searched upward from cwd)

    Returns:
        Parsed configuration with defaults applied
    """
    root = root or find_config_root()
    return load_config_file(root / CONFIG_DIR_NAME / CONFIG_FILE_NAME)


def _section(data: Any, name: str) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"'{name}' section must be a mapping")
    return data


def _string_map(data: Any, name: str) -> Dict[str, str]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{name} must be a mapping")
    result = {}
    for key, value in data.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise ConfigError(f"{name} entries must map strings to strings: {key!r}: {value!r}")
        result[key] = value
    return result


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
