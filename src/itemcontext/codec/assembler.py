"""
Item Context Assembler
======================
Converts an item placed in its context into a folder-like URL and back.

URL form:
    [{scheme}://{authority}]{base_prefix}/{item-context}[/{type-token}/{item-alias}][/v{variant}]

Examples:
    /cs/Satellite/home
    /cs/Satellite/company/media/press-kit/policies/logo-full
    /cs/Satellite/brand-x/catalogue/electronics/audio-players/ipod/v2

Assembly requirements:
- pagename / childpagename equal the configured wrapper / template
- item-context, item-alias and item-type (or c) are set
- item-alias holds no illegal characters

Disassembly requirements:
- The path starts with the base prefix and has at least one more element
- No embedded parameter is repeated in the query string

If the URL carries no type/alias pair, the last context element doubles as
the item-alias and the item-type falls back to the configured context type.

Anything this assembler cannot handle yields None so the caller can hand the
request to a fallback assembler (see AssemblerChain).

Known ambiguity:
    The type/alias pair is detected by checking whether the second-to-last
    segment is a registered type token. A context whose own trailing segment
    equals a token is therefore read as a type/alias pair. Matching is greedy
    from the right and is kept that way on purpose: pick tokens that never
    occur as page aliases.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Protocol, Sequence
from urllib.parse import SplitResult, quote, unquote, urlsplit

from itemcontext.codec.address import (
    C,
    CHILDPAGENAME,
    EMBEDDED_PARAMS,
    ITEM_ALIAS,
    ITEM_CONTEXT,
    ITEM_TYPE,
    PAGENAME,
    VARIANT,
    Address,
    Definition,
    is_digits,
)
from itemcontext.codec.query import (
    PACKED_ARGS,
    construct_query_string,
    exclude_from_packed_args,
    parse_query_string,
)
from itemcontext.utils.config import CodecConfig

logger = logging.getLogger(__name__)

_VARIANT_RE = re.compile(r"^v([0-9]+)$")


class Assembler(Protocol):
    """Protocol shared by the item context assembler and its fallbacks."""

    def assemble(self, definition: Definition) -> Optional[str]:
        """Build a URI for the definition, or None if not handled."""
        ...

    def disassemble(self, uri: str) -> Optional[Definition]:
        """Parse a URI into a definition, or None if not recognized."""
        ...


def construct_uri(
    scheme: Optional[str],
    authority: Optional[str],
    path: Optional[str],
    query: Optional[str],
    fragment: Optional[str],
) -> str:
    """Join URI components; path and fragment are quoted, query is already encoded."""
    parts = []
    if scheme:
        parts.append(f"{scheme}:")
    if authority:
        parts.append(f"//{authority}")
    if path:
        parts.append(quote(path, safe="/"))
    if query:
        parts.append(f"?{query}")
    if fragment:
        parts.append(f"#{quote(fragment, safe='')}")
    uri = "".join(parts)
    logger.debug("Assembled URI: %s", uri)
    return uri


def _first(params: Dict[str, List[str]], name: str) -> Optional[str]:
    values = params.get(name)
    return values[0] if values else None


class ItemContextAssembler:
    """
    Folder-like URL assembler for items placed in a site plan context.

    Stateless apart from its immutable CodecConfig; safe to share across
    concurrent requests.
    """

    def __init__(self, config: CodecConfig):
        self.config = config
        logger.info(
            "Initialized item context assembler (prefix=%r, %d item types)",
            config.base_prefix, len(config.item_types),
        )

    # -------------------------------------------------------------------------
    # Assembly
    # -------------------------------------------------------------------------

    def assemble(self, definition: Definition) -> Optional[str]:
        """
        Assemble a definition into a URI.

        Args:
            definition: Parameters plus optional scheme/authority/fragment

        Returns:
            URI string, or None if this assembler declines the definition
        """
        logger.debug("Assembling definition: %s", definition)
        path = self._get_path(definition)
        if path is None:
            return None
        query = self._get_query_string(definition)
        return construct_uri(
            definition.scheme, definition.authority, path, query, definition.fragment
        )

    def assemble_address(
        self,
        address: Address,
        wrapper: Optional[str] = None,
        template: Optional[str] = None,
    ) -> Optional[str]:
        """Assemble an Address; routing markers default to the configured values."""
        definition = Definition.from_address(
            address,
            wrapper if wrapper is not None else self.config.wrapper_pagename,
            template if template is not None else self.config.template_pagename,
        )
        return self.assemble(definition)

    def _get_path(self, definition: Definition) -> Optional[str]:
        """Main worker for assembly: the URL path, or None to decline."""
        pagename = definition.get_parameter(PAGENAME)
        if pagename is None or pagename != self.config.wrapper_pagename:
            logger.debug(
                "pagename not set to a valid value: %s, expecting %s",
                pagename, self.config.wrapper_pagename,
            )
            return None

        childpagename = definition.get_parameter(CHILDPAGENAME)
        if childpagename is None or childpagename != self.config.template_pagename:
            logger.debug(
                "childpagename not set to a valid value: %s, expecting %s",
                childpagename, self.config.template_pagename,
            )
            return None

        packed = parse_query_string(definition.get_parameter(PACKED_ARGS))

        item_context = _first(packed, ITEM_CONTEXT)
        if item_context is None:
            item_context = definition.get_parameter(ITEM_CONTEXT)
        item_alias = _first(packed, ITEM_ALIAS)
        if item_alias is None:
            item_alias = definition.get_parameter(ITEM_ALIAS)
        item_type = definition.get_parameter(ITEM_TYPE)
        if not item_type:
            item_type = definition.get_parameter(C)
        variant = _first(packed, VARIANT)
        if variant is None:
            variant = definition.get_parameter(VARIANT)

        if not item_context or not item_alias or not item_type:
            logger.debug(
                "Cannot assemble: item-type, item-context or item-alias missing: (%s), (%s), (%s)",
                item_type, item_context, item_alias,
            )
            return None

        if self.has_illegal_characters(item_alias):
            logger.debug(
                "Cannot assemble: item-alias contains illegal characters: (%s), (%s), (%s)",
                item_type, item_context, item_alias,
            )
            return None

        if variant is not None and not is_digits(variant):
            logger.debug("Cannot assemble: variant is not a non-negative integer: %s", variant)
            return None

        path = self.config.normalized_prefix if self.config.append_base_prefix else ""
        path += "/" + item_context.lstrip("/")

        if not self._context_names_item(item_context, item_type, item_alias):
            token = self.config.alias_for_type(item_type)
            if token is None:
                logger.debug("Cannot assemble: no path token configured for item type %s", item_type)
                return None
            path += f"/{token}/{item_alias}"

        if variant is not None:
            path += f"/v{variant}"
        return path

    def _context_names_item(self, item_context: str, item_type: str, item_alias: str) -> bool:
        """True when the item is the context node itself (no type/alias pair needed)."""
        if item_type != self.config.context_item_type:
            return False
        context = item_context.rstrip("/")
        return context == item_alias or context.endswith("/" + item_alias)

    def has_illegal_characters(self, alias: str) -> bool:
        """
        Check an alias against the configured illegal character set.

        "/" is always illegal: an alias is a single path segment, whatever the
        configured set holds.
        """
        illegal = self.config.illegal_alias_characters
        return any(ch == "/" or ch in illegal for ch in alias)

    def _get_query_string(self, definition: Definition) -> Optional[str]:
        """Query string of every non-embedded parameter, with packedargs cleaned up."""
        new_params: Dict[str, List[str]] = {}

        for name, values in definition.parameters.items():
            if name in EMBEDDED_PARAMS:
                continue

            if name == PACKED_ARGS:
                exclude = set(EMBEDDED_PARAMS)
                if self.config.unpacked_args and values:
                    packed = parse_query_string(values[0])
                    for nopack in self.config.unpacked_args:
                        if nopack in packed:
                            new_params[nopack] = packed[nopack]
                            exclude.add(nopack)
                values = exclude_from_packed_args(values, exclude)
                if not values:
                    continue

            new_params[name] = list(values)

        return construct_query_string(new_params)

    # -------------------------------------------------------------------------
    # Disassembly
    # -------------------------------------------------------------------------

    def disassemble(self, uri: str) -> Optional[Definition]:
        """
        Disassemble a URI into a definition.

        Args:
            uri: Absolute URI or path with optional query string

        Returns:
            Definition, or None if the URI is not recognized

        Raises:
            QueryStringError: If the query string cannot be decoded
        """
        logger.debug("Disassembling URI: %s", uri)
        parts = urlsplit(uri)
        params = self.get_query_params(parts)
        if params is None:
            logger.debug("URI not recognized, leaving it to the fallback: %s", uri)
            return None
        return Definition(
            parameters=params,
            scheme=parts.scheme or None,
            authority=parts.netloc or None,
            fragment=parts.fragment or None,
        )

    def disassemble_address(self, uri: str) -> Optional[Address]:
        """Address-level view of disassemble()."""
        definition = self.disassemble(uri)
        return definition.to_address() if definition is not None else None

    def get_query_params(self, parts: SplitResult) -> Optional[Dict[str, List[str]]]:
        """Main worker for disassembly: parses the path back into parameters."""
        path = unquote(parts.path)
        if not path:
            logger.debug("No path found in URI")
            return None

        prefix = self.config.normalized_prefix
        if not path.startswith(prefix + "/"):
            logger.debug("Path does not start with expected prefix %r: %s", prefix, path)
            return None

        remainder = path[len(prefix) + 1:].rstrip("/")
        if not remainder:
            logger.debug("Path holds only the prefix, leaving it to the query assembler")
            return None

        params = parse_query_string(parts.query)
        for name in EMBEDDED_PARAMS:
            if name in params:
                logger.debug("Found embedded param in the query string: %s", name)
                return None

        segments = remainder.split("/")

        variant = self._strip_variant(segments)
        if variant is not None:
            params[VARIANT] = [variant]
            logger.debug("variant decoded to: %s", variant)

        pair = self._strip_type_and_alias(segments)
        params[ITEM_CONTEXT] = ["/".join(segments)]
        if pair is not None:
            item_type, item_alias = pair
        else:
            item_type, item_alias = self.config.context_item_type, segments[-1]

        params[ITEM_TYPE] = [item_type]
        params[C] = [item_type]
        params[ITEM_ALIAS] = [item_alias]
        logger.debug(
            "Decoded item-context=%s item-type=%s item-alias=%s",
            params[ITEM_CONTEXT][0], item_type, item_alias,
        )

        if self.config.template_pagename is not None:
            params[CHILDPAGENAME] = [self.config.template_pagename]
        if self.config.wrapper_pagename is not None:
            params[PAGENAME] = [self.config.wrapper_pagename]
        return params

    @staticmethod
    def _strip_variant(segments: List[str]) -> Optional[str]:
        """Remove and return a trailing v{digits} segment; the context keeps one segment."""
        if len(segments) >= 2:
            match = _VARIANT_RE.match(segments[-1])
            if match:
                segments.pop()
                return match.group(1)
        return None

    def _strip_type_and_alias(self, segments: List[str]):
        """Remove and return (item type, item alias) if the tail is a registered pair."""
        if len(segments) >= 3:
            item_type = self.config.type_for_alias(segments[-2])
            if item_type is not None:
                item_alias = segments.pop()
                segments.pop()
                return item_type, item_alias
        return None


class QueryAssembler:
    """
    Minimal fallback: every parameter travels in the query string.

    Handles any definition; disassembles URIs whose path is exactly the base prefix.
    """

    def __init__(self, config: CodecConfig):
        self.config = config

    def assemble(self, definition: Definition) -> Optional[str]:
        path = self.config.normalized_prefix or "/"
        query = construct_query_string(definition.parameters)
        return construct_uri(definition.scheme, definition.authority, path, query, definition.fragment)

    def disassemble(self, uri: str) -> Optional[Definition]:
        parts = urlsplit(uri)
        if unquote(parts.path).rstrip("/") != self.config.normalized_prefix:
            return None
        return Definition(
            parameters=parse_query_string(parts.query),
            scheme=parts.scheme or None,
            authority=parts.netloc or None,
            fragment=parts.fragment or None,
        )


class AssemblerChain:
    """
    Tries assemblers in order; the first non-None result wins.

    Usage:
        chain = AssemblerChain([ItemContextAssembler(cfg), QueryAssembler(cfg)])
        uri = chain.assemble(definition)
    """

    def __init__(self, assemblers: Sequence[Assembler]):
        self._assemblers = list(assemblers)

    def assemble(self, definition: Definition) -> Optional[str]:
        for assembler in self._assemblers:
            uri = assembler.assemble(definition)
            if uri is not None:
                logger.debug("%s assembled %s", type(assembler).__name__, uri)
                return uri
        return None

    def disassemble(self, uri: str) -> Optional[Definition]:
        for assembler in self._assemblers:
            definition = assembler.disassemble(uri)
            if definition is not None:
                logger.debug("%s disassembled %s", type(assembler).__name__, uri)
                return definition
        return None
