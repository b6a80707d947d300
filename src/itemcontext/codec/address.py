"""
Address Types
=============
Value types exchanged with the item context codec.

- Address: structured view (context path segments, item type, item alias,
  variant, auxiliary parameters)
- Definition: parameter-level view the codec reads and writes, mirroring
  what a request handler sees (name -> ordered values)
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

# Routing markers
PAGENAME = "pagename"
CHILDPAGENAME = "childpagename"

# Address parameters carried in the path
ITEM_CONTEXT = "item-context"
ITEM_ALIAS = "item-alias"
ITEM_TYPE = "item-type"
VARIANT = "variant"

# Short aliases: c for item-type, cid for the resolved item, p for the resolved context
C = "c"
CID = "cid"
P = "p"

EMBEDDED_PARAMS = (
    PAGENAME,
    CHILDPAGENAME,
    ITEM_CONTEXT,
    ITEM_ALIAS,
    VARIANT,
    ITEM_TYPE,
    C,
    CID,
    P,
)

_DIGITS_RE = re.compile(r"[0-9]+")


def is_digits(value: Optional[str]) -> bool:
    """True for a non-empty run of ASCII digits 0-9 (no sign, no Unicode digits)."""
    return bool(value) and _DIGITS_RE.fullmatch(value) is not None


@dataclass
class Address:
    """
    Structured address of one content item placed in its context.

    Attributes:
        context_path: Alias segments of the item's breadcrumb
        item_type: Type name of the addressed item
        item_alias: Alias of the addressed item
        variant: Optional multivariate-testing variant number
        params: Auxiliary parameters (name -> ordered values)
    """

    context_path: List[str]
    item_type: str
    item_alias: str
    variant: Optional[int] = None
    params: Dict[str, List[str]] = field(default_factory=dict)

    def __post_init__(self):
        if self.variant is not None and self.variant < 0:
            raise ValueError(f"Variant must be non-negative, got {self.variant}")

    @property
    def item_context(self) -> str:
        """Context path joined with '/'."""
        return "/".join(self.context_path)

    @classmethod
    def from_item_context(
        cls,
        item_context: str,
        item_type: str,
        item_alias: str,
        variant: Optional[int] = None,
        params: Optional[Dict[str, List[str]]] = None,
    ) -> "Address":
        """Build an Address from a '/'-joined item context."""
        segments = [s for s in item_context.split("/") if s] if item_context else []
        return cls(
            context_path=segments,
            item_type=item_type,
            item_alias=item_alias,
            variant=variant,
            params=dict(params or {}),
        )


@dataclass
class Definition:
    """
    Parameter-level description of a URL.

    Attributes:
        parameters: Name -> ordered values, including embedded names
        scheme: URI scheme (e.g. "https"), optional
        authority: URI authority (host[:port]), optional
        fragment: URI fragment, optional
    """

    parameters: Dict[str, List[str]] = field(default_factory=dict)
    scheme: Optional[str] = None
    authority: Optional[str] = None
    fragment: Optional[str] = None

    def get_parameter(self, name: str) -> Optional[str]:
        """Return the first value of a parameter, or None."""
        values = self.parameters.get(name)
        return values[0] if values else None

    def get_parameters(self, name: str) -> List[str]:
        """Return all values of a parameter (empty list if absent)."""
        return list(self.parameters.get(name, []))

    def set_parameter(self, name: str, value: str) -> None:
        """Replace a parameter with a single value."""
        self.parameters[name] = [value]

    @classmethod
    def from_address(
        cls,
        address: Address,
        wrapper: Optional[str],
        template: Optional[str],
        scheme: Optional[str] = None,
        authority: Optional[str] = None,
        fragment: Optional[str] = None,
    ) -> "Definition":
        """
        Build a Definition for an Address with the given routing markers.

        Auxiliary params come first so embedded names always win.
        """
        parameters = {name: list(values) for name, values in address.params.items()}
        if wrapper is not None:
            parameters[PAGENAME] = [wrapper]
        if template is not None:
            parameters[CHILDPAGENAME] = [template]
        parameters[ITEM_CONTEXT] = [address.item_context]
        parameters[ITEM_TYPE] = [address.item_type]
        parameters[ITEM_ALIAS] = [address.item_alias]
        if address.variant is not None:
            parameters[VARIANT] = [str(address.variant)]
        return cls(parameters=parameters, scheme=scheme, authority=authority, fragment=fragment)

    def to_address(self) -> Optional[Address]:
        """
        Structured view of this Definition.

        Returns:
            Address, or None if item-context, item-type or item-alias is missing
        """
        item_context = self.get_parameter(ITEM_CONTEXT)
        item_type = self.get_parameter(ITEM_TYPE) or self.get_parameter(C)
        item_alias = self.get_parameter(ITEM_ALIAS)
        if not item_context or not item_type or not item_alias:
            return None

        variant = self.get_parameter(VARIANT)
        params = {
            name: list(values)
            for name, values in self.parameters.items()
            if name not in EMBEDDED_PARAMS
        }
        return Address.from_item_context(
            item_context,
            item_type,
            item_alias,
            variant=int(variant) if is_digits(variant) else None,
            params=params,
        )
