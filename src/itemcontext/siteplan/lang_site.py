"""
Language/Site Item Contexts
===========================
Item contexts prefixed with a language and a site alias:

    en/corporate/company/media
    ^^ ^^^^^^^^^ ^^^^^^^^^^^^^
    |  |         breadcrumb resolved by HierarchyResolver
    |  site alias
    language alias (locale up to "_")
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from itemcontext.aliasing.base import CandidateInfo, ItemId
from itemcontext.codec.address import ITEM_CONTEXT
from itemcontext.siteplan.resolver import AddressResolution, HierarchyResolver, ResolutionError

logger = logging.getLogger(__name__)

LANGUAGE_ALIAS = "language-alias"
SITE_ALIAS = "site-alias"


@dataclass(frozen=True)
class ItemContextInfo:
    """A language/site item context split into its parts."""

    language_alias: str
    site_alias: str
    item_context: str

    @classmethod
    def parse(cls, lang_site_context: str) -> "ItemContextInfo":
        """
        Split "lang/site/breadcrumb".

        Raises:
            ResolutionError: If the context has fewer than two "/"
        """
        parts = (lang_site_context or "").split("/", 2)
        if len(parts) < 3:
            raise ResolutionError(f"Item context is missing language or site alias: {lang_site_context!r}")
        return cls(language_alias=parts[0], site_alias=parts[1], item_context=parts[2])

    def __str__(self) -> str:
        return f"{self.language_alias}/{self.site_alias}/{self.item_context}"


def language_alias_for(locale: str) -> str:
    """Language part of a locale name ("en_US" -> "en")."""
    return locale.split("_", 1)[0]


class LangSiteResolver:
    """Wraps a HierarchyResolver to handle language/site prefixed contexts."""

    def __init__(self, resolver: HierarchyResolver):
        self.resolver = resolver

    def compute_alias(self, item_id: ItemId, locale: Optional[str] = None) -> Optional[str]:
        return self.resolver.compute_alias(item_id, locale)

    def compute_item_context(self, site_alias: str, node_id: ItemId, locale: str) -> Optional[str]:
        """The prefixed item context, or None when the node has no breadcrumb."""
        breadcrumb = self.resolver.compute_item_context(node_id, locale)
        if breadcrumb is None:
            return None
        return str(ItemContextInfo(language_alias_for(locale), site_alias, breadcrumb))

    def parse_item_context(self, item_context: str) -> ItemContextInfo:
        return ItemContextInfo.parse(item_context)

    def resolve_site_for_item_context(self, item_context: str) -> str:
        return self.parse_item_context(item_context).site_alias

    def resolve_language_for_item_context(self, item_context: str) -> str:
        return self.parse_item_context(item_context).language_alias

    def resolve_item_context(self, item_context: str, locale: Optional[str] = None) -> CandidateInfo:
        info = self.parse_item_context(item_context)
        return self.resolver.resolve_item_context(info.item_context, locale)

    def resolve_node_for_item_context(self, item_context: str, locale: Optional[str] = None) -> ItemId:
        return self.resolve_item_context(item_context, locale).item_id

    def resolve_locale_for_item_context(self, item_context: str, locale: Optional[str] = None) -> Optional[str]:
        return self.resolve_item_context(item_context, locale).locale

    def resolve_item_id(self, item_type: str, alias: str, context_id: ItemId) -> ItemId:
        return self.resolver.resolve_item_id(item_type, alias, context_id)

    def resolve_parameters(self, params: Mapping[str, str], locale: Optional[str] = None) -> AddressResolution:
        """
        Like HierarchyResolver.resolve_parameters, also setting
        language-alias and site-alias from the prefixed item context.
        """
        params = dict(params)
        lang_site_context = params.get(ITEM_CONTEXT)
        if lang_site_context:
            info = self.parse_item_context(lang_site_context)
            logger.debug("Split item context %s into %r", lang_site_context, info)
            params[LANGUAGE_ALIAS] = info.language_alias
            params[SITE_ALIAS] = info.site_alias
            params[ITEM_CONTEXT] = info.item_context

        resolution = self.resolver.resolve_parameters(params, locale)
        if lang_site_context:
            resolution.params[ITEM_CONTEXT] = lang_site_context
        return resolution
