"""Site plan tree and hierarchy (breadcrumb) resolution."""
from itemcontext.siteplan.lang_site import ItemContextInfo, LangSiteResolver
from itemcontext.siteplan.resolver import AddressResolution, HierarchyResolver, ResolutionError
from itemcontext.siteplan.tree import (
    HierarchyNode,
    NodeKind,
    SitePlanError,
    SitePlanTree,
    YamlSitePlan,
)

__all__ = [
    "AddressResolution",
    "HierarchyNode",
    "HierarchyResolver",
    "ItemContextInfo",
    "LangSiteResolver",
    "NodeKind",
    "ResolutionError",
    "SitePlanError",
    "SitePlanTree",
    "YamlSitePlan",
]
