"""
Hierarchy resolver: breadcrumb computation, breadcrumb resolution and leaf
alias disambiguation.
"""
import itertools
import logging

import pytest

from itemcontext.aliasing import (
    CandidateInfo,
    IdAliasingStrategy,
    ItemId,
    MultilingualAssociatedItemAliasingStrategy,
    PathAliasingStrategy,
)
from itemcontext.siteplan import (
    HierarchyNode,
    HierarchyResolver,
    NodeKind,
    ResolutionError,
    YamlSitePlan,
)
from itemcontext.utils.config import ResolverConfig

from conftest import SITE_PLAN


def page(node_id):
    return ItemId("Page", node_id)


def policy(item_id):
    return ItemId("Policy", item_id)


@pytest.fixture
def resolver(site_plan, resolver_config):
    return HierarchyResolver(site_plan, PathAliasingStrategy(site_plan), resolver_config)


def _resolver_with_depth(site_plan, depth):
    return HierarchyResolver(
        site_plan, PathAliasingStrategy(site_plan), ResolverConfig(lowest_level_to_include=depth)
    )


class FixedCandidates:
    """Strategy stub returning a fixed candidate list for every lookup."""

    def __init__(self, candidates):
        self.candidates = list(candidates)

    def compute_alias(self, item_id, locale=None):
        return str(item_id.id)

    def find_candidates_for_alias(self, item_type, alias):
        return list(self.candidates)


# ---------------------------------------------------------------------------
# Breadcrumb computation
# ---------------------------------------------------------------------------


@pytest.mark.siteplan
@pytest.mark.parametrize("node_id,expected", [
    (10, "site"),
    (11, "company"),
    (12, "company/media"),
    (13, "company/media/press-kit"),
    (21, "products/media"),
])
def test_breadcrumb_prunes_the_top_level(resolver, node_id, expected):
    """
    Given: The default lowest level to include (1)
    When: Computing item contexts
    Then: The top-level page is left out of every descendant's breadcrumb
    """
    assert resolver.compute_item_context(page(node_id)) == expected


@pytest.mark.siteplan
def test_depth_zero_keeps_every_ancestor(site_plan):
    assert _resolver_with_depth(site_plan, 0).compute_item_context(page(13)) == "site/company/media/press-kit"


@pytest.mark.siteplan
def test_depth_beyond_the_ancestors_leaves_only_the_node(site_plan):
    """
    Given: A pruning depth larger than the number of ancestors
    When: Computing the chain
    Then: All ancestors are dropped and only the node remains
    """
    resolver = _resolver_with_depth(site_plan, 3)

    assert resolver.breadcrumb_chain(page(12)) == [page(12)]
    assert resolver.compute_item_context(page(12)) == "media"
    assert resolver.compute_item_context(page(13)) == "press-kit"


@pytest.mark.siteplan
def test_chain_is_root_most_first(resolver):
    assert resolver.breadcrumb_chain(page(13)) == [page(11), page(12), page(13)]


@pytest.mark.siteplan
def test_missing_alias_anywhere_means_no_breadcrumb(multilingual_site_plan):
    """
    Given: Pages aliased by path, which they do not carry
    When: Computing an item context
    Then: None is returned instead of an error
    """
    resolver = HierarchyResolver(multilingual_site_plan, PathAliasingStrategy(multilingual_site_plan))

    assert resolver.compute_item_context(page(12)) is None


@pytest.mark.siteplan
def test_id_strategy_breadcrumb(site_plan):
    resolver = HierarchyResolver(site_plan, IdAliasingStrategy())

    assert resolver.compute_item_context(page(13)) == "11/12/13"
    assert resolver.resolve_node_for_item_context("11/12/13") == page(13)


@pytest.mark.siteplan
def test_walk_stops_at_the_root_marker():
    """
    Given: A tree walk that continues past the root marker
    When: Building the chain
    Then: Nodes above the root marker are ignored
    """
    class Tree:
        def ancestors(self, node_id):
            return [
                HierarchyNode(page(2), ItemId("Publication", 1)),
                HierarchyNode(ItemId("Publication", 1), page(99), NodeKind.ROOT_MARKER),
                HierarchyNode(page(99)),
            ]

        def children(self, node_id):
            return []

    resolver = HierarchyResolver(Tree(), IdAliasingStrategy(), ResolverConfig(lowest_level_to_include=0))

    assert resolver.breadcrumb_chain(page(3)) == [page(2), page(3)]


@pytest.mark.siteplan
def test_non_page_ancestor_is_an_error():
    site = YamlSitePlan.from_dict({
        "items": [
            {"type": "Folder", "id": 1},
            {"type": "Page", "id": 2, "parent": "Folder:1"},
        ],
    })
    resolver = HierarchyResolver(site, IdAliasingStrategy())

    with pytest.raises(ResolutionError, match="Invalid node type"):
        resolver.compute_item_context(page(2))


# ---------------------------------------------------------------------------
# Breadcrumb resolution
# ---------------------------------------------------------------------------


@pytest.mark.siteplan
@pytest.mark.parametrize("node_id", [10, 11, 12, 13, 20, 21])
def test_resolving_a_computed_breadcrumb_returns_the_node(resolver, node_id):
    """
    Given: The item context computed for a node
    When: Resolving it
    Then: The same node is returned
    """
    item_context = resolver.compute_item_context(page(node_id))

    assert resolver.resolve_node_for_item_context(item_context) == page(node_id)


@pytest.mark.siteplan
def test_same_alias_under_different_parents_is_told_apart(resolver):
    assert resolver.resolve_node_for_item_context("company/media") == page(12)
    assert resolver.resolve_node_for_item_context("products/media") == page(21)


@pytest.mark.siteplan
@pytest.mark.parametrize("item_context", ["company/unknown", "elsewhere/media", "site/company/media"])
def test_unmatched_breadcrumb_is_an_error(resolver, item_context):
    with pytest.raises(ResolutionError, match="No node found"):
        resolver.resolve_item_context(item_context)


@pytest.mark.siteplan
@pytest.mark.parametrize("item_context", ["", None])
def test_empty_breadcrumb_is_rejected(resolver, item_context):
    with pytest.raises(ValueError):
        resolver.resolve_item_context(item_context)


@pytest.mark.siteplan
@pytest.mark.parametrize("item_context", ["\u00b2", "company/\u0663"])
def test_unicode_digit_breadcrumb_is_not_found_with_id_aliases(site_plan, item_context):
    """
    Given: The id strategy and a breadcrumb ending in a non-ASCII digit
    When: Resolving it
    Then: Resolution fails as not found rather than on int conversion
    """
    resolver = HierarchyResolver(site_plan, IdAliasingStrategy())

    with pytest.raises(ResolutionError, match="No node found"):
        resolver.resolve_item_context(item_context)


@pytest.mark.siteplan
def test_breadcrumb_resolution_uses_candidate_locale(multilingual_site_plan):
    """
    Given: Pages aliased by translated metadata articles
    When: Resolving the French breadcrumb
    Then: The page is found and the French locale is reported
    """
    strategy = MultilingualAssociatedItemAliasingStrategy(multilingual_site_plan)
    resolver = HierarchyResolver(multilingual_site_plan, strategy)

    assert resolver.compute_item_context(page(12), "fr_FR") == "a-propos/nouvelles"
    assert resolver.resolve_node_for_item_context("a-propos/nouvelles") == page(12)
    assert resolver.resolve_locale_for_item_context("a-propos/nouvelles") == "fr_FR"
    assert resolver.resolve_locale_for_item_context("about/news") == "en_US"


@pytest.mark.siteplan
def test_candidate_without_locale_uses_the_passed_locale(site_plan):
    strategy = FixedCandidates([CandidateInfo(page(21)), CandidateInfo(page(12))])
    resolver = HierarchyResolver(site_plan, strategy)

    result = resolver.resolve_item_context("11/12", locale="en_US")

    assert result == CandidateInfo(page(12))


# ---------------------------------------------------------------------------
# Leaf alias resolution
# ---------------------------------------------------------------------------


@pytest.mark.siteplan
def test_node_type_alias_resolves_to_the_context(resolver):
    assert resolver.resolve_item_id("Page", "anything", page(13)) == page(13)


@pytest.mark.siteplan
def test_unique_alias_resolves_directly(resolver):
    """
    Given: An alias only one policy carries
    When: Resolving it against a page it is not placed on
    Then: That policy is returned without consulting the page's children
    """
    assert resolver.resolve_item_id("Policy", "annual-report", page(21)) == policy(59)


@pytest.mark.siteplan
def test_alias_shared_across_pages_resolves_to_the_child(resolver):
    assert resolver.resolve_item_id("Policy", "logo-full", page(13)) == policy(50)
    assert resolver.resolve_item_id("Policy", "brand-guide", page(21)) == policy(53)


@pytest.mark.siteplan
def test_unknown_alias_is_an_error(resolver):
    with pytest.raises(ResolutionError, match="Could not locate"):
        resolver.resolve_item_id("Policy", "missing", page(13))


@pytest.mark.siteplan
@pytest.mark.parametrize("order", list(itertools.permutations([50, 51, 58])))
def test_child_of_the_context_wins_regardless_of_order(site_plan, order):
    """
    Given: Three candidates for one alias, exactly one placed on the context page
    When: Resolving the alias in any candidate order
    Then: That child is returned
    """
    strategy = FixedCandidates(CandidateInfo(policy(i)) for i in order)
    resolver = HierarchyResolver(site_plan, strategy)

    assert resolver.resolve_item_id("Policy", "logo-full", page(21)) == policy(51)
    assert resolver.resolve_item_id("Policy", "logo-full", page(11)) == policy(58)


@pytest.mark.siteplan
def test_no_child_match_falls_back_to_first_candidate(resolver, caplog):
    """
    Given: Several candidates, none placed on the context page
    When: Resolving the alias
    Then: The first candidate is returned with a warning
    """
    with caplog.at_level(logging.WARNING):
        result = resolver.resolve_item_id("Policy", "logo-full", page(12))

    assert result == policy(50)
    assert "Returning the first one" in caplog.text


@pytest.mark.siteplan
def test_several_child_matches_return_the_first(resolver, caplog):
    with caplog.at_level(logging.WARNING):
        result = resolver.resolve_item_id("Policy", "colours", page(13))

    assert result == policy(55)
    assert "Found multiple" in caplog.text


# ---------------------------------------------------------------------------
# Parameter resolution
# ---------------------------------------------------------------------------


@pytest.mark.siteplan
def test_parameters_get_p_and_cid(resolver):
    """
    Given: Decoded parameters for a policy placed on a page
    When: Resolving them
    Then: p and cid are set to the page and policy ids
    """
    resolution = resolver.resolve_parameters({
        "item-context": "company/media/press-kit",
        "item-type": "Policy",
        "item-alias": "logo-full",
    })

    assert resolution.params["p"] == "13"
    assert resolution.params["cid"] == "50"
    assert resolution.node_id == page(13)
    assert resolution.item_id == policy(50)


@pytest.mark.siteplan
def test_context_page_resolves_cid_to_p(resolver):
    resolution = resolver.resolve_parameters({
        "item-context": "products/media",
        "c": "Page",
        "item-alias": "media",
    })

    assert resolution.params["p"] == resolution.params["cid"] == "21"


@pytest.mark.siteplan
def test_explicit_p_and_cid_win(resolver, caplog):
    """
    Given: Parameters that already carry p and cid
    When: Resolving them
    Then: The explicit values are kept and warnings are logged
    """
    with caplog.at_level(logging.WARNING):
        resolution = resolver.resolve_parameters({
            "item-context": "company/media/press-kit",
            "item-type": "Policy",
            "item-alias": "logo-full",
            "p": "21",
            "cid": "51",
        })

    assert resolution.params["p"] == "21"
    assert resolution.params["cid"] == "51"
    assert resolution.item_id == policy(51)
    assert caplog.text.count("Both") == 2


@pytest.mark.siteplan
def test_explicit_p_is_used_as_the_alias_context(resolver):
    resolution = resolver.resolve_parameters({"item-type": "Policy", "item-alias": "logo-full", "p": "21"})

    assert resolution.params["cid"] == "51"


@pytest.mark.siteplan
def test_alias_without_context_is_an_error(resolver):
    with pytest.raises(ResolutionError):
        resolver.resolve_parameters({"item-type": "Policy", "item-alias": "logo-full"})


@pytest.mark.siteplan
def test_non_ascii_digit_ids_are_not_read_as_ids(resolver):
    """
    Given: Explicit p and cid holding a superscript digit
    When: Resolving parameters
    Then: They are kept as given but no node or item id is derived from them
    """
    resolution = resolver.resolve_parameters({"p": "\u00b2", "cid": "\u00b2", "c": "Policy", "item-alias": "logo-full"})

    assert resolution.params["p"] == "\u00b2"
    assert resolution.node_id is None
    assert resolution.item_id is None


@pytest.mark.siteplan
def test_resolution_reads_document_order_independently():
    """
    Given: The same site plan with its items listed in reverse
    When: Resolving breadcrumbs that share a last segment
    Then: The results do not change
    """
    reversed_plan = YamlSitePlan.from_dict({**SITE_PLAN, "items": list(reversed(SITE_PLAN["items"]))})
    resolver = HierarchyResolver(reversed_plan, PathAliasingStrategy(reversed_plan))

    assert resolver.resolve_node_for_item_context("company/media") == page(12)
    assert resolver.resolve_node_for_item_context("products/media") == page(21)
    assert resolver.resolve_item_id("Policy", "logo-full", page(13)) == policy(50)
