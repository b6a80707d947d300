"""
Shared fixtures for the itemcontext test suite.

A small corporate site plan:

    Publication:1
    └── Page:10 site
        ├── Page:11 company
        │   ├── Page:12 media
        │   │   ├── Page:13 press-kit
        │   │   │   ├── Policy:50 logo-full
        │   │   │   ├── Policy:52 brand-guide
        │   │   │   ├── Policy:55 colours
        │   │   │   └── Policy:56 colours
        │   │   └── Policy:59 annual-report
        │   └── Policy:58 logo-full
        └── Page:20 products
            └── Page:21 media
                ├── Policy:51 logo-full
                └── Policy:53 brand-guide
"""
import pytest

from itemcontext.codec.assembler import ItemContextAssembler
from itemcontext.siteplan.tree import YamlSitePlan
from itemcontext.utils.config import CodecConfig, ItemContextConfig, ResolverConfig


CODEC_SETTINGS = {
    "base_prefix": "/cs/Satellite",
    "wrapper_pagename": "FSII/Wrapper",
    "template_pagename": "FSII/Layout",
    "item_types": {"Policy": "policies", "Product": "products-catalogue"},
    "unpacked_args": ["rendermode"],
}

SITE_PLAN = {
    "publication": 1,
    "items": [
        {"type": "Page", "id": 10, "name": "Site", "path": "site"},
        {"type": "Page", "id": 11, "parent": 10, "name": "Company", "path": "company"},
        {"type": "Page", "id": 12, "parent": 11, "name": "Media", "path": "media"},
        {"type": "Page", "id": 13, "parent": 12, "name": "Press Kit", "path": "press-kit"},
        {"type": "Page", "id": 20, "parent": 10, "name": "Products", "path": "products"},
        {"type": "Page", "id": 21, "parent": 20, "name": "Media", "path": "media"},
        {"type": "Policy", "id": 50, "parent": 13, "name": "Logo", "path": "logo-full"},
        {"type": "Policy", "id": 51, "parent": 21, "name": "Logo", "path": "logo-full"},
        {"type": "Policy", "id": 52, "parent": 13, "name": "Brand", "path": "brand-guide"},
        {"type": "Policy", "id": 53, "parent": 21, "name": "Brand", "path": "brand-guide"},
        {"type": "Policy", "id": 55, "parent": 13, "name": "Colours", "path": "colours"},
        {"type": "Policy", "id": 56, "parent": 13, "name": "Colours", "path": "colours"},
        {"type": "Policy", "id": 58, "parent": 11, "name": "Logo", "path": "logo-full"},
        {"type": "Policy", "id": 59, "parent": 12, "name": "Annual Report", "path": "annual-report"},
    ],
}

# Pages aliased through metadata articles, with English and French copies
MULTILINGUAL_SITE_PLAN = {
    "publication": 1,
    "items": [
        {"type": "Page", "id": 10},
        {"type": "Page", "id": 11, "parent": 10},
        {"type": "Page", "id": 12, "parent": 11},
        {"type": "Page", "id": 14, "parent": 11},
        {"type": "Article", "id": 70, "path": "about", "locale": "en_US", "translation_group": "about"},
        {"type": "Article", "id": 71, "path": "a-propos", "locale": "fr_FR", "translation_group": "about"},
        {"type": "Article", "id": 72, "path": "news", "locale": "en_US", "translation_group": "news"},
        {"type": "Article", "id": 73, "path": "nouvelles", "locale": "fr_FR", "translation_group": "news"},
        {"type": "Article", "id": 74, "path": "spare", "locale": "en_US"},
        {"type": "Article", "id": 75, "path": "extra", "locale": "en_US"},
    ],
    "associations": [
        {"from": "Page:11", "name": "MetadataArticle", "to": "Article:70"},
        {"from": "Page:12", "name": "MetadataArticle", "to": "Article:72"},
        {"from": "Page:14", "name": "MetadataArticle", "to": "Article:74"},
        {"from": "Page:14", "name": "MetadataArticle", "to": "Article:75"},
    ],
}


@pytest.fixture
def codec_config():
    """Codec configuration mounted at /cs/Satellite."""
    return CodecConfig.from_dict(CODEC_SETTINGS)


@pytest.fixture
def assembler(codec_config):
    return ItemContextAssembler(codec_config)


@pytest.fixture
def resolver_config():
    return ResolverConfig(aliasing_strategy="path")


@pytest.fixture
def config():
    return ItemContextConfig.from_dict(
        {"codec": CODEC_SETTINGS, "resolver": {"aliasing_strategy": "path"}}
    )


@pytest.fixture
def site_plan():
    return YamlSitePlan.from_dict(SITE_PLAN)


@pytest.fixture
def multilingual_site_plan():
    return YamlSitePlan.from_dict(MULTILINGUAL_SITE_PLAN)
