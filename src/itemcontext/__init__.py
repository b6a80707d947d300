"""
itemcontext - folder-like URLs for items placed in a site plan.

- itemcontext.codec: URL <-> item context address codec
- itemcontext.aliasing: pluggable item id <-> alias strategies
- itemcontext.siteplan: breadcrumb computation and resolution
"""

__version__ = "1.0.0"
