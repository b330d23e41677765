"""Catalog engines.

Pure, synchronous functions over an immutable catalog snapshot:

- ``variant_resolver``: which variant a selection names, which values are disabled
- ``faceted_query``: filtered, faceted, sorted and paginated product listings
- ``pricing``: flash-sale effective prices
"""

from multimart.engine.faceted_query import (
    Facet,
    ProductQuery,
    ProductSummary,
    QueryResult,
    SortKey,
    query,
)
from multimart.engine.pricing import (
    display_base_price,
    effective_price,
    is_flash_sale_active,
)
from multimart.engine.variant_resolver import VariantResolution, expand_combos, resolve

__all__ = [
    # Variant resolver
    "VariantResolution",
    "expand_combos",
    "resolve",
    # Faceted query
    "Facet",
    "ProductQuery",
    "ProductSummary",
    "QueryResult",
    "SortKey",
    "query",
    # Pricing
    "display_base_price",
    "effective_price",
    "is_flash_sale_active",
]
