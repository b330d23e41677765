"""Faceted query engine.

Filters a product collection by category scope, free text and variant
attribute values, counts facet values over what survives, then sorts,
paginates and projects the page into product summaries.
"""

from collections.abc import Collection, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from multimart.domain.entities import Product, SimpleProduct, Vendor, VariantProduct
from multimart.domain.exceptions import (
    InvalidInputError,
    InvalidPaginationError,
    InvalidSortKeyError,
    UnknownFilterKeyError,
)
from multimart.domain.value_objects import FlashSale, VariantMatrix
from multimart.engine.pricing import is_flash_sale_active

UNKNOWN_VENDOR = "Unknown Vendor"


class SortKey(str, Enum):
    """Supported result orderings."""

    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    NEWEST = "newest"

    @classmethod
    def parse(cls, value: "SortKey | str") -> "SortKey":
        """Parse a sort key.

        Raises:
            InvalidSortKeyError: If the value is not a supported ordering.
        """
        try:
            return cls(value)
        except ValueError:
            raise InvalidSortKeyError(str(value), [key.value for key in cls]) from None


# ============================================================================
# Query Parameters
# ============================================================================


@dataclass(frozen=True)
class ProductQuery:
    """Filter, sort and pagination parameters for a product query.

    Attributes:
        category_id: Category scope (optional in search mode and for
            vendor listings).
        subcategory_id: Optional subcategory scope.
        vendor_id: Optional vendor scope.
        attribute_filters: Axis key -> allowed values. OR within a key,
            AND across keys; empty value sets are ignored.
        search_query: Case-insensitive substring over name, description
            and SKUs.
        sort_key: Ordering of results.
        page: Page number (1-indexed).
        page_size: Items per page.
    """

    category_id: str | None = None
    subcategory_id: str | None = None
    vendor_id: str | None = None
    attribute_filters: Mapping[str, Iterable[str]] = field(default_factory=dict)
    search_query: str | None = None
    sort_key: SortKey | str = SortKey.NEWEST
    page: int = 1
    page_size: int = 12

    @property
    def offset(self) -> int:
        """Calculate offset from page number."""
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        """Get limit (alias for page_size)."""
        return self.page_size

    @property
    def is_search(self) -> bool:
        """Check if a non-blank text query was given."""
        return bool(self.search_query and self.search_query.strip())

    def active_filters(self) -> dict[str, frozenset[str]]:
        """Attribute filters with empty value sets removed."""
        filters: dict[str, frozenset[str]] = {}
        for key, values in self.attribute_filters.items():
            allowed = frozenset((values,) if isinstance(values, str) else values)
            if allowed:
                filters[key] = allowed
        return filters


# ============================================================================
# Results
# ============================================================================


@dataclass(frozen=True)
class Facet:
    """Value counts for one attribute over the filtered result set.

    Attributes:
        key: Attribute (axis) key.
        values: Observed values, first-seen order.
        counts: Value -> number of variants carrying it.
    """

    key: str
    values: tuple[str, ...]
    counts: dict[str, int]

    @property
    def total(self) -> int:
        """Sum of counts (number of contributing variants)."""
        return sum(self.counts.values())


@dataclass(frozen=True)
class ProductSummary:
    """Product card data for a result row.

    Carries flash-sale metadata but not a discounted price; callers
    compute that with the pricing resolver when they need it.
    """

    id: str
    name: str
    slug: str
    vendor_name: str
    min_price: Decimal
    max_price: Decimal
    default_image: str
    in_stock: bool
    has_variants: bool
    base_price: Decimal | None = None
    flash_sale: FlashSale | None = None
    flash_sale_active: bool = False


@dataclass(frozen=True)
class QueryResult:
    """A page of product summaries with facets.

    Attributes:
        items: Summaries on this page.
        facets: Facets over the whole filtered set.
        total_count: Filtered count before pagination.
        page: Current page.
        page_size: Items per page.
    """

    items: list[ProductSummary]
    facets: list[Facet]
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        """Calculate total pages."""
        return (self.total_count + self.page_size - 1) // self.page_size

    @property
    def has_next(self) -> bool:
        """Check if there's a next page."""
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        """Check if there's a previous page."""
        return self.page > 1


# ============================================================================
# Pipeline steps
# ============================================================================


def validate_query(params: ProductQuery, max_page_size: int | None = None) -> SortKey:
    """Reject malformed query parameters before any filtering.

    Args:
        params: Query parameters.
        max_page_size: Optional upper bound on page size.

    Returns:
        The parsed sort key.

    Raises:
        InvalidPaginationError: If page < 1, page_size <= 0 or page_size
            exceeds max_page_size.
        InvalidSortKeyError: If the sort key is unknown.
        InvalidInputError: If neither a category,
            a vendor nor a search query is given.
    """
    if params.page < 1:
        raise InvalidPaginationError(params.page, params.page_size, "page must be >= 1")
    if params.page_size <= 0:
        raise InvalidPaginationError(params.page, params.page_size, "page_size must be > 0")
    if max_page_size is not None and params.page_size > max_page_size:
        raise InvalidPaginationError(
            params.page, params.page_size, f"page_size must be <= {max_page_size}"
        )
    if params.category_id is None and params.vendor_id is None and not params.is_search:
        raise InvalidInputError(
            "A category or vendor is required unless a search query is given",
            details={"category_id": None, "vendor_id": None, "search_query": params.search_query},
        )
    return SortKey.parse(params.sort_key)


def _in_scope(product: Product, params: ProductQuery) -> bool:
    if params.category_id is not None and product.category_id != params.category_id:
        return False
    if params.subcategory_id is not None and product.subcategory_id != params.subcategory_id:
        return False
    if params.vendor_id is not None and product.vendor_id != params.vendor_id:
        return False
    return True


def _matches_text(product: Product, needle: str) -> bool:
    if needle in product.name.lower() or needle in product.description.lower():
        return True
    return any(needle in sku.lower() for sku in product.skus)


def _matches_attributes(product: Product, filters: Mapping[str, frozenset[str]]) -> bool:
    if not isinstance(product, VariantProduct):
        return False
    for key, allowed in filters.items():
        if not any(
            variant.in_stock and variant.combo.get(key) in allowed
            for variant in product.variants
        ):
            return False
    return True


def filter_products(
    products: Iterable[Product],
    params: ProductQuery,
    known_axes: Collection[str] | None = None,
) -> list[Product]:
    """Apply scope, text and attribute filters in order.

    Args:
        products: Candidate products.
        params: Query parameters.
        known_axes: Axis keys valid in this scope. When given, filters on
            any other key are rejected.

    Returns:
        Surviving products in original collection order.

    Raises:
        UnknownFilterKeyError: If a filter key is not in known_axes.
    """
    filters = params.active_filters()
    if known_axes is not None:
        unknown = sorted(key for key in filters if key not in known_axes)
        if unknown:
            raise UnknownFilterKeyError(unknown, sorted(known_axes))

    result = [product for product in products if _in_scope(product, params)]
    if params.is_search:
        needle = params.search_query.lower()  # type: ignore[union-attr]
        result = [product for product in result if _matches_text(product, needle)]
    if filters:
        result = [product for product in result if _matches_attributes(product, filters)]
    return result


def build_facets(
    products: Iterable[Product],
    matrices: Mapping[str, VariantMatrix] | None = None,
) -> list[Facet]:
    """Count every (key, value) pair across all variants of the products.

    Variant stock is not considered: facets describe what the filtered
    products are made of, not what is buyable.

    Args:
        products: Filtered products.
        matrices: Subcategory id -> matrix. When given, each variant combo
            is checked against its product's matrix before counting.

    Returns:
        One facet per key, keys and values in first-seen order.

    Raises:
        IncompleteComboError: If a combo does not fit its matrix.
    """
    counts: dict[str, dict[str, int]] = {}
    for product in products:
        if not isinstance(product, VariantProduct):
            continue
        matrix = matrices.get(product.subcategory_id) if matrices is not None else None
        for variant in product.variants:
            if matrix is not None:
                matrix.check_combo(variant.combo)
            for key, value in variant.combo.items():
                per_key = counts.setdefault(key, {})
                per_key[value] = per_key.get(value, 0) + 1
    return [
        Facet(key=key, values=tuple(per_key), counts=dict(per_key))
        for key, per_key in counts.items()
    ]


def sort_products(products: Sequence[Product], sort_key: SortKey) -> list[Product]:
    """Order products; ties keep collection order."""
    if sort_key is SortKey.PRICE_ASC:
        return sorted(products, key=lambda p: p.min_price)
    if sort_key is SortKey.PRICE_DESC:
        return sorted(products, key=lambda p: p.min_price, reverse=True)
    return sorted(products, key=lambda p: p.created_at, reverse=True)


def summarize(
    product: Product,
    vendors: Mapping[str, Vendor] | None = None,
    now: datetime | None = None,
    unknown_vendor_name: str = UNKNOWN_VENDOR,
) -> ProductSummary:
    """Project a product into its card summary."""
    vendor = vendors.get(product.vendor_id) if vendors is not None else None
    return ProductSummary(
        id=product.id,
        name=product.name,
        slug=product.slug,
        vendor_name=vendor.name if vendor is not None else unknown_vendor_name,
        min_price=product.min_price,
        max_price=product.max_price,
        default_image=product.default_image,
        in_stock=product.in_stock,
        has_variants=product.has_variants,
        base_price=product.base_price if isinstance(product, SimpleProduct) else None,
        flash_sale=product.flash_sale,
        flash_sale_active=is_flash_sale_active(product.flash_sale, now),
    )


# ============================================================================
# Query
# ============================================================================


def query(
    products: Iterable[Product],
    params: ProductQuery,
    vendors: Mapping[str, Vendor] | None = None,
    matrices: Mapping[str, VariantMatrix] | None = None,
    known_axes: Collection[str] | None = None,
    max_page_size: int | None = None,
    unknown_vendor_name: str = UNKNOWN_VENDOR,
    now: datetime | None = None,
) -> QueryResult:
    """Run a faceted product query.

    Steps: scope filter, text filter, attribute filter, facet counting
    over the filtered set, sort, paginate, project.

    Args:
        products: Product collection to query.
        params: Filter, sort and pagination parameters.
        vendors: Vendor id -> vendor, for vendor names in summaries.
        matrices: Subcategory id -> matrix, for combo integrity checks.
        known_axes: Axis keys that filters may reference.
        max_page_size: Optional upper bound on page size.
        unknown_vendor_name: Vendor name used when a vendor is missing.
        now: Instant used for flash-sale state (defaults to now).

    Returns:
        QueryResult; an out-of-range page has no items but keeps the
        correct total_count.

    Raises:
        InvalidInputError: On malformed parameters.
        InconsistentCatalogDataError: On combos that do not fit their matrix.
    """
    sort_key = validate_query(params, max_page_size)
    filtered = filter_products(products, params, known_axes)
    facets = build_facets(filtered, matrices)
    ordered = sort_products(filtered, sort_key)
    page = ordered[params.offset : params.offset + params.limit]
    return QueryResult(
        items=[summarize(p, vendors, now, unknown_vendor_name) for p in page],
        facets=facets,
        total_count=len(filtered),
        page=params.page,
        page_size=params.page_size,
    )
