"""Domain exceptions.

Three kinds of failure exist in the catalog engine:

- ``NotFoundError``: an unknown category, subcategory, product, vendor or SKU.
- ``InvalidInputError``: the caller sent something malformed (bad paging,
  stale or unknown filter keys, values outside an axis domain).
- ``InconsistentCatalogDataError``: the catalog snapshot itself violates an
  invariant (incomplete combos, duplicate combos, oversold flash sales).

Engines raise these; the catalog service turns them into explicit failed
results so callers never see them as control flow.
"""

from typing import Any, ClassVar


class DomainError(Exception):
    """Base class for all domain exceptions.

    Attributes:
        error_code: Machine-readable code shared by the whole error family.
        message: Human-readable error message.
        details: Additional error context.
    """

    error_code: ClassVar[str] = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Not Found Errors
# ============================================================================


class NotFoundError(DomainError):
    """Base class for lookups of unknown catalog records."""

    error_code: ClassVar[str] = "NOT_FOUND"

    def __init__(self, entity_type: str, key: str, lookup: str = "id") -> None:
        """Initialize not found error.

        Args:
            entity_type: Type of record (e.g., "Category", "Product").
            key: The id or slug that was looked up.
            lookup: Which index was used ("id", "slug", "sku").
        """
        super().__init__(
            f"{entity_type} not found by {lookup}: {key}",
            details={"entity_type": entity_type, "lookup": lookup, "key": key},
        )


class CategoryNotFoundError(NotFoundError):
    """Raised when a category id or slug is unknown."""

    def __init__(self, key: str, lookup: str = "id") -> None:
        super().__init__("Category", key, lookup)


class SubcategoryNotFoundError(NotFoundError):
    """Raised when a subcategory id or slug is unknown."""

    def __init__(self, key: str, lookup: str = "id") -> None:
        super().__init__("Subcategory", key, lookup)


class ProductNotFoundError(NotFoundError):
    """Raised when a product id or slug is unknown."""

    def __init__(self, key: str, lookup: str = "id") -> None:
        super().__init__("Product", key, lookup)


class VendorNotFoundError(NotFoundError):
    """Raised when a vendor id or slug is unknown."""

    def __init__(self, key: str, lookup: str = "id") -> None:
        super().__init__("Vendor", key, lookup)


class VariantNotFoundError(NotFoundError):
    """Raised when a SKU does not belong to the product."""

    def __init__(self, product_id: str, sku: str) -> None:
        super().__init__("Variant", sku, "sku")
        self.details["product_id"] = product_id


# ============================================================================
# Invalid Input Errors
# ============================================================================


class InvalidInputError(DomainError):
    """Base class for malformed caller input.

    Rejected before any computation; the caller must correct and resubmit.
    """

    error_code: ClassVar[str] = "INVALID_INPUT"


class InvalidPaginationError(InvalidInputError):
    """Raised when page or page size is out of bounds."""

    def __init__(self, page: int, page_size: int, reason: str) -> None:
        """Initialize invalid pagination error.

        Args:
            page: Requested page number.
            page_size: Requested page size.
            reason: Explanation of why the request is invalid.
        """
        super().__init__(
            f"Invalid pagination page={page} page_size={page_size}: {reason}",
            details={"page": page, "page_size": page_size, "reason": reason},
        )


class InvalidSortKeyError(InvalidInputError):
    """Raised when the sort key is not one of the supported orderings."""

    def __init__(self, sort_key: str, allowed: list[str]) -> None:
        super().__init__(
            f"Unknown sort key '{sort_key}'. Allowed: {allowed}",
            details={"sort_key": sort_key, "allowed": allowed},
        )


class InvalidSelectionError(InvalidInputError):
    """Raised when a selection names a value outside its axis domain."""

    def __init__(self, axis_key: str, value: str, allowed: list[str]) -> None:
        super().__init__(
            f"Value '{value}' is not in the domain of axis '{axis_key}'",
            details={"axis_key": axis_key, "value": value, "allowed": allowed},
        )


class UnknownFilterKeyError(InvalidInputError):
    """Raised when an attribute filter references no variant axis in scope."""

    def __init__(self, keys: list[str], known: list[str]) -> None:
        super().__init__(
            f"Attribute filters reference unknown axes: {keys}",
            details={"keys": keys, "known_axes": known},
        )


# ============================================================================
# Inconsistent Catalog Data Errors
# ============================================================================


class InconsistentCatalogDataError(DomainError):
    """Base class for integrity violations in the catalog snapshot.

    Not a user error: the snapshot handed to the engine is broken and
    must be fixed (or re-fetched) by the catalog owner.
    """

    error_code: ClassVar[str] = "INCONSISTENT_CATALOG_DATA"


class IncompleteComboError(InconsistentCatalogDataError):
    """Raised when a combo misses axes or carries values outside a domain."""

    def __init__(
        self,
        combo: dict[str, str],
        missing: list[str] | None = None,
        unknown: list[str] | None = None,
        invalid: dict[str, str] | None = None,
    ) -> None:
        """Initialize incomplete combo error.

        Args:
            combo: The offending combo as a plain mapping.
            missing: Axis keys with no value.
            unknown: Keys that are not axes of the matrix.
            invalid: Axis key -> value pairs outside the axis domain.
        """
        super().__init__(
            f"Variant combo {combo} does not match the variant matrix",
            details={
                "combo": combo,
                "missing": missing or [],
                "unknown": unknown or [],
                "invalid": invalid or {},
            },
        )


class DuplicateComboError(InconsistentCatalogDataError):
    """Raised when two variants of one product share a combo."""

    def __init__(self, product_id: str, combo: dict[str, str]) -> None:
        super().__init__(
            f"Product {product_id} has more than one variant for combo {combo}",
            details={"product_id": product_id, "combo": combo},
        )


class DuplicateSkuError(InconsistentCatalogDataError):
    """Raised when two variants of one product share a SKU."""

    def __init__(self, product_id: str, sku: str) -> None:
        super().__init__(
            f"Product {product_id} has duplicate SKU '{sku}'",
            details={"product_id": product_id, "sku": sku},
        )


class InvalidVariantError(InconsistentCatalogDataError):
    """Raised when a variant or product carries a negative price or stock."""

    def __init__(self, sku: str, reason: str) -> None:
        super().__init__(
            f"Invalid variant '{sku}': {reason}",
            details={"sku": sku, "reason": reason},
        )


class FlashSaleOversoldError(InconsistentCatalogDataError):
    """Raised when a flash sale reports more units sold than its limit."""

    def __init__(self, sold_count: int, stock_limit: int) -> None:
        super().__init__(
            f"Flash sale sold {sold_count} units over a limit of {stock_limit}",
            details={"sold_count": sold_count, "stock_limit": stock_limit},
        )


class InvalidFlashSaleWindowError(InconsistentCatalogDataError):
    """Raised when a flash sale ends before it starts."""

    def __init__(self, start_date: str, end_date: str) -> None:
        super().__init__(
            f"Flash sale ends ({end_date}) before it starts ({start_date})",
            details={"start_date": start_date, "end_date": end_date},
        )


class DuplicateAxisKeyError(InconsistentCatalogDataError):
    """Raised when a variant matrix declares the same axis key twice."""

    def __init__(self, axis_key: str) -> None:
        super().__init__(
            f"Duplicate axis key '{axis_key}' in variant matrix",
            details={"axis_key": axis_key},
        )


class InvalidAxisError(InconsistentCatalogDataError):
    """Raised when an axis has a blank key or repeats a value."""

    def __init__(self, axis_key: str, reason: str) -> None:
        super().__init__(
            f"Invalid variant axis '{axis_key}': {reason}",
            details={"axis_key": axis_key, "reason": reason},
        )
