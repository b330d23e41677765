"""Catalog service for presentation-layer operations.

High-level facade over the current catalog snapshot and the pure engines.
Every call returns a ``ServiceResult``: domain errors are reported as
explicit failures, never raised to the caller.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Generic, TypeVar

import structlog

from multimart.catalog.schemas import (
    CategorySchema,
    ErrorInfo,
    FlashSaleSchema,
    PriceQuoteSchema,
    ProductDetailSchema,
    ProductPageResponse,
    SubcategorySchema,
    VariantResolutionSchema,
)
from multimart.catalog.snapshot import CatalogSnapshot
from multimart.domain.entities import VariantProduct
from multimart.domain.exceptions import (
    DomainError,
    InconsistentCatalogDataError,
    VariantNotFoundError,
)
from multimart.domain.value_objects import VariantMatrix
from multimart.engine.faceted_query import ProductQuery, SortKey, query, summarize
from multimart.engine.pricing import display_base_price, effective_price, is_flash_sale_active
from multimart.engine.variant_resolver import resolve
from multimart.infrastructure.config import Settings, settings as default_settings

T = TypeVar("T")

logger = structlog.get_logger()


# ============================================================================
# Service Result Type
# ============================================================================


@dataclass
class ServiceResult(Generic[T]):
    """Result of a catalog service call."""

    value: T | None = None
    success: bool = True
    error: ErrorInfo | None = None

    @classmethod
    def ok(cls, value: T) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: DomainError) -> "ServiceResult[T]":
        return cls(success=False, error=ErrorInfo.from_error(error))


# ============================================================================
# Catalog Service
# ============================================================================


class CatalogService:
    """Presentation-facing operations over a catalog snapshot.

    The snapshot is replaced wholesale with ``publish``; each call reads
    the snapshot reference once, so a call never mixes two snapshots.

    Example usage:
        service = CatalogService(load_snapshot(payload))

        page = service.browse_category(
            "clothing",
            filters={"color": ["Red"]},
            sort_key="price-asc",
        )
        if page.success:
            print(page.value.total, [p.name for p in page.value.items])

        picker = service.resolve_variant("classic-tee", {"size": "S"})
        print(picker.value.disabled_values)
    """

    def __init__(
        self,
        snapshot: CatalogSnapshot,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            snapshot: Catalog snapshot to serve.
            settings: Engine settings (defaults to environment settings).
            clock: Source of the current time, for flash-sale state.
            request_id: Request ID for log correlation.
        """
        self._snapshot = snapshot
        self.settings = settings or default_settings
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.request_id = request_id

    @property
    def snapshot(self) -> CatalogSnapshot:
        """The snapshot currently served."""
        return self._snapshot

    def publish(self, snapshot: CatalogSnapshot) -> None:
        """Swap in a newer snapshot."""
        self._snapshot = snapshot
        logger.info(
            "Catalog snapshot published",
            products=len(snapshot.products),
            published_at=snapshot.published_at.isoformat(),
            request_id=self.request_id,
        )

    def _run(self, operation: str, call: Callable[[], T], **context: object) -> ServiceResult[T]:
        try:
            return ServiceResult.ok(call())
        except InconsistentCatalogDataError as e:
            logger.error(
                "Catalog data integrity violation",
                operation=operation,
                error_code=e.error_code,
                error=e.message,
                details=e.details,
                request_id=self.request_id,
                **context,
            )
            return ServiceResult.fail(e)
        except DomainError as e:
            logger.warning(
                "Catalog request rejected",
                operation=operation,
                error_code=e.error_code,
                error=e.message,
                request_id=self.request_id,
                **context,
            )
            return ServiceResult.fail(e)

    # ------------------------------------------------------------------
    # Taxonomy
    # ------------------------------------------------------------------

    def list_categories(self) -> ServiceResult[list[CategorySchema]]:
        """List all categories."""
        snapshot = self._snapshot
        return self._run(
            "list_categories",
            lambda: [CategorySchema.from_category(c) for c in snapshot.categories],
        )

    def list_subcategories(self, category_slug: str) -> ServiceResult[list[SubcategorySchema]]:
        """List subcategories of a category, with their variant matrices."""
        snapshot = self._snapshot

        def call() -> list[SubcategorySchema]:
            category = snapshot.get_category_by_slug(category_slug)
            return [
                SubcategorySchema.from_subcategory(s)
                for s in snapshot.subcategories_for(category.id)
            ]

        return self._run("list_subcategories", call, category_slug=category_slug)

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def _query(self, snapshot: CatalogSnapshot, params: ProductQuery) -> ProductPageResponse:
        known_axes = (
            snapshot.axis_keys(params.category_id, params.subcategory_id)
            if self.settings.strict_filters
            else None
        )
        result = query(
            snapshot.products,
            params,
            vendors=snapshot.vendors,
            matrices=snapshot.matrices,
            known_axes=known_axes,
            max_page_size=self.settings.max_page_size,
            unknown_vendor_name=self.settings.unknown_vendor_name,
            now=self.clock(),
        )
        logger.info(
            "Catalog query executed",
            category_id=params.category_id,
            subcategory_id=params.subcategory_id,
            vendor_id=params.vendor_id,
            search_query=params.search_query,
            filters={k: sorted(v) for k, v in params.active_filters().items()},
            sort_key=SortKey.parse(params.sort_key).value,
            page=params.page,
            total=result.total_count,
            request_id=self.request_id,
        )
        return ProductPageResponse.from_result(result)

    def browse_category(
        self,
        category_slug: str,
        subcategory_slug: str | None = None,
        filters: Mapping[str, Iterable[str]] | None = None,
        sort_key: SortKey | str = SortKey.NEWEST,
        page: int = 1,
        page_size: int | None = None,
    ) -> ServiceResult[ProductPageResponse]:
        """Faceted listing of a category or subcategory.

        Args:
            category_slug: Category slug.
            subcategory_slug: Optional subcategory slug within the category.
            filters: Axis key -> allowed values.
            sort_key: "price-asc", "price-desc" or "newest".
            page: Page number (1-indexed).
            page_size: Items per page (defaults to settings).

        Returns:
            ServiceResult with a ProductPageResponse.
        """
        snapshot = self._snapshot

        def call() -> ProductPageResponse:
            category = snapshot.get_category_by_slug(category_slug)
            subcategory = (
                snapshot.get_subcategory_by_slug(category_slug, subcategory_slug)
                if subcategory_slug
                else None
            )
            params = ProductQuery(
                category_id=category.id,
                subcategory_id=subcategory.id if subcategory else None,
                attribute_filters=dict(filters or {}),
                sort_key=sort_key,
                page=page,
                page_size=page_size or self.settings.default_page_size,
            )
            return self._query(snapshot, params)

        return self._run(
            "browse_category",
            call,
            category_slug=category_slug,
            subcategory_slug=subcategory_slug,
        )

    def search(
        self,
        search_query: str,
        category_slug: str | None = None,
        filters: Mapping[str, Iterable[str]] | None = None,
        sort_key: SortKey | str = SortKey.NEWEST,
        page: int = 1,
        page_size: int | None = None,
    ) -> ServiceResult[ProductPageResponse]:
        """Free-text search, across the catalog or within a category.

        Args:
            search_query: Text matched against names, descriptions and SKUs.
            category_slug: Optional category scope.
            filters: Axis key -> allowed values.
            sort_key: "price-asc", "price-desc" or "newest".
            page: Page number (1-indexed).
            page_size: Items per page (defaults to settings).

        Returns:
            ServiceResult with a ProductPageResponse.
        """
        snapshot = self._snapshot

        def call() -> ProductPageResponse:
            category_id = (
                snapshot.get_category_by_slug(category_slug).id if category_slug else None
            )
            params = ProductQuery(
                category_id=category_id,
                attribute_filters=dict(filters or {}),
                search_query=search_query,
                sort_key=sort_key,
                page=page,
                page_size=page_size or self.settings.default_page_size,
            )
            return self._query(snapshot, params)

        return self._run("search", call, search_query=search_query)

    def vendor_products(
        self,
        vendor_id: str,
        sort_key: SortKey | str = SortKey.NEWEST,
        page: int = 1,
        page_size: int | None = None,
    ) -> ServiceResult[ProductPageResponse]:
        """List a vendor's products across all categories, newest first by default."""
        snapshot = self._snapshot

        def call() -> ProductPageResponse:
            vendor = snapshot.get_vendor(vendor_id)
            params = ProductQuery(
                vendor_id=vendor.id,
                sort_key=sort_key,
                page=page,
                page_size=page_size or self.settings.default_page_size,
            )
            return self._query(snapshot, params)

        return self._run("vendor_products", call, vendor_id=vendor_id)

    # ------------------------------------------------------------------
    # Product page
    # ------------------------------------------------------------------

    def get_product_detail(self, product_slug: str) -> ServiceResult[ProductDetailSchema]:
        """Product page data: card fields plus description, attributes and variants."""
        snapshot = self._snapshot

        def call() -> ProductDetailSchema:
            product = snapshot.lookup_by_slug(product_slug)
            summary = summarize(
                product,
                snapshot.vendors,
                self.clock(),
                self.settings.unknown_vendor_name,
            )
            return ProductDetailSchema.from_product(product, summary, snapshot.matrix_for(product))

        return self._run("get_product_detail", call, product_slug=product_slug)

    def resolve_variant(
        self,
        product_slug: str,
        selection: Mapping[str, str] | None = None,
    ) -> ServiceResult[VariantResolutionSchema]:
        """Variant picker state for a buyer's partial selection.

        Args:
            product_slug: Product slug.
            selection: Axis key -> chosen value.

        Returns:
            ServiceResult with the matched variant (when the selection is
            complete) and the disabled values per axis. Simple products
            resolve vacuously complete.
        """
        snapshot = self._snapshot

        def call() -> VariantResolutionSchema:
            product = snapshot.lookup_by_slug(product_slug)
            if not isinstance(product, VariantProduct):
                matrix = VariantMatrix()
                resolution = resolve(matrix, (), selection)
            else:
                matrix = snapshot.matrix_for(product)
                resolution = resolve(matrix, product.variants, selection)
            logger.debug(
                "Variant selection resolved",
                product_id=product.id,
                selection=resolution.selection.as_dict(),
                is_complete=resolution.is_complete,
                matched_sku=(
                    resolution.matched_variant.sku
                    if resolution.matched_variant is not None
                    else None
                ),
                request_id=self.request_id,
            )
            return VariantResolutionSchema.from_resolution(product.id, resolution, matrix)

        return self._run("resolve_variant", call, product_slug=product_slug)

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    def price_for(
        self,
        product_slug: str,
        sku: str | None = None,
        now: datetime | None = None,
    ) -> ServiceResult[PriceQuoteSchema]:
        """Quote the base and flash-sale price of a product or variant.

        Args:
            product_slug: Product slug.
            sku: Variant SKU (or a simple product's own SKU).
            now: Instant to price at (defaults to the service clock).

        Returns:
            ServiceResult with a PriceQuoteSchema. Without a SKU, a
            product whose variants differ in price quotes no single base
            price, only the min/max range.
        """
        snapshot = self._snapshot

        def call() -> PriceQuoteSchema:
            product = snapshot.lookup_by_slug(product_slug)
            moment = now or self.clock()
            variant = None
            if sku is not None:
                if isinstance(product, VariantProduct):
                    variant = product.find_variant(sku)
                    if variant is None:
                        raise VariantNotFoundError(product.id, sku)
                elif sku != product.base_sku:
                    raise VariantNotFoundError(product.id, sku)

            base = display_base_price(product, variant)
            flash_sale = product.flash_sale
            return PriceQuoteSchema(
                product_id=product.id,
                sku=sku,
                base_price=base,
                effective_price=(
                    effective_price(base, flash_sale, moment) if base is not None else None
                ),
                min_price=product.min_price,
                max_price=product.max_price,
                flash_sale_active=is_flash_sale_active(flash_sale, moment),
                flash_sale=(
                    FlashSaleSchema.from_flash_sale(flash_sale) if flash_sale is not None else None
                ),
                quoted_at=moment,
            )

        return self._run("price_for", call, product_slug=product_slug, sku=sku)
