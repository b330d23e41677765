"""Point-in-time catalog snapshot.

A ``CatalogSnapshot`` is built once from catalog records, checked for
integrity, indexed by id and slug, and never modified afterwards. New
catalog data means a new snapshot, so concurrent readers never observe a
half-written product.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

import structlog

from multimart.domain.entities import (
    Category,
    Product,
    Subcategory,
    VariantProduct,
    Vendor,
)
from multimart.domain.exceptions import (
    CategoryNotFoundError,
    InconsistentCatalogDataError,
    ProductNotFoundError,
    SubcategoryNotFoundError,
    VendorNotFoundError,
)
from multimart.domain.value_objects import VariantMatrix

logger = structlog.get_logger()


def _index_unique(records: Iterable, kind: str) -> dict:
    index = {}
    for record in records:
        if record.id in index:
            raise InconsistentCatalogDataError(
                f"Duplicate {kind} id: {record.id}",
                details={"entity_type": kind, "id": record.id},
            )
        index[record.id] = record
    return index


class CatalogSnapshot:
    """Immutable, validated view of the catalog.

    Example usage:
        snapshot = CatalogSnapshot(
            vendors=vendors,
            categories=categories,
            subcategories=subcategories,
            products=products,
        )
        product = snapshot.lookup_by_slug("galaxy-pro-max")
        matrix = snapshot.matrix_for(product)
    """

    def __init__(
        self,
        categories: Iterable[Category],
        subcategories: Iterable[Subcategory],
        products: Iterable[Product],
        vendors: Iterable[Vendor] = (),
        published_at: datetime | None = None,
    ) -> None:
        """Build and validate a snapshot.

        Args:
            categories: All categories.
            subcategories: All subcategories.
            products: All products.
            vendors: All vendors.
            published_at: When the catalog owner published this data.

        Raises:
            InconsistentCatalogDataError: If records reference unknown
                parents, collide on id or slug, or carry variant combos
                that do not fit their subcategory's matrix.
        """
        self.published_at = published_at or datetime.now(timezone.utc)
        self._vendors: dict[str, Vendor] = _index_unique(vendors, "Vendor")
        self._categories: dict[str, Category] = _index_unique(categories, "Category")
        self._subcategories: dict[str, Subcategory] = _index_unique(
            subcategories, "Subcategory"
        )
        self._products: dict[str, Product] = _index_unique(products, "Product")

        self._categories_by_slug = {c.slug: c for c in self._categories.values()}
        self._subcategories_by_slug = {
            (s.category_id, s.slug): s for s in self._subcategories.values()
        }
        self._products_by_slug: dict[str, Product] = {}

        for subcategory in self._subcategories.values():
            if subcategory.category_id not in self._categories:
                raise InconsistentCatalogDataError(
                    f"Subcategory {subcategory.id} references unknown category "
                    f"{subcategory.category_id}",
                    details={
                        "subcategory_id": subcategory.id,
                        "category_id": subcategory.category_id,
                    },
                )
        for product in self._products.values():
            self._check_product(product)
            self._products_by_slug[product.slug] = product

        logger.info(
            "Catalog snapshot built",
            vendors=len(self._vendors),
            categories=len(self._categories),
            subcategories=len(self._subcategories),
            products=len(self._products),
            published_at=self.published_at.isoformat(),
        )

    def _check_product(self, product: Product) -> None:
        if product.slug in self._products_by_slug:
            raise InconsistentCatalogDataError(
                f"Duplicate product slug: {product.slug}",
                details={"product_id": product.id, "slug": product.slug},
            )
        subcategory = self._subcategories.get(product.subcategory_id)
        if product.category_id not in self._categories or subcategory is None:
            raise InconsistentCatalogDataError(
                f"Product {product.id} references unknown category or subcategory",
                details={
                    "product_id": product.id,
                    "category_id": product.category_id,
                    "subcategory_id": product.subcategory_id,
                },
            )
        if subcategory.category_id != product.category_id:
            raise InconsistentCatalogDataError(
                f"Product {product.id} subcategory {subcategory.id} is not in "
                f"category {product.category_id}",
                details={
                    "product_id": product.id,
                    "category_id": product.category_id,
                    "subcategory_id": subcategory.id,
                },
            )
        if isinstance(product, VariantProduct):
            for variant in product.variants:
                subcategory.variant_matrix.check_combo(variant.combo)
        if product.flash_sale is not None:
            product.flash_sale.validate()

    # ------------------------------------------------------------------
    # Vendors
    # ------------------------------------------------------------------

    @property
    def vendors(self) -> dict[str, Vendor]:
        """Vendor id -> vendor (a copy)."""
        return dict(self._vendors)

    def get_vendor(self, vendor_id: str) -> Vendor:
        """Get vendor by ID.

        Raises:
            VendorNotFoundError: If no vendor has this id.
        """
        try:
            return self._vendors[vendor_id]
        except KeyError:
            raise VendorNotFoundError(vendor_id) from None

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    @property
    def categories(self) -> list[Category]:
        """All categories in insertion order."""
        return list(self._categories.values())

    def get_category(self, category_id: str) -> Category:
        """Get category by ID.

        Raises:
            CategoryNotFoundError: If no category has this id.
        """
        try:
            return self._categories[category_id]
        except KeyError:
            raise CategoryNotFoundError(category_id) from None

    def get_category_by_slug(self, slug: str) -> Category:
        """Get category by slug.

        Raises:
            CategoryNotFoundError: If no category has this slug.
        """
        try:
            return self._categories_by_slug[slug]
        except KeyError:
            raise CategoryNotFoundError(slug, "slug") from None

    # ------------------------------------------------------------------
    # Subcategories
    # ------------------------------------------------------------------

    def get_subcategory(self, subcategory_id: str) -> Subcategory:
        """Get subcategory by ID.

        Raises:
            SubcategoryNotFoundError: If no subcategory has this id.
        """
        try:
            return self._subcategories[subcategory_id]
        except KeyError:
            raise SubcategoryNotFoundError(subcategory_id) from None

    def get_subcategory_by_slug(self, category_slug: str, slug: str) -> Subcategory:
        """Get subcategory by its category's slug and its own slug.

        Raises:
            CategoryNotFoundError: If the category slug is unknown.
            SubcategoryNotFoundError: If the category has no such subcategory.
        """
        category = self.get_category_by_slug(category_slug)
        try:
            return self._subcategories_by_slug[(category.id, slug)]
        except KeyError:
            raise SubcategoryNotFoundError(f"{category_slug}/{slug}", "slug") from None

    def subcategories_for(self, category_id: str) -> list[Subcategory]:
        """Subcategories of a category, in insertion order."""
        return [s for s in self._subcategories.values() if s.category_id == category_id]

    @property
    def matrices(self) -> dict[str, VariantMatrix]:
        """Subcategory id -> variant matrix."""
        return {s.id: s.variant_matrix for s in self._subcategories.values()}

    def matrix_for(self, product: Product) -> VariantMatrix:
        """Variant matrix of a product's subcategory."""
        return self.get_subcategory(product.subcategory_id).variant_matrix

    def axis_keys(
        self,
        category_id: str | None = None,
        subcategory_id: str | None = None,
    ) -> set[str]:
        """Axis keys defined by the subcategories in a scope.

        Args:
            category_id: Restrict to one category (None = whole catalog).
            subcategory_id: Restrict to one subcategory.

        Returns:
            Union of axis keys of the matching subcategories' matrices.
        """
        keys: set[str] = set()
        for subcategory in self._subcategories.values():
            if category_id is not None and subcategory.category_id != category_id:
                continue
            if subcategory_id is not None and subcategory.id != subcategory_id:
                continue
            keys.update(subcategory.variant_matrix.axis_keys)
        return keys

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    @property
    def products(self) -> list[Product]:
        """All products in insertion order."""
        return list(self._products.values())

    def get_product(self, product_id: str) -> Product:
        """Get product by ID.

        Raises:
            ProductNotFoundError: If no product has this id.
        """
        try:
            return self._products[product_id]
        except KeyError:
            raise ProductNotFoundError(product_id) from None

    def lookup_by_slug(self, slug: str) -> Product:
        """Get product by slug.

        Raises:
            ProductNotFoundError: If no product has this slug.
        """
        try:
            return self._products_by_slug[slug]
        except KeyError:
            raise ProductNotFoundError(slug, "slug") from None

    def lookup_by_category(
        self,
        category_id: str,
        subcategory_id: str | None = None,
    ) -> list[Product]:
        """Products in a category (and optionally a subcategory).

        Raises:
            CategoryNotFoundError: If the category is unknown.
            SubcategoryNotFoundError: If the subcategory is unknown.
        """
        self.get_category(category_id)
        if subcategory_id is not None:
            self.get_subcategory(subcategory_id)
        return [
            p
            for p in self._products.values()
            if p.category_id == category_id
            and (subcategory_id is None or p.subcategory_id == subcategory_id)
        ]

    def products_for_vendor(self, vendor_id: str) -> list[Product]:
        """Products sold by a vendor, in insertion order."""
        return [p for p in self._products.values() if p.vendor_id == vendor_id]
