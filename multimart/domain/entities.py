"""Domain entities for the catalog.

Entities are catalog records with identity: vendors, categories,
subcategories and products. Products come in two mutually exclusive
shapes, ``SimpleProduct`` and ``VariantProduct``; their price and stock
aggregates are always derived from source fields by ``derive_aggregates``.
"""

from abc import abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from functools import cached_property
from typing import ClassVar

from multimart.domain.base import Entity, ValueObject
from multimart.domain.exceptions import (
    DuplicateComboError,
    DuplicateSkuError,
    InconsistentCatalogDataError,
    InvalidVariantError,
)
from multimart.domain.value_objects import (
    AttributeTemplate,
    FlashSale,
    ProductAttribute,
    ProductSEO,
    VariantCombo,
    VariantMatrix,
    ensure_utc,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Vendor, Category, Subcategory
# ============================================================================


@dataclass(frozen=True, eq=False, kw_only=True)
class Vendor(Entity[str]):
    """A seller on the marketplace.

    Attributes:
        id: Vendor identifier.
        name: Display name shown on product cards.
        slug: URL slug.
        email: Contact address.
        verified: Whether the marketplace verified the vendor.
    """

    name: str
    slug: str
    email: str = ""
    verified: bool = False


@dataclass(frozen=True, eq=False, kw_only=True)
class Category(Entity[str]):
    """Top-level catalog category (e.g., "Electronics")."""

    name: str
    slug: str
    image: str = ""


@dataclass(frozen=True, eq=False, kw_only=True)
class Subcategory(Entity[str]):
    """A category subdivision that owns a variant matrix.

    Attributes:
        id: Subcategory identifier.
        category_id: Parent category.
        name: Display name.
        slug: URL slug, unique within the parent category.
        variant_matrix: Axes that generate purchasable variants.
        attribute_templates: Specification fields vendors fill in.
    """

    category_id: str
    name: str
    slug: str
    variant_matrix: VariantMatrix = field(default_factory=VariantMatrix)
    attribute_templates: tuple[AttributeTemplate, ...] = ()


# ============================================================================
# Variant
# ============================================================================


@dataclass(frozen=True)
class Variant(ValueObject):
    """One purchasable combination of a variant-bearing product.

    Attributes:
        combo: Axis values identifying this variant.
        sku: Stock keeping unit, unique within the product.
        price: Unit price in currency units.
        stock: Units on hand.
        images: Variant-specific image URLs.
    """

    combo: VariantCombo
    sku: str
    price: Decimal
    stock: int = 0
    images: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate price and stock."""
        object.__setattr__(self, "price", Decimal(str(self.price)))
        object.__setattr__(self, "images", tuple(self.images))
        if self.price < 0:
            raise InvalidVariantError(self.sku, "price cannot be negative")
        if self.stock < 0:
            raise InvalidVariantError(self.sku, "stock cannot be negative")

    @property
    def in_stock(self) -> bool:
        """Check if at least one unit is available."""
        return self.stock > 0


# ============================================================================
# Products
# ============================================================================


@dataclass(frozen=True)
class ProductAggregates(ValueObject):
    """Price and stock figures derived from a product's source fields."""

    min_price: Decimal
    max_price: Decimal
    total_stock: int

    @property
    def in_stock(self) -> bool:
        return self.total_stock > 0


@dataclass(frozen=True, eq=False, kw_only=True)
class BaseProduct(Entity[str]):
    """Fields shared by simple and variant-bearing products.

    Abstract: only SimpleProduct and VariantProduct are instantiated.

    Attributes:
        id: Product identifier.
        vendor_id: Selling vendor.
        category_id: Owning category.
        subcategory_id: Owning subcategory (defines the variant matrix).
        name: Product name.
        slug: URL slug, unique across the catalog.
        description: Long description.
        default_image: Image shown on product cards.
        attributes: Specification values.
        seo: Search engine metadata.
        flash_sale: Optional promotional discount.
        created_at: When the product was listed.
        updated_at: Last edit.
    """

    has_variants: ClassVar[bool] = False

    vendor_id: str
    category_id: str
    subcategory_id: str
    name: str
    slug: str
    description: str = ""
    default_image: str = ""
    attributes: tuple[ProductAttribute, ...] = ()
    seo: ProductSEO | None = None
    flash_sale: FlashSale | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        object.__setattr__(self, "created_at", ensure_utc(self.created_at))
        object.__setattr__(self, "updated_at", ensure_utc(self.updated_at))
        object.__setattr__(self, "attributes", tuple(self.attributes))

    @cached_property
    def aggregates(self) -> ProductAggregates:
        """Derived price and stock figures."""
        return derive_aggregates(self)  # type: ignore[arg-type]

    @property
    def min_price(self) -> Decimal:
        return self.aggregates.min_price

    @property
    def max_price(self) -> Decimal:
        return self.aggregates.max_price

    @property
    def total_stock(self) -> int:
        return self.aggregates.total_stock

    @property
    def in_stock(self) -> bool:
        return self.aggregates.in_stock

    @property
    @abstractmethod
    def skus(self) -> tuple[str, ...]:
        """All SKUs sold under this product."""


@dataclass(frozen=True, eq=False, kw_only=True)
class SimpleProduct(BaseProduct):
    """A product sold as a single SKU, with no variants.

    Attributes:
        base_price: Unit price.
        base_stock: Units on hand.
        base_sku: Optional SKU.
    """

    base_price: Decimal
    base_stock: int = 0
    base_sku: str | None = None

    def __post_init__(self) -> None:
        """Validate base price and stock."""
        super().__post_init__()
        object.__setattr__(self, "base_price", Decimal(str(self.base_price)))
        if self.base_price < 0:
            raise InvalidVariantError(self.base_sku or self.id, "price cannot be negative")
        if self.base_stock < 0:
            raise InvalidVariantError(self.base_sku or self.id, "stock cannot be negative")

    @property
    def skus(self) -> tuple[str, ...]:
        return (self.base_sku,) if self.base_sku else ()


@dataclass(frozen=True, eq=False, kw_only=True)
class VariantProduct(BaseProduct):
    """A product sold as a matrix of variants.

    Combos must be complete with respect to the subcategory's matrix;
    that check needs the matrix and is done by the catalog snapshot.
    Within the product, combos and SKUs must be unique.

    Attributes:
        variants: Purchasable variants (never empty).
    """

    has_variants: ClassVar[bool] = True

    variants: tuple[Variant, ...]

    def __post_init__(self) -> None:
        """Validate variant uniqueness."""
        super().__post_init__()
        object.__setattr__(self, "variants", tuple(self.variants))
        if not self.variants:
            raise InconsistentCatalogDataError(
                f"Variant product {self.id} has no variants",
                details={"product_id": self.id},
            )
        combos: set[VariantCombo] = set()
        skus: set[str] = set()
        for variant in self.variants:
            if variant.combo in combos:
                raise DuplicateComboError(self.id, variant.combo.as_dict())
            if variant.sku in skus:
                raise DuplicateSkuError(self.id, variant.sku)
            combos.add(variant.combo)
            skus.add(variant.sku)

    @property
    def skus(self) -> tuple[str, ...]:
        return tuple(variant.sku for variant in self.variants)

    @property
    def variant_values(self) -> dict[str, list[str]]:
        """Axis key -> values present among variants, first-seen order."""
        values: dict[str, list[str]] = {}
        for variant in self.variants:
            for key, value in variant.combo.items():
                seen = values.setdefault(key, [])
                if value not in seen:
                    seen.append(value)
        return values

    def find_variant(self, sku: str) -> Variant | None:
        """Get a variant by SKU.

        Args:
            sku: Variant SKU.

        Returns:
            The variant, or None if the product has no such SKU.
        """
        for variant in self.variants:
            if variant.sku == sku:
                return variant
        return None


Product = SimpleProduct | VariantProduct


def derive_aggregates(product: Product) -> ProductAggregates:
    """Compute min/max price and total stock from a product's source fields.

    This is the only place the aggregates are computed.

    Args:
        product: Simple or variant-bearing product.

    Returns:
        Derived aggregates.
    """
    if isinstance(product, SimpleProduct):
        return ProductAggregates(
            min_price=product.base_price,
            max_price=product.base_price,
            total_stock=product.base_stock,
        )
    prices = [variant.price for variant in product.variants]
    return ProductAggregates(
        min_price=min(prices),
        max_price=max(prices),
        total_stock=sum(variant.stock for variant in product.variants),
    )
