"""Catalog snapshot loader.

The catalog owner publishes plain structured data (dicts and lists, as
decoded from JSON). These pydantic records validate that payload and
convert it into domain objects. Both snake_case and camelCase keys are
accepted, and ``_id`` is accepted for ids. Stored aggregates such as
``minPrice`` or ``inStock`` are ignored; they are always re-derived.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from multimart.catalog.snapshot import CatalogSnapshot
from multimart.domain.entities import (
    Category,
    Product,
    SimpleProduct,
    Subcategory,
    Variant,
    VariantProduct,
    Vendor,
)
from multimart.domain.exceptions import InconsistentCatalogDataError
from multimart.domain.value_objects import (
    AttributeTemplate,
    AttributeType,
    DiscountType,
    FlashSale,
    ProductAttribute,
    ProductSEO,
    VariantAxis,
    VariantMatrix,
)


class Record(BaseModel):
    """Base for catalog payload records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _id_field() -> Any:
    return Field(..., validation_alias=AliasChoices("id", "_id"))


# ============================================================================
# Records
# ============================================================================


class VendorRecord(Record):
    id: str = _id_field()
    name: str
    slug: str
    email: str = ""
    verified: bool = False

    def to_domain(self) -> Vendor:
        return Vendor(
            id=self.id,
            name=self.name,
            slug=self.slug,
            email=self.email,
            verified=self.verified,
        )


class CategoryRecord(Record):
    id: str = _id_field()
    name: str
    slug: str
    image: str = ""

    def to_domain(self) -> Category:
        return Category(id=self.id, name=self.name, slug=self.slug, image=self.image)


class AxisRecord(Record):
    key: str
    label: str
    values: list[str] = Field(default_factory=list)


class MatrixRecord(Record):
    axes: list[AxisRecord] = Field(default_factory=list)

    def to_domain(self) -> VariantMatrix:
        return VariantMatrix(
            axes=tuple(
                VariantAxis(key=a.key, label=a.label, values=tuple(a.values))
                for a in self.axes
            )
        )


class AttributeTemplateRecord(Record):
    key: str
    label: str
    type: AttributeType = AttributeType.TEXT
    options: list[str] = Field(default_factory=list)
    required: bool = False
    unit: str | None = None


class SubcategoryRecord(Record):
    id: str = _id_field()
    category_id: str
    name: str
    slug: str
    variant_matrix: MatrixRecord = Field(default_factory=MatrixRecord)
    attribute_templates: list[AttributeTemplateRecord] = Field(default_factory=list)

    def to_domain(self) -> Subcategory:
        return Subcategory(
            id=self.id,
            category_id=self.category_id,
            name=self.name,
            slug=self.slug,
            variant_matrix=self.variant_matrix.to_domain(),
            attribute_templates=tuple(
                AttributeTemplate(
                    key=t.key,
                    label=t.label,
                    type=t.type,
                    options=tuple(t.options),
                    required=t.required,
                    unit=t.unit,
                )
                for t in self.attribute_templates
            ),
        )


class VariantRecord(Record):
    combo: dict[str, str]
    sku: str
    price: Decimal
    stock: int = 0
    images: list[str] = Field(default_factory=list)


class FlashSaleRecord(Record):
    discount_type: DiscountType
    discount_value: Decimal
    start_date: datetime
    end_date: datetime
    stock_limit: int | None = None
    sold_count: int | None = None
    is_active: bool = True

    def to_domain(self) -> FlashSale:
        return FlashSale(
            discount_type=self.discount_type,
            discount_value=self.discount_value,
            start_date=self.start_date,
            end_date=self.end_date,
            stock_limit=self.stock_limit,
            sold_count=self.sold_count or 0,
            is_enabled=self.is_active,
        )


class AttributeRecord(Record):
    key: str
    value: str


class SEORecord(Record):
    title: str = ""
    description: str = ""
    keywords: list[str] = Field(default_factory=list)


class ProductRecord(Record):
    id: str = _id_field()
    vendor_id: str
    category_id: str
    subcategory_id: str
    name: str
    slug: str
    description: str = ""
    default_image: str = ""
    attributes: list[AttributeRecord] = Field(default_factory=list)
    seo: SEORecord | None = None
    has_variants: bool | None = None
    base_price: Decimal | None = None
    base_stock: int | None = None
    base_sku: str | None = None
    variants: list[VariantRecord] = Field(default_factory=list)
    flash_sale: FlashSaleRecord | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_domain(self, matrix: VariantMatrix) -> Product:
        """Convert to the matching product shape.

        Args:
            matrix: Variant matrix of the product's subcategory.

        Raises:
            InconsistentCatalogDataError: If the record mixes shapes or
                its variant combos do not fit the matrix.
        """
        common: dict[str, Any] = {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "category_id": self.category_id,
            "subcategory_id": self.subcategory_id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "default_image": self.default_image,
            "attributes": tuple(ProductAttribute(key=a.key, value=a.value) for a in self.attributes),
            "seo": (
                ProductSEO(
                    title=self.seo.title,
                    description=self.seo.description,
                    keywords=tuple(self.seo.keywords),
                )
                if self.seo is not None
                else None
            ),
            "flash_sale": self.flash_sale.to_domain() if self.flash_sale else None,
        }
        if self.created_at is not None:
            common["created_at"] = self.created_at
        if self.updated_at is not None:
            common["updated_at"] = self.updated_at

        has_variants = bool(self.variants) if self.has_variants is None else self.has_variants
        if has_variants:
            return VariantProduct(
                **common,
                variants=tuple(
                    Variant(
                        combo=matrix.combo(v.combo),
                        sku=v.sku,
                        price=v.price,
                        stock=v.stock,
                        images=tuple(v.images),
                    )
                    for v in self.variants
                ),
            )
        if self.variants:
            raise InconsistentCatalogDataError(
                f"Simple product {self.id} carries variants",
                details={"product_id": self.id},
            )
        if self.base_price is None:
            raise InconsistentCatalogDataError(
                f"Simple product {self.id} has no base price",
                details={"product_id": self.id},
            )
        return SimpleProduct(
            **common,
            base_price=self.base_price,
            base_stock=self.base_stock or 0,
            base_sku=self.base_sku,
        )


class CatalogPayload(Record):
    """Full catalog as published by the catalog owner."""

    vendors: list[VendorRecord] = Field(default_factory=list)
    categories: list[CategoryRecord] = Field(default_factory=list)
    subcategories: list[SubcategoryRecord] = Field(default_factory=list)
    products: list[ProductRecord] = Field(default_factory=list)


# ============================================================================
# Loader
# ============================================================================


def load_snapshot(payload: dict[str, Any], published_at: datetime | None = None) -> CatalogSnapshot:
    """Validate a catalog payload and build a snapshot from it.

    Args:
        payload: Plain catalog data with ``vendors``, ``categories``,
            ``subcategories`` and ``products`` lists.
        published_at: When the catalog owner published the data.

    Returns:
        Validated CatalogSnapshot.

    Raises:
        InconsistentCatalogDataError: If the payload is malformed or
            violates a catalog invariant.
    """
    try:
        data = CatalogPayload.model_validate(payload)
    except ValidationError as e:
        raise InconsistentCatalogDataError(
            "Catalog payload failed validation",
            details={
                "errors": e.errors(
                    include_url=False, include_context=False, include_input=False
                )
            },
        ) from e

    subcategories = [record.to_domain() for record in data.subcategories]
    matrices = {s.id: s.variant_matrix for s in subcategories}
    products = []
    for record in data.products:
        if record.subcategory_id not in matrices:
            raise InconsistentCatalogDataError(
                f"Product {record.id} references unknown subcategory {record.subcategory_id}",
                details={"product_id": record.id, "subcategory_id": record.subcategory_id},
            )
        products.append(record.to_domain(matrices[record.subcategory_id]))

    return CatalogSnapshot(
        vendors=[record.to_domain() for record in data.vendors],
        categories=[record.to_domain() for record in data.categories],
        subcategories=subcategories,
        products=products,
        published_at=published_at,
    )
