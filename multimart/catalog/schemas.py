"""Output schemas for the catalog service.

Pydantic models that turn engine results into plain structured values.
Dump with ``model_dump(mode="json")`` to get dicts, lists and primitives
ready for any transport the integrator chooses.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from multimart.domain.entities import (
    Category,
    Product,
    SimpleProduct,
    Subcategory,
    Variant,
    VariantProduct,
)
from multimart.domain.exceptions import DomainError
from multimart.domain.value_objects import DiscountType, FlashSale, VariantMatrix
from multimart.engine.faceted_query import Facet, ProductSummary, QueryResult
from multimart.engine.pricing import discount_label, remaining_sale_units
from multimart.engine.variant_resolver import VariantResolution


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorInfo(BaseModel):
    """Standard error payload.

    All failed service calls carry this format.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict, description="Additional error details")

    @classmethod
    def from_error(cls, error: DomainError) -> "ErrorInfo":
        return cls(error_code=error.error_code, message=error.message, details=error.details)


class PaginatedResponse(BaseModel):
    """Base paginated response."""

    total: int = Field(..., description="Total number of items")
    page: int = Field(..., description="Current page number")
    page_size: int = Field(..., description="Items per page")
    total_pages: int = Field(..., description="Number of pages")
    has_more: bool = Field(..., description="Whether there are more pages")


# ============================================================================
# Taxonomy Schemas
# ============================================================================


class CategorySchema(BaseModel):
    """Category listing entry."""

    id: str
    name: str
    slug: str
    image: str = ""

    @classmethod
    def from_category(cls, category: Category) -> "CategorySchema":
        return cls(id=category.id, name=category.name, slug=category.slug, image=category.image)


class AxisSchema(BaseModel):
    """Variant axis."""

    key: str
    label: str
    values: list[str]


class MatrixSchema(BaseModel):
    """Variant matrix."""

    axes: list[AxisSchema] = Field(default_factory=list)

    @classmethod
    def from_matrix(cls, matrix: VariantMatrix) -> "MatrixSchema":
        return cls(
            axes=[
                AxisSchema(key=a.key, label=a.label, values=list(a.values))
                for a in matrix.axes
            ]
        )


class AttributeTemplateSchema(BaseModel):
    """Specification field definition."""

    key: str
    label: str
    type: str
    options: list[str] = Field(default_factory=list)
    required: bool = False
    unit: str | None = None


class SubcategorySchema(BaseModel):
    """Subcategory listing entry."""

    id: str
    category_id: str
    name: str
    slug: str
    variant_matrix: MatrixSchema
    attribute_templates: list[AttributeTemplateSchema] = Field(default_factory=list)

    @classmethod
    def from_subcategory(cls, subcategory: Subcategory) -> "SubcategorySchema":
        return cls(
            id=subcategory.id,
            category_id=subcategory.category_id,
            name=subcategory.name,
            slug=subcategory.slug,
            variant_matrix=MatrixSchema.from_matrix(subcategory.variant_matrix),
            attribute_templates=[
                AttributeTemplateSchema(
                    key=t.key,
                    label=t.label,
                    type=t.type.value,
                    options=list(t.options),
                    required=t.required,
                    unit=t.unit,
                )
                for t in subcategory.attribute_templates
            ],
        )


# ============================================================================
# Product Schemas
# ============================================================================


class FlashSaleSchema(BaseModel):
    """Flash sale metadata shown on product cards."""

    discount_type: DiscountType
    discount_value: Decimal
    start_date: datetime
    end_date: datetime
    stock_limit: int | None = None
    sold_count: int = 0
    remaining: int | None = Field(default=None, description="Units left at the sale price")
    label: str = Field(..., description="Badge text, e.g. '20% OFF'")

    @classmethod
    def from_flash_sale(cls, flash_sale: FlashSale) -> "FlashSaleSchema":
        return cls(
            discount_type=flash_sale.discount_type,
            discount_value=flash_sale.discount_value,
            start_date=flash_sale.start_date,
            end_date=flash_sale.end_date,
            stock_limit=flash_sale.stock_limit,
            sold_count=flash_sale.sold_count,
            remaining=remaining_sale_units(flash_sale),
            label=discount_label(flash_sale),
        )


class ProductSummarySchema(BaseModel):
    """Product card."""

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
    flash_sale: FlashSaleSchema | None = None
    flash_sale_active: bool = False

    @classmethod
    def from_summary(cls, summary: ProductSummary) -> "ProductSummarySchema":
        return cls(
            id=summary.id,
            name=summary.name,
            slug=summary.slug,
            vendor_name=summary.vendor_name,
            min_price=summary.min_price,
            max_price=summary.max_price,
            default_image=summary.default_image,
            in_stock=summary.in_stock,
            has_variants=summary.has_variants,
            base_price=summary.base_price,
            flash_sale=(
                FlashSaleSchema.from_flash_sale(summary.flash_sale)
                if summary.flash_sale is not None
                else None
            ),
            flash_sale_active=summary.flash_sale_active,
        )


class FacetSchema(BaseModel):
    """Facet value counts for one attribute."""

    key: str
    values: list[str]
    counts: dict[str, int]

    @classmethod
    def from_facet(cls, facet: Facet) -> "FacetSchema":
        return cls(key=facet.key, values=list(facet.values), counts=dict(facet.counts))


class ProductPageResponse(PaginatedResponse):
    """A page of product cards with facets over the whole filtered set."""

    items: list[ProductSummarySchema]
    facets: list[FacetSchema] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: QueryResult) -> "ProductPageResponse":
        return cls(
            total=result.total_count,
            page=result.page,
            page_size=result.page_size,
            total_pages=result.total_pages,
            has_more=result.has_next,
            items=[ProductSummarySchema.from_summary(s) for s in result.items],
            facets=[FacetSchema.from_facet(f) for f in result.facets],
        )


class VariantSchema(BaseModel):
    """Purchasable variant."""

    combo: dict[str, str]
    label: str
    sku: str
    price: Decimal
    stock: int
    in_stock: bool
    images: list[str] = Field(default_factory=list)

    @classmethod
    def from_variant(cls, variant: Variant) -> "VariantSchema":
        return cls(
            combo=variant.combo.as_dict(),
            label=variant.combo.label,
            sku=variant.sku,
            price=variant.price,
            stock=variant.stock,
            in_stock=variant.in_stock,
            images=list(variant.images),
        )


class AttributeSchema(BaseModel):
    """Specification value."""

    key: str
    value: str


class ProductDetailSchema(ProductSummarySchema):
    """Product page data."""

    description: str
    attributes: list[AttributeSchema] = Field(default_factory=list)
    variant_matrix: MatrixSchema
    variants: list[VariantSchema] = Field(default_factory=list)
    variant_values: dict[str, list[str]] = Field(default_factory=dict)
    base_stock: int | None = None
    base_sku: str | None = None
    total_stock: int

    @classmethod
    def from_product(
        cls,
        product: Product,
        summary: ProductSummary,
        matrix: VariantMatrix,
    ) -> "ProductDetailSchema":
        card = ProductSummarySchema.from_summary(summary).model_dump()
        is_simple = isinstance(product, SimpleProduct)
        return cls(
            **card,
            description=product.description,
            attributes=[AttributeSchema(key=a.key, value=a.value) for a in product.attributes],
            variant_matrix=MatrixSchema.from_matrix(matrix),
            variants=(
                [VariantSchema.from_variant(v) for v in product.variants]
                if isinstance(product, VariantProduct)
                else []
            ),
            variant_values=(
                product.variant_values if isinstance(product, VariantProduct) else {}
            ),
            base_stock=product.base_stock if is_simple else None,
            base_sku=product.base_sku if is_simple else None,
            total_stock=product.total_stock,
        )


# ============================================================================
# Variant Picker and Pricing Schemas
# ============================================================================


class VariantResolutionSchema(BaseModel):
    """Variant picker state for a selection."""

    product_id: str
    selection: dict[str, str]
    is_complete: bool
    matched_variant: VariantSchema | None = None
    disabled_values: dict[str, list[str]] = Field(default_factory=dict)
    enabled_values: dict[str, list[str]] = Field(default_factory=dict)

    @classmethod
    def from_resolution(
        cls, product_id: str, resolution: VariantResolution, matrix: VariantMatrix
    ) -> "VariantResolutionSchema":
        # Disabled values are listed in axis display order.
        disabled = {
            axis.key: [
                v for v in axis.values if v in resolution.disabled_values.get(axis.key, ())
            ]
            for axis in matrix.axes
        }
        return cls(
            product_id=product_id,
            selection=resolution.selection.as_dict(),
            is_complete=resolution.is_complete,
            matched_variant=(
                VariantSchema.from_variant(resolution.matched_variant)
                if resolution.matched_variant is not None
                else None
            ),
            disabled_values=disabled,
            enabled_values={k: list(v) for k, v in resolution.enabled_values.items()},
        )


class PriceQuoteSchema(BaseModel):
    """Prices for a product or one of its variants at a given instant."""

    product_id: str
    sku: str | None = None
    base_price: Decimal | None = Field(
        default=None, description="Price before discount; None for an unselected price range"
    )
    effective_price: Decimal | None = Field(
        default=None, description="Flash-sale price; None when no sale applies"
    )
    min_price: Decimal
    max_price: Decimal
    flash_sale_active: bool = False
    flash_sale: FlashSaleSchema | None = None
    quoted_at: datetime
