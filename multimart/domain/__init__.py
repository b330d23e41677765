"""Domain layer - Catalog entities, value objects and exceptions.

This module exports the catalog building blocks:

- **Entities**: Records with identity (Vendor, Category, Subcategory, products)
- **Value Objects**: Immutable values (VariantAxis, VariantMatrix, VariantCombo, FlashSale)
- **Exceptions**: NotFound, InvalidInput and InconsistentCatalogData families

Example usage:
    from multimart.domain import VariantAxis, VariantMatrix

    matrix = VariantMatrix(
        axes=(
            VariantAxis(key="size", label="Size", values=("S", "M", "L")),
            VariantAxis(key="color", label="Color", values=("Red", "Blue")),
        )
    )
    combo = matrix.combo({"size": "M", "color": "Red"})
    print(combo.label)  # M / Red
"""

# Base classes
from multimart.domain.base import Entity, ValueObject

# Entities
from multimart.domain.entities import (
    BaseProduct,
    Category,
    Product,
    ProductAggregates,
    SimpleProduct,
    Subcategory,
    Variant,
    VariantProduct,
    Vendor,
    derive_aggregates,
)

# Exceptions
from multimart.domain.exceptions import (
    DomainError,
    InconsistentCatalogDataError,
    InvalidInputError,
    NotFoundError,
)

# Value Objects
from multimart.domain.value_objects import (
    AttributeTemplate,
    AttributeType,
    DiscountType,
    FlashSale,
    ProductAttribute,
    ProductSEO,
    VariantAxis,
    VariantCombo,
    VariantMatrix,
)

__all__ = [
    # Base
    "Entity",
    "ValueObject",
    # Entities
    "BaseProduct",
    "Category",
    "Product",
    "ProductAggregates",
    "SimpleProduct",
    "Subcategory",
    "Variant",
    "VariantProduct",
    "Vendor",
    "derive_aggregates",
    # Value Objects
    "AttributeTemplate",
    "AttributeType",
    "DiscountType",
    "FlashSale",
    "ProductAttribute",
    "ProductSEO",
    "VariantAxis",
    "VariantCombo",
    "VariantMatrix",
    # Exceptions
    "DomainError",
    "InconsistentCatalogDataError",
    "InvalidInputError",
    "NotFoundError",
]
