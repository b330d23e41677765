"""Shared fixtures for catalog engine tests."""

from datetime import datetime, timezone
from typing import Any

import pytest

from multimart.catalog.loader import load_snapshot
from multimart.catalog.service import CatalogService
from multimart.catalog.snapshot import CatalogSnapshot
from multimart.domain import VariantAxis, VariantMatrix
from multimart.infrastructure.config import Settings

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def apparel_matrix() -> VariantMatrix:
    """size=[S,M,L] x color=[Red,Blue]."""
    return VariantMatrix(
        axes=(
            VariantAxis(key="size", label="Size", values=("S", "M", "L")),
            VariantAxis(key="color", label="Color", values=("Red", "Blue")),
        )
    )


@pytest.fixture
def catalog_payload() -> dict[str, Any]:
    """Small catalog in the camelCase shape the catalog owner publishes."""
    return {
        "vendors": [
            {"_id": "v-acme", "name": "Acme Apparel", "slug": "acme-apparel", "verified": True},
            {"_id": "v-gadget", "name": "Gadget Hub", "slug": "gadget-hub"},
        ],
        "categories": [
            {"_id": "c-clothing", "name": "Clothing", "slug": "clothing"},
            {"_id": "c-electronics", "name": "Electronics", "slug": "electronics"},
        ],
        "subcategories": [
            {
                "_id": "sc-tshirts",
                "categoryId": "c-clothing",
                "name": "T-Shirts",
                "slug": "t-shirts",
                "variantMatrix": {
                    "axes": [
                        {"key": "size", "label": "Size", "values": ["S", "M", "L"]},
                        {"key": "color", "label": "Color", "values": ["Red", "Blue"]},
                    ]
                },
                "attributeTemplates": [
                    {"key": "material", "label": "Material", "type": "text", "required": True},
                ],
            },
            {
                "_id": "sc-phones",
                "categoryId": "c-electronics",
                "name": "Phones",
                "slug": "phones",
                "variantMatrix": {
                    "axes": [
                        {"key": "storage", "label": "Storage", "values": ["128GB", "256GB"]},
                        {"key": "color", "label": "Color", "values": ["Black", "White"]},
                    ]
                },
            },
            {
                "_id": "sc-accessories",
                "categoryId": "c-electronics",
                "name": "Accessories",
                "slug": "accessories",
            },
        ],
        "products": [
            {
                "_id": "p-tee",
                "vendorId": "v-acme",
                "categoryId": "c-clothing",
                "subcategoryId": "sc-tshirts",
                "name": "Classic Tee",
                "slug": "classic-tee",
                "description": "Soft cotton crew neck",
                "attributes": [{"key": "material", "value": "Cotton"}],
                "hasVariants": True,
                "variants": [
                    {"combo": {"size": "S", "color": "Red"}, "sku": "TEE-S-RED", "price": 20, "stock": 0},
                    {"combo": {"size": "S", "color": "Blue"}, "sku": "TEE-S-BLU", "price": 20, "stock": 5},
                    {"combo": {"size": "M", "color": "Red"}, "sku": "TEE-M-RED", "price": 22, "stock": 3},
                    {"combo": {"size": "L", "color": "Red"}, "sku": "TEE-L-RED", "price": 25, "stock": 2},
                ],
                "minPrice": 1,
                "createdAt": "2024-01-01T00:00:00Z",
            },
            {
                "_id": "p-phone",
                "vendorId": "v-gadget",
                "categoryId": "c-electronics",
                "subcategoryId": "sc-phones",
                "name": "Phone X",
                "slug": "phone-x",
                "description": "Flagship handset",
                "variants": [
                    {"combo": {"storage": "128GB", "color": "Black"}, "sku": "PX-128-BLK", "price": 90, "stock": 4},
                    {"combo": {"storage": "256GB", "color": "Black"}, "sku": "PX-256-BLK", "price": 110, "stock": 0},
                    {"combo": {"storage": "128GB", "color": "White"}, "sku": "PX-128-WHT", "price": 90, "stock": 2},
                ],
                "flashSale": {
                    "discountType": "percentage",
                    "discountValue": 20,
                    "startDate": "2024-06-01T00:00:00Z",
                    "endDate": "2024-06-30T23:59:59Z",
                    "stockLimit": 10,
                    "soldCount": 3,
                    "isActive": True,
                },
                "createdAt": "2024-03-01T00:00:00Z",
            },
            {
                "_id": "p-cable",
                "vendorId": "v-gadget",
                "categoryId": "c-electronics",
                "subcategoryId": "sc-accessories",
                "name": "USB-C Cable",
                "slug": "usb-cable",
                "description": "Braided two metre cable",
                "hasVariants": False,
                "basePrice": "100.00",
                "baseStock": 10,
                "baseSku": "CABLE-1",
                "flashSale": {
                    "discountType": "fixed",
                    "discountValue": 15,
                    "startDate": "2024-06-10T00:00:00Z",
                    "endDate": "2024-06-20T00:00:00Z",
                },
                "createdAt": "2024-02-01T00:00:00Z",
            },
        ],
    }


@pytest.fixture
def snapshot(catalog_payload: dict[str, Any]) -> CatalogSnapshot:
    """Snapshot built from the sample payload."""
    return load_snapshot(catalog_payload, published_at=FIXED_NOW)


@pytest.fixture
def engine_settings() -> Settings:
    """Settings independent of the environment."""
    return Settings(
        default_page_size=12,
        max_page_size=50,
        strict_filters=True,
        unknown_vendor_name="Unknown Vendor",
        log_json=False,
    )


@pytest.fixture
def service(snapshot: CatalogSnapshot, engine_settings: Settings) -> CatalogService:
    """Catalog service with a fixed clock."""
    return CatalogService(snapshot, settings=engine_settings, clock=lambda: FIXED_NOW)
