"""Tests for the catalog service."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from multimart.catalog.loader import load_snapshot
from multimart.catalog.service import CatalogService, ServiceResult
from multimart.domain.exceptions import IncompleteComboError
from multimart.infrastructure.config import Settings


class TestServiceResult:
    """Tests for ServiceResult."""

    def test_ok(self) -> None:
        """Successful results carry a value and no error."""
        result = ServiceResult.ok(42)
        assert result.success
        assert result.value == 42
        assert result.error is None

    def test_fail_carries_error_code(self) -> None:
        """Failures carry the error family code and details."""
        result: ServiceResult[int] = ServiceResult.fail(
            IncompleteComboError({"size": "S"}, missing=["color"])
        )
        assert not result.success
        assert result.value is None
        assert result.error is not None
        assert result.error.error_code == "INCONSISTENT_CATALOG_DATA"
        assert result.error.details["missing"] == ["color"]


class TestTaxonomy:
    """Tests for taxonomy listings."""

    def test_list_categories(self, service: CatalogService) -> None:
        """All categories are listed."""
        result = service.list_categories()
        assert result.success
        assert [c.slug for c in result.value] == ["clothing", "electronics"]

    def test_list_subcategories(self, service: CatalogService) -> None:
        """Subcategories carry their variant matrix."""
        result = service.list_subcategories("clothing")
        assert result.success
        (tees,) = result.value
        assert [a.key for a in tees.variant_matrix.axes] == ["size", "color"]
        assert tees.attribute_templates[0].required

    def test_unknown_category(self, service: CatalogService) -> None:
        """An unknown category slug is NOT_FOUND."""
        result = service.list_subcategories("garden")
        assert not result.success
        assert result.error.error_code == "NOT_FOUND"


class TestBrowseCategory:
    """Tests for category listings."""

    def test_filter_by_color(self, service: CatalogService) -> None:
        """The tee has an in-stock Red variant."""
        result = service.browse_category("clothing", filters={"color": ["Red"]})
        assert result.success
        page = result.value
        assert page.total == 1
        assert page.items[0].slug == "classic-tee"
        assert page.items[0].vendor_name == "Acme Apparel"
        assert {f.key for f in page.facets} == {"size", "color"}

    def test_subcategory_listing(self, service: CatalogService) -> None:
        """Subcategory slugs narrow a listing."""
        result = service.browse_category("electronics", "accessories")
        assert [item.slug for item in result.value.items] == ["usb-cable"]

    def test_sorted_by_price(self, service: CatalogService) -> None:
        """Listings can be sorted by price."""
        result = service.browse_category("electronics", sort_key="price-desc")
        assert [item.slug for item in result.value.items] == ["usb-cable", "phone-x"]

    def test_flash_sale_on_cards(self, service: CatalogService) -> None:
        """Cards carry flash-sale metadata and whether it is active."""
        result = service.browse_category("electronics", "phones")
        card = result.value.items[0]
        assert card.flash_sale_active
        assert card.flash_sale.label == "20% OFF"
        assert card.flash_sale.remaining == 7

    def test_unknown_filter_key(self, service: CatalogService) -> None:
        """Filters on axes outside the category are invalid input."""
        result = service.browse_category("clothing", filters={"storage": ["128GB"]})
        assert not result.success
        assert result.error.error_code == "INVALID_INPUT"

    def test_unknown_filter_key_lenient(self, snapshot, engine_settings: Settings) -> None:
        """With strict filters off, an unknown key matches nothing."""
        lenient = CatalogService(
            snapshot, settings=engine_settings.model_copy(update={"strict_filters": False})
        )
        result = lenient.browse_category("clothing", filters={"storage": ["128GB"]})
        assert result.success
        assert result.value.total == 0

    def test_invalid_page(self, service: CatalogService) -> None:
        """Page numbers start at 1."""
        result = service.browse_category("clothing", page=0)
        assert not result.success
        assert result.error.error_code == "INVALID_INPUT"

    def test_page_size_over_maximum(self, service: CatalogService) -> None:
        """Page size is capped by settings."""
        result = service.browse_category("clothing", page_size=51)
        assert not result.success

    def test_unknown_subcategory(self, service: CatalogService) -> None:
        """An unknown subcategory slug is NOT_FOUND."""
        result = service.browse_category("clothing", "hats")
        assert result.error.error_code == "NOT_FOUND"


class TestSearch:
    """Tests for search."""

    def test_search_across_categories(self, service: CatalogService) -> None:
        """Search needs no category."""
        result = service.search("cable")
        assert [item.slug for item in result.value.items] == ["usb-cable"]

    def test_search_by_sku(self, service: CatalogService) -> None:
        """SKUs are searchable."""
        result = service.search("px-256")
        assert [item.slug for item in result.value.items] == ["phone-x"]

    def test_search_within_category(self, service: CatalogService) -> None:
        """A category slug scopes the search."""
        result = service.search("tee", category_slug="electronics")
        assert result.value.total == 0

    def test_blank_search(self, service: CatalogService) -> None:
        """A blank query without a category is invalid input."""
        result = service.search("  ")
        assert result.error.error_code == "INVALID_INPUT"


class TestVendorProducts:
    """Tests for vendor listings."""

    def test_vendor_products_newest_first(self, service: CatalogService) -> None:
        """A vendor's products span categories, newest first."""
        result = service.vendor_products("v-gadget")
        assert [item.slug for item in result.value.items] == ["phone-x", "usb-cable"]

    def test_unknown_vendor(self, service: CatalogService) -> None:
        """An unknown vendor is NOT_FOUND."""
        result = service.vendor_products("v-404")
        assert result.error.error_code == "NOT_FOUND"


class TestProductDetail:
    """Tests for product detail."""

    def test_variant_product_detail(self, service: CatalogService) -> None:
        """Detail carries variants, matrix and derived aggregates."""
        detail = service.get_product_detail("classic-tee").value
        assert detail.min_price == Decimal("20")
        assert detail.max_price == Decimal("25")
        assert detail.total_stock == 10
        assert len(detail.variants) == 4
        assert detail.variants[0].label == "S / Red"
        assert detail.variant_values["size"] == ["S", "M", "L"]
        assert detail.attributes[0].value == "Cotton"

    def test_simple_product_detail(self, service: CatalogService) -> None:
        """Simple products expose base fields and no variants."""
        detail = service.get_product_detail("usb-cable").value
        assert detail.base_price == Decimal("100.00")
        assert detail.base_sku == "CABLE-1"
        assert detail.variants == []
        assert detail.variant_matrix.axes == []

    def test_unknown_product(self, service: CatalogService) -> None:
        """An unknown slug is NOT_FOUND."""
        result = service.get_product_detail("nope")
        assert result.error.error_code == "NOT_FOUND"


class TestResolveVariant:
    """Tests for the variant picker."""

    def test_partial_selection(self, service: CatalogService) -> None:
        """Selecting size S disables Red."""
        result = service.resolve_variant("classic-tee", {"size": "S"})
        picker = result.value
        assert not picker.is_complete
        assert picker.disabled_values == {"size": [], "color": ["Red"]}
        assert picker.enabled_values["color"] == ["Blue"]

    def test_complete_selection(self, service: CatalogService) -> None:
        """A complete selection reports the matched variant."""
        picker = service.resolve_variant("classic-tee", {"size": "M", "color": "Red"}).value
        assert picker.is_complete
        assert picker.matched_variant.sku == "TEE-M-RED"

    def test_selection_without_variant(self, service: CatalogService) -> None:
        """A complete selection with no variant matches nothing."""
        picker = service.resolve_variant("classic-tee", {"size": "L", "color": "Blue"}).value
        assert picker.is_complete
        assert picker.matched_variant is None

    def test_simple_product(self, service: CatalogService) -> None:
        """Simple products are vacuously complete."""
        picker = service.resolve_variant("usb-cable", {"size": "S"}).value
        assert picker.is_complete
        assert picker.selection == {}
        assert picker.disabled_values == {}

    def test_out_of_domain_value(self, service: CatalogService) -> None:
        """A value outside the axis domain is invalid input."""
        result = service.resolve_variant("classic-tee", {"size": "XL"})
        assert result.error.error_code == "INVALID_INPUT"


class TestPriceFor:
    """Tests for price quotes."""

    def test_variant_price(self, service: CatalogService) -> None:
        """A variant SKU is priced with the active 20% sale."""
        quote = service.price_for("phone-x", sku="PX-128-BLK").value
        assert quote.base_price == Decimal("90")
        assert quote.effective_price == Decimal("72.00")
        assert quote.flash_sale_active

    def test_price_range_without_sku(self, service: CatalogService) -> None:
        """Without a SKU a price range quotes no single price."""
        quote = service.price_for("phone-x").value
        assert quote.base_price is None
        assert quote.effective_price is None
        assert quote.min_price == Decimal("90")
        assert quote.max_price == Decimal("110")

    def test_simple_product_fixed_discount(self, service: CatalogService) -> None:
        """15 off 100 is 85."""
        quote = service.price_for("usb-cable").value
        assert quote.effective_price == Decimal("85.00")
        assert quote.flash_sale.label == "$15 OFF"

    def test_after_sale_window(self, service: CatalogService) -> None:
        """After the window there is no effective price."""
        later = datetime(2024, 7, 1, tzinfo=timezone.utc)
        quote = service.price_for("usb-cable", now=later).value
        assert quote.effective_price is None
        assert not quote.flash_sale_active
        assert quote.quoted_at == later

    def test_unknown_sku(self, service: CatalogService) -> None:
        """A SKU from another product is NOT_FOUND."""
        result = service.price_for("phone-x", sku="TEE-M-RED")
        assert result.error.error_code == "NOT_FOUND"
        assert result.error.details["product_id"] == "p-phone"


class TestPublish:
    """Tests for snapshot replacement."""

    def test_publish_replaces_snapshot(
        self, service: CatalogService, catalog_payload: dict[str, Any]
    ) -> None:
        """Calls after publish see the new snapshot."""
        catalog_payload["products"] = [
            p for p in catalog_payload["products"] if p["_id"] != "p-cable"
        ]
        service.publish(load_snapshot(catalog_payload))
        result = service.get_product_detail("usb-cable")
        assert result.error.error_code == "NOT_FOUND"
