"""Tests for the flash-sale pricing resolver."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from multimart.domain import DiscountType, FlashSale, SimpleProduct, Variant, VariantCombo, VariantProduct
from multimart.domain.exceptions import FlashSaleOversoldError
from multimart.engine.pricing import (
    discount_label,
    display_base_price,
    effective_price,
    is_flash_sale_active,
    price_or_base,
    remaining_sale_units,
)

START = datetime(2024, 6, 1, tzinfo=timezone.utc)
END = datetime(2024, 6, 30, tzinfo=timezone.utc)
DURING = datetime(2024, 6, 15, tzinfo=timezone.utc)


def make_sale(
    discount_type: DiscountType = DiscountType.PERCENTAGE,
    value: str = "20",
    stock_limit: int | None = None,
    sold_count: int = 0,
    is_enabled: bool = True,
) -> FlashSale:
    """Create a test flash sale running through June 2024."""
    return FlashSale(
        discount_type=discount_type,
        discount_value=Decimal(value),
        start_date=START,
        end_date=END,
        stock_limit=stock_limit,
        sold_count=sold_count,
        is_enabled=is_enabled,
    )


class TestEffectivePrice:
    """Tests for effective_price."""

    def test_percentage_discount(self) -> None:
        """20% off 100 is 80."""
        assert effective_price(Decimal("100"), make_sale(), DURING) == Decimal("80.00")

    def test_fixed_discount(self) -> None:
        """15 off 100 is 85."""
        sale = make_sale(DiscountType.FIXED, "15")
        assert effective_price(Decimal("100"), sale, DURING) == Decimal("85.00")

    def test_no_sale(self) -> None:
        """Without a sale there is no effective price."""
        assert effective_price(Decimal("100"), None, DURING) is None

    def test_fixed_discount_clamped_at_zero(self) -> None:
        """A discount larger than the price never goes negative."""
        sale = make_sale(DiscountType.FIXED, "150")
        assert effective_price(Decimal("100"), sale, DURING) == Decimal("0.00")

    def test_sub_cent_result_is_exact(self) -> None:
        """15% off 9.99 keeps its sub-cent digits."""
        sale = make_sale(DiscountType.PERCENTAGE, "15")
        assert effective_price(Decimal("9.99"), sale, DURING) == Decimal("8.4915")

    def test_window_end_inclusive(self) -> None:
        """The sale price holds at end and is gone one millisecond later."""
        sale = make_sale()
        assert effective_price(Decimal("100"), sale, END) == Decimal("80")
        assert effective_price(Decimal("100"), sale, END + timedelta(milliseconds=1)) is None

    def test_price_or_base_falls_back(self) -> None:
        """Outside the window the buyer pays the base price."""
        after = END + timedelta(days=1)
        assert price_or_base(Decimal("100"), make_sale(), after) == Decimal("100")
        assert price_or_base(Decimal("100"), make_sale(), DURING) == Decimal("80.00")


class TestIsFlashSaleActive:
    """Tests for is_flash_sale_active."""

    def test_window_bounds_inclusive(self) -> None:
        """The sale applies at exactly start and end."""
        sale = make_sale()
        assert is_flash_sale_active(sale, START)
        assert is_flash_sale_active(sale, END)

    def test_after_end(self) -> None:
        """One millisecond after end the sale is over."""
        assert not is_flash_sale_active(make_sale(), END + timedelta(milliseconds=1))

    def test_before_start(self) -> None:
        """Before start the sale does not apply."""
        assert not is_flash_sale_active(make_sale(), START - timedelta(milliseconds=1))

    def test_sold_out(self) -> None:
        """soldCount == stockLimit ends the sale."""
        sale = make_sale(stock_limit=10, sold_count=10)
        assert not is_flash_sale_active(sale, DURING)
        assert effective_price(Decimal("100"), sale, DURING) is None

    def test_one_unit_left(self) -> None:
        """The last unit is still sold at the sale price."""
        sale = make_sale(stock_limit=10, sold_count=9)
        assert is_flash_sale_active(sale, DURING)

    def test_disabled(self) -> None:
        """A disabled sale never applies."""
        assert not is_flash_sale_active(make_sale(is_enabled=False), DURING)

    def test_oversold_raises(self) -> None:
        """An oversold sale is reported, not silently ignored."""
        with pytest.raises(FlashSaleOversoldError):
            is_flash_sale_active(make_sale(stock_limit=10, sold_count=11), DURING)

    def test_naive_now_treated_as_utc(self) -> None:
        """A naive instant is compared as UTC."""
        assert is_flash_sale_active(make_sale(), datetime(2024, 6, 15))


class TestSaleDisplay:
    """Tests for sale display helpers."""

    def test_remaining_units(self) -> None:
        """Remaining units are limit minus sold."""
        assert remaining_sale_units(make_sale(stock_limit=10, sold_count=3)) == 7
        assert remaining_sale_units(make_sale()) is None
        assert remaining_sale_units(None) is None

    def test_labels(self) -> None:
        """Badges read "20% OFF" and "$15 OFF"."""
        assert discount_label(make_sale()) == "20% OFF"
        assert discount_label(make_sale(DiscountType.FIXED, "15.00")) == "$15 OFF"
        assert discount_label(make_sale(DiscountType.FIXED, "7.50")) == "$7.5 OFF"


class TestDisplayBasePrice:
    """Tests for display_base_price."""

    def _variant(self, size: str, price: str) -> Variant:
        return Variant(
            combo=VariantCombo(pairs=(("size", size),)),
            sku=f"SKU-{size}",
            price=Decimal(price),
            stock=1,
        )

    def _product(self, *variants: Variant) -> VariantProduct:
        return VariantProduct(
            id="p-1",
            vendor_id="v-1",
            category_id="c-1",
            subcategory_id="sc-1",
            name="Tee",
            slug="tee",
            variants=variants,
        )

    def test_simple_product(self) -> None:
        """A simple product shows its base price."""
        product = SimpleProduct(
            id="p-2",
            vendor_id="v-1",
            category_id="c-1",
            subcategory_id="sc-2",
            name="Cable",
            slug="cable",
            base_price=Decimal("12.00"),
        )
        assert display_base_price(product) == Decimal("12.00")

    def test_selected_variant(self) -> None:
        """A resolved variant shows its own price."""
        small = self._variant("S", "20.00")
        product = self._product(small, self._variant("M", "25.00"))
        assert display_base_price(product, small) == Decimal("20.00")

    def test_price_range_without_selection(self) -> None:
        """A price range has no single display price."""
        product = self._product(self._variant("S", "20.00"), self._variant("M", "25.00"))
        assert display_base_price(product) is None

    def test_uniform_price_without_selection(self) -> None:
        """Variants sharing one price show it."""
        product = self._product(self._variant("S", "20.00"), self._variant("M", "20.00"))
        assert display_base_price(product) == Decimal("20.00")
