"""Flash-sale pricing resolver.

Pure functions of a base price, an optional flash sale, and the current
time. Nothing here changes ``sold_count``; that belongs to order
fulfilment.
"""

from datetime import datetime, timezone
from decimal import Decimal

from multimart.domain.entities import Product, SimpleProduct, Variant
from multimart.domain.value_objects import DiscountType, FlashSale, ensure_utc


def _now(now: datetime | None) -> datetime:
    return ensure_utc(now) if now is not None else datetime.now(timezone.utc)


def is_flash_sale_active(flash_sale: FlashSale | None, now: datetime | None = None) -> bool:
    """Check whether a flash sale applies at a given instant.

    A sale applies when it is enabled, ``start_date <= now <= end_date``,
    and (if bounded) fewer than ``stock_limit`` units were sold.

    Args:
        flash_sale: Sale descriptor, or None.
        now: Instant to evaluate at (defaults to current UTC time).

    Returns:
        True if the sale price applies.

    Raises:
        FlashSaleOversoldError: If the sale sold past its limit.
        InvalidFlashSaleWindowError: If the sale ends before it starts.
    """
    if flash_sale is None:
        return False
    flash_sale.validate()
    if not flash_sale.is_enabled:
        return False
    moment = _now(now)
    if moment < flash_sale.start_date or moment > flash_sale.end_date:
        return False
    if flash_sale.stock_limit is not None and flash_sale.sold_count >= flash_sale.stock_limit:
        return False
    return True


def effective_price(
    base_price: Decimal,
    flash_sale: FlashSale | None = None,
    now: datetime | None = None,
) -> Decimal | None:
    """Compute the flash-sale price of an item.

    Args:
        base_price: Price before discount (a variant price, a simple
            product's base price, or a product's min price for display).
        flash_sale: Sale descriptor, or None.
        now: Instant to evaluate at (defaults to current UTC time).

    Returns:
        Discounted price (never below zero), or None when no sale applies.
        The value is exact; rounding is left to display and checkout code.

    Raises:
        FlashSaleOversoldError: If the sale sold past its limit.
        InvalidFlashSaleWindowError: If the sale ends before it starts.
    """
    if flash_sale is None or not is_flash_sale_active(flash_sale, now):
        return None
    base = Decimal(str(base_price))
    if flash_sale.discount_type is DiscountType.PERCENTAGE:
        price = base * (1 - flash_sale.discount_value / 100)
    else:
        price = base - flash_sale.discount_value
    return max(Decimal("0"), price)


def price_or_base(
    base_price: Decimal,
    flash_sale: FlashSale | None = None,
    now: datetime | None = None,
) -> Decimal:
    """Get the price a buyer pays: the sale price if one applies, else the base."""
    discounted = effective_price(base_price, flash_sale, now)
    return discounted if discounted is not None else Decimal(str(base_price))


def remaining_sale_units(flash_sale: FlashSale | None) -> int | None:
    """Units still available at the sale price.

    Returns:
        ``stock_limit - sold_count`` (never negative), or None when the
        sale is absent or unbounded.
    """
    if flash_sale is None or flash_sale.stock_limit is None:
        return None
    return max(0, flash_sale.stock_limit - flash_sale.sold_count)


def discount_label(flash_sale: FlashSale) -> str:
    """Badge text for a sale, e.g. "20% OFF" or "$15 OFF"."""
    value = flash_sale.discount_value.normalize()
    text = f"{value:f}"
    if flash_sale.discount_type is DiscountType.PERCENTAGE:
        return f"{text}% OFF"
    return f"${text} OFF"


def display_base_price(product: Product, variant: Variant | None = None) -> Decimal | None:
    """Pick the single price to show (and discount) for a product.

    Args:
        product: Product being displayed.
        variant: The variant the buyer resolved, if any.

    Returns:
        The simple product's base price, the selected variant's price, or
        the product's only price; None when the product spans a price range
        and nothing is selected. The result is for display only, never
        for checkout.
    """
    if isinstance(product, SimpleProduct):
        return product.base_price
    if variant is not None:
        return variant.price
    if product.min_price == product.max_price:
        return product.min_price
    return None
