"""
Order Module - Pricing
=======================
Subtotal / shipping / total arithmetic shared by cart, checkout and orders.
Prices are always the product's current price at the time of the call.
"""

from decimal import Decimal
from typing import Iterable, Tuple

from config.settings import SHIPPING_FEE, FREE_SHIPPING_THRESHOLD
from common.helpers import to_money


def calculate_shipping(subtotal) -> Decimal:
    """Free shipping only when the subtotal is strictly above the threshold."""
    if to_money(subtotal) > to_money(FREE_SHIPPING_THRESHOLD):
        return to_money(0)
    return to_money(SHIPPING_FEE)


def price_items(items: Iterable) -> Tuple[Decimal, Decimal, Decimal]:
    """
    Price cart lines (anything with `.product.price` and `.quantity`).
    Returns: (subtotal, shipping, total)
    """
    subtotal = sum(
        (to_money(item.product.price) * item.quantity for item in items),
        Decimal("0"),
    )
    subtotal = to_money(subtotal)
    shipping = calculate_shipping(subtotal)
    return subtotal, shipping, to_money(subtotal + shipping)
