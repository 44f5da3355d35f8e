"""
Unit tests for order pricing: subtotal, shipping rule and total.
"""
from decimal import Decimal
from types import SimpleNamespace

import pytest

from modules.order.pricing import calculate_shipping, price_items


def line(price, quantity):
    return SimpleNamespace(product=SimpleNamespace(price=Decimal(price)), quantity=quantity)


class TestShippingRule:
    """Shipping is free only strictly above the threshold."""

    @pytest.mark.parametrize("subtotal, expected", [
        ("1500", "0.00"),
        ("1000.01", "0.00"),
        ("1000", "100.00"),
        ("500", "100.00"),
        ("0", "100.00"),
    ])
    def test_calculate_shipping(self, subtotal, expected):
        assert calculate_shipping(Decimal(subtotal)) == Decimal(expected)


class TestPriceItems:

    def test_large_cart_ships_free(self):
        subtotal, shipping, total = price_items([line("500", 3)])
        assert subtotal == Decimal("1500.00")
        assert shipping == Decimal("0.00")
        assert total == Decimal("1500.00")

    def test_small_cart_pays_shipping(self):
        subtotal, shipping, total = price_items([line("250", 2)])
        assert (subtotal, shipping, total) == (Decimal("500.00"), Decimal("100.00"), Decimal("600.00"))

    def test_mixed_lines_keep_cents(self):
        subtotal, shipping, total = price_items([line("19.99", 3), line("0.05", 1)])
        assert subtotal == Decimal("60.02")
        assert total == Decimal("160.02")

    def test_empty_cart(self):
        subtotal, shipping, total = price_items([])
        assert subtotal == Decimal("0.00")
        assert total == Decimal("100.00")
