"""Tests for cart and checkout pricing."""

import pytest
from storefront.checkout.pricing import compute_totals, discount_for, normalize_code, shipping_for
from storefront.config import Settings


@pytest.fixture()
def settings():
    return Settings(
        tax_rate=0.08,
        free_shipping_threshold=100,
        flat_shipping_fee=10,
        cart_ttl_days=7,
        currency="USD",
        jwt_secret="secret",
        jwt_algorithm="HS256",
        restock_on_cancel=False,
        staff_alert_email="staff@example.com",
    )


class TestComputeTotals:
    def test_subtotal_at_threshold_ships_free(self, settings):
        totals = compute_totals([(50.0, 2)], settings=settings)
        assert totals.subtotal == 100.0
        assert totals.tax == 8.0
        assert totals.shipping == 0.0
        assert totals.discount == 0.0
        assert totals.total == 108.0

    def test_subtotal_below_threshold_pays_flat_fee(self, settings):
        totals = compute_totals([(19.99, 1), (5.0, 3)], settings=settings)
        assert totals.subtotal == 34.99
        assert totals.tax == 2.8
        assert totals.shipping == 10.0
        assert totals.total == 47.79

    def test_empty_cart_costs_nothing(self, settings):
        totals = compute_totals([], settings=settings)
        assert totals.as_dict() == {"subtotal": 0.0, "tax": 0.0, "shipping": 0.0, "discount": 0.0, "total": 0.0}

    def test_total_is_always_the_breakdown(self, settings):
        totals = compute_totals([(12.345, 3), (0.1, 7)], "express", "WELCOME10", settings)
        assert totals.total == pytest.approx(totals.subtotal + totals.tax + totals.shipping - totals.discount, abs=0.01)


class TestShipping:
    @pytest.mark.parametrize(
        "method, expected",
        [("standard", 10.0), ("express", 20.0), ("overnight", 30.0), ("pickup", 0.0), ("digital", 0.0)],
    )
    def test_method_multipliers(self, settings, method, expected):
        assert shipping_for(40.0, method, settings) == expected

    def test_free_shipping_applies_to_every_method(self, settings):
        assert shipping_for(150.0, "overnight", settings) == 0.0

    def test_unknown_method_uses_standard_rate(self, settings):
        assert shipping_for(40.0, None, settings) == 10.0


class TestDiscountCodes:
    def test_welcome10_takes_ten_percent(self):
        assert discount_for("WELCOME10", 80.0, 10.0) == 8.0

    def test_welcome10_requires_minimum(self):
        assert discount_for("WELCOME10", 49.99, 10.0) == 0.0

    def test_save20_is_fixed(self):
        assert discount_for("SAVE20", 120.0, 0.0) == 20.0

    def test_save20_requires_minimum(self):
        assert discount_for("SAVE20", 99.0, 10.0) == 0.0

    def test_freeship_discounts_shipping(self):
        assert discount_for("FREESHIP", 30.0, 10.0) == 10.0

    def test_unknown_code_gives_zero(self):
        assert discount_for("NOPE", 500.0, 10.0) == 0.0

    def test_codes_are_case_insensitive(self):
        assert normalize_code("  welcome10 ") == "WELCOME10"
        assert discount_for("welcome10", 100.0, 0.0) == 10.0

    def test_blank_code_normalizes_to_none(self):
        assert normalize_code("   ") is None
