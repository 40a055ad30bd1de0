"""
Tests for the Payment Calculator

These tests verify:
- The documented order of operations (tax, then discount, then addons)
- Commission on the total, withholding on the commission
- Full payment when no advance is given
- Half-up rounding at each rounding point
- The accounting identities over randomized inputs
"""

import random
import pytest
from decimal import Decimal

from app.config import settings
from app.services.payment_calculator import (
    PaymentCalculationInput,
    apply_rate,
    calculate_payment_breakdown,
    format_amount,
    from_minor_units,
    quantity_for_booking_format,
    quantity_label,
    to_minor_units,
)


def _input(**overrides):
    values = dict(
        total_base_price=100000,
        addons_amount=5000,
        discount_amount=2000,
        advance_payment_amount=50000,
        tax_rate=1800,
        commission_rate=1000,
        withholding_rate=100,
    )
    values.update(overrides)
    return PaymentCalculationInput(**values)


class TestBreakdownVector:
    """The reference booking: 1000.00 base, 20.00 off, 50.00 addons, 500.00 advance"""

    def test_every_field(self):
        b = calculate_payment_breakdown(_input())

        assert b.tax_amount == 18000
        assert b.subtotal_with_tax == 118000
        assert b.total_base_amount == 116000
        assert b.total_amount == 121000
        assert b.amount_paid_online == 50000
        assert b.amount_to_collect_offline == 71000
        assert b.platform_commission == 12100
        assert b.withholding_amount == 121
        assert b.net_pay_to_seller == 37779
        assert b.total_earnings == 108779

    def test_discount_applies_after_tax(self):
        """Tax is computed on the undiscounted base"""
        with_discount = calculate_payment_breakdown(_input(discount_amount=10000))
        without_discount = calculate_payment_breakdown(_input(discount_amount=0))

        assert with_discount.tax_amount == without_discount.tax_amount == 18000
        assert without_discount.total_base_amount - with_discount.total_base_amount == 10000

    def test_commission_is_on_total_not_online_portion(self):
        b = calculate_payment_breakdown(_input(advance_payment_amount=1000))
        assert b.platform_commission == 12100

    def test_rates_are_echoed(self):
        b = calculate_payment_breakdown(_input(tax_rate=500, commission_rate=250, withholding_rate=0))
        assert b.tax_rate == 500
        assert b.platform_commission_rate == 250
        assert b.withholding_rate == 0
        assert b.withholding_amount == 0

    def test_to_dict_includes_balance_alias(self):
        data = calculate_payment_breakdown(_input()).to_dict()
        assert data["balance_to_collect"] == data["amount_to_collect_offline"] == 71000
        assert data["payment_method"] == "online"
        assert data["total_earnings"] == 108779


class TestPaymentDefaults:

    def test_full_payment_when_no_advance(self):
        b = calculate_payment_breakdown(_input(advance_payment_amount=None))
        assert b.amount_paid_online == b.total_amount == 121000
        assert b.amount_to_collect_offline == 0
        assert b.net_pay_to_seller == 121000 - 12100 - 121

    def test_zero_advance_means_all_offline(self):
        b = calculate_payment_breakdown(_input(advance_payment_amount=0))
        assert b.amount_paid_online == 0
        assert b.amount_to_collect_offline == 121000
        # Commission still taken from the (empty) online portion
        assert b.net_pay_to_seller == -12221

    def test_rates_default_from_settings(self):
        b = calculate_payment_breakdown(PaymentCalculationInput(total_base_price=10000))
        assert b.tax_rate == settings.default_tax_rate_bps
        assert b.platform_commission_rate == settings.default_commission_rate_bps
        assert b.withholding_rate == settings.default_withholding_rate_bps

    def test_zero_everything(self):
        b = calculate_payment_breakdown(PaymentCalculationInput(
            total_base_price=0, tax_rate=1800, commission_rate=1000, withholding_rate=100
        ))
        assert b.total_amount == 0
        assert b.total_earnings == 0

    def test_from_unit_price(self):
        payment = PaymentCalculationInput.from_unit_price(2500, 4, tax_rate=0)
        assert payment.total_base_price == 10000
        assert payment.tax_rate == 0


class TestRounding:
    """round(x) is half-up on the exact quotient"""

    @pytest.mark.parametrize("amount,rate,expected", [
        (25, 1000, 3),      # 2.5 -> 3 (not banker's 2)
        (5, 1000, 1),       # 0.5 -> 1
        (24, 1000, 2),      # 2.4 -> 2
        (26, 1000, 3),      # 2.6 -> 3
        (12100, 100, 121),
        (12149, 100, 121),  # 121.49
        (12150, 100, 122),  # 121.50
        (0, 1800, 0),
    ])
    def test_apply_rate(self, amount, rate, expected):
        assert apply_rate(amount, rate) == expected

    def test_tax_rounding_feeds_the_total(self):
        # 18% of 12345 = 2222.1 -> 2222
        b = calculate_payment_breakdown(_input(
            total_base_price=12345, addons_amount=0, discount_amount=0, advance_payment_amount=None
        ))
        assert b.tax_amount == 2222
        assert b.total_amount == 14567


def _random_cases(seed, count):
    rng = random.Random(seed)
    cases = []
    for _ in range(count):
        base = rng.randint(0, 5_000_000)
        tax_rate = rng.choice([0, 500, 1200, 1800, 2800])
        tax = apply_rate(base, tax_rate)
        discount = rng.randint(0, base + tax)
        addons = rng.randint(0, 200_000)
        total = base + tax - discount + addons
        advance = rng.choice([None, rng.randint(0, total)])
        cases.append(dict(
            total_base_price=base,
            addons_amount=addons,
            discount_amount=discount,
            advance_payment_amount=advance,
            tax_rate=tax_rate,
            commission_rate=rng.randint(0, 3000),
            withholding_rate=rng.randint(0, 500),
        ))
    return cases


class TestAccountingIdentities:

    @pytest.mark.parametrize("case", _random_cases(seed=20240605, count=60))
    def test_identities_hold(self, case):
        b = calculate_payment_breakdown(PaymentCalculationInput(**case))

        assert b.amount_paid_online + b.amount_to_collect_offline == b.total_amount
        assert b.total_earnings == b.total_amount - b.platform_commission - b.withholding_amount
        assert b.total_amount == (
            b.total_base_price + b.tax_amount - b.discount_amount + b.addons_amount
        )
        for value in b.to_dict().values():
            if not isinstance(value, str):
                assert isinstance(value, int)

    @pytest.mark.parametrize("case", _random_cases(seed=7, count=10))
    def test_deterministic(self, case):
        first = calculate_payment_breakdown(PaymentCalculationInput(**case))
        second = calculate_payment_breakdown(PaymentCalculationInput(**case))
        assert first == second


class TestPaymentHelpers:

    @pytest.mark.parametrize("booking_format,expected", [
        ("F1", 3), ("F2", 3), ("F4", 3), ("F3", 5), ("X9", 1),
    ])
    def test_quantity_for_booking_format(self, booking_format, expected):
        assert quantity_for_booking_format(booking_format, participant_count=5, total_days=3) == expected

    def test_quantity_label(self):
        assert quantity_label("F3") == "No. of Participants"
        assert quantity_label("F1") == "No. of Days"

    def test_minor_units(self):
        assert to_minor_units("123.45", per_major=100) == 12345
        assert to_minor_units(Decimal("0.005"), per_major=100) == 1
        assert to_minor_units(10, per_major=100) == 1000
        assert from_minor_units(12345, per_major=100) == Decimal("123.45")

    def test_format_amount(self):
        assert format_amount(123456789, currency="INR") == "INR 1,234,567.89"
        assert format_amount(5, currency="USD") == "USD 0.05"
