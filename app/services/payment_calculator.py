"""
Payment Calculator

Turns a resolved price into a full booking payment breakdown.

All amounts are integers in the smallest currency unit (paise, cents).
Rates are basis points (1800 = 18%). Every rounding point uses
ROUND_HALF_UP on an exact Decimal quotient, so no floating point ever
touches an amount.

Order of operations (each step feeds the next, do not reorder):
1. tax                    = round(total_base_price * tax_rate / 10000)
2. subtotal_with_tax      = total_base_price + tax
3. total_base_amount      = subtotal_with_tax - discount        (discount after tax)
4. total_amount           = total_base_amount + addons
5. amount_paid_online     = advance_payment if given else total_amount
6. amount_to_collect_offline = total_amount - amount_paid_online
7. platform_commission    = round(total_amount * commission_rate / 10000)
8. withholding            = round(platform_commission * withholding_rate / 10000)
9. net_pay_to_seller      = amount_paid_online - platform_commission - withholding
10. total_earnings        = net_pay_to_seller + amount_to_collect_offline

Commission and withholding are taken from the online portion only; the
offline balance goes to the seller untouched.
"""

from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from ..config import settings

BASIS_POINTS = 10000

BOOKING_FORMATS = ("F1", "F2", "F3", "F4")


def apply_rate(amount: int, rate_bps: int) -> int:
    """round(amount * rate / 10000), half away from zero"""
    exact = Decimal(amount) * Decimal(rate_bps) / Decimal(BASIS_POINTS)
    return int(exact.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class PaymentCalculationInput:
    total_base_price: int  # already price x quantity
    addons_amount: int = 0
    discount_amount: int = 0
    advance_payment_amount: Optional[int] = None
    tax_rate: Optional[int] = None
    commission_rate: Optional[int] = None
    withholding_rate: Optional[int] = None
    payment_method: str = "online"

    @classmethod
    def from_unit_price(cls, base_price: int, quantity: int, **kwargs) -> "PaymentCalculationInput":
        """Build an input from a per-day/per-participant price and a quantity"""
        return cls(total_base_price=base_price * quantity, **kwargs)


@dataclass(frozen=True)
class PaymentBreakdown:
    total_base_price: int
    tax_rate: int
    tax_amount: int
    subtotal_with_tax: int
    discount_amount: int
    total_base_amount: int
    addons_amount: int
    total_amount: int
    amount_paid_online: int
    amount_to_collect_offline: int
    platform_commission_rate: int
    platform_commission: int
    withholding_rate: int
    withholding_amount: int
    net_pay_to_seller: int
    total_earnings: int
    payment_method: str = "online"

    @property
    def balance_to_collect(self) -> int:
        return self.amount_to_collect_offline

    def to_dict(self) -> dict:
        data = asdict(self)
        data["balance_to_collect"] = self.balance_to_collect
        return data


def calculate_payment_breakdown(payment: PaymentCalculationInput) -> PaymentBreakdown:
    """
    Pure and deterministic: same input, same integers, every time.

    Inputs are trusted to be non-negative integers; validation belongs to
    the caller (see PaymentBreakdownRequest).
    """
    tax_rate = settings.default_tax_rate_bps if payment.tax_rate is None else payment.tax_rate
    commission_rate = (
        settings.default_commission_rate_bps if payment.commission_rate is None else payment.commission_rate
    )
    withholding_rate = (
        settings.default_withholding_rate_bps if payment.withholding_rate is None else payment.withholding_rate
    )

    # Steps 1-4
    tax_amount = apply_rate(payment.total_base_price, tax_rate)
    subtotal_with_tax = payment.total_base_price + tax_amount
    total_base_amount = subtotal_with_tax - payment.discount_amount
    total_amount = total_base_amount + payment.addons_amount

    # Steps 5-6: full payment unless an advance is given
    if payment.advance_payment_amount is None:
        amount_paid_online = total_amount
    else:
        amount_paid_online = payment.advance_payment_amount
    amount_to_collect_offline = total_amount - amount_paid_online

    # Steps 7-8: commission on the total, withholding on the commission
    platform_commission = apply_rate(total_amount, commission_rate)
    withholding_amount = apply_rate(platform_commission, withholding_rate)

    # Steps 9-10
    net_pay_to_seller = amount_paid_online - platform_commission - withholding_amount
    total_earnings = net_pay_to_seller + amount_to_collect_offline

    return PaymentBreakdown(
        total_base_price=payment.total_base_price,
        tax_rate=tax_rate,
        tax_amount=tax_amount,
        subtotal_with_tax=subtotal_with_tax,
        discount_amount=payment.discount_amount,
        total_base_amount=total_base_amount,
        addons_amount=payment.addons_amount,
        total_amount=total_amount,
        amount_paid_online=amount_paid_online,
        amount_to_collect_offline=amount_to_collect_offline,
        platform_commission_rate=commission_rate,
        platform_commission=platform_commission,
        withholding_rate=withholding_rate,
        withholding_amount=withholding_amount,
        net_pay_to_seller=net_pay_to_seller,
        total_earnings=total_earnings,
        payment_method=payment.payment_method,
    )


# ==================
# Helpers
# ==================

def quantity_for_booking_format(booking_format: str, participant_count: int, total_days: int) -> int:
    """
    F3 (slot/experience) bookings are priced per participant,
    F1/F2/F4 per day. Unknown formats count as 1.
    """
    if booking_format == "F3":
        return participant_count
    if booking_format in BOOKING_FORMATS:
        return total_days
    return 1


def quantity_label(booking_format: str) -> str:
    if booking_format == "F3":
        return "No. of Participants"
    if booking_format in BOOKING_FORMATS:
        return "No. of Days"
    return "Quantity"


def to_minor_units(amount, per_major: Optional[int] = None) -> int:
    """Rupees -> paise. Accepts int, str or Decimal; floats go through str()."""
    per_major = per_major or settings.minor_units_per_major
    value = Decimal(str(amount)) * per_major
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int, per_major: Optional[int] = None) -> Decimal:
    per_major = per_major or settings.minor_units_per_major
    return (Decimal(amount) / Decimal(per_major)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_amount(amount: int, currency: Optional[str] = None) -> str:
    """12345 -> 'INR 123.45' (thousands separated)"""
    currency = currency or settings.currency
    return f"{currency} {from_minor_units(amount):,.2f}"
