"""
Payments API Router

Stateless breakdown quotes; nothing is persisted.
"""

from fastapi import APIRouter, Request

from ..config import settings
from ..schemas.payment import PaymentBreakdownRequest, PaymentBreakdownResponse
from ..services.payment_calculator import (
    PaymentCalculationInput,
    calculate_payment_breakdown,
    format_amount,
    quantity_for_booking_format,
)
from ..utils.rate_limiter import limiter, RATE_LIMITS

router = APIRouter(prefix="/api/payments", tags=["Payments"])


@router.post("/breakdown", response_model=PaymentBreakdownResponse)
@limiter.limit(RATE_LIMITS["payment_quote"])
async def payment_breakdown(request: Request, payload: PaymentBreakdownRequest):
    """Compute the full payment breakdown for a booking"""
    options = dict(
        addons_amount=payload.addons_amount,
        discount_amount=payload.discount_amount,
        advance_payment_amount=payload.advance_payment_amount,
        tax_rate=payload.tax_rate,
        commission_rate=payload.commission_rate,
        withholding_rate=payload.withholding_rate,
        payment_method=payload.payment_method,
    )

    if payload.total_base_price is not None:
        payment = PaymentCalculationInput(total_base_price=payload.total_base_price, **options)
    else:
        quantity = payload.quantity
        if quantity is None:
            quantity = quantity_for_booking_format(
                payload.booking_format, payload.participant_count, payload.total_days
            )
        payment = PaymentCalculationInput.from_unit_price(payload.base_price, quantity, **options)

    breakdown = calculate_payment_breakdown(payment)
    data = breakdown.to_dict()
    data["currency"] = settings.currency
    data["formatted_total"] = format_amount(breakdown.total_amount)
    return data
