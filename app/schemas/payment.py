"""
Payment Schemas
"""

from typing import Optional
from pydantic import BaseModel, Field, model_validator


class PaymentBreakdownRequest(BaseModel):
    """
    Either total_base_price, or base_price + quantity (or base_price +
    booking_format with participant_count / total_days).
    Rates are basis points; omitted rates use the configured defaults.
    """
    total_base_price: Optional[int] = Field(None, ge=0)
    base_price: Optional[int] = Field(None, ge=0, description="Per-day or per-participant price")
    quantity: Optional[int] = Field(None, ge=0)
    booking_format: Optional[str] = Field(None, pattern="^F[1-4]$")
    participant_count: int = Field(default=0, ge=0)
    total_days: int = Field(default=0, ge=0)

    addons_amount: int = Field(default=0, ge=0)
    discount_amount: int = Field(default=0, ge=0)
    advance_payment_amount: Optional[int] = Field(None, ge=0)
    tax_rate: Optional[int] = Field(None, ge=0, le=10000)
    commission_rate: Optional[int] = Field(None, ge=0, le=10000)
    withholding_rate: Optional[int] = Field(None, ge=0, le=10000)
    payment_method: str = Field(default="online", max_length=30)

    @model_validator(mode='after')
    def check_base(self):
        if self.total_base_price is None and self.base_price is None:
            raise ValueError("total_base_price or base_price is required")
        if self.total_base_price is None and self.quantity is None and self.booking_format is None:
            raise ValueError("base_price needs quantity or booking_format")
        return self


class PaymentBreakdownResponse(BaseModel):
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
    balance_to_collect: int
    platform_commission_rate: int
    platform_commission: int
    withholding_rate: int
    withholding_amount: int
    net_pay_to_seller: int
    total_earnings: int
    payment_method: str
    currency: str
    formatted_total: str
