from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from billing.models.enums import PaymentMethod
from billing.schemas.common import Money, UtcDatetime


class PaymentCreate(BaseModel):
    invoice_id: int
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    payment_date: UtcDatetime
    payment_method: PaymentMethod
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    id: int
    invoice_id: int
    amount: Money
    payment_date: datetime
    payment_method: PaymentMethod
    notes: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
