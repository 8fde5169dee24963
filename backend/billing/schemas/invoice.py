from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from billing.models.enums import InvoiceStatus, PaymentMethod
from billing.schemas.common import Money, UtcDatetime
from billing.schemas.customer import CustomerResponse
from billing.schemas.payment import PaymentResponse


class InvoiceItemCreate(BaseModel):
    description: str = Field(..., min_length=1)
    quantity: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    unit_price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class InvoiceItemResponse(BaseModel):
    id: int
    invoice_id: int
    description: str
    quantity: Money
    unit_price: Money
    total: Money
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class InvoiceTotalsRequest(BaseModel):
    items: List[InvoiceItemCreate] = Field(..., min_length=1)
    tax_rate: Decimal = Field(Decimal("11"), ge=0, le=100)
    discount_rate: Decimal = Field(Decimal("0"), ge=0, le=100)


class InvoiceTotalsResponse(BaseModel):
    subtotal: Money
    discount_amount: Money
    tax_amount: Money
    total_amount: Money

    class Config:
        from_attributes = True


class InvoiceCreate(BaseModel):
    customer_id: int
    due_date: UtcDatetime
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=100)  # Falls back to settings.default_tax_rate
    discount_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    payment_method: PaymentMethod
    notes: Optional[str] = None
    seller_name: str = Field(..., min_length=1)
    seller_email: Optional[str] = None
    seller_phone: Optional[str] = None
    seller_address: Optional[str] = None
    items: List[InvoiceItemCreate] = Field(..., min_length=1)


class InvoiceUpdate(BaseModel):
    """Partial update. Monetary fields are recomputed when items or rates are sent."""
    customer_id: Optional[int] = None
    due_date: Optional[UtcDatetime] = None
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    discount_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    payment_method: Optional[PaymentMethod] = None
    status: Optional[InvoiceStatus] = None
    notes: Optional[str] = None
    seller_name: Optional[str] = Field(None, min_length=1)
    seller_email: Optional[str] = None
    seller_phone: Optional[str] = None
    seller_address: Optional[str] = None
    items: Optional[List[InvoiceItemCreate]] = Field(None, min_length=1)


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class InvoiceResponse(BaseModel):
    id: int
    invoice_number: str
    customer_id: int
    invoice_date: Optional[datetime]
    due_date: datetime
    subtotal: Money
    tax_rate: Money
    tax_amount: Money
    discount_rate: Money
    discount_amount: Money
    total_amount: Money
    payment_method: PaymentMethod
    status: InvoiceStatus
    notes: Optional[str]
    seller_name: str
    seller_email: Optional[str]
    seller_phone: Optional[str]
    seller_address: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class InvoiceDetailResponse(BaseModel):
    invoice: InvoiceResponse
    customer: CustomerResponse
    items: List[InvoiceItemResponse] = []
    payments: List[PaymentResponse] = []
