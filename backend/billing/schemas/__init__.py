from billing.schemas.customer import CustomerCreate, CustomerUpdate, CustomerResponse
from billing.schemas.payment import PaymentCreate, PaymentResponse
from billing.schemas.invoice import (
    InvoiceItemCreate,
    InvoiceItemResponse,
    InvoiceTotalsRequest,
    InvoiceTotalsResponse,
    InvoiceCreate,
    InvoiceUpdate,
    InvoiceStatusUpdate,
    InvoiceResponse,
    InvoiceDetailResponse,
)

__all__ = [
    "CustomerCreate",
    "CustomerUpdate",
    "CustomerResponse",
    "PaymentCreate",
    "PaymentResponse",
    "InvoiceItemCreate",
    "InvoiceItemResponse",
    "InvoiceTotalsRequest",
    "InvoiceTotalsResponse",
    "InvoiceCreate",
    "InvoiceUpdate",
    "InvoiceStatusUpdate",
    "InvoiceResponse",
    "InvoiceDetailResponse",
]
