from billing.models.enums import InvoiceStatus, PaymentMethod
from billing.models.customer import Customer
from billing.models.invoice import Invoice
from billing.models.invoice_item import InvoiceItem
from billing.models.payment import Payment
from billing.models.invoice_sequence import InvoiceSequence

__all__ = ["InvoiceStatus", "PaymentMethod", "Customer", "Invoice", "InvoiceItem", "Payment", "InvoiceSequence"]
