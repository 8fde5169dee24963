from enum import Enum


class InvoiceStatus(str, Enum):
    """Lifecycle states of an invoice"""
    UNPAID = "Unpaid"
    PARTIAL = "Partial"
    PAID = "Paid"
    OVERDUE = "Overdue"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "Bank Transfer"
    CASH = "Cash"
    CREDIT_CARD = "Credit Card"
    CHECK = "Check"
    OTHER = "Other"
