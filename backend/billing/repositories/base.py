"""
Repository abstraction the billing core runs against.

Money crosses this boundary as Decimal and timestamps as datetime. Writes made
inside transaction() are committed together or not at all.
"""
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from billing.models.customer import Customer
from billing.models.invoice import Invoice
from billing.models.invoice_item import InvoiceItem
from billing.models.payment import Payment


class BillingRepository(ABC):

    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        """Commit everything written inside the block, or roll it all back on error"""

    # Lookups
    @abstractmethod
    def find_invoice(self, invoice_id: int) -> Optional[Invoice]:
        ...

    @abstractmethod
    def lock_invoice(self, invoice_id: int) -> Optional[Invoice]:
        """Like find_invoice, but holds a row lock until the transaction ends"""

    @abstractmethod
    def find_customer(self, customer_id: int) -> Optional[Customer]:
        ...

    @abstractmethod
    def list_invoices(self, status: Optional[str] = None, ids: Optional[List[int]] = None) -> List[Invoice]:
        ...

    @abstractmethod
    def list_invoices_with_status(self, status: str) -> List[Invoice]:
        ...

    @abstractmethod
    def list_items_for_invoice(self, invoice_id: int) -> List[InvoiceItem]:
        ...

    @abstractmethod
    def list_payments_for_invoice(self, invoice_id: int) -> List[Payment]:
        ...

    @abstractmethod
    def list_customers(self) -> List[Customer]:
        ...

    # Writes
    @abstractmethod
    def next_invoice_sequence(self) -> int:
        """Atomically advance the invoice counter and return the new value"""

    @abstractmethod
    def insert_invoice(self, fields: Dict[str, Any]) -> Invoice:
        ...

    @abstractmethod
    def replace_invoice_items(self, invoice_id: int, items: Iterable[Any]) -> List[InvoiceItem]:
        ...

    @abstractmethod
    def update_invoice_fields(self, invoice_id: int, fields: Dict[str, Any]) -> Invoice:
        ...

    @abstractmethod
    def mark_overdue(self, now: datetime) -> List[int]:
        """Move every Unpaid invoice due before `now` to Overdue in one statement; return their ids"""

    @abstractmethod
    def delete_invoice(self, invoice_id: int) -> None:
        ...

    @abstractmethod
    def insert_payment(
        self,
        invoice_id: int,
        amount: Decimal,
        payment_date: datetime,
        payment_method: str,
        notes: Optional[str] = None,
    ) -> Payment:
        ...

    @abstractmethod
    def insert_customer(self, fields: Dict[str, Any]) -> Customer:
        ...

    @abstractmethod
    def update_customer_fields(self, customer_id: int, fields: Dict[str, Any]) -> Customer:
        ...

    @abstractmethod
    def delete_customer(self, customer_id: int) -> None:
        ...

    @abstractmethod
    def count_invoices_for_customer(self, customer_id: int) -> int:
        ...
