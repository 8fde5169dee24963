from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from billing.errors import ConflictError, NotFoundError
from billing.models.customer import Customer
from billing.models.enums import InvoiceStatus
from billing.models.invoice import Invoice
from billing.models.invoice_item import InvoiceItem
from billing.models.invoice_sequence import InvoiceSequence
from billing.models.payment import Payment
from billing.repositories.base import BillingRepository

logger = logging.getLogger(__name__)

INVOICE_SEQUENCE_NAME = "invoice"


class SqlBillingRepository(BillingRepository):
    """BillingRepository backed by a SQLAlchemy session"""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self):
        try:
            yield self
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Transaction rolled back on integrity error: {e.orig}")
            raise ConflictError(f"Conflicting write: {e.orig}") from e
        except Exception:
            self.db.rollback()
            raise

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_invoice(self, invoice_id: int) -> Optional[Invoice]:
        return self.db.query(Invoice).filter(Invoice.id == invoice_id).first()

    def lock_invoice(self, invoice_id: int) -> Optional[Invoice]:
        # populate_existing so a stale copy in the identity map is refreshed from the locked row
        return (
            self.db.query(Invoice)
            .filter(Invoice.id == invoice_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def find_customer(self, customer_id: int) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.id == customer_id).first()

    def list_invoices(self, status: Optional[str] = None, ids: Optional[List[int]] = None) -> List[Invoice]:
        query = self.db.query(Invoice)
        if status:
            query = query.filter(Invoice.status == status)
        if ids is not None:
            if not ids:
                return []
            query = query.filter(Invoice.id.in_(ids))
        return query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()

    def list_invoices_with_status(self, status: str) -> List[Invoice]:
        return self.list_invoices(status=status)

    def list_items_for_invoice(self, invoice_id: int) -> List[InvoiceItem]:
        return (
            self.db.query(InvoiceItem)
            .filter(InvoiceItem.invoice_id == invoice_id)
            .order_by(InvoiceItem.id)
            .all()
        )

    def list_payments_for_invoice(self, invoice_id: int) -> List[Payment]:
        return (
            self.db.query(Payment)
            .filter(Payment.invoice_id == invoice_id)
            .order_by(Payment.id)
            .all()
        )

    def list_customers(self) -> List[Customer]:
        return self.db.query(Customer).order_by(Customer.created_at.desc(), Customer.id.desc()).all()

    def count_invoices_for_customer(self, customer_id: int) -> int:
        return self.db.query(Invoice).filter(Invoice.customer_id == customer_id).count()

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    def next_invoice_sequence(self) -> int:
        sequences = InvoiceSequence.__table__
        # A single UPDATE takes the row lock, so concurrent callers queue behind each other
        result = self.db.execute(
            update(sequences)
            .where(sequences.c.name == INVOICE_SEQUENCE_NAME)
            .values(last_value=sequences.c.last_value + 1)
        )
        if result.rowcount == 0:
            # First invoice ever; a concurrent first insert fails on the primary key
            self.db.add(InvoiceSequence(name=INVOICE_SEQUENCE_NAME, last_value=1))
            self.db.flush()
            return 1
        return self.db.execute(
            select(sequences.c.last_value).where(sequences.c.name == INVOICE_SEQUENCE_NAME)
        ).scalar_one()

    def insert_invoice(self, fields: Dict[str, Any]) -> Invoice:
        invoice = Invoice(**fields)
        self.db.add(invoice)
        self.db.flush()  # Get the ID without committing
        return invoice

    def replace_invoice_items(self, invoice_id: int, items: Iterable[Any]) -> List[InvoiceItem]:
        invoice = self.find_invoice(invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        # delete-orphan removes the previous rows on flush
        invoice.items = [
            InvoiceItem(
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total=item.total,
            )
            for item in items
        ]
        self.db.flush()
        return list(invoice.items)

    def update_invoice_fields(self, invoice_id: int, fields: Dict[str, Any]) -> Invoice:
        invoice = self.find_invoice(invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        for key, value in fields.items():
            setattr(invoice, key, value)
        self.db.flush()
        return invoice

    def mark_overdue(self, now: datetime) -> List[int]:
        unpaid = InvoiceStatus.UNPAID.value
        values = {"status": InvoiceStatus.OVERDUE.value, "updated_at": now}

        if self.db.get_bind().dialect.update_returning:
            stmt = (
                update(Invoice)
                .where(Invoice.status == unpaid, Invoice.due_date < now)
                .values(**values)
                .returning(Invoice.id)
                .execution_options(synchronize_session=False)
            )
            return [row[0] for row in self.db.execute(stmt)]

        # No UPDATE ... RETURNING: lock the candidates, then update them conditionally
        ids = [
            row.id
            for row in self.db.query(Invoice.id)
            .filter(Invoice.status == unpaid, Invoice.due_date < now)
            .with_for_update()
            .all()
        ]
        if ids:
            self.db.query(Invoice).filter(
                Invoice.id.in_(ids), Invoice.status == unpaid
            ).update(values, synchronize_session=False)
        return ids

    def delete_invoice(self, invoice_id: int) -> None:
        invoice = self.find_invoice(invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        self.db.delete(invoice)
        self.db.flush()

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def insert_payment(
        self,
        invoice_id: int,
        amount: Decimal,
        payment_date: datetime,
        payment_method: str,
        notes: Optional[str] = None,
    ) -> Payment:
        payment = Payment(
            invoice_id=invoice_id,
            amount=amount,
            payment_date=payment_date,
            payment_method=payment_method,
            notes=notes,
        )
        self.db.add(payment)
        self.db.flush()
        return payment

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    def insert_customer(self, fields: Dict[str, Any]) -> Customer:
        customer = Customer(**fields)
        self.db.add(customer)
        self.db.flush()
        return customer

    def update_customer_fields(self, customer_id: int, fields: Dict[str, Any]) -> Customer:
        customer = self.find_customer(customer_id)
        if not customer:
            raise NotFoundError("Customer", customer_id)
        for key, value in fields.items():
            setattr(customer, key, value)
        self.db.flush()
        return customer

    def delete_customer(self, customer_id: int) -> None:
        customer = self.find_customer(customer_id)
        if not customer:
            raise NotFoundError("Customer", customer_id)
        self.db.delete(customer)
        self.db.flush()
