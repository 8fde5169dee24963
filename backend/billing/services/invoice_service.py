"""
Invoice Service - creation, editing and lookup of invoices.

Monetary fields are never taken from the caller: they are always derived by
the invoice calculator from the line items and rates.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from billing.config import settings
from billing.errors import NotFoundError
from billing.models.enums import InvoiceStatus, PaymentMethod
from billing.models.invoice import Invoice
from billing.repositories.base import BillingRepository
from billing.schemas.invoice import InvoiceCreate, InvoiceUpdate, InvoiceItemCreate
from billing.services.invoice_calculator import (
    InvoiceTotals,
    LineItemInput,
    compute_invoice_totals,
    make_line_item,
)
from billing.services.invoice_numbering import allocate_invoice_number, with_invoice_number_retry
from billing.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

# Fields copied verbatim from an InvoiceUpdate when present
_PLAIN_UPDATE_FIELDS = (
    "customer_id",
    "due_date",
    "payment_method",
    "status",
    "notes",
    "seller_name",
    "seller_email",
    "seller_phone",
    "seller_address",
)
# Columns that may not be cleared through an update
_NON_NULLABLE_FIELDS = {"customer_id", "due_date", "payment_method", "status", "seller_name"}


def _line_items(items: List[Any]) -> List[LineItemInput]:
    result = []
    for item in items:
        if isinstance(item, dict):
            result.append(make_line_item(item.get("description"), item.get("quantity"), item.get("unit_price")))
        else:
            result.append(make_line_item(item.description, item.quantity, item.unit_price))
    return result


def _money_fields(totals: InvoiceTotals, tax_rate: Decimal, discount_rate: Decimal) -> Dict[str, Decimal]:
    return {
        "subtotal": totals.subtotal,
        "tax_rate": tax_rate,
        "tax_amount": totals.tax_amount,
        "discount_rate": discount_rate,
        "discount_amount": totals.discount_amount,
        "total_amount": totals.total_amount,
    }


def _enum_value(value):
    return value.value if isinstance(value, (InvoiceStatus, PaymentMethod)) else value


def preview_totals(items: List[InvoiceItemCreate], tax_rate, discount_rate) -> InvoiceTotals:
    """Totals an invoice with these items and rates would get, without persisting anything"""
    return compute_invoice_totals(_line_items(items), tax_rate, discount_rate)


def create_invoice(repo: BillingRepository, invoice_in: InvoiceCreate) -> Invoice:
    """
    Create an invoice with its line items.

    Totals are computed first so bad input fails before any number is
    allocated. Number allocation, the invoice row and its items commit in one
    transaction, which is retried as a whole on a number collision.

    Raises:
        ValidationError: bad items or rates
        NotFoundError: customer does not exist
        ConflictError: invoice number could not be allocated
    """
    tax_rate = invoice_in.tax_rate if invoice_in.tax_rate is not None else settings.default_tax_rate
    discount_rate = (
        invoice_in.discount_rate if invoice_in.discount_rate is not None else settings.default_discount_rate
    )
    items = _line_items(invoice_in.items)
    totals = compute_invoice_totals(items, tax_rate, discount_rate)

    def _create() -> Invoice:
        with repo.transaction():
            if not repo.find_customer(invoice_in.customer_id):
                raise NotFoundError("Customer", invoice_in.customer_id)

            invoice_number = allocate_invoice_number(repo)
            fields = {
                "invoice_number": invoice_number,
                "customer_id": invoice_in.customer_id,
                "due_date": invoice_in.due_date,
                "payment_method": _enum_value(invoice_in.payment_method),
                "status": InvoiceStatus.UNPAID.value,
                "notes": invoice_in.notes,
                "seller_name": invoice_in.seller_name,
                "seller_email": invoice_in.seller_email,
                "seller_phone": invoice_in.seller_phone,
                "seller_address": invoice_in.seller_address,
            }
            fields.update(_money_fields(totals, tax_rate, discount_rate))
            invoice = repo.insert_invoice(fields)
            repo.replace_invoice_items(invoice.id, items)
        return invoice

    try:
        invoice = with_invoice_number_retry(_create)
    except Exception as e:
        logger.error(f"Invoice creation failed: {str(e)}", exc_info=True)
        raise

    logger.info(
        f"Created invoice {invoice.invoice_number} for customer {invoice.customer_id}: "
        f"total {totals.total_amount}"
    )
    return invoice


def update_invoice(repo: BillingRepository, invoice_id: int, invoice_in: InvoiceUpdate) -> Invoice:
    """
    Partially update an invoice.

    When items, tax_rate or discount_rate are sent, the monetary fields are
    recomputed, using the stored rates and stored items for whatever was not
    sent. Sent items replace the stored ones wholesale.

    Raises:
        NotFoundError: invoice, or a newly referenced customer, does not exist
        ValidationError: bad items or rates
    """
    changes = invoice_in.model_dump(exclude_unset=True)

    try:
        with repo.transaction():
            invoice = repo.lock_invoice(invoice_id)
            if not invoice:
                raise NotFoundError("Invoice", invoice_id)

            if changes.get("customer_id") is not None and not repo.find_customer(changes["customer_id"]):
                raise NotFoundError("Customer", changes["customer_id"])

            fields: Dict[str, Any] = {"updated_at": utcnow()}
            for key in _PLAIN_UPDATE_FIELDS:
                if key not in changes:
                    continue
                if changes[key] is None and key in _NON_NULLABLE_FIELDS:
                    continue
                fields[key] = _enum_value(changes[key])

            new_items: Optional[List[LineItemInput]] = None
            if changes.get("items"):
                new_items = _line_items(changes["items"])

            recompute = any(changes.get(key) is not None for key in ("items", "tax_rate", "discount_rate"))
            if recompute:
                tax_rate = changes["tax_rate"] if changes.get("tax_rate") is not None else invoice.tax_rate
                discount_rate = (
                    changes["discount_rate"] if changes.get("discount_rate") is not None else invoice.discount_rate
                )
                items = new_items if new_items is not None else _line_items(repo.list_items_for_invoice(invoice_id))
                totals = compute_invoice_totals(items, tax_rate, discount_rate)
                fields.update(_money_fields(totals, tax_rate, discount_rate))

            invoice = repo.update_invoice_fields(invoice_id, fields)
            if new_items is not None:
                repo.replace_invoice_items(invoice_id, new_items)
    except Exception as e:
        logger.error(f"Failed to update invoice {invoice_id}: {str(e)}", exc_info=True)
        raise

    logger.info(f"Updated invoice {invoice.invoice_number} (recomputed totals: {recompute})")
    return invoice


def update_invoice_status(repo: BillingRepository, invoice_id: int, status: InvoiceStatus) -> Invoice:
    """Manual status override. Unlike payment recording, this may move a Paid invoice back."""
    status = InvoiceStatus(status)
    try:
        with repo.transaction():
            invoice = repo.lock_invoice(invoice_id)
            if not invoice:
                raise NotFoundError("Invoice", invoice_id)
            previous = invoice.status
            invoice = repo.update_invoice_fields(invoice_id, {"status": status.value, "updated_at": utcnow()})
    except Exception as e:
        logger.error(f"Invoice status update failed: {str(e)}", exc_info=True)
        raise

    logger.info(f"Invoice {invoice.invoice_number} status manually set {previous} -> {status.value}")
    return invoice


def list_invoices(repo: BillingRepository, status: Optional[InvoiceStatus] = None) -> List[Invoice]:
    """Invoices newest first, optionally filtered by status"""
    if status is not None:
        return repo.list_invoices_with_status(InvoiceStatus(status).value)
    return repo.list_invoices()


def get_invoice(repo: BillingRepository, invoice_id: int) -> Invoice:
    invoice = repo.find_invoice(invoice_id)
    if not invoice:
        raise NotFoundError("Invoice", invoice_id)
    return invoice


def get_invoice_details(repo: BillingRepository, invoice_id: int) -> Dict[str, Any]:
    """Invoice together with its customer, line items and payments"""
    invoice = get_invoice(repo, invoice_id)
    customer = repo.find_customer(invoice.customer_id)
    if not customer:
        raise NotFoundError("Customer", invoice.customer_id)
    return {
        "invoice": invoice,
        "customer": customer,
        "items": repo.list_items_for_invoice(invoice_id),
        "payments": repo.list_payments_for_invoice(invoice_id),
    }


def list_payments(repo: BillingRepository, invoice_id: int):
    get_invoice(repo, invoice_id)
    return repo.list_payments_for_invoice(invoice_id)


def delete_invoice(repo: BillingRepository, invoice_id: int) -> None:
    """Delete an invoice; its line items and payments go with it"""
    try:
        with repo.transaction():
            repo.delete_invoice(invoice_id)
    except Exception as e:
        logger.error(f"Failed to delete invoice {invoice_id}: {str(e)}", exc_info=True)
        raise
    logger.info(f"Deleted invoice {invoice_id}")
