"""
Status Resolver - derives invoice status from the payments recorded against it.

Unpaid -> Partial -> Paid. Paid is terminal here: no path through this module
moves a Paid invoice back to Partial or Unpaid.
"""
from decimal import Decimal
from typing import Iterable, Optional, Union
import logging

from billing.errors import NotFoundError, ValidationError
from billing.models.enums import InvoiceStatus, PaymentMethod
from billing.models.payment import Payment
from billing.repositories.base import BillingRepository
from billing.schemas.payment import PaymentCreate
from billing.services.invoice_calculator import to_decimal
from billing.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


def resolve_status(
    total_amount: Decimal,
    payment_amounts: Iterable[Decimal],
    current_status: Optional[Union[InvoiceStatus, str]] = None,
) -> InvoiceStatus:
    """
    Status implied by cumulative payments.

    Paid when the payments cover the total (overpayment included), Partial when
    anything has been paid, otherwise Unpaid. A current status of Paid is kept.
    """
    if current_status is not None and InvoiceStatus(current_status) == InvoiceStatus.PAID:
        return InvoiceStatus.PAID

    total_paid = sum(payment_amounts, Decimal("0"))
    if total_paid >= total_amount:
        return InvoiceStatus.PAID
    if total_paid > 0:
        return InvoiceStatus.PARTIAL
    return InvoiceStatus.UNPAID


def apply_payment(invoice, prior_payments: Iterable, new_amount: Decimal) -> InvoiceStatus:
    """Status of `invoice` once `new_amount` is added to its prior payments"""
    amounts = [payment.amount for payment in prior_payments]
    amounts.append(new_amount)
    return resolve_status(invoice.total_amount, amounts, current_status=invoice.status)


def record_payment(repo: BillingRepository, payment_in: PaymentCreate) -> Payment:
    """
    Record a payment and move the invoice to the status it implies.

    The invoice row is locked for the duration, and the payment row and the
    status change commit together.

    Raises:
        ValidationError: if the amount is not positive
        NotFoundError: if the invoice does not exist
    """
    amount = to_decimal(payment_in.amount, "amount")
    if amount <= 0:
        raise ValidationError(f"Payment amount must be positive, got {amount}")

    try:
        with repo.transaction():
            invoice = repo.lock_invoice(payment_in.invoice_id)
            if not invoice:
                raise NotFoundError("Invoice", payment_in.invoice_id)

            prior_payments = repo.list_payments_for_invoice(invoice.id)
            payment = repo.insert_payment(
                invoice_id=invoice.id,
                amount=amount,
                payment_date=payment_in.payment_date,
                payment_method=PaymentMethod(payment_in.payment_method).value,
                notes=payment_in.notes,
            )

            current_status = InvoiceStatus(invoice.status)
            new_status = apply_payment(invoice, prior_payments, amount)
            total_paid = sum((p.amount for p in prior_payments), Decimal("0")) + amount
            if total_paid > invoice.total_amount:
                logger.warning(
                    f"Invoice {invoice.invoice_number} overpaid: {total_paid} received against {invoice.total_amount}"
                )

            if new_status != current_status:
                repo.update_invoice_fields(invoice.id, {
                    "status": new_status.value,
                    "updated_at": utcnow(),
                })
                logger.info(f"Invoice {invoice.invoice_number} status {current_status.value} -> {new_status.value}")
    except Exception as e:
        logger.error(f"Payment creation failed for invoice {payment_in.invoice_id}: {str(e)}", exc_info=True)
        raise

    return payment
