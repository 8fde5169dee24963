"""
Overdue Sweep - batch reclassification of past-due Unpaid invoices.

Only invoices whose stored status is exactly Unpaid are moved. Partial, Paid
and Overdue invoices are left alone. The transition is one conditional UPDATE,
so an invoice that a concurrent payment already moved out of Unpaid is not
overwritten.
"""
from datetime import datetime
from typing import List, Optional
import logging

from billing.models.invoice import Invoice
from billing.repositories.base import BillingRepository
from billing.utils.timeutils import to_utc, utcnow

logger = logging.getLogger(__name__)


def run_overdue_sweep(repo: BillingRepository, now: Optional[datetime] = None) -> List[Invoice]:
    """
    Mark every Unpaid invoice with due_date < now as Overdue.

    Args:
        repo: Billing repository
        now: Reference time, defaults to the current UTC time. Also written to updated_at.

    Returns:
        The invoices that transitioned in this run. Empty when nothing qualified,
        in which case nothing was written.
    """
    now = to_utc(now) if now else utcnow()
    try:
        with repo.transaction():
            invoice_ids = repo.mark_overdue(now)
    except Exception as e:
        logger.error(f"Check overdue invoices failed: {str(e)}", exc_info=True)
        raise

    if not invoice_ids:
        logger.info("Overdue sweep: no invoices to update")
        return []

    invoices = repo.list_invoices(ids=invoice_ids)
    logger.info(
        f"Overdue sweep: marked {len(invoices)} invoice(s) overdue: "
        f"{', '.join(invoice.invoice_number for invoice in invoices)}"
    )
    return invoices
