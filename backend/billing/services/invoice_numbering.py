"""
Invoice number allocation.

Numbers are a fixed prefix plus a zero-padded sequence value (INV-000001). The
sequence lives in a single counter row that is advanced with one atomic
UPDATE, and invoices.invoice_number carries a unique constraint, so two
concurrent creations can never commit the same number. A collision surfaces
as ConflictError and the whole creation transaction is retried.
"""
import logging
from typing import Callable, Optional, TypeVar

from billing.config import settings
from billing.errors import ConflictError
from billing.repositories.base import BillingRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


def format_invoice_number(sequence: int, prefix: Optional[str] = None, width: Optional[int] = None) -> str:
    prefix = settings.invoice_number_prefix if prefix is None else prefix
    width = settings.invoice_number_width if width is None else width
    return f"{prefix}{str(sequence).zfill(width)}"


def allocate_invoice_number(repo: BillingRepository) -> str:
    """Reserve the next invoice number. Must run inside repo.transaction()."""
    sequence = repo.next_invoice_sequence()
    invoice_number = format_invoice_number(sequence)
    logger.info(f"Allocated invoice number {invoice_number}")
    return invoice_number


def with_invoice_number_retry(operation: Callable[[], T], max_attempts: Optional[int] = None) -> T:
    """
    Run a transactional operation that allocates an invoice number, retrying on ConflictError.

    Args:
        operation: Callable that opens its own transaction and allocates a number inside it
        max_attempts: Defaults to settings.invoice_number_max_retries

    Raises:
        ConflictError: if every attempt collided
    """
    max_attempts = max_attempts or settings.invoice_number_max_retries
    for attempt in range(1, max_attempts + 1):
        try:
            return operation()
        except ConflictError:
            if attempt == max_attempts:
                logger.error(f"Invoice number allocation failed after {attempt} attempts")
                raise
            logger.warning(f"Invoice number collision, retrying (attempt {attempt}/{max_attempts})")
