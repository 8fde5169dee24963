import logging
from typing import List

from billing.errors import NotFoundError, ValidationError
from billing.models.customer import Customer
from billing.repositories.base import BillingRepository
from billing.schemas.customer import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)


def create_customer(repo: BillingRepository, customer_in: CustomerCreate) -> Customer:
    try:
        with repo.transaction():
            customer = repo.insert_customer(customer_in.model_dump())
    except Exception as e:
        logger.error(f"Customer creation failed: {str(e)}", exc_info=True)
        raise
    logger.info(f"Created customer {customer.id}: {customer.name}")
    return customer


def list_customers(repo: BillingRepository) -> List[Customer]:
    return repo.list_customers()


def update_customer(repo: BillingRepository, customer_id: int, customer_in: CustomerUpdate) -> Customer:
    """Write only the fields that were sent. A name cannot be cleared."""
    changes = customer_in.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] is None:
        del changes["name"]
    try:
        with repo.transaction():
            if not repo.find_customer(customer_id):
                raise NotFoundError("Customer", customer_id)
            customer = repo.update_customer_fields(customer_id, changes)
    except Exception as e:
        logger.error(f"Failed to update customer {customer_id}: {str(e)}", exc_info=True)
        raise
    return customer


def delete_customer(repo: BillingRepository, customer_id: int) -> None:
    """Delete a customer. Customers referenced by invoices are kept."""
    try:
        with repo.transaction():
            if not repo.find_customer(customer_id):
                raise NotFoundError("Customer", customer_id)
            invoice_count = repo.count_invoices_for_customer(customer_id)
            if invoice_count:
                raise ValidationError(
                    f"Customer with id {customer_id} still has {invoice_count} invoice(s) and cannot be deleted"
                )
            repo.delete_customer(customer_id)
    except Exception as e:
        logger.error(f"Failed to delete customer {customer_id}: {str(e)}", exc_info=True)
        raise
    logger.info(f"Deleted customer {customer_id}")
