from fastapi import APIRouter, Depends
from billing.repositories.base import BillingRepository
from billing.routers.deps import get_repository
from billing.schemas.payment import PaymentCreate, PaymentResponse
from billing.services.status_resolver import record_payment

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("", response_model=PaymentResponse, status_code=201)
def create_payment(payment_in: PaymentCreate, repo: BillingRepository = Depends(get_repository)):
    """Record a payment against an invoice and update the invoice status"""
    return record_payment(repo, payment_in)
