from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from billing.models.enums import InvoiceStatus
from billing.repositories.base import BillingRepository
from billing.routers.deps import get_repository
from billing.schemas.customer import CustomerResponse
from billing.schemas.invoice import (
    InvoiceCreate,
    InvoiceUpdate,
    InvoiceStatusUpdate,
    InvoiceResponse,
    InvoiceDetailResponse,
    InvoiceItemResponse,
    InvoiceTotalsRequest,
    InvoiceTotalsResponse,
)
from billing.schemas.payment import PaymentResponse
from billing.services import invoice_service
from billing.services.overdue_sweep import run_overdue_sweep

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.get("", response_model=List[InvoiceResponse])
def list_invoices(
    status: Optional[InvoiceStatus] = Query(None, description="Filter by status"),
    repo: BillingRepository = Depends(get_repository)
):
    """List invoices, newest first"""
    return invoice_service.list_invoices(repo, status)


@router.post("", response_model=InvoiceResponse, status_code=201)
def create_invoice(invoice_in: InvoiceCreate, repo: BillingRepository = Depends(get_repository)):
    """Create an invoice; totals are computed from the items and rates"""
    return invoice_service.create_invoice(repo, invoice_in)


@router.post("/totals", response_model=InvoiceTotalsResponse)
def compute_totals(totals_in: InvoiceTotalsRequest):
    """Preview the totals for a set of items and rates without saving anything"""
    totals = invoice_service.preview_totals(totals_in.items, totals_in.tax_rate, totals_in.discount_rate)
    return InvoiceTotalsResponse.model_validate(totals)


@router.post("/check-overdue", response_model=List[InvoiceResponse])
def check_overdue_invoices(repo: BillingRepository = Depends(get_repository)):
    """Move past-due Unpaid invoices to Overdue and return the ones that changed"""
    return run_overdue_sweep(repo)


@router.get("/{invoice_id}", response_model=InvoiceDetailResponse)
def get_invoice_details(invoice_id: int, repo: BillingRepository = Depends(get_repository)):
    """Invoice with its customer, items and payments"""
    details = invoice_service.get_invoice_details(repo, invoice_id)
    return InvoiceDetailResponse(
        invoice=InvoiceResponse.model_validate(details["invoice"]),
        customer=CustomerResponse.model_validate(details["customer"]),
        items=[InvoiceItemResponse.model_validate(item) for item in details["items"]],
        payments=[PaymentResponse.model_validate(payment) for payment in details["payments"]],
    )


@router.put("/{invoice_id}", response_model=InvoiceResponse)
def update_invoice(
    invoice_id: int,
    invoice_in: InvoiceUpdate,
    repo: BillingRepository = Depends(get_repository)
):
    """Edit an invoice; totals are recomputed when items or rates change"""
    return invoice_service.update_invoice(repo, invoice_id, invoice_in)


@router.patch("/{invoice_id}/status", response_model=InvoiceResponse)
def update_invoice_status(
    invoice_id: int,
    status_in: InvoiceStatusUpdate,
    repo: BillingRepository = Depends(get_repository)
):
    """Set the status by hand"""
    return invoice_service.update_invoice_status(repo, invoice_id, status_in.status)


@router.delete("/{invoice_id}")
def delete_invoice(invoice_id: int, repo: BillingRepository = Depends(get_repository)):
    """Delete an invoice together with its items and payments"""
    invoice_service.delete_invoice(repo, invoice_id)
    return {"message": "Invoice deleted", "invoice_id": invoice_id}


@router.get("/{invoice_id}/payments", response_model=List[PaymentResponse])
def list_payments(invoice_id: int, repo: BillingRepository = Depends(get_repository)):
    """Payments recorded against an invoice"""
    return invoice_service.list_payments(repo, invoice_id)
