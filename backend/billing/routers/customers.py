from fastapi import APIRouter, Depends
from typing import List
from billing.repositories.base import BillingRepository
from billing.routers.deps import get_repository
from billing.schemas.customer import CustomerCreate, CustomerUpdate, CustomerResponse
from billing.services import customer_service

router = APIRouter(prefix="/api/customers", tags=["customers"])


@router.post("", response_model=CustomerResponse, status_code=201)
def create_customer(customer_in: CustomerCreate, repo: BillingRepository = Depends(get_repository)):
    """Create a customer"""
    return customer_service.create_customer(repo, customer_in)


@router.get("", response_model=List[CustomerResponse])
def list_customers(repo: BillingRepository = Depends(get_repository)):
    """List all customers, newest first"""
    return customer_service.list_customers(repo)


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    customer_in: CustomerUpdate,
    repo: BillingRepository = Depends(get_repository)
):
    """Update the fields that are sent"""
    return customer_service.update_customer(repo, customer_id, customer_in)


@router.delete("/{customer_id}")
def delete_customer(customer_id: int, repo: BillingRepository = Depends(get_repository)):
    """Delete a customer that has no invoices"""
    customer_service.delete_customer(repo, customer_id)
    return {"message": "Customer deleted", "customer_id": customer_id}
