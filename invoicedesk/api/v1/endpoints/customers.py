from typing import Optional
import uuid
from math import ceil

from fastapi import APIRouter, HTTPException, status, Query

from invoicedesk.api.deps import DB
from invoicedesk.schemas.customer import (
    CustomerCreate,
    CustomerUpdate,
    CustomerResponse,
    CustomerListResponse,
)
from invoicedesk.services.customer_service import CustomerService


router = APIRouter(tags=["Customers"])


@router.get("", response_model=CustomerListResponse)
async def list_customers(
    db: DB,
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search by name, phone, email"),
):
    """Get paginated list of saved customers."""
    service = CustomerService(db)
    skip = (page - 1) * size

    customers, total = await service.get_customers(search=search, skip=skip, limit=size)

    return CustomerListResponse(
        items=[CustomerResponse.model_validate(c) for c in customers],
        total=total,
        page=page,
        size=size,
        pages=ceil(total / size) if total > 0 else 1,
    )


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(customer_id: uuid.UUID, db: DB):
    """Get a customer by ID."""
    customer = await CustomerService(db).get_customer(customer_id)
    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    return CustomerResponse.model_validate(customer)


@router.post(
    "",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_customer(data: CustomerCreate, db: DB):
    """Create a new customer."""
    customer = await CustomerService(db).create_customer(data)
    return CustomerResponse.model_validate(customer)


@router.put("/{customer_id}", response_model=CustomerResponse)
async def update_customer(customer_id: uuid.UUID, data: CustomerUpdate, db: DB):
    """Update a customer. Past invoices keep their own snapshot."""
    customer = await CustomerService(db).update_customer(customer_id, data)
    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    return CustomerResponse.model_validate(customer)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(customer_id: uuid.UUID, db: DB):
    """Delete a customer."""
    if not await CustomerService(db).delete_customer(customer_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
