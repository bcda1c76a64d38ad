from typing import Optional
import uuid
from math import ceil

from fastapi import APIRouter, HTTPException, status, Query

from invoicedesk.api.deps import DB
from invoicedesk.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
)
from invoicedesk.services.product_service import ProductService


router = APIRouter(tags=["Products"])


@router.get("", response_model=ProductListResponse)
async def list_products(
    db: DB,
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search by name or description"),
):
    """Get paginated list of catalog products."""
    service = ProductService(db)
    skip = (page - 1) * size

    products, total = await service.get_products(search=search, skip=skip, limit=size)

    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        size=size,
        pages=ceil(total / size) if total > 0 else 1,
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: uuid.UUID, db: DB):
    """Get a product by ID."""
    product = await ProductService(db).get_product(product_id)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )
    return ProductResponse.model_validate(product)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_product(data: ProductCreate, db: DB):
    """Create a new product."""
    product = await ProductService(db).create_product(data)
    return ProductResponse.model_validate(product)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(product_id: uuid.UUID, data: ProductUpdate, db: DB):
    """Update a product."""
    product = await ProductService(db).update_product(product_id, data)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )
    return ProductResponse.model_validate(product)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: uuid.UUID, db: DB):
    """Delete a product."""
    if not await ProductService(db).delete_product(product_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )
