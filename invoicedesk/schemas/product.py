"""Pydantic schemas for catalog products."""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from uuid import UUID

from pydantic import AliasChoices, Field

from invoicedesk.schemas.base import (
    BaseCreateSchema, BaseResponseSchema, BaseUpdateSchema, PaginatedResponse,
)


class ProductBase(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    unit: str = Field("PCS", min_length=1, max_length=20)
    tax_rate: Decimal = Field(
        Decimal("0"), ge=0, le=100,
        validation_alias=AliasChoices("tax_rate", "taxRate"),
    )


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseUpdateSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=20)
    tax_rate: Optional[Decimal] = Field(
        None, ge=0, le=100,
        validation_alias=AliasChoices("tax_rate", "taxRate"),
    )


class ProductResponse(BaseResponseSchema):
    id: UUID
    name: str
    description: Optional[str] = None
    price: Decimal
    unit: str
    tax_rate: Decimal
    created_at: datetime
    updated_at: datetime


class ProductListResponse(PaginatedResponse):
    items: List[ProductResponse]
