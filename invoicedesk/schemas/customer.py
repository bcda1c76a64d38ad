"""Pydantic schemas for saved customers."""
from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import Field

from invoicedesk.schemas.base import (
    BaseCreateSchema, BaseResponseSchema, BaseUpdateSchema, PaginatedResponse,
)


class CustomerBase(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=1000)


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseUpdateSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=1000)


class CustomerResponse(BaseResponseSchema):
    id: UUID
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CustomerListResponse(PaginatedResponse):
    items: List[CustomerResponse]
