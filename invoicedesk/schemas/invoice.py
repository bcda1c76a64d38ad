"""Pydantic schemas for invoices and line items."""
import datetime as dt
import uuid
from decimal import Decimal
from typing import Optional, List, Union

from pydantic import AliasChoices, BaseModel, Field, computed_field, field_validator, model_validator

from invoicedesk.core.enum_utils import normalize_to_lowercase
from invoicedesk.models.invoice import InvoiceStatus
from invoicedesk.schemas.base import (
    BaseCreateSchema, BaseResponseSchema, BaseUpdateSchema, PaginatedResponse,
)
from invoicedesk.services.totals_service import compute_totals

# Numeric form fields: a number, a numeric string, or "" while still being typed
NumericInput = Optional[Union[Decimal, str]]


# ==================== Line Items ====================

class InvoiceItem(BaseCreateSchema):
    """One invoice line. Numeric fields are kept as entered; totals coerce blanks to zero."""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str = Field("", max_length=300)
    quantity: NumericInput = Decimal("0")
    unit: str = Field("PCS", max_length=20)
    price: NumericInput = Decimal("0")
    discount: NumericInput = Field(None, description="Percentage (0-100)")
    tax_rate: NumericInput = Field(None, validation_alias=AliasChoices("tax_rate", "taxRate"), description="Percentage (0-100)")

    @field_validator('unit', mode='before')
    @classmethod
    def default_unit(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return "PCS"
        return v


class InvoiceTotalsSchema(BaseResponseSchema):
    """Totals computed from the current line items."""
    subtotal: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal
    round_off: Decimal
    total: Decimal


class TotalsPreviewRequest(BaseCreateSchema):
    """Unsaved draft sent from the editor for live totals."""
    items: List[InvoiceItem] = []
    tax_rate: NumericInput = Field(Decimal("0"), validation_alias=AliasChoices("tax_rate", "taxRate"))
    discount: NumericInput = Decimal("0")


# ==================== Invoice ====================

class InvoiceBase(BaseCreateSchema):
    """Fields shared by create requests and the in-memory invoice handed to the renderer."""
    invoice_number: str = Field(..., min_length=1, max_length=50, validation_alias=AliasChoices("invoice_number", "invoiceNumber"))
    date: dt.date

    # Customer snapshot
    customer_name: str = Field(..., min_length=1, max_length=200, validation_alias=AliasChoices("customer_name", "customerName"))
    customer_email: Optional[str] = Field(None, max_length=255, validation_alias=AliasChoices("customer_email", "customerEmail"))
    customer_phone: Optional[str] = Field(None, max_length=50, validation_alias=AliasChoices("customer_phone", "customerPhone"))
    customer_address: Optional[str] = Field(None, max_length=1000, validation_alias=AliasChoices("customer_address", "customerAddress"))

    items: List[InvoiceItem] = []
    tax_rate: Decimal = Field(Decimal("0"), validation_alias=AliasChoices("tax_rate", "taxRate"))
    discount: Decimal = Decimal("0")
    notes: Optional[str] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT

    @field_validator('status', mode='before')
    @classmethod
    def normalize_status(cls, v):
        return normalize_to_lowercase(v)

    @model_validator(mode='after')
    def require_items_unless_draft(self):
        if self.status != InvoiceStatus.DRAFT and not self.items:
            raise ValueError("An invoice needs at least one line item unless it is a draft")
        return self


class InvoiceCreate(InvoiceBase):
    """Schema for creating an invoice. invoice_number may be omitted to auto-number."""
    invoice_number: Optional[str] = Field(None, max_length=50, validation_alias=AliasChoices("invoice_number", "invoiceNumber"))


class InvoiceUpdate(BaseUpdateSchema):
    """Schema for updating an invoice (replace provided fields)."""
    invoice_number: Optional[str] = Field(None, min_length=1, max_length=50, validation_alias=AliasChoices("invoice_number", "invoiceNumber"))
    date: Optional[dt.date] = None
    customer_name: Optional[str] = Field(None, min_length=1, max_length=200, validation_alias=AliasChoices("customer_name", "customerName"))
    customer_email: Optional[str] = Field(None, max_length=255, validation_alias=AliasChoices("customer_email", "customerEmail"))
    customer_phone: Optional[str] = Field(None, max_length=50, validation_alias=AliasChoices("customer_phone", "customerPhone"))
    customer_address: Optional[str] = Field(None, max_length=1000, validation_alias=AliasChoices("customer_address", "customerAddress"))
    items: Optional[List[InvoiceItem]] = None
    tax_rate: Optional[Decimal] = Field(None, validation_alias=AliasChoices("tax_rate", "taxRate"))
    discount: Optional[Decimal] = None
    notes: Optional[str] = None
    status: Optional[InvoiceStatus] = None

    @field_validator('status', mode='before')
    @classmethod
    def normalize_status(cls, v):
        return normalize_to_lowercase(v)


class InvoiceStatusUpdate(BaseModel):
    """Schema for changing only the status."""
    status: InvoiceStatus

    @field_validator('status', mode='before')
    @classmethod
    def normalize_status(cls, v):
        return normalize_to_lowercase(v)


class InvoiceResponse(BaseResponseSchema):
    """Response schema for Invoice. Totals are recomputed on every read."""
    id: uuid.UUID
    invoice_number: str
    date: dt.date
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    items: List[InvoiceItem] = []
    tax_rate: Decimal
    discount: Decimal
    notes: Optional[str] = None
    status: str
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @computed_field
    @property
    def totals(self) -> InvoiceTotalsSchema:
        return InvoiceTotalsSchema.model_validate(
            compute_totals(self.items, self.tax_rate, self.discount)
        )


class InvoiceListResponse(PaginatedResponse):
    """Response for listing invoices."""
    items: List[InvoiceResponse]


class NextInvoiceNumberResponse(BaseModel):
    invoice_number: str


# ==================== Stats ====================

class InvoiceStats(BaseModel):
    """Invoice counts per status."""
    total: int = 0
    draft: int = 0
    pending: int = 0
    paid: int = 0
    overdue: int = 0
    cancelled: int = 0


class DashboardStats(BaseModel):
    """Revenue summary for the dashboard."""
    total_invoices: int = 0
    total_revenue: Decimal = Decimal("0")
    pending_amount: Decimal = Decimal("0")
    paid_count: int = 0
    pending_count: int = 0
    overdue_count: int = 0
    this_month_revenue: Decimal = Decimal("0")
