"""Pydantic schemas for the seller profile and invoice preferences."""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import AliasChoices, Field

from invoicedesk.schemas.base import BaseCreateSchema, BaseResponseSchema, BaseUpdateSchema


# ==================== Business ====================

class Business(BaseCreateSchema):
    """Seller identity as handed to the renderer."""
    name: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    phone: str = ""
    email: str = ""
    tax_id: str = Field("", validation_alias=AliasChoices("tax_id", "taxId"))
    currency: str = "₹"
    tax_rate: Decimal = Field(Decimal("18"), validation_alias=AliasChoices("tax_rate", "taxRate"))
    logo: Optional[str] = None
    signature: Optional[str] = None
    bank_name: Optional[str] = Field(None, validation_alias=AliasChoices("bank_name", "bankName"))
    account_number: Optional[str] = Field(None, validation_alias=AliasChoices("account_number", "accountNumber"))
    ifsc_code: Optional[str] = Field(None, validation_alias=AliasChoices("ifsc_code", "ifscCode"))
    branch_name: Optional[str] = Field(None, validation_alias=AliasChoices("branch_name", "branchName"))


class BusinessUpdate(BaseUpdateSchema):
    name: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    pincode: Optional[str] = Field(None, max_length=10)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    tax_id: Optional[str] = Field(None, max_length=50, validation_alias=AliasChoices("tax_id", "taxId"))
    currency: Optional[str] = Field(None, min_length=1, max_length=10)
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=100, validation_alias=AliasChoices("tax_rate", "taxRate"))
    logo: Optional[str] = None
    signature: Optional[str] = None
    bank_name: Optional[str] = Field(None, max_length=200, validation_alias=AliasChoices("bank_name", "bankName"))
    account_number: Optional[str] = Field(None, max_length=50, validation_alias=AliasChoices("account_number", "accountNumber"))
    ifsc_code: Optional[str] = Field(None, max_length=20, validation_alias=AliasChoices("ifsc_code", "ifscCode"))
    branch_name: Optional[str] = Field(None, max_length=200, validation_alias=AliasChoices("branch_name", "branchName"))


class BusinessResponse(BaseResponseSchema):
    id: UUID
    name: str
    address: str
    city: str
    state: str
    pincode: str
    phone: str
    email: str
    tax_id: str
    currency: str
    tax_rate: Decimal
    logo: Optional[str] = None
    signature: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    branch_name: Optional[str] = None
    updated_at: Optional[datetime] = None


# ==================== Invoice Settings ====================

class InvoiceSettings(BaseCreateSchema):
    """Invoice presentation preferences as handed to the renderer."""
    currency: str = "₹"
    tax_rate: Decimal = Field(Decimal("18"), validation_alias=AliasChoices("tax_rate", "taxRate"))
    invoice_prefix: str = Field("INV", validation_alias=AliasChoices("invoice_prefix", "invoicePrefix"))
    default_payment_terms: str = Field(
        "Due on receipt", validation_alias=AliasChoices("default_payment_terms", "defaultPaymentTerms")
    )
    show_logo: bool = Field(True, validation_alias=AliasChoices("show_logo", "showLogo"))
    tax_label: str = Field("GST", validation_alias=AliasChoices("tax_label", "taxLabel"))


class InvoiceSettingsUpdate(BaseUpdateSchema):
    currency: Optional[str] = Field(None, min_length=1, max_length=10)
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=100, validation_alias=AliasChoices("tax_rate", "taxRate"))
    invoice_prefix: Optional[str] = Field(
        None, min_length=1, max_length=20, validation_alias=AliasChoices("invoice_prefix", "invoicePrefix")
    )
    default_payment_terms: Optional[str] = Field(
        None, max_length=200, validation_alias=AliasChoices("default_payment_terms", "defaultPaymentTerms")
    )
    show_logo: Optional[bool] = Field(None, validation_alias=AliasChoices("show_logo", "showLogo"))
    tax_label: Optional[str] = Field(None, min_length=1, max_length=20, validation_alias=AliasChoices("tax_label", "taxLabel"))


class InvoiceSettingsResponse(BaseResponseSchema):
    id: UUID
    currency: str
    tax_rate: Decimal
    invoice_prefix: str
    default_payment_terms: str
    show_logo: bool
    tax_label: str
    updated_at: Optional[datetime] = None
