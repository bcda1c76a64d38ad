"""
Seller profile and invoice preferences.

Both tables hold a single row for the installation; it is created with
defaults on startup (see database_init.seed_defaults).
"""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Boolean, DateTime, Text, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from invoicedesk.database import Base
from invoicedesk.db_types import UUIDType


class BusinessProfile(Base):
    """Seller identity printed on every invoice."""
    __tablename__ = "business_profile"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    address: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    city: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    state: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    pincode: Mapped[str] = mapped_column(String(10), default="", nullable=False)
    phone: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    email: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    tax_id: Mapped[str] = mapped_column(String(50), default="", nullable=False, comment="GSTIN / VAT number")

    # Images as base64 or data URLs
    logo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    signature: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    currency: Mapped[str] = mapped_column(String(10), default="₹", nullable=False)
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("18"), nullable=False)

    # Bank details
    bank_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    account_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    ifsc_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    branch_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )


class InvoicePreferences(Base):
    """Presentation defaults for invoices (currency, tax label, numbering)."""
    __tablename__ = "settings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    currency: Mapped[str] = mapped_column(String(10), default="₹", nullable=False)
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("18"), nullable=False)
    invoice_prefix: Mapped[str] = mapped_column(String(20), default="INV", nullable=False)
    default_payment_terms: Mapped[str] = mapped_column(String(200), default="Due on receipt", nullable=False)
    show_logo: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    tax_label: Mapped[str] = mapped_column(String(20), default="GST", nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )
