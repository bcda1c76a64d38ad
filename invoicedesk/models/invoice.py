import uuid
import datetime as dt
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Dict, Any

from sqlalchemy import String, DateTime, Date, Text, Numeric, Index
from sqlalchemy.orm import Mapped, mapped_column

from invoicedesk.database import Base
from invoicedesk.db_types import JSONType, UUIDType


class InvoiceStatus(str, Enum):
    """Invoice status enumeration."""
    DRAFT = "draft"
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class Invoice(Base):
    """
    Invoice with line items.

    Customer fields are a snapshot taken when the invoice was written; editing
    the customer record later does not change past invoices. Line items are
    stored as an ordered JSON array exactly as entered (blank numeric fields
    included), totals are never stored.
    """
    __tablename__ = "invoices"
    __table_args__ = (
        Index("ix_invoices_created_at", "created_at"),
        Index("ix_invoices_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    invoice_number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="Display number e.g. INV-2026-0001"
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    # Customer snapshot
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    customer_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    customer_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    items: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSONType,
        default=list,
        nullable=False
    )

    tax_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        default=Decimal("0"),
        nullable=False
    )
    discount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        default=Decimal("0"),
        nullable=False
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=InvoiceStatus.DRAFT.value,
        nullable=False,
        comment="draft, pending, paid, overdue, cancelled"
    )

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

    def __repr__(self) -> str:
        return f"<Invoice(number='{self.invoice_number}', status='{self.status}')>"
