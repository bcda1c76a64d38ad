"""Service for invoices: CRUD, numbering and revenue stats."""
import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import select, func, or_, delete
from sqlalchemy.ext.asyncio import AsyncSession

from invoicedesk.core.enum_utils import get_enum_value
from invoicedesk.models.invoice import Invoice, InvoiceStatus
from invoicedesk.schemas.invoice import (
    DashboardStats, InvoiceCreate, InvoiceStats, InvoiceUpdate,
)
from invoicedesk.services.business_service import BusinessService
from invoicedesk.services.totals_service import compute_totals

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "date": Invoice.date,
    "created_at": Invoice.created_at,
    "invoice_number": Invoice.invoice_number,
    "customer_name": Invoice.customer_name,
    "status": Invoice.status,
}


def _dump_items(items) -> list:
    """Line items as stored in the JSON column, blanks kept as entered."""
    return [item.model_dump() for item in items]


class InvoiceService:
    """Invoice persistence. Totals are never stored, they are recomputed from items."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==================== CRUD ====================

    async def get_invoice(self, invoice_id: uuid.UUID) -> Optional[Invoice]:
        result = await self.db.execute(select(Invoice).where(Invoice.id == invoice_id))
        return result.scalar_one_or_none()

    async def list_invoices(
        self,
        status: Optional[InvoiceStatus] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Invoice], int]:
        """Get paginated invoices, newest first by default."""
        filters = []
        if status:
            filters.append(Invoice.status == get_enum_value(status))
        if search:
            pattern = f"%{search.strip()}%"
            filters.append(or_(
                Invoice.invoice_number.ilike(pattern),
                Invoice.customer_name.ilike(pattern),
                Invoice.customer_email.ilike(pattern),
            ))

        count_stmt = select(func.count(Invoice.id))
        if filters:
            count_stmt = count_stmt.where(*filters)
        total = (await self.db.execute(count_stmt)).scalar() or 0

        column = SORTABLE_FIELDS.get(sort_by, Invoice.created_at)
        order = column.asc() if sort_order == "asc" else column.desc()
        stmt = select(Invoice).order_by(order, Invoice.id)
        if filters:
            stmt = stmt.where(*filters)
        stmt = stmt.offset(skip).limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

    async def create_invoice(self, data: InvoiceCreate) -> Invoice:
        invoice_number = data.invoice_number or await self.get_next_invoice_number(data.date.year)

        invoice = Invoice(
            invoice_number=invoice_number,
            date=data.date,
            customer_name=data.customer_name,
            customer_email=data.customer_email,
            customer_phone=data.customer_phone,
            customer_address=data.customer_address,
            items=_dump_items(data.items),
            tax_rate=data.tax_rate,
            discount=data.discount,
            notes=data.notes,
            status=get_enum_value(data.status),
        )
        self.db.add(invoice)
        await self.db.commit()
        await self.db.refresh(invoice)
        logger.info("Created invoice %s (%s)", invoice.invoice_number, invoice.id)
        return invoice

    async def update_invoice(self, invoice_id: uuid.UUID, data: InvoiceUpdate) -> Optional[Invoice]:
        """Replace the provided fields. Returns None if the invoice does not exist."""
        invoice = await self.get_invoice(invoice_id)
        if not invoice:
            return None

        update_data = data.model_dump(exclude_unset=True)
        if "items" in update_data:
            update_data["items"] = _dump_items(data.items or [])
        if update_data.get("status") is not None:
            update_data["status"] = get_enum_value(update_data["status"])

        for key, value in update_data.items():
            if value is None and key in ("invoice_number", "date", "customer_name", "tax_rate", "discount", "status"):
                continue
            setattr(invoice, key, value)

        if invoice.status != InvoiceStatus.DRAFT.value and not invoice.items:
            raise ValueError("An invoice needs at least one line item unless it is a draft")

        await self.db.commit()
        await self.db.refresh(invoice)
        return invoice

    async def update_status(self, invoice_id: uuid.UUID, status: InvoiceStatus) -> Optional[Invoice]:
        invoice = await self.get_invoice(invoice_id)
        if not invoice:
            return None
        new_status = get_enum_value(status)
        if new_status != InvoiceStatus.DRAFT.value and not invoice.items:
            raise ValueError("An invoice needs at least one line item unless it is a draft")
        old_status, invoice.status = invoice.status, new_status
        await self.db.commit()
        await self.db.refresh(invoice)
        logger.info("Invoice %s status %s -> %s", invoice.invoice_number, old_status, new_status)
        return invoice

    async def delete_invoice(self, invoice_id: uuid.UUID) -> bool:
        result = await self.db.execute(delete(Invoice).where(Invoice.id == invoice_id))
        await self.db.commit()
        return result.rowcount > 0

    # ==================== Numbering ====================

    async def get_next_invoice_number(self, year: Optional[int] = None) -> str:
        """
        Next number in the {prefix}-{year}-{NNNN} series.

        Counts this year's invoices with the prefix and adds one, skipping
        forward past any number already taken.
        """
        prefs = await BusinessService(self.db).get_invoice_settings()
        prefix = prefs.invoice_prefix or "INV"
        year = year or date.today().year
        series = f"{prefix}-{year}-"

        count_stmt = select(func.count(Invoice.id)).where(Invoice.invoice_number.like(f"{series}%"))
        sequence = ((await self.db.execute(count_stmt)).scalar() or 0) + 1

        taken_stmt = select(Invoice.invoice_number).where(Invoice.invoice_number.like(f"{series}%"))
        taken = set((await self.db.execute(taken_stmt)).scalars().all())
        while f"{series}{sequence:04d}" in taken:
            sequence += 1
        return f"{series}{sequence:04d}"

    # ==================== Stats ====================

    async def get_stats(self) -> InvoiceStats:
        """Invoice counts per status."""
        stmt = select(Invoice.status, func.count(Invoice.id)).group_by(Invoice.status)
        rows = (await self.db.execute(stmt)).all()
        stats = InvoiceStats()
        for status, count in rows:
            if status in InvoiceStats.model_fields:
                setattr(stats, status, count)
            stats.total += count
        return stats

    async def get_dashboard_stats(self, today: Optional[date] = None) -> DashboardStats:
        """
        Revenue summary.

        Revenue counts paid invoices, the pending amount counts pending and
        overdue ones; this month's revenue uses the invoice date.
        """
        today = today or date.today()
        invoices = (await self.db.execute(select(Invoice))).scalars().all()

        stats = DashboardStats(total_invoices=len(invoices))
        total_revenue = Decimal("0")
        pending_amount = Decimal("0")
        this_month = Decimal("0")
        for invoice in invoices:
            total = compute_totals(invoice.items, invoice.tax_rate, invoice.discount).total
            if invoice.status == InvoiceStatus.PAID.value:
                stats.paid_count += 1
                total_revenue += total
                if invoice.date.year == today.year and invoice.date.month == today.month:
                    this_month += total
            elif invoice.status == InvoiceStatus.PENDING.value:
                stats.pending_count += 1
                pending_amount += total
            elif invoice.status == InvoiceStatus.OVERDUE.value:
                stats.overdue_count += 1
                pending_amount += total

        stats.total_revenue = total_revenue
        stats.pending_amount = pending_amount
        stats.this_month_revenue = this_month
        return stats
