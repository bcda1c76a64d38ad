from fastapi import APIRouter

from invoicedesk.api.deps import DB
from invoicedesk.schemas.invoice import DashboardStats
from invoicedesk.services.invoice_service import InvoiceService


router = APIRouter(tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(db: DB):
    """
    Revenue summary.

    total_revenue and this_month_revenue count paid invoices; pending_amount
    counts pending and overdue ones. Amounts are recomputed from line items.
    """
    return await InvoiceService(db).get_dashboard_stats()
