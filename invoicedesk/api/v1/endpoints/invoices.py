from typing import Optional
import uuid
from math import ceil

from fastapi import APIRouter, HTTPException, status, Query

from invoicedesk.api.deps import DB
from invoicedesk.models.invoice import InvoiceStatus
from invoicedesk.schemas.invoice import (
    InvoiceCreate,
    InvoiceUpdate,
    InvoiceStatusUpdate,
    InvoiceResponse,
    InvoiceListResponse,
    InvoiceStats,
    InvoiceTotalsSchema,
    NextInvoiceNumberResponse,
    TotalsPreviewRequest,
)
from invoicedesk.services.invoice_service import InvoiceService
from invoicedesk.services.totals_service import compute_totals


router = APIRouter(tags=["Invoices"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Invoice not found"
    )


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    db: DB,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    status: Optional[InvoiceStatus] = Query(None),
    search: Optional[str] = Query(None, description="Search by number, customer name or email"),
    sort_by: str = Query("created_at", pattern="^(date|created_at|invoice_number|customer_name|status)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
):
    """Get paginated list of invoices with computed totals."""
    service = InvoiceService(db)
    skip = (page - 1) * size

    invoices, total = await service.list_invoices(
        status=status,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        skip=skip,
        limit=size,
    )

    return InvoiceListResponse(
        items=[InvoiceResponse.model_validate(inv) for inv in invoices],
        total=total,
        page=page,
        size=size,
        pages=ceil(total / size) if total > 0 else 1,
    )


@router.get("/next-number", response_model=NextInvoiceNumberResponse)
async def get_next_invoice_number(db: DB):
    """Next number in the {prefix}-{year}-{NNNN} series."""
    number = await InvoiceService(db).get_next_invoice_number()
    return NextInvoiceNumberResponse(invoice_number=number)


@router.get("/stats", response_model=InvoiceStats)
async def get_invoice_stats(db: DB):
    """Invoice counts per status."""
    return await InvoiceService(db).get_stats()


@router.post("/preview-totals", response_model=InvoiceTotalsSchema)
async def preview_totals(data: TotalsPreviewRequest):
    """Totals for an unsaved draft, as the editor shows them while typing."""
    totals = compute_totals(data.items, data.tax_rate, data.discount)
    return InvoiceTotalsSchema.model_validate(totals)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(invoice_id: uuid.UUID, db: DB):
    """Get an invoice by ID."""
    invoice = await InvoiceService(db).get_invoice(invoice_id)
    if not invoice:
        raise _not_found()
    return InvoiceResponse.model_validate(invoice)


@router.post(
    "",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_invoice(data: InvoiceCreate, db: DB):
    """Create an invoice. A missing invoice_number is taken from the numbering series."""
    invoice = await InvoiceService(db).create_invoice(data)
    return InvoiceResponse.model_validate(invoice)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(invoice_id: uuid.UUID, data: InvoiceUpdate, db: DB):
    """Update an invoice."""
    try:
        invoice = await InvoiceService(db).update_invoice(invoice_id, data)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    if not invoice:
        raise _not_found()
    return InvoiceResponse.model_validate(invoice)


@router.patch("/{invoice_id}/status", response_model=InvoiceResponse)
async def update_invoice_status(invoice_id: uuid.UUID, data: InvoiceStatusUpdate, db: DB):
    """Change only the invoice status."""
    try:
        invoice = await InvoiceService(db).update_status(invoice_id, data.status)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    if not invoice:
        raise _not_found()
    return InvoiceResponse.model_validate(invoice)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(invoice_id: uuid.UUID, db: DB):
    """Delete an invoice."""
    deleted = await InvoiceService(db).delete_invoice(invoice_id)
    if not deleted:
        raise _not_found()
