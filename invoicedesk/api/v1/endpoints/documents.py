"""
Invoice PDF endpoints.

GET /invoices/{id}/pdf renders synchronously through the worker; the
pdf-jobs endpoints expose the same render as a background job with
progress polling and cancellation.
"""
import logging
import uuid

from fastapi import APIRouter, HTTPException, status, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response, StreamingResponse

from invoicedesk.api.deps import DB, Worker, RenderJobs
from invoicedesk.schemas.invoice import InvoiceResponse
from invoicedesk.schemas.render import RenderJobResponse
from invoicedesk.services.business_service import BusinessService
from invoicedesk.services.invoice_service import InvoiceService
from invoicedesk.services.pdf import InvoiceDocument, RenderError
from invoicedesk.services.render_jobs import RenderJob
from invoicedesk.services.render_worker import (
    RenderCancelledError, RenderHandle, WorkerTransportError,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Documents"])


async def _start_render(db: DB, worker: Worker, invoice_id: uuid.UUID) -> RenderHandle:
    invoice = await InvoiceService(db).get_invoice(invoice_id)
    if not invoice:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invoice not found"
        )
    business, invoice_settings = await BusinessService(db).get_render_context()
    return worker.generate(InvoiceResponse.model_validate(invoice), business, invoice_settings)


async def _await_document(handle: RenderHandle) -> InvoiceDocument:
    """Wait for the document, mapping render outcomes to HTTP errors."""
    try:
        return await handle.document()
    except RenderError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )
    except WorkerTransportError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e)
        )
    except RenderCancelledError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )


def _pdf_response(document: InvoiceDocument, inline: bool) -> Response:
    headers = {
        "Content-Disposition": document.content_disposition(inline=inline),
        "X-Page-Count": str(document.page_count),
    }
    if document.degraded_assets:
        headers["X-Degraded-Assets"] = ",".join(document.degraded_assets)
    if inline:
        return StreamingResponse(document.as_stream(), media_type=document.media_type, headers=headers)
    return Response(content=document.to_bytes(), media_type=document.media_type, headers=headers)


def _job_response(job: RenderJob) -> RenderJobResponse:
    return RenderJobResponse(**job.to_dict())


def _get_job(jobs: RenderJobs, job_id: str) -> RenderJob:
    job = jobs.get(job_id)
    if not job:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Render job not found"
        )
    return job


@router.get("/invoices/{invoice_id}/pdf")
async def download_invoice_pdf(
    invoice_id: uuid.UUID,
    db: DB,
    worker: Worker,
    disposition: str = Query("attachment", pattern="^(attachment|inline)$"),
):
    """
    Render and return the invoice PDF.

    disposition=inline opens it in the browser for preview or printing,
    attachment downloads it as {invoice_number}.pdf.
    """
    handle = await _start_render(db, worker, invoice_id)
    document = await _await_document(handle)
    return _pdf_response(document, inline=disposition == "inline")


@router.post(
    "/invoices/{invoice_id}/pdf-jobs",
    response_model=RenderJobResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def start_render_job(
    invoice_id: uuid.UUID,
    db: DB,
    worker: Worker,
    jobs: RenderJobs,
):
    """Start a background render; poll GET /pdf-jobs/{job_id} for progress."""
    handle = await _start_render(db, worker, invoice_id)
    job = jobs.add(invoice_id, handle)
    logger.info("Render job %s started for invoice %s", job.job_id, invoice_id)
    return _job_response(job)


@router.get("/pdf-jobs/{job_id}", response_model=RenderJobResponse)
async def get_render_job(job_id: str, jobs: RenderJobs):
    """Status and progress of a render job."""
    return _job_response(_get_job(jobs, job_id))


@router.get("/pdf-jobs/{job_id}/document")
async def get_render_job_document(
    job_id: str,
    jobs: RenderJobs,
    disposition: str = Query("attachment", pattern="^(attachment|inline)$"),
):
    """The finished PDF. Returns 202 with the job status while it is still rendering."""
    job = _get_job(jobs, job_id)
    if not job.handle.done():
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content=jsonable_encoder(_job_response(job)),
        )
    document = await _await_document(job.handle)
    return _pdf_response(document, inline=disposition == "inline")


@router.delete("/pdf-jobs/{job_id}", response_model=RenderJobResponse)
async def cancel_render_job(job_id: str, jobs: RenderJobs):
    """Cancel a queued or running render job."""
    job = _get_job(jobs, job_id)
    if not job.handle.cancel():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Render job already {job.status}"
        )
    return _job_response(job)
