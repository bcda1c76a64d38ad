from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from invoicedesk.database import get_db
from invoicedesk.services.render_jobs import RenderJobRegistry, render_jobs
from invoicedesk.services.render_worker import PDFRenderWorker, pdf_worker


def get_render_worker() -> PDFRenderWorker:
    """The process-wide PDF render worker, started in the app lifespan."""
    return pdf_worker


def get_render_jobs() -> RenderJobRegistry:
    return render_jobs


DB = Annotated[AsyncSession, Depends(get_db)]
Worker = Annotated[PDFRenderWorker, Depends(get_render_worker)]
RenderJobs = Annotated[RenderJobRegistry, Depends(get_render_jobs)]
