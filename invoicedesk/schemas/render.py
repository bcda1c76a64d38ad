"""Pydantic schemas for background PDF render jobs."""
from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel


class RenderJobResponse(BaseModel):
    """Status of a render job started with POST /invoices/{id}/pdf-jobs."""
    job_id: str
    invoice_id: UUID
    status: str  # queued, running, succeeded, failed, cancelled
    progress: int = 0
    message: str = ""
    error: Optional[str] = None
    error_kind: Optional[str] = None
    page_count: Optional[int] = None
    degraded_assets: List[str] = []
    warnings: List[str] = []
    created_at: datetime
    finished_at: Optional[datetime] = None
