"""
In-memory registry of background render jobs started over the API.

Jobs live only in this process. Finished jobs are dropped by the
purge_finished_render_jobs scheduler job once they are older than
RENDER_JOB_TTL_MINUTES.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from invoicedesk.services.render_worker import RenderHandle, RenderOutcome

logger = logging.getLogger(__name__)


@dataclass
class RenderJob:
    invoice_id: uuid.UUID
    handle: RenderHandle
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    @property
    def job_id(self) -> str:
        return self.handle.job_id

    @property
    def status(self) -> str:
        outcome = self.handle.outcome()
        if outcome is not None:
            return outcome.status
        return "running" if self.handle.started else "queued"

    def to_dict(self) -> dict:
        """Fields of RenderJobResponse."""
        outcome = self.handle.outcome()
        if outcome is not None and self.finished_at is None:
            self.finished_at = datetime.now(timezone.utc)
        progress = self.handle.latest_progress
        data = {
            "job_id": self.job_id,
            "invoice_id": self.invoice_id,
            "status": self.status,
            "progress": progress.progress,
            "message": progress.message,
            "error": None,
            "error_kind": None,
            "page_count": None,
            "degraded_assets": [],
            "warnings": [],
            "created_at": self.created_at,
            "finished_at": self.finished_at,
        }
        if outcome is not None:
            data["error"] = outcome.error
            data["error_kind"] = outcome.error_kind
            if outcome.document is not None:
                data["page_count"] = outcome.document.page_count
                data["degraded_assets"] = list(outcome.document.degraded_assets)
                data["warnings"] = list(outcome.document.warnings)
        return data


class RenderJobRegistry:
    """Render jobs by id."""

    def __init__(self):
        self._jobs: Dict[str, RenderJob] = {}

    def __len__(self) -> int:
        return len(self._jobs)

    def add(self, invoice_id: uuid.UUID, handle: RenderHandle) -> RenderJob:
        job = RenderJob(invoice_id=invoice_id, handle=handle)

        def mark_finished(outcome: RenderOutcome) -> None:
            if job.finished_at is None:
                job.finished_at = datetime.now(timezone.utc)

        handle.add_done_callback(mark_finished)
        self._jobs[job.job_id] = job
        return job

    def get(self, job_id: str) -> Optional[RenderJob]:
        return self._jobs.get(job_id)

    def remove(self, job_id: str) -> Optional[RenderJob]:
        return self._jobs.pop(job_id, None)

    def purge_finished(self, older_than: timedelta) -> int:
        """Drop finished jobs whose finish time is older than the cutoff."""
        cutoff = datetime.now(timezone.utc) - older_than
        expired = [
            job_id for job_id, job in self._jobs.items()
            if job.finished_at is not None and job.finished_at <= cutoff
        ]
        for job_id in expired:
            del self._jobs[job_id]
        if expired:
            logger.info("Purged %d finished render job(s)", len(expired))
        return len(expired)


render_jobs = RenderJobRegistry()
