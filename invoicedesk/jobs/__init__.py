"""
Background Jobs Module

Handles scheduled housekeeping:
- Purging finished PDF render jobs
"""

from invoicedesk.jobs.scheduler import (
    scheduler,
    start_scheduler,
    shutdown_scheduler,
    get_job_status,
    purge_finished_render_jobs,
)

__all__ = [
    "scheduler",
    "start_scheduler",
    "shutdown_scheduler",
    "get_job_status",
    "purge_finished_render_jobs",
]
