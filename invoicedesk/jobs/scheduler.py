"""
APScheduler configuration.

Housekeeping jobs for the in-process render job registry. Jobs run on the
application's event loop through the asyncio executor.
"""

import logging
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.executors.asyncio import AsyncIOExecutor

from invoicedesk.config import settings

logger = logging.getLogger(__name__)

# Job stores
jobstores = {
    'default': MemoryJobStore()
}

# Executors
executors = {
    'default': AsyncIOExecutor(),
}

# Job defaults
job_defaults = {
    'coalesce': True,  # Combine multiple pending executions into one
    'max_instances': 1,  # Only one instance of each job at a time
    'misfire_grace_time': 60,
}

scheduler = AsyncIOScheduler(
    jobstores=jobstores,
    executors=executors,
    job_defaults=job_defaults,
    timezone='Asia/Kolkata'
)


async def purge_finished_render_jobs() -> int:
    """Drop finished render jobs older than RENDER_JOB_TTL_MINUTES."""
    from invoicedesk.services.render_jobs import render_jobs

    try:
        purged = render_jobs.purge_finished(timedelta(minutes=settings.RENDER_JOB_TTL_MINUTES))
    except Exception as e:
        logger.error(f"Render job purge failed: {e}")
        return 0
    logger.debug(f"Render job purge removed {purged} job(s), {len(render_jobs)} left")
    return purged


def start_scheduler():
    """Start the background job scheduler."""
    if not scheduler.running:
        scheduler.add_job(
            purge_finished_render_jobs,
            'interval',
            minutes=settings.RENDER_JOB_PURGE_INTERVAL_MINUTES,
            id='purge_finished_render_jobs',
            name='Purge Finished Render Jobs',
            replace_existing=True,
        )

        scheduler.start()
        logger.info("Background job scheduler started")

        for job in scheduler.get_jobs():
            logger.info(f"Scheduled job: {job.name} - Next run: {job.next_run_time}")


def shutdown_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Background job scheduler stopped")


def get_job_status():
    """Get status of all scheduled jobs."""
    jobs = scheduler.get_jobs()
    return [
        {
            'id': job.id,
            'name': job.name,
            'next_run_time': str(job.next_run_time) if job.next_run_time else None,
            'trigger': str(job.trigger),
        }
        for job in jobs
    ]
