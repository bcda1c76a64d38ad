"""
Background PDF rendering.

PDFRenderWorker owns one dedicated thread; render jobs queue behind each
other on it so the event loop never blocks on ReportLab. Each call to
generate() returns a RenderHandle that streams progress back to the
calling event loop and resolves to exactly one RenderOutcome:

    succeeded   document available
    failed      error_kind "render" (renderer fault) or "transport"
                (worker stopped, executor failure)
    cancelled   cancel() was called before the job finished

Usage:
    worker = PDFRenderWorker()
    worker.start()
    handle = worker.generate(invoice, business, invoice_settings)
    async for event in handle.progress_events():
        print(event.progress, event.message)
    document = await handle.document()
"""
import asyncio
import copy
import logging
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

from invoicedesk.services.pdf.layout import InvoiceDocument
from invoicedesk.services.pdf.renderer import RenderError, render_invoice
from invoicedesk.services.pdf.tax_split import TaxSplitPolicy

logger = logging.getLogger(__name__)


class WorkerTransportError(Exception):
    """The job never reached the renderer, or the worker broke underneath it."""
    pass


class RenderCancelledError(Exception):
    """The job was cancelled before it produced a document."""
    pass


@dataclass(frozen=True)
class RenderProgress:
    progress: int
    message: str


@dataclass(frozen=True)
class RenderOutcome:
    """Final state of a render job."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    status: str
    document: Optional[InvoiceDocument] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None  # "render" or "transport"


class RenderHandle:
    """
    Caller-side view of one render job.

    All state changes happen on the owning event loop; the worker thread
    only schedules them with call_soon_threadsafe, so progress events arrive
    in the order the renderer emitted them.
    """

    def __init__(self, job_id: str, loop: asyncio.AbstractEventLoop):
        self.job_id = job_id
        self._loop = loop
        self._events: asyncio.Queue = asyncio.Queue()
        self._outcome: asyncio.Future = loop.create_future()
        self._latest = RenderProgress(0, "Queued")
        self._started = False
        self._job: Optional[Future] = None

    # ==================== Read side ====================

    @property
    def latest_progress(self) -> RenderProgress:
        return self._latest

    @property
    def started(self) -> bool:
        return self._started

    @property
    def cancelled(self) -> bool:
        return self.done() and self._outcome.result().status == RenderOutcome.CANCELLED

    def done(self) -> bool:
        return self._outcome.done()

    def outcome(self) -> Optional[RenderOutcome]:
        """The outcome if the job has finished, else None."""
        return self._outcome.result() if self._outcome.done() else None

    def add_done_callback(self, fn: Callable[[RenderOutcome], None]) -> None:
        self._outcome.add_done_callback(lambda fut: fn(fut.result()))

    async def progress_events(self) -> AsyncIterator[RenderProgress]:
        """Yield progress events until the job finishes. Meant for a single consumer."""
        while True:
            event = await self._events.get()
            if event is None:
                # leave the end marker for any later iteration
                self._events.put_nowait(None)
                return
            yield event

    async def result(self) -> RenderOutcome:
        return await asyncio.shield(self._outcome)

    async def document(self) -> InvoiceDocument:
        """
        Wait for the rendered document.

        Raises:
            RenderError: The renderer failed.
            WorkerTransportError: The worker could not run the job.
            RenderCancelledError: The job was cancelled.
        """
        outcome = await self.result()
        if outcome.status == RenderOutcome.SUCCEEDED:
            return outcome.document
        if outcome.status == RenderOutcome.CANCELLED:
            raise RenderCancelledError(outcome.error or "Render cancelled")
        if outcome.error_kind == "transport":
            raise WorkerTransportError(outcome.error)
        raise RenderError(outcome.error)

    def cancel(self) -> bool:
        """
        Request cancellation. Returns False if the job already finished.

        A queued job is dropped before it starts; a running one finishes in
        the background and its result is discarded.
        """
        if self.done():
            return False
        if self._job is not None and self._job.cancel():
            logger.info("Render job %s cancelled before start", self.job_id)
        else:
            logger.info("Render job %s cancelled while running", self.job_id)
        self._finish(RenderOutcome(RenderOutcome.CANCELLED, error="Render cancelled"))
        return True

    # ==================== Write side (event loop only) ====================

    def _report(self, progress: int, message: str) -> None:
        if self.done() or progress < self._latest.progress:
            return
        self._started = True
        event = RenderProgress(progress, message)
        self._latest = event
        self._events.put_nowait(event)

    def _finish(self, outcome: RenderOutcome) -> None:
        if self.done():
            return
        self._outcome.set_result(outcome)
        self._events.put_nowait(None)

    def _attach(self, job: Future) -> None:
        self._job = job
        job.add_done_callback(self._on_job_done)

    def _on_job_done(self, job: Future) -> None:
        # Runs on the worker thread, or on the loop when cancelled there
        try:
            self._loop.call_soon_threadsafe(self._settle, job)
        except RuntimeError:
            logger.warning("Event loop closed before render job %s finished", self.job_id)

    def _settle(self, job: Future) -> None:
        if self.done():
            logger.debug("Discarding late result of render job %s", self.job_id)
            return
        if job.cancelled():
            self._finish(RenderOutcome(RenderOutcome.CANCELLED, error="Render cancelled"))
            return
        error = job.exception()
        if error is None:
            self._finish(RenderOutcome(RenderOutcome.SUCCEEDED, document=job.result()))
            logger.info("Render job %s succeeded", self.job_id)
        elif isinstance(error, RenderError):
            logger.error("Render job %s failed: %s", self.job_id, error)
            self._finish(RenderOutcome(RenderOutcome.FAILED, error=str(error), error_kind="render"))
        else:
            logger.error("Render job %s lost by the worker: %r", self.job_id, error)
            self._finish(RenderOutcome(
                RenderOutcome.FAILED,
                error=f"PDF worker failure: {error}",
                error_kind="transport",
            ))

    def _fail_transport(self, message: str) -> None:
        logger.error("Render job %s not dispatched: %s", self.job_id, message)
        self._finish(RenderOutcome(RenderOutcome.FAILED, error=message, error_kind="transport"))


class PDFRenderWorker:
    """Single background thread that renders invoices one at a time."""

    def __init__(self, tax_split: Optional[TaxSplitPolicy] = None):
        self.tax_split = tax_split
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def running(self) -> bool:
        return self._executor is not None

    def start(self) -> None:
        if self._executor is not None:
            return
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pdf-render")
        logger.info("PDF render worker started")

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker; queued jobs are dropped and resolve as cancelled."""
        if self._executor is None:
            return
        executor, self._executor = self._executor, None
        executor.shutdown(wait=wait, cancel_futures=True)
        logger.info("PDF render worker stopped")

    def generate(self, invoice, business, settings, *, job_id: Optional[str] = None) -> RenderHandle:
        """
        Queue an invoice for rendering. Must be called from a running event loop.

        The inputs are deep-copied first, later edits by the caller do not
        reach the job.
        """
        loop = asyncio.get_running_loop()
        handle = RenderHandle(job_id or uuid.uuid4().hex, loop)

        executor = self._executor
        if executor is None:
            handle._fail_transport("PDF render worker is not running")
            return handle

        invoice, business, settings = copy.deepcopy((invoice, business, settings))

        def report(progress: int, message: str) -> None:
            loop.call_soon_threadsafe(handle._report, progress, message)

        try:
            job = executor.submit(
                render_invoice,
                invoice,
                business,
                settings,
                tax_split=self.tax_split,
                on_progress=report,
            )
        except RuntimeError as e:
            handle._fail_transport(f"PDF render worker rejected the job: {e}")
            return handle

        handle._attach(job)
        logger.info("Queued render job %s for invoice %s", handle.job_id, invoice.invoice_number)
        return handle


pdf_worker = PDFRenderWorker()
