"""Tests for the background PDF render worker."""
import asyncio
import threading
import uuid
from datetime import timedelta

import pytest

from invoicedesk.services import render_worker
from invoicedesk.services.pdf import RenderError
from invoicedesk.services.render_jobs import RenderJobRegistry
from invoicedesk.services.render_worker import (
    PDFRenderWorker, RenderCancelledError, RenderOutcome, WorkerTransportError,
)


@pytest.fixture
def worker():
    worker = PDFRenderWorker()
    worker.start()
    yield worker
    worker.shutdown()


async def collect(handle):
    return [event async for event in handle.progress_events()]


class TestPDFRenderWorker:

    async def test_progress_is_ordered_and_ends_at_100(self, worker, invoice, business, invoice_settings):
        handle = worker.generate(invoice, business, invoice_settings)
        events = await collect(handle)

        progress = [event.progress for event in events]
        assert progress == sorted(progress)
        assert progress[0] == 0
        assert progress[-1] == 100
        assert progress == [0, 20, 40, 60, 80, 90, 100]

        outcome = await handle.result()
        assert outcome.status == RenderOutcome.SUCCEEDED
        document = await handle.document()
        assert document.content.startswith(b"%PDF")
        assert handle.latest_progress.progress == 100

    async def test_concurrent_jobs_have_independent_streams(
        self, worker, invoice_factory, business, invoice_settings
    ):
        first = worker.generate(invoice_factory(item_count=60), business, invoice_settings)
        second = worker.generate(invoice_factory(item_count=3, invoice_number="INV-2026-0002"),
                                 business, invoice_settings)

        first_events, second_events = await asyncio.gather(collect(first), collect(second))
        for events in (first_events, second_events):
            assert [e.progress for e in events] == [0, 20, 40, 60, 80, 90, 100]

        assert (await first.document()).filename == "INV-2026-0001.pdf"
        assert (await second.document()).filename == "INV-2026-0002.pdf"

    async def test_inputs_are_snapshotted(self, worker, invoice, business, invoice_settings):
        handle = worker.generate(invoice, business, invoice_settings)
        invoice.invoice_number = "CHANGED"
        document = await handle.document()
        assert document.invoice_number == "INV-2026-0001"

    async def test_cancel_queued_job(self, worker, invoice, business, invoice_settings):
        gate = threading.Event()
        # Occupy the single worker thread so the next job stays queued
        worker._executor.submit(gate.wait, 5)

        handle = worker.generate(invoice, business, invoice_settings)
        assert handle.cancel() is True
        gate.set()

        outcome = await handle.result()
        assert outcome.status == RenderOutcome.CANCELLED
        assert handle.cancelled
        assert await collect(handle) == []
        with pytest.raises(RenderCancelledError):
            await handle.document()

    async def test_cancel_running_job_discards_result(
        self, worker, invoice, business, invoice_settings, monkeypatch
    ):
        release = threading.Event()
        finished = threading.Event()
        real_render = render_worker.render_invoice

        def held_render(*args, on_progress=None, **kwargs):
            on_progress(0, "Starting")
            release.wait(5)
            try:
                return real_render(*args, on_progress=on_progress, **kwargs)
            finally:
                finished.set()

        monkeypatch.setattr(render_worker, "render_invoice", held_render)
        handle = worker.generate(invoice, business, invoice_settings)

        async for event in handle.progress_events():
            assert handle.cancel() is True
        release.set()

        outcome = await handle.result()
        assert outcome.status == RenderOutcome.CANCELLED
        assert outcome.document is None

        # The worker still finishes; its late result must not change the outcome
        await asyncio.get_running_loop().run_in_executor(None, finished.wait, 5)
        await asyncio.sleep(0.05)
        assert (await handle.result()).status == RenderOutcome.CANCELLED
        assert handle.cancel() is False

    async def test_render_failure_is_reported(self, invoice, business, invoice_settings):
        class BrokenSplit:
            def split(self, *args):
                raise ValueError("no tax components")

        worker = PDFRenderWorker(tax_split=BrokenSplit())
        worker.start()
        try:
            handle = worker.generate(invoice, business, invoice_settings)
            outcome = await handle.result()
        finally:
            worker.shutdown()

        assert "no tax components" in outcome.error
        assert outcome.status == RenderOutcome.FAILED
        assert outcome.error_kind == "render"
        with pytest.raises(RenderError):
            await handle.document()

    async def test_stopped_worker_is_a_transport_failure(self, invoice, business, invoice_settings):
        worker = PDFRenderWorker()
        worker.start()
        worker.shutdown()

        handle = worker.generate(invoice, business, invoice_settings)
        outcome = await handle.result()
        assert outcome.status == RenderOutcome.FAILED
        assert outcome.error_kind == "transport"
        with pytest.raises(WorkerTransportError):
            await handle.document()


class TestRenderJobRegistry:

    async def test_purge_drops_only_finished_jobs(self, worker, invoice, business, invoice_settings):
        registry = RenderJobRegistry()
        done_job = registry.add(uuid.uuid4(), worker.generate(invoice, business, invoice_settings))
        await done_job.handle.result()
        await asyncio.sleep(0)
        assert done_job.finished_at is not None
        assert done_job.status == "succeeded"
        assert done_job.to_dict()["page_count"] == 1

        assert registry.purge_finished(timedelta(minutes=30)) == 0
        assert registry.purge_finished(timedelta(0)) == 1
        assert registry.get(done_job.job_id) is None
