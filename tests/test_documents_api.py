"""API tests for invoice PDF download and background render jobs."""
import asyncio

from invoicedesk.services.render_worker import pdf_worker

INVOICE = {
    "invoice_number": "INV-2026-0042",
    "date": "2026-03-14",
    "customer_name": "Acme Traders",
    "items": [{"name": "LED Panel", "quantity": 3, "price": 450, "tax_rate": 0}],
    "tax_rate": 18,
    "status": "pending",
}


async def create_invoice(client, **overrides):
    response = await client.post("/api/v1/invoices", json={**INVOICE, **overrides})
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def wait_for_job(client, job_id, attempts=100):
    for _ in range(attempts):
        job = (await client.get(f"/api/v1/pdf-jobs/{job_id}")).json()
        if job["status"] in ("succeeded", "failed", "cancelled"):
            return job
        await asyncio.sleep(0.05)
    raise AssertionError(f"render job {job_id} did not finish")


class TestInvoicePdf:

    async def test_download_as_attachment(self, client):
        invoice_id = await create_invoice(client)
        response = await client.get(f"/api/v1/invoices/{invoice_id}/pdf")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="INV-2026-0042.pdf"'
        assert response.headers["x-page-count"] == "1"
        assert response.content.startswith(b"%PDF")

    async def test_inline_preview(self, client):
        invoice_id = await create_invoice(client)
        response = await client.get(f"/api/v1/invoices/{invoice_id}/pdf", params={"disposition": "inline"})

        assert response.status_code == 200
        assert response.headers["content-disposition"].startswith("inline;")
        assert response.content.startswith(b"%PDF")

    async def test_broken_logo_still_renders(self, client):
        await client.put("/api/v1/business", json={"name": "Shree Ganesh", "logo": "not-an-image"})
        invoice_id = await create_invoice(client)
        response = await client.get(f"/api/v1/invoices/{invoice_id}/pdf")

        assert response.status_code == 200
        assert response.headers["x-degraded-assets"] == "logo"

    async def test_unknown_invoice(self, client):
        response = await client.get("/api/v1/invoices/00000000-0000-0000-0000-000000000000/pdf")
        assert response.status_code == 404

    async def test_stopped_worker_returns_503(self, client):
        invoice_id = await create_invoice(client)
        pdf_worker.shutdown()
        try:
            response = await client.get(f"/api/v1/invoices/{invoice_id}/pdf")
        finally:
            pdf_worker.start()
        assert response.status_code == 503


class TestRenderJobs:

    async def test_job_lifecycle(self, client):
        invoice_id = await create_invoice(client)
        response = await client.post(f"/api/v1/invoices/{invoice_id}/pdf-jobs")
        assert response.status_code == 202
        job = response.json()
        assert job["invoice_id"] == invoice_id
        assert job["status"] in ("queued", "running", "succeeded")

        job = await wait_for_job(client, job["job_id"])
        assert job["status"] == "succeeded"
        assert job["progress"] == 100
        assert job["page_count"] == 1
        assert job["finished_at"] is not None

        response = await client.get(f"/api/v1/pdf-jobs/{job['job_id']}/document")
        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

        response = await client.delete(f"/api/v1/pdf-jobs/{job['job_id']}")
        assert response.status_code == 409

    async def test_unknown_job(self, client):
        assert (await client.get("/api/v1/pdf-jobs/nope")).status_code == 404
        assert (await client.get("/api/v1/pdf-jobs/nope/document")).status_code == 404
        assert (await client.delete("/api/v1/pdf-jobs/nope")).status_code == 404

    async def test_cancelled_job_document_is_409(self, client):
        invoice_id = await create_invoice(client)
        job = (await client.post(f"/api/v1/invoices/{invoice_id}/pdf-jobs")).json()

        response = await client.delete(f"/api/v1/pdf-jobs/{job['job_id']}")
        if response.status_code == 200:
            assert response.json()["status"] == "cancelled"
            response = await client.get(f"/api/v1/pdf-jobs/{job['job_id']}/document")
            assert response.status_code == 409
        else:
            # Rendered before the cancel arrived
            assert response.status_code == 409
