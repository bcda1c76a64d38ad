"""API tests for invoices, catalog records, business profile and dashboard."""
from datetime import date

INVOICE = {
    "invoiceNumber": "INV-2026-0001",
    "date": "2026-03-14",
    "customerName": "Acme Traders",
    "customerEmail": "accounts@acme.example",
    "items": [
        {"name": "LED Panel", "quantity": 2, "unit": "PCS", "price": 100, "discount": 10, "taxRate": 5},
    ],
    "taxRate": 18,
    "discount": 10,
    "status": "pending",
}


async def create_invoice(client, **overrides):
    payload = {**INVOICE, **overrides}
    response = await client.post("/api/v1/invoices", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestInvoiceCrud:

    async def test_create_returns_computed_totals(self, client):
        invoice = await create_invoice(client)

        assert invoice["invoice_number"] == "INV-2026-0001"
        assert invoice["status"] == "pending"
        totals = invoice["totals"]
        assert float(totals["subtotal"]) == 189
        assert float(totals["taxable_amount"]) == 170.1
        assert float(totals["total"]) == 201
        assert float(totals["round_off"]) == 0.282

    async def test_blank_numeric_fields_are_kept(self, client):
        invoice = await create_invoice(client, status="draft", items=[
            {"name": "Typed later", "quantity": "", "price": "", "discount": "", "taxRate": ""},
        ])
        item = invoice["items"][0]
        assert item["quantity"] == ""
        assert item["unit"] == "PCS"
        assert float(invoice["totals"]["total"]) == 0

    async def test_non_draft_needs_items(self, client):
        response = await client.post("/api/v1/invoices", json={**INVOICE, "items": []})
        assert response.status_code == 422

    async def test_customer_address_is_length_capped(self, client):
        response = await client.post("/api/v1/invoices", json={**INVOICE, "customerAddress": "x" * 1001})
        assert response.status_code == 422

        invoice = await create_invoice(client, customerAddress="x" * 1000)
        assert len(invoice["customer_address"]) == 1000

    async def test_status_is_case_insensitive(self, client):
        invoice = await create_invoice(client, status="PAID")
        assert invoice["status"] == "paid"

    async def test_get_update_delete(self, client):
        invoice = await create_invoice(client)
        url = f"/api/v1/invoices/{invoice['id']}"

        response = await client.get(url)
        assert response.status_code == 200
        assert response.json()["customer_name"] == "Acme Traders"

        response = await client.put(url, json={"customerName": "Acme Traders Pvt Ltd", "discount": 0})
        assert response.status_code == 200
        body = response.json()
        assert body["customer_name"] == "Acme Traders Pvt Ltd"
        assert float(body["totals"]["taxable_amount"]) == 189

        response = await client.patch(f"{url}/status", json={"status": "paid"})
        assert response.status_code == 200
        assert response.json()["status"] == "paid"

        response = await client.delete(url)
        assert response.status_code == 204
        response = await client.get(url)
        assert response.status_code == 404

    async def test_missing_invoice_is_404(self, client):
        response = await client.get("/api/v1/invoices/00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404

    async def test_list_filters_and_search(self, client):
        await create_invoice(client, invoiceNumber="INV-2026-0001", status="paid")
        await create_invoice(client, invoiceNumber="INV-2026-0002", customerName="Bharat Stores")
        await create_invoice(client, invoiceNumber="INV-2026-0003", status="draft")

        response = await client.get("/api/v1/invoices", params={"status": "paid"})
        body = response.json()
        assert body["total"] == 1
        assert body["items"][0]["invoice_number"] == "INV-2026-0001"

        response = await client.get("/api/v1/invoices", params={"search": "bharat"})
        assert [i["invoice_number"] for i in response.json()["items"]] == ["INV-2026-0002"]

        response = await client.get(
            "/api/v1/invoices",
            params={"sort_by": "invoice_number", "sort_order": "asc", "size": 2},
        )
        body = response.json()
        assert body["total"] == 3
        assert body["pages"] == 2
        assert [i["invoice_number"] for i in body["items"]] == ["INV-2026-0001", "INV-2026-0002"]


class TestNumberingAndStats:

    async def test_next_number_follows_prefix_and_year(self, client):
        year = date.today().year
        response = await client.get("/api/v1/invoices/next-number")
        assert response.json()["invoice_number"] == f"INV-{year}-0001"

        await create_invoice(client, invoiceNumber=f"INV-{year}-0001", date=date.today().isoformat())
        response = await client.get("/api/v1/invoices/next-number")
        assert response.json()["invoice_number"] == f"INV-{year}-0002"

        await client.put("/api/v1/settings", json={"invoicePrefix": "GE"})
        response = await client.get("/api/v1/invoices/next-number")
        assert response.json()["invoice_number"] == f"GE-{year}-0001"

    async def test_create_without_number_auto_numbers(self, client):
        payload = {k: v for k, v in INVOICE.items() if k != "invoiceNumber"}
        response = await client.post("/api/v1/invoices", json=payload)
        assert response.status_code == 201
        assert response.json()["invoice_number"] == "INV-2026-0001"

    async def test_stats_and_dashboard(self, client):
        today = date.today().isoformat()
        await create_invoice(client, invoiceNumber="A-1", status="paid", date=today)
        await create_invoice(client, invoiceNumber="A-2", status="pending")
        await create_invoice(client, invoiceNumber="A-3", status="overdue")
        await create_invoice(client, invoiceNumber="A-4", status="draft")

        stats = (await client.get("/api/v1/invoices/stats")).json()
        assert stats == {"total": 4, "draft": 1, "pending": 1, "paid": 1, "overdue": 1, "cancelled": 0}

        dashboard = (await client.get("/api/v1/dashboard/stats")).json()
        assert dashboard["total_invoices"] == 4
        assert float(dashboard["total_revenue"]) == 201
        assert float(dashboard["this_month_revenue"]) == 201
        assert float(dashboard["pending_amount"]) == 402
        assert dashboard["paid_count"] == 1
        assert dashboard["pending_count"] == 1
        assert dashboard["overdue_count"] == 1

    async def test_preview_totals(self, client):
        response = await client.post("/api/v1/invoices/preview-totals", json={
            "items": [{"quantity": 1, "price": "103.95"}],
        })
        assert response.status_code == 200
        totals = response.json()
        assert float(totals["total"]) == 104
        assert float(totals["round_off"]) == 0.05


class TestCatalogAndBusiness:

    async def test_customer_crud(self, client):
        response = await client.post("/api/v1/customers", json={"name": "Acme Traders", "phone": "98765"})
        assert response.status_code == 201
        customer_id = response.json()["id"]

        listing = (await client.get("/api/v1/customers", params={"search": "acme"})).json()
        assert listing["total"] == 1

        response = await client.put(f"/api/v1/customers/{customer_id}", json={"email": "a@acme.example"})
        assert response.json()["email"] == "a@acme.example"

        assert (await client.delete(f"/api/v1/customers/{customer_id}")).status_code == 204
        assert (await client.delete(f"/api/v1/customers/{customer_id}")).status_code == 404

    async def test_product_crud(self, client):
        response = await client.post("/api/v1/products", json={"name": "LED Panel", "price": 450, "taxRate": 18})
        assert response.status_code == 201
        product = response.json()
        assert product["unit"] == "PCS"

        response = await client.put(f"/api/v1/products/{product['id']}", json={"price": 500})
        assert float(response.json()["price"]) == 500

        assert (await client.delete(f"/api/v1/products/{product['id']}")).status_code == 204

    async def test_business_and_settings_defaults(self, client):
        business = (await client.get("/api/v1/business")).json()
        assert business["currency"] == "₹"

        prefs = (await client.get("/api/v1/settings")).json()
        assert prefs["invoice_prefix"] == "INV"
        assert prefs["default_payment_terms"] == "Due on receipt"
        assert prefs["show_logo"] is True
        assert prefs["tax_label"] == "GST"

        response = await client.put("/api/v1/business", json={"name": "Shree Ganesh Electricals", "taxId": "09ABC"})
        assert response.json()["tax_id"] == "09ABC"

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["checks"]["database"] == "connected"
