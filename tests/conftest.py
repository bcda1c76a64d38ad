"""
Shared fixtures.

The database URL is pointed at a throwaway SQLite file before any
invoicedesk module is imported, settings are read once at import time.
"""
import os
import tempfile
from datetime import date
from decimal import Decimal

_DB_DIR = tempfile.mkdtemp(prefix="invoicedesk-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["SCHEDULER_ENABLED"] = "false"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from invoicedesk.database import Base, engine  # noqa: E402
from invoicedesk.database_init import init_db, seed_defaults  # noqa: E402
from invoicedesk.main import app  # noqa: E402
from invoicedesk.schemas.business import Business, InvoiceSettings  # noqa: E402
from invoicedesk.schemas.invoice import InvoiceBase, InvoiceItem  # noqa: E402
from invoicedesk.services.render_worker import pdf_worker  # noqa: E402

# 1x1 transparent PNG
PNG_PIXEL = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def make_invoice(item_count: int = 2, **overrides) -> InvoiceBase:
    items = [
        InvoiceItem(
            name=f"Item {n}",
            quantity=Decimal(n),
            unit="PCS",
            price=Decimal("100"),
            discount=Decimal("0"),
            tax_rate=Decimal("0"),
        )
        for n in range(1, item_count + 1)
    ]
    data = dict(
        invoice_number="INV-2026-0001",
        date=date(2026, 3, 14),
        customer_name="Acme Traders",
        customer_email="accounts@acme.example",
        customer_phone="9876543210",
        customer_address="12 MG Road, Lucknow",
        items=items,
        tax_rate=Decimal("18"),
        discount=Decimal("0"),
        notes=None,
        status="pending",
    )
    data.update(overrides)
    return InvoiceBase(**data)


@pytest.fixture
def invoice() -> InvoiceBase:
    return make_invoice()


@pytest.fixture
def business() -> Business:
    return Business(
        name="Shree Ganesh Electricals",
        address="45 Hazratganj",
        city="Lucknow",
        state="Uttar Pradesh",
        pincode="226001",
        phone="0522-4000000",
        email="billing@ganesh.example",
        tax_id="09ABCDE1234F1Z5",
        currency="₹",
        bank_name="State Bank of India",
        account_number="12345678901",
        ifsc_code="SBIN0000123",
    )


@pytest.fixture
def invoice_settings() -> InvoiceSettings:
    return InvoiceSettings()


@pytest.fixture
def png_pixel() -> str:
    return PNG_PIXEL


@pytest_asyncio.fixture
async def client():
    """API client against a fresh database with the render worker running."""
    await init_db()
    await seed_defaults()
    pdf_worker.start()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def invoice_factory():
    return make_invoice
