from fastapi import APIRouter

from invoicedesk.api.deps import DB
from invoicedesk.schemas.business import (
    BusinessUpdate,
    BusinessResponse,
    InvoiceSettingsUpdate,
    InvoiceSettingsResponse,
)
from invoicedesk.services.business_service import BusinessService


router = APIRouter(tags=["Business"])


@router.get("/business", response_model=BusinessResponse)
async def get_business(db: DB):
    """Seller profile printed on invoices."""
    profile = await BusinessService(db).get_business()
    return BusinessResponse.model_validate(profile)


@router.put("/business", response_model=BusinessResponse)
async def update_business(data: BusinessUpdate, db: DB):
    profile = await BusinessService(db).update_business(data)
    return BusinessResponse.model_validate(profile)


@router.get("/settings", response_model=InvoiceSettingsResponse)
async def get_invoice_settings(db: DB):
    """Invoice preferences: currency, tax label, numbering prefix, payment terms."""
    prefs = await BusinessService(db).get_invoice_settings()
    return InvoiceSettingsResponse.model_validate(prefs)


@router.put("/settings", response_model=InvoiceSettingsResponse)
async def update_invoice_settings(data: InvoiceSettingsUpdate, db: DB):
    prefs = await BusinessService(db).update_invoice_settings(data)
    return InvoiceSettingsResponse.model_validate(prefs)
