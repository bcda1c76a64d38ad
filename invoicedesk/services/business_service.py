"""Service for the singleton seller profile and invoice preferences."""
import logging
from typing import Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from invoicedesk.models.business import BusinessProfile, InvoicePreferences
from invoicedesk.schemas.business import (
    Business, BusinessUpdate, InvoiceSettings, InvoiceSettingsUpdate,
)

logger = logging.getLogger(__name__)


class BusinessService:
    """Both tables hold one row; it is created with defaults on first access."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_business(self) -> BusinessProfile:
        result = await self.db.execute(select(BusinessProfile).limit(1))
        profile = result.scalar_one_or_none()
        if profile is None:
            profile = BusinessProfile()
            self.db.add(profile)
            await self.db.flush()
            logger.info("Created default business profile")
        return profile

    async def update_business(self, data: BusinessUpdate) -> BusinessProfile:
        profile = await self.get_business()
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(profile, key, value)
        await self.db.commit()
        await self.db.refresh(profile)
        return profile

    async def get_invoice_settings(self) -> InvoicePreferences:
        result = await self.db.execute(select(InvoicePreferences).limit(1))
        prefs = result.scalar_one_or_none()
        if prefs is None:
            prefs = InvoicePreferences()
            self.db.add(prefs)
            await self.db.flush()
            logger.info("Created default invoice settings")
        return prefs

    async def update_invoice_settings(self, data: InvoiceSettingsUpdate) -> InvoicePreferences:
        prefs = await self.get_invoice_settings()
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(prefs, key, value)
        await self.db.commit()
        await self.db.refresh(prefs)
        return prefs

    async def get_render_context(self) -> Tuple[Business, InvoiceSettings]:
        """Seller profile and preferences as plain schemas for the renderer."""
        profile = await self.get_business()
        prefs = await self.get_invoice_settings()
        return (
            Business.model_validate(profile, from_attributes=True),
            InvoiceSettings.model_validate(prefs, from_attributes=True),
        )
