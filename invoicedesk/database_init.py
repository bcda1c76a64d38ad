"""
Database initialization.

Creates missing tables and seeds the single business profile and invoice
settings rows so the first render has something to print.
"""
import logging

from invoicedesk.database import Base, engine, get_db_context

logger = logging.getLogger(__name__)


async def init_db() -> None:
    """Create all tables that do not exist yet."""
    # Import all models to register them with Base.metadata
    from invoicedesk import models  # noqa: F401

    logger.info("Registered %d tables", len(Base.metadata.tables))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


async def seed_defaults() -> None:
    """Insert the default business profile and invoice settings if missing."""
    from invoicedesk.services.business_service import BusinessService

    async with get_db_context() as session:
        service = BusinessService(session)
        await service.get_business()
        await service.get_invoice_settings()
