import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from invoicedesk.config import settings
from invoicedesk.database import async_session_factory
from invoicedesk.api.v1.router import api_router
from invoicedesk.jobs.scheduler import start_scheduler, shutdown_scheduler, get_job_status
from invoicedesk.services.render_worker import pdf_worker

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
    - Create tables and seed the business profile / invoice settings rows
    - Start the PDF render worker thread
    - Start background scheduler (render job purge)
    """
    logger.info("Starting %s v%s", settings.APP_NAME, settings.APP_VERSION)

    from invoicedesk.database_init import init_db, seed_defaults
    await init_db()
    await seed_defaults()

    pdf_worker.start()

    if settings.SCHEDULER_ENABLED:
        start_scheduler()

    yield

    # Shutdown
    shutdown_scheduler()
    pdf_worker.shutdown(wait=False)
    logger.info("Shutting down...")


OPENAPI_TAGS = [
    {"name": "Invoices", "description": "Invoices with line items; totals are computed on every read"},
    {"name": "Documents", "description": "Invoice PDFs: direct download/preview and background render jobs"},
    {"name": "Customers", "description": "Saved customers used to prefill invoices"},
    {"name": "Products", "description": "Product catalog used to prefill line items"},
    {"name": "Business", "description": "Seller profile and invoice settings"},
    {"name": "Dashboard", "description": "Revenue and status summary"},
    {"name": "Health", "description": "Service health checks"},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Invoice management with GST-style PDF invoices.",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log unexpected errors and return them as JSON."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)

    error_detail = {
        "error": str(exc),
        "type": type(exc).__name__,
        "path": str(request.url.path),
        "method": request.method,
    }
    if settings.DEBUG:
        error_detail["traceback"] = traceback.format_exc()

    return JSONResponse(status_code=500, content=error_detail)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint with database and render worker status."""
    from sqlalchemy import text
    from datetime import datetime, timezone

    health_status = {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "database": "unknown",
            "pdf_worker": "running" if pdf_worker.running else "stopped",
        }
    }

    try:
        async with async_session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            health_status["checks"]["database"] = "connected"
    except Exception as e:
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = f"error: {str(e)}"

    if not pdf_worker.running:
        health_status["status"] = "unhealthy"

    health_status["scheduled_jobs"] = get_job_status()

    if health_status["status"] == "unhealthy":
        return JSONResponse(status_code=503, content=health_status)

    return health_status


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
