from fastapi import APIRouter

from invoicedesk.api.v1.endpoints import (
    invoices,
    documents,
    customers,
    products,
    business,
    dashboard,
)


api_router = APIRouter(prefix="/api/v1")

# ==================== Invoices ====================
api_router.include_router(
    invoices.router,
    prefix="/invoices",
    tags=["Invoices"]
)

# ==================== PDF Documents ====================
api_router.include_router(
    documents.router,
    tags=["Documents"]
)

# ==================== Catalog ====================
api_router.include_router(
    customers.router,
    prefix="/customers",
    tags=["Customers"]
)
api_router.include_router(
    products.router,
    prefix="/products",
    tags=["Products"]
)

# ==================== Business & Settings ====================
api_router.include_router(
    business.router,
    tags=["Business"]
)

# ==================== Dashboard ====================
api_router.include_router(
    dashboard.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)
