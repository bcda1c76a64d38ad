# Models module
from invoicedesk.models.invoice import Invoice, InvoiceStatus
from invoicedesk.models.customer import Customer
from invoicedesk.models.product import Product
from invoicedesk.models.business import BusinessProfile, InvoicePreferences

__all__ = [
    "Invoice",
    "InvoiceStatus",
    "Customer",
    "Product",
    "BusinessProfile",
    "InvoicePreferences",
]
