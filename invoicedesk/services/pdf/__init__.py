"""PDF rendering for invoices."""
from invoicedesk.services.pdf.layout import InvoiceDocument, Placement
from invoicedesk.services.pdf.renderer import RenderError, render_invoice
from invoicedesk.services.pdf.tax_split import TaxLine, TaxSplitPolicy

__all__ = [
    "InvoiceDocument",
    "Placement",
    "RenderError",
    "render_invoice",
    "TaxLine",
    "TaxSplitPolicy",
]
