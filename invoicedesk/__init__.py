"""InvoiceDesk: invoice management API with GST totals and PDF rendering."""

__version__ = "1.0.0"
