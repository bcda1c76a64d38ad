"""Service layer: totals, amount in words, persistence helpers and PDF rendering."""
