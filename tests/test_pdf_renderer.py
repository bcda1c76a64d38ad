"""Tests for the invoice PDF renderer."""
from decimal import Decimal

import pytest

from invoicedesk.schemas.invoice import InvoiceItem
from invoicedesk.services.pdf import RenderError, TaxSplitPolicy, render_invoice
from invoicedesk.services.pdf.formatting import (
    decode_image, format_currency, pdf_currency_prefix, wrap_text,
)
from invoicedesk.services.pdf.layout import BOTTOM_MARGIN, MARGIN, PAGE_HEIGHT
from invoicedesk.services.pdf.renderer import _InvoiceRenderer


class TestFormatting:

    def test_currency_prefix_falls_back_for_rupee(self):
        assert pdf_currency_prefix("₹") == "Rs."
        assert pdf_currency_prefix("$") == "$"
        assert pdf_currency_prefix("€") == "€"
        assert pdf_currency_prefix("₽") == "RUB"
        assert pdf_currency_prefix("₿", fallback="BTC") == "BTC"
        assert pdf_currency_prefix("", fallback="Rs.") == "Rs."

    def test_format_currency(self):
        assert format_currency(Decimal("1234.5"), "Rs.") == "Rs. 1,234.50"
        assert format_currency("", "$") == "$ 0.00"
        assert format_currency(Decimal("0.005"), "$") == "$ 0.01"

    def test_wrap_text_breaks_long_tokens(self):
        lines = wrap_text("x" * 400, "Helvetica", 9, 100)
        assert len(lines) > 1
        assert "".join(lines) == "x" * 400

    def test_decode_image_rejects_garbage(self):
        with pytest.raises(ValueError):
            decode_image("not an image at all!")
        with pytest.raises(ValueError):
            decode_image("data:image/png;base64,aGVsbG8gd29ybGQ=")

    def test_decode_image_accepts_data_url(self, png_pixel):
        reader = decode_image(f"data:image/png;base64,{png_pixel}")
        assert reader.getSize() == (1, 1)


class TestRenderInvoice:

    def test_renders_single_page_pdf(self, invoice, business, invoice_settings):
        document = render_invoice(invoice, business, invoice_settings)

        assert document.content.startswith(b"%PDF")
        assert document.to_bytes() == document.content
        assert document.as_stream().read() == document.content
        assert document.page_count == 1
        assert document.filename == "INV-2026-0001.pdf"
        assert document.degraded_assets == []
        assert document.warnings == []
        kinds = [p.kind for p in document.placements]
        assert kinds[:2] == ["header", "bill_to"]
        assert kinds[-3:] == ["totals", "amount_in_words", "footer"]

    def test_content_disposition(self, invoice, business, invoice_settings):
        document = render_invoice(invoice, business, invoice_settings)
        assert document.content_disposition(inline=True) == 'inline; filename="INV-2026-0001.pdf"'
        assert document.content_disposition() == 'attachment; filename="INV-2026-0001.pdf"'

    def test_progress_checkpoints(self, invoice, business, invoice_settings):
        events = []
        render_invoice(invoice, business, invoice_settings,
                       on_progress=lambda progress, message: events.append(progress))
        assert events == [0, 20, 40, 60, 80, 90, 100]

    def test_long_item_table_paginates_without_splitting_rows(
        self, invoice_factory, business, invoice_settings
    ):
        invoice = invoice_factory(item_count=120)
        document = render_invoice(invoice, business, invoice_settings)

        rows = document.placements_of("item_row")
        assert [row.label for row in rows] == [str(n) for n in range(1, 121)]
        assert document.page_count > 2
        for row in rows:
            assert row.top >= MARGIN
            assert row.bottom <= PAGE_HEIGHT - BOTTOM_MARGIN + 1e-6

        # Header row repeats on every page the table reaches, above its rows
        header_pages = {p.page: p for p in document.placements_of("table_header")}
        for row in rows:
            assert row.page in header_pages
            assert header_pages[row.page].bottom <= row.top + 1e-6

    def test_blocks_never_cross_the_bottom_margin(self, invoice_factory, business, invoice_settings):
        for count in (1, 25, 31, 38, 45):
            document = render_invoice(invoice_factory(item_count=count), business, invoice_settings)
            for placement in document.placements:
                assert placement.bottom <= PAGE_HEIGHT - BOTTOM_MARGIN + 1e-6, placement

    def test_long_item_name_wraps_within_one_row(self, invoice_factory, business, invoice_settings):
        invoice = invoice_factory(item_count=1)
        invoice.items[0] = InvoiceItem(name="Copper wire " * 25, quantity=1, price=10)
        document = render_invoice(invoice, business, invoice_settings)
        row = document.placements_of("item_row")[0]
        assert row.bottom - row.top > 7
        assert document.warnings == []

    def test_item_name_taller_than_a_page_is_trimmed(self, invoice_factory, business, invoice_settings):
        invoice = invoice_factory(item_count=1)
        invoice.items[0].name = "Copper wire " * 1500
        document = render_invoice(invoice, business, invoice_settings)

        row = document.placements_of("item_row")[0]
        assert row.bottom <= PAGE_HEIGHT - BOTTOM_MARGIN + 1e-6
        assert len(document.warnings) == 1
        assert document.warnings[0].startswith("Item 1 name trimmed")

    def test_mapping_items_fill_every_column(self, invoice, business, invoice_settings):
        item = {"name": "Ceiling Fan", "quantity": 2, "unit": "NOS", "price": "1500", "discount": 0, "taxRate": 18}
        renderer = _InvoiceRenderer(invoice, business, invoice_settings,
                                    TaxSplitPolicy.from_config(), lambda progress, message: None)
        cells, name_lines = renderer._row_cells(1, item)

        assert name_lines == ["Ceiling Fan"]
        assert cells == ["1", "", "2", "NOS", "1,500.00", "", "18%", "3,540.00"]

        invoice.items = [item]
        assert render_invoice(invoice, business, invoice_settings).page_count == 1

    def test_long_customer_address_is_trimmed(self, invoice, business, invoice_settings):
        invoice.customer_address = "Plot 12 Sector 9 " * 1500
        document = render_invoice(invoice, business, invoice_settings)

        for placement in document.placements:
            assert placement.bottom <= PAGE_HEIGHT - BOTTOM_MARGIN + 1e-6, placement
        assert len(document.warnings) == 1
        assert document.warnings[0].startswith("Customer address trimmed")

    def test_long_business_address_is_trimmed(self, invoice, business, invoice_settings):
        business.address = "Industrial Estate Phase 2 " * 600
        document = render_invoice(invoice, business, invoice_settings)

        header = document.placements_of("header")[0]
        assert header.bottom <= PAGE_HEIGHT - BOTTOM_MARGIN + 1e-6
        assert document.warnings[0].startswith("Business address trimmed")

    def test_long_payment_terms_are_trimmed(self, invoice, business, invoice_settings):
        invoice_settings.default_payment_terms = "Pay within thirty days of invoice. " * 400
        invoice.notes = "Handle with care"
        document = render_invoice(invoice, business, invoice_settings)

        footer = document.placements_of("footer")[0]
        assert footer.bottom <= PAGE_HEIGHT - BOTTOM_MARGIN + 1e-6
        assert document.warnings[0].startswith("Payment terms trimmed")
        # Terms fill the band, so the notes are dropped too
        assert document.warnings[1] == "Notes trimmed from 1 to 0 lines to fit one page"

    def test_corrupt_logo_and_signature_are_not_fatal(self, invoice, business, invoice_settings):
        business.logo = "this is not base64 %%%"
        business.signature = "data:image/png;base64,aGVsbG8="
        document = render_invoice(invoice, business, invoice_settings)

        assert document.content.startswith(b"%PDF")
        assert sorted(document.degraded_assets) == ["logo", "signature"]

    def test_valid_logo_is_drawn(self, invoice, business, invoice_settings, png_pixel):
        business.logo = png_pixel
        business.signature = f"data:image/png;base64,{png_pixel}"
        document = render_invoice(invoice, business, invoice_settings)
        assert document.degraded_assets == []

    def test_logo_hidden_by_settings(self, invoice, business, invoice_settings):
        business.logo = "broken"
        invoice_settings.show_logo = False
        document = render_invoice(invoice, business, invoice_settings)
        assert document.degraded_assets == []

    def test_oversized_notes_are_trimmed(self, invoice, business, invoice_settings):
        invoice.notes = "\n".join(f"Note line {n}" for n in range(200))
        document = render_invoice(invoice, business, invoice_settings)

        footer = document.placements_of("footer")[0]
        assert footer.bottom <= PAGE_HEIGHT - BOTTOM_MARGIN + 1e-6
        assert len(document.warnings) == 1
        assert "Notes trimmed" in document.warnings[0]

    def test_renderer_fault_raises_render_error(self, invoice, business, invoice_settings):
        def explode(progress, message):
            if progress == 60:
                raise RuntimeError("boom")

        with pytest.raises(RenderError, match="boom"):
            render_invoice(invoice, business, invoice_settings, on_progress=explode)


class TestTaxSplitPolicy:

    def test_default_is_half_and_half(self):
        policy = TaxSplitPolicy.from_config()
        lines = policy.split(Decimal("1000"), Decimal("18"), Decimal("180"))
        assert [(line.label, line.rate, line.amount) for line in lines] == [
            ("SGST", Decimal("9"), Decimal("90")),
            ("CGST", Decimal("9"), Decimal("90")),
        ]

    def test_custom_split(self):
        policy = TaxSplitPolicy.from_pairs([("IGST", 1)])
        [line] = policy.split(100, 12, 12)
        assert line.label == "IGST"
        assert line.rate == Decimal("12")
        assert line.amount == Decimal("12")

    def test_shares_must_sum_to_one(self):
        with pytest.raises(ValueError):
            TaxSplitPolicy.from_pairs([("SGST", 0.5), ("CGST", 0.4)])

    def test_renders_with_custom_split(self, invoice, business, invoice_settings):
        policy = TaxSplitPolicy.from_pairs([("IGST", 1)])
        document = render_invoice(invoice, business, invoice_settings, tax_split=policy)
        assert document.page_count == 1
