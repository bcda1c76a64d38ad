"""
Invoice PDF renderer.

Draws a GST-style tax invoice on A4 with the ReportLab canvas:

    header band        title, logo, seller details
    bill-to band       customer details | invoice number, date, place of supply
    line-item table    header row repeated on every page it continues onto
    totals block       tax breakdown | sub total, round off, total
    amount in words
    footer band        terms, notes, bank details | signature

Every band, and every table row, is placed whole: when it does not fit
below the cursor the page breaks first. Logo and signature problems only
degrade the output; anything else that goes wrong is raised as RenderError.
"""
import io
import logging
from typing import Callable, List, Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from invoicedesk.config import settings as app_settings
from invoicedesk.services.amount_words import amount_in_words
from invoicedesk.services.pdf.formatting import (
    decode_image, format_currency, format_date, format_money, format_number,
    pdf_currency_prefix, wrap_text,
)
from invoicedesk.services.pdf.layout import (
    CONTENT_WIDTH, MARGIN, PAGE_WIDTH, USABLE_HEIGHT,
    InvoiceDocument, PageCursor,
)
from invoicedesk.services.pdf.tax_split import TaxSplitPolicy
from invoicedesk.services.totals_service import compute_line, compute_totals, item_field, to_decimal

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
PT = 0.3528  # mm per point

LINE = 4.5
HEADER_MIN_HEIGHT = 30.0
LOGO_SIZE = 20.0
SIGNATURE_WIDTH = 30.0
SIGNATURE_HEIGHT = 15.0
BAND_GAP = 4.0
# Most text lines a single band can hold on an empty page
BAND_LINES = int((USABLE_HEIGHT - BAND_GAP) // LINE)

TABLE_HEADER_HEIGHT = 7.0
ROW_LINE = 4.0
ROW_PADDING = 3.0
ROW_MIN_HEIGHT = 7.0
# Longest item name a single row may hold and still fit under a repeated header
MAX_ROW_LINES = int((USABLE_HEIGHT - TABLE_HEADER_HEIGHT - ROW_PADDING) // ROW_LINE)

GRID = colors.HexColor("#d0d0d0")
SHADE = colors.HexColor("#eeeeee")


class RenderError(Exception):
    """The renderer could not produce a document."""
    pass


def _noop_progress(progress: int, message: str) -> None:
    pass


class _InvoiceRenderer:
    """Single-use drawing state for one invoice."""

    def __init__(self, invoice, business, prefs, tax_split: TaxSplitPolicy,
                 on_progress: ProgressCallback):
        self.invoice = invoice
        self.business = business
        self.prefs = prefs
        self.tax_split = tax_split
        self.on_progress = on_progress

        self.buffer = io.BytesIO()
        self.pdf = canvas.Canvas(self.buffer, pagesize=A4)
        self.pdf.setTitle(f"Invoice {invoice.invoice_number}")
        if business.name:
            self.pdf.setAuthor(business.name)
        self.cursor = PageCursor(self.pdf)

        self.degraded_assets: List[str] = []
        self.warnings: List[str] = []

        self.items = list(invoice.items or [])
        self.totals = compute_totals(self.items, invoice.tax_rate, invoice.discount)
        currency = getattr(prefs, 'currency', None) or business.currency
        self.currency = currency
        self.prefix = pdf_currency_prefix(currency, app_settings.PDF_CURRENCY_FALLBACK_LABEL)
        self.tax_label = (getattr(prefs, 'tax_label', None) or 'GST').strip()

        # Line-item table columns: (title, width mm, right aligned)
        self.columns = [
            ("#", 8, False),
            ("Item name", 62, False),
            ("Quantity", 18, True),
            ("Unit", 14, False),
            ("Price/ Unit", 24, True),
            ("Discount", 16, True),
            (self.tax_label, 14, True),
            ("Amount", 24, True),
        ]

    # ==================== Drawing primitives ====================

    def text(self, x: float, top: float, value: str, size: float = 9, bold: bool = False,
             align: str = "left", color=colors.black) -> None:
        """Draw one line whose glyph box starts at `top` (mm from the page top)."""
        self.pdf.setFont(FONT_BOLD if bold else FONT, size)
        self.pdf.setFillColor(color)
        x_pt = PageCursor.x(x)
        y_pt = PageCursor.y(top + size * PT * 0.8)
        if align == "right":
            self.pdf.drawRightString(x_pt, y_pt, value)
        elif align == "center":
            self.pdf.drawCentredString(x_pt, y_pt, value)
        else:
            self.pdf.drawString(x_pt, y_pt, value)

    def hline(self, x1: float, x2: float, top: float, color=GRID, width: float = 0.5) -> None:
        self.pdf.setStrokeColor(color)
        self.pdf.setLineWidth(width)
        self.pdf.line(PageCursor.x(x1), PageCursor.y(top), PageCursor.x(x2), PageCursor.y(top))

    def shade(self, x: float, top: float, width: float, height: float) -> None:
        self.pdf.setFillColor(SHADE)
        self.pdf.rect(PageCursor.x(x), PageCursor.y(top + height), PageCursor.x(width),
                      PageCursor.x(height), stroke=0, fill=1)

    def image(self, asset: str, blob: str, x: float, top: float, width: float, height: float) -> bool:
        """Draw a logo or signature; a bad image is logged and skipped."""
        try:
            reader = decode_image(blob)
            self.pdf.drawImage(
                reader, PageCursor.x(x), PageCursor.y(top + height),
                width=PageCursor.x(width), height=PageCursor.x(height),
                preserveAspectRatio=True, anchor="c", mask="auto",
            )
        except Exception as e:
            logger.warning("Skipping %s on invoice %s: %s", asset, self.invoice.invoice_number, e)
            self.degraded_assets.append(asset)
            return False
        return True

    def wrap(self, value, width_mm: float, size: float = 9, bold: bool = False) -> List[str]:
        return wrap_text(value, FONT_BOLD if bold else FONT, size, PageCursor.x(width_mm))

    def fit_lines(self, lines: List[str], keep: int, what: str) -> List[str]:
        """Cut wrapped text to `keep` lines so its band still fits on one page."""
        keep = max(keep, 0)
        if len(lines) <= keep:
            return lines
        message = f"{what} trimmed from {len(lines)} to {keep} lines to fit one page"
        logger.warning("%s on invoice %s", message, self.invoice.invoice_number)
        self.warnings.append(message)
        lines = lines[:keep]
        if lines:
            lines[-1] = lines[-1][:-3] + "..."
        return lines

    # ==================== Bands ====================

    def draw_header(self) -> None:
        business = self.business
        show_logo = bool(getattr(self.prefs, 'show_logo', True) and business.logo)

        title_height = 9.0
        # Name line plus place, phone, email and tax id share the band with the address
        address_budget = int((USABLE_HEIGHT - title_height - BAND_GAP - 6.0) // LINE) - 4
        address = self.wrap(business.address, 95) if business.address else []

        lines: List[Tuple[str, float, bool]] = []
        if business.name:
            lines.append((business.name, 12, True))
        for line in self.fit_lines(address, address_budget, "Business address"):
            lines.append((line, 9, False))
        place = ", ".join(p for p in [business.city, business.state] if p)
        if business.pincode:
            place = f"{place} - {business.pincode}" if place else business.pincode
        if place:
            lines.append((place, 9, False))
        if business.phone:
            lines.append((f"Phone no.: {business.phone}", 9, False))
        if business.email:
            lines.append((f"Email: {business.email}", 9, False))
        if business.tax_id:
            id_label = "GSTIN" if self.tax_label.upper() == "GST" else f"{self.tax_label} No."
            tax_line = f"{id_label}: {business.tax_id}"
            if business.state:
                tax_line += f", State: {business.state}"
            lines.append((tax_line, 9, False))

        details_height = sum(6.0 if size > 9 else LINE for _, size, _ in lines)
        height = title_height + max(HEADER_MIN_HEIGHT, details_height) + BAND_GAP

        self.cursor.reserve(height)
        top = self.cursor.top
        self.text(PAGE_WIDTH / 2, top, "Tax Invoice", size=14, bold=True, align="center")

        body_top = top + title_height
        if show_logo:
            self.image("logo", business.logo, MARGIN, body_top, LOGO_SIZE, LOGO_SIZE)

        line_top = body_top
        right = PAGE_WIDTH - MARGIN
        for value, size, bold in lines:
            self.text(right, line_top, value, size=size, bold=bold, align="right")
            line_top += 6.0 if size > 9 else LINE

        self.hline(MARGIN, right, top + height - BAND_GAP / 2, color=colors.black)
        self.cursor.place("header", "header", height)

    def draw_bill_to(self) -> None:
        invoice = self.invoice
        half = CONTENT_WIDTH / 2 - 5
        address = self.wrap(invoice.customer_address, half) if invoice.customer_address else []
        email = self.wrap(f"Email: {invoice.customer_email}", half) if invoice.customer_email else []
        contact = [f"Contact No.: {invoice.customer_phone}"] if invoice.customer_phone else []
        address = self.fit_lines(address, BAND_LINES - 2 - len(contact) - len(email), "Customer address")

        left: List[Tuple[str, bool]] = [("Bill To", True), (invoice.customer_name or "", True)]
        left.extend((line, False) for line in address + contact + email)

        place_of_supply = self.business.state or app_settings.PDF_DEFAULT_PLACE_OF_SUPPLY
        right: List[Tuple[str, bool]] = [
            ("Invoice Details", True),
            (f"Invoice No.: {invoice.invoice_number}", False),
            (f"Date: {format_date(invoice.date)}", False),
            (f"Place of Supply: {place_of_supply}", False),
        ]

        height = max(len(left), len(right)) * LINE + BAND_GAP
        self.cursor.reserve(height)
        top = self.cursor.top
        for index, (value, bold) in enumerate(left):
            self.text(MARGIN, top + index * LINE, value, bold=bold, size=10 if index == 0 else 9)
        right_x = PAGE_WIDTH / 2 + 5
        for index, (value, bold) in enumerate(right):
            self.text(right_x, top + index * LINE, value, bold=bold, size=10 if index == 0 else 9)
        self.cursor.place("bill_to", "bill_to", height)

    def draw_table_header(self) -> None:
        top = self.cursor.top
        self.shade(MARGIN, top, CONTENT_WIDTH, TABLE_HEADER_HEIGHT)
        x = MARGIN
        for title, width, right_aligned in self.columns:
            if right_aligned:
                self.text(x + width - 1.5, top + 2, title, size=8.5, bold=True, align="right")
            else:
                self.text(x + 1.5, top + 2, title, size=8.5, bold=True)
            x += width
        self.cursor.place("table_header", f"page {self.cursor.page}", TABLE_HEADER_HEIGHT)

    def _row_cells(self, index: int, item) -> Tuple[List[str], List[str]]:
        line = compute_line(item)
        name_width = self.columns[1][1] - 3
        name = item_field(item, "name") or ""
        name_lines = self.fit_lines(self.wrap(name, name_width, size=8.5), MAX_ROW_LINES, f"Item {index} name")

        discount = to_decimal(item_field(item, "discount"))
        tax_rate = to_decimal(item_field(item, "tax_rate", "taxRate"))
        cells = [
            str(index),
            "",
            format_number(item_field(item, "quantity")),
            item_field(item, "unit") or "PCS",
            format_money(item_field(item, "price")),
            f"{format_number(discount)}%" if discount else "",
            f"{format_number(tax_rate)}%" if tax_rate else "",
            format_money(line.total),
        ]
        return cells, name_lines

    def draw_row(self, cells: List[str], name_lines: List[str], label: str, kind: str = "item_row",
                 bold: bool = False) -> None:
        height = max(ROW_MIN_HEIGHT, len(name_lines) * ROW_LINE + ROW_PADDING)
        self.cursor.reserve(height, on_new_page=self.draw_table_header)
        top = self.cursor.top
        x = MARGIN
        for column, ((_, width, right_aligned), value) in enumerate(zip(self.columns, cells)):
            if column == 1:
                for offset, name_line in enumerate(name_lines):
                    self.text(x + 1.5, top + 1.5 + offset * ROW_LINE, name_line, size=8.5, bold=bold)
            elif right_aligned:
                self.text(x + width - 1.5, top + 1.5, value, size=8.5, bold=bold, align="right")
            else:
                self.text(x + 1.5, top + 1.5, value, size=8.5, bold=bold)
            x += width
        self.hline(MARGIN, PAGE_WIDTH - MARGIN, top + height)
        self.cursor.place(kind, label, height)

    def draw_items(self) -> None:
        rows = [self._row_cells(index, item) for index, item in enumerate(self.items, start=1)]

        # Keep the header together with the first row
        first_height = ROW_MIN_HEIGHT
        if rows:
            first_height = max(ROW_MIN_HEIGHT, len(rows[0][1]) * ROW_LINE + ROW_PADDING)
        self.cursor.reserve(TABLE_HEADER_HEIGHT + first_height)
        self.draw_table_header()

        for index, (cells, name_lines) in enumerate(rows, start=1):
            self.draw_row(cells, name_lines, label=str(index))

        quantity = sum((to_decimal(item_field(item, "quantity")) for item in self.items), to_decimal(0))
        total_cells = ["", "", format_number(quantity), "", "", "", "", format_money(self.totals.subtotal)]
        self.draw_row(total_cells, ["Total"], label="total", kind="table_total", bold=True)

    def draw_totals(self) -> None:
        totals = self.totals
        tax_lines = self.tax_split.split(totals.taxable_amount, self.invoice.tax_rate, totals.tax_amount)

        round_off = totals.round_off
        if round_off < 0:
            round_off_text = f"- {format_currency(-round_off, self.prefix)}"
        else:
            round_off_text = format_currency(round_off, self.prefix)
        amounts = [
            ("Sub Total", format_currency(totals.taxable_amount, self.prefix), False),
            ("Round off", round_off_text, False),
            ("Total", format_currency(totals.total, self.prefix), True),
        ]

        left_height = LINE + TABLE_HEADER_HEIGHT + len(tax_lines) * 6.0
        right_height = LINE + 2 + len(amounts) * 6.0 + 1
        height = max(left_height, right_height) + BAND_GAP
        self.cursor.reserve(height + BAND_GAP)
        self.cursor.skip(BAND_GAP)
        top = self.cursor.top

        # Tax breakdown
        tax_columns = [("Tax type", 22, False), ("Taxable amt", 32, True), ("Rate", 16, True), ("Tax amount", 32, True)]
        self.text(MARGIN, top, "Tax Summary", size=10, bold=True)
        header_top = top + LINE + 1
        self.shade(MARGIN, header_top, sum(w for _, w, _ in tax_columns), TABLE_HEADER_HEIGHT)
        x = MARGIN
        for title, width, right_aligned in tax_columns:
            if right_aligned:
                self.text(x + width - 1.5, header_top + 2, title, size=8.5, bold=True, align="right")
            else:
                self.text(x + 1.5, header_top + 2, title, size=8.5, bold=True)
            x += width
        row_top = header_top + TABLE_HEADER_HEIGHT + 1
        for tax_line in tax_lines:
            values = [
                tax_line.label,
                format_currency(tax_line.taxable_amount, self.prefix),
                f"{format_number(tax_line.rate)}%",
                format_currency(tax_line.amount, self.prefix),
            ]
            x = MARGIN
            for (_, width, right_aligned), value in zip(tax_columns, values):
                if right_aligned:
                    self.text(x + width - 1.5, row_top, value, size=8.5, align="right")
                else:
                    self.text(x + 1.5, row_top, value, size=8.5)
                x += width
            row_top += 6.0

        # Amounts
        label_x = PAGE_WIDTH - MARGIN - 70
        value_x = PAGE_WIDTH - MARGIN
        self.text(label_x, top, "Amounts", size=10, bold=True)
        line_top = top + LINE + 2
        for label, value, bold in amounts:
            size = 11 if bold else 9
            if bold:
                self.hline(label_x, value_x, line_top - 1, color=colors.black)
            self.text(label_x, line_top, label, size=size, bold=bold)
            self.text(value_x, line_top, value, size=size, bold=bold, align="right")
            line_top += 6.0

        self.cursor.place("totals", "totals", height)

    def draw_amount_in_words(self) -> None:
        words = amount_in_words(self.totals.total, self.currency)
        lines = self.wrap(words, CONTENT_WIDTH)
        height = LINE + len(lines) * LINE + BAND_GAP
        self.cursor.reserve(height)
        top = self.cursor.top
        self.text(MARGIN, top, "Invoice Amount In Words", size=10, bold=True)
        for index, line in enumerate(lines, start=1):
            self.text(MARGIN, top + index * LINE, line)
        self.cursor.place("amount_in_words", "amount_in_words", height)

    def _footer_left_lines(self, width: float) -> Tuple[List[Tuple[str, bool]], List[str]]:
        bank: List[Tuple[str, bool]] = []
        business = self.business
        if business.bank_name or business.account_number:
            bank.append(("Pay To", True))
            if business.bank_name:
                bank.append((f"Bank Name: {business.bank_name}", False))
            if business.account_number:
                bank.append((f"Bank Account No.: {business.account_number}", False))
            if business.ifsc_code:
                bank.append((f"Bank IFSC code: {business.ifsc_code}", False))
            if business.branch_name:
                bank.append((f"Branch: {business.branch_name}", False))
            if business.name:
                bank.append((f"Account holder's name: {business.name}", False))

        terms = getattr(self.prefs, 'default_payment_terms', None)
        terms_lines = self.wrap(terms, width) if terms else []
        terms_lines = self.fit_lines(terms_lines, BAND_LINES - 1 - len(bank), "Payment terms")
        fixed: List[Tuple[str, bool]] = [("Terms and conditions", True)]
        fixed.extend((line, False) for line in terms_lines)

        notes = self.wrap(self.invoice.notes, width) if self.invoice.notes else []
        return fixed + bank, notes

    def draw_footer(self) -> None:
        left_width = CONTENT_WIDTH - 75
        fixed, notes = self._footer_left_lines(left_width)
        right_height = LINE + SIGNATURE_HEIGHT + 2 + LINE

        def band_height(note_count: int) -> float:
            note_block = (note_count + 1) * LINE if note_count else 0
            return max(len(fixed) * LINE + note_block, right_height) + BAND_GAP

        keep = len(notes)
        while keep > 0 and band_height(keep) > USABLE_HEIGHT:
            keep -= 1
        notes = self.fit_lines(notes, keep, "Notes")
        height = band_height(len(notes))

        self.cursor.reserve(height)
        top = self.cursor.top

        line_top = top
        for value, bold in fixed:
            self.text(MARGIN, line_top, value, bold=bold)
            line_top += LINE
        if notes:
            self.text(MARGIN, line_top, "Notes", bold=True)
            line_top += LINE
            for value in notes:
                self.text(MARGIN, line_top, value)
                line_top += LINE

        sign_left = PAGE_WIDTH - MARGIN - 60
        sign_center = sign_left + 30
        self.text(sign_center, top, f"For: {self.business.name}", bold=True, align="center")
        sign_top = top + LINE + 1
        if self.business.signature:
            self.image("signature", self.business.signature,
                       sign_center - SIGNATURE_WIDTH / 2, sign_top, SIGNATURE_WIDTH, SIGNATURE_HEIGHT)
        self.hline(sign_left + 5, sign_left + 55, sign_top + SIGNATURE_HEIGHT + 1, color=colors.black)
        self.text(sign_center, sign_top + SIGNATURE_HEIGHT + 2, "Authorized Signatory", align="center")

        self.cursor.place("footer", "footer", height)

    # ==================== Entry ====================

    def render(self) -> InvoiceDocument:
        self.on_progress(0, "Starting")
        self.draw_header()
        self.on_progress(20, "Header drawn")
        self.draw_bill_to()
        self.on_progress(40, "Customer details drawn")
        self.draw_items()
        self.on_progress(60, f"{len(self.items)} line items drawn")
        self.draw_totals()
        self.draw_amount_in_words()
        self.on_progress(80, "Totals and tax drawn")
        self.draw_footer()
        self.on_progress(90, "Footer drawn")

        self.pdf.save()
        document = InvoiceDocument(
            content=self.buffer.getvalue(),
            invoice_number=self.invoice.invoice_number,
            page_count=self.cursor.page,
            placements=self.cursor.placements,
            degraded_assets=self.degraded_assets,
            warnings=self.warnings,
        )
        self.on_progress(100, "Done")
        return document


def render_invoice(
    invoice,
    business,
    settings,
    *,
    tax_split: Optional[TaxSplitPolicy] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> InvoiceDocument:
    """
    Render an invoice to an in-memory PDF.

    Args:
        invoice: Invoice with items (schemas.invoice.InvoiceBase or InvoiceResponse).
        business: Seller profile (schemas.business.Business).
        settings: Invoice preferences (schemas.business.InvoiceSettings).
        tax_split: Tax breakdown policy, defaults to TAX_SPLIT_COMPONENTS.
        on_progress: Called with (percent, message) at each checkpoint.

    Returns:
        InvoiceDocument with the PDF bytes and the recorded layout.

    Raises:
        RenderError: Layout or PDF generation failed.
    """
    number = getattr(invoice, 'invoice_number', None) or "?"
    try:
        renderer = _InvoiceRenderer(
            invoice,
            business,
            settings,
            tax_split or TaxSplitPolicy.from_config(),
            on_progress or _noop_progress,
        )
        document = renderer.render()
    except RenderError:
        raise
    except Exception as e:
        logger.exception("Failed to render invoice %s", number)
        raise RenderError(f"Failed to render invoice {number}: {e}") from e

    logger.info(
        "Rendered invoice %s: %d page(s), %d bytes",
        number, document.page_count, len(document.content),
    )
    return document
