"""
Page geometry, block placement and the finished document.

Positions are millimetres measured down from the top edge of the page.
ReportLab draws from the bottom-left corner in points, so every draw call
goes through PageCursor.y() to convert.
"""
import io
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

logger = logging.getLogger(__name__)

PAGE_WIDTH = A4[0] / mm    # 210
PAGE_HEIGHT = A4[1] / mm   # 297
MARGIN = 15.0
BOTTOM_MARGIN = 20.0
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
# Tallest block that can ever fit on one page
USABLE_HEIGHT = PAGE_HEIGHT - MARGIN - BOTTOM_MARGIN


@dataclass(frozen=True)
class Placement:
    """Where one block or table row landed."""
    kind: str
    label: str
    page: int
    top: float
    bottom: float


class PageCursor:
    """
    Tracks the current page and the next free vertical position.

    A block is atomic: reserve() either fits it below the cursor or starts a
    new page, and never splits it.
    """

    def __init__(self, pdf: canvas.Canvas):
        self.pdf = pdf
        self.page = 1
        self.top = MARGIN
        self.placements: List[Placement] = []

    @property
    def limit(self) -> float:
        return PAGE_HEIGHT - BOTTOM_MARGIN

    def remaining(self) -> float:
        return self.limit - self.top

    def fits(self, height: float) -> bool:
        return self.top + height <= self.limit + 1e-6

    def new_page(self) -> None:
        self.pdf.showPage()
        self.page += 1
        self.top = MARGIN
        logger.debug("Started page %d", self.page)

    def reserve(self, height: float, on_new_page: Optional[Callable[[], None]] = None) -> bool:
        """
        Make room for a block of the given height.

        Returns True when a page break happened. on_new_page runs right after
        the break (e.g. to repeat a table header).
        """
        if self.fits(height) or self.top <= MARGIN:
            return False
        self.new_page()
        if on_new_page is not None:
            on_new_page()
        return True

    def place(self, kind: str, label: str, height: float) -> Placement:
        """Record a block at the cursor and move below it."""
        placement = Placement(
            kind=kind,
            label=label,
            page=self.page,
            top=round(self.top, 3),
            bottom=round(self.top + height, 3),
        )
        self.placements.append(placement)
        self.top += height
        return placement

    def skip(self, gap: float) -> None:
        self.top = min(self.top + gap, self.limit)

    @staticmethod
    def x(x_mm: float) -> float:
        return x_mm * mm

    @staticmethod
    def y(top_mm: float) -> float:
        """Convert a top-down millimetre position to a ReportLab y in points."""
        return (PAGE_HEIGHT - top_mm) * mm


def safe_filename(name: str) -> str:
    # strip characters not allowed on Windows/mac paths
    return re.sub(r'[\\/*?:"<>|]', "", (name or "")).strip() or "invoice"


@dataclass
class InvoiceDocument:
    """
    A rendered invoice held in memory.

    The same bytes serve both downloads (to_bytes) and inline preview or
    printing (as_stream with an inline Content-Disposition).
    """
    content: bytes
    invoice_number: str
    page_count: int
    placements: List[Placement] = field(default_factory=list)
    degraded_assets: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    media_type = "application/pdf"

    @property
    def filename(self) -> str:
        return f"{safe_filename(self.invoice_number)}.pdf"

    def to_bytes(self) -> bytes:
        return self.content

    def as_stream(self) -> io.BytesIO:
        return io.BytesIO(self.content)

    def content_disposition(self, inline: bool = False) -> str:
        kind = "inline" if inline else "attachment"
        return f'{kind}; filename="{self.filename}"'

    def placements_of(self, kind: str) -> List[Placement]:
        return [p for p in self.placements if p.kind == kind]
