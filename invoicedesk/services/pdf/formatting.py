"""Text, number and image helpers for the PDF renderer."""
import base64
import binascii
import io
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, List, Optional

from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth

from invoicedesk.services.totals_service import to_decimal

# ASCII labels for currency symbols the base-14 fonts (cp1252) cannot draw
CURRENCY_LABELS = {
    '₹': 'Rs.',
    '₩': 'KRW',
    '₱': 'PHP',
    '₦': 'NGN',
    '₺': 'TRY',
    '₴': 'UAH',
    '₽': 'RUB',
}

CENT = Decimal("0.01")

_DATA_URL = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(;[\w=-]+)*;base64,", re.IGNORECASE)


def is_font_safe(text: str) -> bool:
    """True when every character exists in the standard PDF font encoding."""
    try:
        text.encode('cp1252')
    except UnicodeEncodeError:
        return False
    return True


def pdf_currency_prefix(symbol: Optional[str], fallback: str = "Rs.") -> str:
    """
    Currency prefix that renders with Helvetica.

    "$" stays "$", "₹" becomes "Rs."; an unknown symbol outside cp1252 falls
    back to the configured label.
    """
    symbol = (symbol or '').strip()
    if not symbol:
        return fallback
    if is_font_safe(symbol):
        return symbol
    return CURRENCY_LABELS.get(symbol, fallback)


def format_money(amount: Any) -> str:
    value = to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    return f"{value:,.2f}"


def format_currency(amount: Any, prefix: str) -> str:
    """e.g. format_currency(1234.5, "Rs.") -> "Rs. 1,234.50"."""
    return f"{prefix} {format_money(amount)}"


def format_number(value: Any) -> str:
    """Quantities and percentages without trailing zeros: 2, 2.5, 18."""
    number = to_decimal(value)
    if number == number.to_integral_value():
        return str(int(number))
    return format(number.normalize(), 'f')


def format_date(value) -> str:
    if value is None:
        return ''
    if hasattr(value, 'strftime'):
        return value.strftime('%d-%m-%Y')
    return str(value)


def _split_long_token(token: str, font: str, size: float, max_width: float) -> List[str]:
    """Break a single long token (like an email) into width-safe chunks."""
    if stringWidth(token, font, size) <= max_width:
        return [token]
    chunks = []
    remaining = token
    while remaining:
        lo, hi = 1, len(remaining)
        fit = 1
        while lo <= hi:
            mid = (lo + hi) // 2
            if stringWidth(remaining[:mid], font, size) <= max_width:
                fit = mid
                lo = mid + 1
            else:
                hi = mid - 1
        chunks.append(remaining[:fit])
        remaining = remaining[fit:]
    return chunks


def wrap_text(text: Any, font: str, size: float, max_width: float) -> List[str]:
    """
    Word-wrap text to a width in points. Explicit newlines are kept.

    Always returns at least one (possibly empty) line.
    """
    lines: List[str] = []
    for paragraph in str(text or '').splitlines() or ['']:
        current = ''
        words = []
        for word in paragraph.split():
            words.extend(_split_long_token(word, font, size, max_width))
        for word in words:
            candidate = f"{current} {word}" if current else word
            if stringWidth(candidate, font, size) <= max_width:
                current = candidate
            else:
                if current:
                    lines.append(current)
                current = word
        lines.append(current)
    return lines or ['']


def decode_image(blob: str) -> ImageReader:
    """
    Decode a base64 or data-URL image into a ReportLab ImageReader.

    Raises:
        ValueError: The blob is not valid base64 or not a readable image.
    """
    payload = blob.strip()
    match = _DATA_URL.match(payload)
    if match:
        payload = payload[match.end():]
    payload = "".join(payload.split())
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"image is not valid base64: {e}") from e
    if not raw:
        raise ValueError("image is empty")
    try:
        reader = ImageReader(io.BytesIO(raw))
        reader.getSize()
    except Exception as e:
        raise ValueError(f"unreadable image: {e}") from e
    return reader
