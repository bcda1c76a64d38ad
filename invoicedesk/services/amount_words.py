"""Convert invoice totals to words (Indian numbering system)."""
from typing import Optional

ONES = ['', 'One', 'Two', 'Three', 'Four', 'Five', 'Six', 'Seven', 'Eight', 'Nine',
        'Ten', 'Eleven', 'Twelve', 'Thirteen', 'Fourteen', 'Fifteen', 'Sixteen',
        'Seventeen', 'Eighteen', 'Nineteen']
TENS = ['', '', 'Twenty', 'Thirty', 'Forty', 'Fifty', 'Sixty', 'Seventy', 'Eighty', 'Ninety']

# Largest first; each bucket's multiplier is itself spelled out recursively
SCALES = [
    (10_000_000, 'Crore'),
    (100_000, 'Lakh'),
    (1_000, 'Thousand'),
    (100, 'Hundred'),
]

# Spoken currency names for the "... Rupees only" line
CURRENCY_NAMES = {
    '₹': 'Rupees',
    'Rs.': 'Rupees',
    'Rs': 'Rupees',
    'INR': 'Rupees',
    '$': 'Dollars',
    'USD': 'Dollars',
    '€': 'Euros',
    'EUR': 'Euros',
    '£': 'Pounds',
    'GBP': 'Pounds',
}


def number_to_words(num: int) -> str:
    """
    Spell out an integer.

    Examples:
        >>> number_to_words(1234)
        'One Thousand Two Hundred and Thirty-Four'
        >>> number_to_words(12500000)
        'One Crore Twenty-Five Lakh'
    """
    num = int(num)
    if num == 0:
        return 'Zero'
    if num < 0:
        return 'Minus ' + number_to_words(-num)

    parts = []
    for scale, name in SCALES:
        if num >= scale:
            parts.append(f"{number_to_words(num // scale)} {name}")
            num %= scale

    if num > 0:
        if parts:
            parts.append('and')
        if num < 20:
            parts.append(ONES[num])
        else:
            parts.append(TENS[num // 10] + ('-' + ONES[num % 10] if num % 10 else ''))

    return ' '.join(parts)


def currency_name(symbol: Optional[str]) -> str:
    """Spoken name for a currency symbol, empty when unknown."""
    return CURRENCY_NAMES.get((symbol or '').strip(), '')


def amount_in_words(total, currency: Optional[str] = None) -> str:
    """
    Words line printed under the totals, e.g. "One Hundred and Four Rupees only".

    Fractions are dropped; the printed total is already a whole amount.
    """
    words = number_to_words(int(total))
    name = currency_name(currency)
    return f"{words} {name} only" if name else f"{words} only"
