"""
Enum helpers for VARCHAR-based status fields.

Statuses are stored as lowercase strings (``"draft"``, ``"paid"``, ...).
Pydantic schemas validate input against the Python Enum; responses read the
stored string directly.
"""

from enum import Enum
from typing import Any, Optional


def get_enum_value(value: Any) -> Optional[str]:
    """
    Safely get string value from an enum or string.

    Examples:
        >>> get_enum_value(InvoiceStatus.PAID)
        'paid'
        >>> get_enum_value("paid")
        'paid'
    """
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    return str(value)


def normalize_to_lowercase(value: Any) -> Any:
    """Lowercase and strip string input so ``"Paid "`` validates as ``"paid"``."""
    if isinstance(value, str):
        return value.strip().lower()
    return value
