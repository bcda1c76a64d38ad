"""Tests for status enum helpers."""
from invoicedesk.core.enum_utils import get_enum_value, normalize_to_lowercase
from invoicedesk.models.invoice import InvoiceStatus


def test_get_enum_value_reads_enums_and_strings():
    assert get_enum_value(InvoiceStatus.PAID) == "paid"
    assert get_enum_value("overdue") == "overdue"
    assert get_enum_value(None) is None


def test_normalize_to_lowercase():
    assert normalize_to_lowercase(" Paid ") == "paid"
    assert normalize_to_lowercase(InvoiceStatus.DRAFT) == "draft"
    assert normalize_to_lowercase(3) == 3
