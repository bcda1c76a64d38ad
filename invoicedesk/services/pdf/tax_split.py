"""Display split of the invoice-level tax into named components."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from invoicedesk.config import settings
from invoicedesk.services.totals_service import to_decimal


@dataclass(frozen=True)
class TaxLine:
    """One row of the tax breakdown table."""
    label: str
    taxable_amount: Decimal
    rate: Decimal
    amount: Decimal


@dataclass(frozen=True)
class TaxSplitPolicy:
    """
    Named tax components and their share of the invoice tax.

    The default is the Indian intra-state split, SGST and CGST at half the
    rate each. Shares must add up to one.
    """
    components: Tuple[Tuple[str, Decimal], ...]

    def __post_init__(self):
        if not self.components:
            raise ValueError("A tax split needs at least one component")
        total = sum((share for _, share in self.components), Decimal("0"))
        if abs(total - 1) > Decimal("0.000001"):
            raise ValueError(f"Tax split shares must sum to 1, got {total}")

    @classmethod
    def from_pairs(cls, pairs: Iterable[Sequence]) -> "TaxSplitPolicy":
        return cls(tuple((str(label), Decimal(str(share))) for label, share in pairs))

    @classmethod
    def from_config(cls, pairs: Optional[Iterable[Sequence]] = None) -> "TaxSplitPolicy":
        if pairs is None:
            pairs = settings.TAX_SPLIT_COMPONENTS
        return cls.from_pairs(pairs)

    def split(self, taxable_amount, rate, tax_amount) -> List[TaxLine]:
        taxable = to_decimal(taxable_amount)
        rate = to_decimal(rate)
        tax_amount = to_decimal(tax_amount)
        return [
            TaxLine(
                label=label,
                taxable_amount=taxable,
                rate=rate * share,
                amount=tax_amount * share,
            )
            for label, share in self.components
        ]
