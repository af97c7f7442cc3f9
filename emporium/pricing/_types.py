"""
Pricing types.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping

from emporium._money import Money, money

DEFAULT_COMMISSION_RATE = Decimal("10.00")


@dataclass(frozen=True, slots=True)
class TaxConfig:
    """
    A jurisdiction's VAT and commission settings.

    Rates are percentages (15 means 15%). A disabled component contributes
    nothing regardless of its rate.
    """

    vat_enabled: bool = False
    vat_rate: Decimal = Decimal("0")
    commission_enabled: bool = False
    commission_rate: Decimal = DEFAULT_COMMISSION_RATE
    jurisdiction: str = "default"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> TaxConfig:
        """Build from a ``vat_settings`` row. A zero/empty commission rate falls back to 10%."""
        commission_rate = money(row.get("commission_rate")) or DEFAULT_COMMISSION_RATE
        return cls(
            vat_enabled=bool(row.get("is_enabled", False)),
            vat_rate=money(row.get("default_rate")),
            commission_enabled=bool(row.get("commission_enabled", False)),
            commission_rate=commission_rate,
            jurisdiction=str(row.get("jurisdiction") or "default"),
        )


NO_TAX = TaxConfig()


@dataclass(frozen=True, slots=True)
class PriceBreakdown:
    """
    Priced amount for one line (or one unit).

    base: price before tax, unit_price * quantity
    vat: tax charged to the customer
    commission: marketplace share, deducted from the vendor payout
    total: base + vat, what the customer pays for the line
    """

    base: Money
    vat: Money
    commission: Money
    total: Money


__all__ = ("DEFAULT_COMMISSION_RATE", "TaxConfig", "NO_TAX", "PriceBreakdown")
