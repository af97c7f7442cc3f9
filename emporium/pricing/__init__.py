"""
Pricing: VAT and commission for one base price.

    from emporium import pricing as P

    tax = P.TaxConfig(vat_enabled=True, vat_rate=Decimal("15"))
    unit = P.price(Decimal("10.00"), tax)            # vat 1.50, total 11.50
    line = P.price_line(Decimal("10.00"), 3, tax)    # vat 4.50, total 34.50

Commission is reported next to VAT but never added to what the customer
pays: it comes out of the vendor payout.
"""

from emporium.pricing._types import TaxConfig, PriceBreakdown, NO_TAX
from emporium.pricing._engine import price, price_line

__all__ = (
    "TaxConfig",
    "PriceBreakdown",
    "NO_TAX",
    "price",
    "price_line",
)
