"""
Cart partitioning: group by vendor, price, split shipping.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from decimal import ROUND_DOWN

from emporium._money import Money, CENT, ZERO, money, round_money
from emporium.cart._types import CartLine, PricedLine, VendorPartition
from emporium.pricing import TaxConfig, price_line


def partition(lines: Iterable[CartLine]) -> dict[str, list[CartLine]]:
    """Group lines by vendor. Vendors and lines keep cart order."""
    groups: dict[str, list[CartLine]] = {}
    for line in lines:
        groups.setdefault(line.vendor_id, []).append(line)
    return groups


def split_shipping(cost: Money, parts: int) -> list[Money]:
    """
    Divide ``cost`` evenly over ``parts`` vendor orders.

    Leftover cents go one each to the first parts, so the shares always sum
    back to ``cost``: 10.00 over 3 → 3.34, 3.33, 3.33.
    """
    if parts <= 0:
        return []
    cost = round_money(money(cost))
    share = (cost / parts).quantize(CENT, rounding=ROUND_DOWN)
    remainder = int((cost - share * parts) / CENT)
    return [share + CENT if i < remainder else share for i in range(parts)]


def _price_lines(lines: Sequence[CartLine], tax: TaxConfig) -> tuple[PricedLine, ...]:
    priced: list[PricedLine] = []
    for line in lines:
        p = price_line(line.unit_price, line.quantity, tax)
        priced.append(PricedLine(line, p.vat, p.commission, p.total))
    return tuple(priced)


def price_partitions(
    groups: Mapping[str, Sequence[CartLine]],
    shipping_cost: Money,
    tax: TaxConfig,
) -> list[VendorPartition]:
    """One VendorPartition per vendor group, totals summed from rounded lines."""
    shares = split_shipping(shipping_cost, len(groups))
    partitions: list[VendorPartition] = []

    for (vendor_id, lines), shipping in zip(groups.items(), shares):
        priced = _price_lines(lines, tax)
        subtotal = sum((p.line.subtotal for p in priced), ZERO)
        tax_total = sum((p.tax_amount for p in priced), ZERO)
        commission = sum((p.commission_amount for p in priced), ZERO)
        partitions.append(
            VendorPartition(
                vendor_id=vendor_id,
                lines=priced,
                subtotal=subtotal,
                tax_total=tax_total,
                commission_total=commission,
                shipping_total=shipping,
                total=subtotal + tax_total + shipping,
            )
        )

    return partitions


def cart_totals(lines: Iterable[CartLine], tax: TaxConfig) -> tuple[Money, Money, Money]:
    """(subtotal, tax, merchandise total) for the whole cart, pre-shipping."""
    priced = _price_lines(list(lines), tax)
    subtotal = sum((p.line.subtotal for p in priced), ZERO)
    vat = sum((p.tax_amount for p in priced), ZERO)
    return subtotal, vat, subtotal + vat


__all__ = ("partition", "split_shipping", "price_partitions", "cart_totals")
