from decimal import Decimal

import pytest

from emporium.pricing import NO_TAX, TaxConfig, price, price_line

VAT_15 = TaxConfig(vat_enabled=True, vat_rate=Decimal("15"))
FULL = TaxConfig(
    vat_enabled=True,
    vat_rate=Decimal("15"),
    commission_enabled=True,
    commission_rate=Decimal("10"),
)


@pytest.mark.parametrize("base", ["0", "0.01", "9.99", "10", "123.45", "1000000"])
def test_total_never_below_base_and_excludes_commission(base: str) -> None:
    p = price(Decimal(base), FULL)

    assert p.total >= Decimal(base)
    assert p.total - p.vat == Decimal(base)


def test_zero_price() -> None:
    p = price(Decimal("0"), FULL)

    assert (p.vat, p.commission, p.total) == (Decimal("0.00"), Decimal("0.00"), Decimal("0"))


def test_vat_and_commission_rates() -> None:
    p = price(Decimal("100"), FULL)

    assert p.vat == Decimal("15.00")
    assert p.commission == Decimal("10.00")
    assert p.total == Decimal("115.00")


def test_disabled_components_contribute_nothing() -> None:
    p = price(Decimal("100"), NO_TAX)

    assert p.vat == Decimal("0.00")
    assert p.commission == Decimal("0.00")
    assert p.total == Decimal("100")


def test_line_rounds_once_after_multiplying() -> None:
    # 3 x 0.05 at 15% = 0.0225 → 0.02; per-unit rounding would give 3 x 0.01 = 0.03
    line = price_line(Decimal("0.05"), 3, VAT_15)

    assert line.vat == Decimal("0.02")
    assert line.total == Decimal("0.17")


def test_half_up_rounding() -> None:
    # 0.10 at 25% = 0.025 → 0.03
    line = price_line(Decimal("0.10"), 1, TaxConfig(vat_enabled=True, vat_rate=Decimal("25")))

    assert line.vat == Decimal("0.03")


def test_negative_price_rejected() -> None:
    with pytest.raises(ValueError):
        price(Decimal("-1"), FULL)


def test_negative_quantity_rejected() -> None:
    with pytest.raises(ValueError):
        price_line(Decimal("1"), -2, FULL)


def test_tax_config_from_settings_row() -> None:
    tax = TaxConfig.from_row(
        {
            "is_enabled": True,
            "default_rate": 15,
            "commission_enabled": True,
            "commission_rate": None,
            "jurisdiction": "ZW",
        }
    )

    assert tax.vat_enabled
    assert tax.vat_rate == Decimal("15")
    assert tax.commission_rate == Decimal("10.00")
    assert tax.jurisdiction == "ZW"


def test_float_amounts_do_not_leak_binary_noise() -> None:
    p = price(0.1, VAT_15)  # type: ignore[arg-type]

    assert p.base == Decimal("0.1")
    assert p.vat == Decimal("0.02")
