"""
Card and mobile-money validation. Runs before any network call.
"""

from __future__ import annotations

import re
from datetime import date

from emporium._errors import ValidationError
from emporium.payments._types import (
    CardDetails,
    MobileMoneyDetails,
    PaymentDetails,
    PaymentSelection,
)

_WHITESPACE = re.compile(r"\s+")
_NON_DIGIT = re.compile(r"[^0-9]")
_CARD_NUMBER = re.compile(r"[0-9]{13,19}")
_EXPIRY = re.compile(r"[0-9]{4}")
_CVV = re.compile(r"[0-9]{3,4}")


def clean_card_number(number: str) -> str:
    return _WHITESPACE.sub("", number)


def clean_mobile_number(number: str) -> str:
    return _NON_DIGIT.sub("", number)


def luhn_valid(digits: str) -> bool:
    """Luhn checksum over a digit string."""
    total = 0
    for i, ch in enumerate(reversed(digits)):
        n = int(ch)
        if i % 2 == 1:
            n *= 2
            if n > 9:
                n -= 9
        total += n
    return total % 10 == 0


def validate_card_number(number: str) -> str:
    """Returns the cleaned number."""
    cleaned = clean_card_number(number)
    if not _CARD_NUMBER.fullmatch(cleaned):
        raise ValidationError("card_number", "Card number must be 13 to 19 digits")
    if not luhn_valid(cleaned):
        raise ValidationError("card_number", "Invalid card number")
    return cleaned


def validate_expiry(expiry: str, today: date | None = None) -> tuple[int, int]:
    """
    MMYY, not before the current month.

    Returns (month, year).
    """
    value = expiry.strip()
    if not _EXPIRY.fullmatch(value):
        raise ValidationError("card_expiry", "Expiry must be in MMYY format")

    month, year = int(value[:2]), 2000 + int(value[2:])
    if not 1 <= month <= 12:
        raise ValidationError("card_expiry", "Invalid expiry month")

    today = today or date.today()
    if (year, month) < (today.year, today.month):
        raise ValidationError("card_expiry", "Card has expired")
    return month, year


def validate_cvv(cvv: str) -> str:
    value = cvv.strip()
    if not _CVV.fullmatch(value):
        raise ValidationError("card_cvv", "CVV must be 3 or 4 digits")
    return value


def validate_card(card: CardDetails, today: date | None = None) -> None:
    validate_card_number(card.number)
    validate_expiry(card.expiry, today)
    validate_cvv(card.cvv)


def validate_mobile_money(details: MobileMoneyDetails) -> str:
    """Returns the cleaned digits."""
    digits = clean_mobile_number(details.number)
    if not 9 <= len(digits) <= 12:
        raise ValidationError("mobile_number", "Mobile number must be 9 to 12 digits")
    return digits


def validate_details(
    selection: PaymentSelection,
    details: PaymentDetails,
    today: date | None = None,
) -> None:
    """
    Check the details a sub-method needs.

    Raises:
        ValidationError: missing or malformed details
    """
    if selection.needs_card:
        if not isinstance(details, CardDetails):
            raise ValidationError("card_number", "Card details are required")
        validate_card(details, today)
    elif selection.needs_mobile_number:
        if not isinstance(details, MobileMoneyDetails):
            raise ValidationError("mobile_number", "Mobile money number is required")
        validate_mobile_money(details)


__all__ = (
    "clean_card_number",
    "clean_mobile_number",
    "luhn_valid",
    "validate_card_number",
    "validate_expiry",
    "validate_cvv",
    "validate_card",
    "validate_mobile_money",
    "validate_details",
)
