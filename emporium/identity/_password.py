"""
Guest password generation.
"""

from __future__ import annotations

import secrets
import string

SYMBOLS = "!@#$%^&*"
_CLASSES = (string.ascii_uppercase, string.ascii_lowercase, string.digits, SYMBOLS)
_ALPHABET = "".join(_CLASSES)

MIN_LENGTH = 12


def is_strong(password: str) -> bool:
    """At least MIN_LENGTH characters drawn from every character class."""
    return len(password) >= MIN_LENGTH and all(
        any(ch in chars for ch in password) for chars in _CLASSES
    )


def generate_password(length: int = 16) -> str:
    """
    Random password with upper, lower, digit and symbol characters.

    Raises:
        ValueError: length below MIN_LENGTH
    """
    if length < MIN_LENGTH:
        raise ValueError(f"Password length must be at least {MIN_LENGTH}")

    # one from each class, the rest from the full alphabet, then shuffle
    chars = [secrets.choice(chars) for chars in _CLASSES]
    chars += [secrets.choice(_ALPHABET) for _ in range(length - len(chars))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


__all__ = ("SYMBOLS", "MIN_LENGTH", "is_strong", "generate_password")
