"""
Friendly error text.

Gateway text is shown verbatim, except for a few known failures that read
badly to a customer.
"""

from __future__ import annotations

SESSION_EXPIRED = "Your session has expired. Please sign in again and retry the payment."
NETWORK_ERROR = "Network error. Please check your internet connection and try again."

_REMAPS: tuple[tuple[str, str], ...] = (
    ("not authenticated", SESSION_EXPIRED),
    ("jwt expired", SESSION_EXPIRED),
    ("failed to fetch", NETWORK_ERROR),
    ("network request failed", NETWORK_ERROR),
)


def friendly_message(text: str | None, fallback: str = "Payment failed") -> str:
    if not text:
        return fallback
    lowered = text.lower()
    for needle, replacement in _REMAPS:
        if needle in lowered:
            return replacement
    return text


__all__ = ("SESSION_EXPIRED", "NETWORK_ERROR", "friendly_message")
