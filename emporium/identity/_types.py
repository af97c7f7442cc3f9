"""
Identity types: who is checking out and where it goes.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any


@dataclass(frozen=True, slots=True)
class Principal:
    """An authenticated user."""

    id: str
    email: str = ""


@dataclass(frozen=True, slots=True)
class Contact:
    email: str
    full_name: str
    phone: str

    def missing(self) -> list[str]:
        """Names of blank fields, in form order."""
        return [f.name for f in fields(self) if not getattr(self, f.name).strip()]


@dataclass(frozen=True, slots=True)
class Address:
    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""

    def missing(self) -> list[str]:
        """Blank fields among those a delivery needs."""
        return [name for name in ("street", "city", "state") if not getattr(self, name).strip()]

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class GuestCredentials:
    """
    Generated password for a freshly created guest account.

    The password can be read exactly once. The core never stores it.
    """

    __slots__ = ("email", "_password")

    def __init__(self, email: str, password: str) -> None:
        self.email = email
        self._password: str | None = password

    @property
    def revealed(self) -> bool:
        return self._password is None

    def reveal(self) -> str | None:
        password, self._password = self._password, None
        return password

    def __repr__(self) -> str:
        return f"GuestCredentials(email={self.email!r}, password=***)"


@dataclass(frozen=True, slots=True)
class Resolution:
    user_id: str
    credentials: GuestCredentials | None = None

    @property
    def is_guest(self) -> bool:
        return self.credentials is not None


__all__ = ("Principal", "Contact", "Address", "GuestCredentials", "Resolution")
