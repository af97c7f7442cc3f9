"""
Identity provider: account creation and the current session.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import uuid
from typing import Any, Protocol

from emporium._errors import IdentityError
from emporium.identity._password import is_strong
from emporium.identity._types import Principal
from emporium.store import PROFILES, DataStore

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    """
    What checkout needs from auth.

    sign_up raises IdentityError when the account cannot be created.
    current_user is the ambient session of a single-user client; servers
    resolve each request's bearer token with verify_token instead.
    """

    async def sign_up(self, email: str, password: str, attributes: dict[str, Any]) -> Principal:
        ...

    async def current_user(self) -> Principal | None:
        ...

    async def verify_token(self, token: str) -> Principal | None:
        ...


class MemoryIdentityProvider:
    """
    In-process provider.

    Signing up also signs the new user in, and writes a profile row when a
    store is given (the way a hosted auth backend's sign-up trigger does).
    """

    def __init__(self, store: DataStore | None = None) -> None:
        self._store = store
        self._accounts: dict[str, tuple[Principal, str]] = {}
        self._session: Principal | None = None
        self._tokens: dict[str, Principal] = {}
        self._lock = asyncio.Lock()

    def sign_in_as(self, principal: Principal) -> None:
        self._session = principal

    def sign_out(self) -> None:
        self._session = None

    def issue_token(self, principal: Principal) -> str:
        token = secrets.token_urlsafe(32)
        self._tokens[token] = principal
        return token

    def revoke_token(self, token: str) -> None:
        self._tokens.pop(token, None)

    def check_password(self, email: str, password: str) -> bool:
        account = self._accounts.get(email.lower())
        return account is not None and account[1] == password

    async def current_user(self) -> Principal | None:
        return self._session

    async def verify_token(self, token: str) -> Principal | None:
        return self._tokens.get(token)

    async def sign_up(self, email: str, password: str, attributes: dict[str, Any]) -> Principal:
        key = email.strip().lower()
        if "@" not in key:
            raise IdentityError(f"Invalid email address: {email}")
        if not is_strong(password):
            raise IdentityError("Password is too weak")

        async with self._lock:
            if key in self._accounts:
                raise IdentityError("User already registered")
            principal = Principal(id=str(uuid.uuid4()), email=key)
            self._accounts[key] = (principal, password)

        if self._store is not None:
            await self._store.insert(
                PROFILES,
                [
                    {
                        "id": principal.id,
                        "email": key,
                        "full_name": attributes.get("full_name", ""),
                        "phone": attributes.get("phone"),
                        "role": attributes.get("role", "customer"),
                    }
                ],
            )

        logger.info("Created account %s", principal.id)
        self._session = principal
        return principal


__all__ = ("IdentityProvider", "MemoryIdentityProvider")
