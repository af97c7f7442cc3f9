"""
Identity resolver: existing session or guest account.
"""

from __future__ import annotations

import logging

from emporium._errors import CheckoutError, IdentityError, StoreError
from emporium.identity._password import generate_password
from emporium.identity._provider import IdentityProvider
from emporium.identity._types import (
    Address,
    Contact,
    GuestCredentials,
    Principal,
    Resolution,
)
from emporium.store import PROFILES, DataStore, Eq

logger = logging.getLogger(__name__)


class IdentityResolver:
    """
    Resolve the customer id for a checkout.

    With a principal (or a provider session) nothing happens beyond
    returning its id. Without one a guest account is created with a
    generated password, which is handed back exactly once.
    """

    def __init__(self, provider: IdentityProvider, store: DataStore | None = None) -> None:
        self._provider = provider
        self._store = store

    async def resolve(
        self,
        principal: Principal | None,
        contact: Contact,
        address: Address | None = None,
        *,
        use_session: bool = True,
    ) -> Resolution:
        """
        use_session=False skips the provider's ambient session, so a missing
        principal always means a guest. Servers pass it per request.
        """
        if principal is None and use_session:
            principal = await self._provider.current_user()
        if principal is not None:
            return Resolution(user_id=principal.id)

        password = generate_password()
        try:
            created = await self._provider.sign_up(
                contact.email,
                password,
                {
                    "full_name": contact.full_name,
                    "phone": contact.phone,
                    "role": "customer",
                },
            )
        except IdentityError:
            raise
        except CheckoutError as e:
            raise IdentityError(f"Failed to create account: {e.message}") from e

        logger.info("Guest account %s created for checkout", created.id)

        if address is not None:
            await self._save_location(created.id, address)

        return Resolution(
            user_id=created.id,
            credentials=GuestCredentials(contact.email, password),
        )

    async def _save_location(self, user_id: str, address: Address) -> None:
        if self._store is None or not (address.city or address.country):
            return
        try:
            await self._store.update(
                PROFILES,
                {"city": address.city or None, "country": address.country or None},
                Eq("id", user_id),
            )
        except StoreError as e:
            logger.warning("Could not save location on profile %s: %s", user_id, e.message)


__all__ = ("IdentityResolver",)
