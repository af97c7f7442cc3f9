"""
Identity: make sure a checkout has a customer to bill.

    resolver = IdentityResolver(provider, store)
    resolution = await resolver.resolve(session.principal, contact, address)

    resolution.user_id               # always set
    if resolution.credentials:       # guest checkout created an account
        show(resolution.credentials.reveal())   # once, then gone

Providers:
    IdentityProvider        Protocol: sign_up() + current_user()
    MemoryIdentityProvider  in-process reference implementation
"""

from emporium.identity._types import (
    Principal,
    Contact,
    Address,
    GuestCredentials,
    Resolution,
)
from emporium.identity._password import generate_password, is_strong
from emporium.identity._provider import IdentityProvider, MemoryIdentityProvider
from emporium.identity._resolver import IdentityResolver

__all__ = (
    "Principal",
    "Contact",
    "Address",
    "GuestCredentials",
    "Resolution",
    "generate_password",
    "is_strong",
    "IdentityProvider",
    "MemoryIdentityProvider",
    "IdentityResolver",
)
