"""
emporium: multi-vendor checkout core.

    from emporium import pricing as P     # VAT / commission per line
    from emporium import shipping as Sh   # Eligible delivery methods
    from emporium import cart as Ca       # Vendor partitions
    from emporium import payments as Pay  # Gateway dispatch
    from emporium import checkout as Co   # The whole workflow

    result = await Co.Checkout(store, identity, dispatcher).run(session)
"""

from emporium import pricing
from emporium import shipping
from emporium import cart
from emporium import store
from emporium import identity
from emporium import orders
from emporium import payments
from emporium import checkout
from emporium._errors import (
    CheckoutError,
    ValidationError,
    IdentityError,
    AuthenticationError,
    PartitionWriteError,
    GatewayError,
    NetworkError,
    StoreError,
)
from emporium._money import Money, ZERO, money, round_money
from emporium.config import CheckoutConfig, PartialFailurePolicy

__version__ = "0.1.0"

__all__ = (
    "pricing",
    "shipping",
    "cart",
    "store",
    "identity",
    "orders",
    "payments",
    "checkout",
    "CheckoutError",
    "ValidationError",
    "IdentityError",
    "AuthenticationError",
    "PartitionWriteError",
    "GatewayError",
    "NetworkError",
    "StoreError",
    "Money",
    "ZERO",
    "money",
    "round_money",
    "CheckoutConfig",
    "PartialFailurePolicy",
)
