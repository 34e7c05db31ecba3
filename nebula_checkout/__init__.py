"""
nebula_checkout — idempotent storefront checkout with simulated payment sessions.

    from nebula_checkout import catalog       # Products, rewards, payment methods
    from nebula_checkout import cart          # Cart entries and pricing
    from nebula_checkout import rewards as R  # Reward eligibility
    from nebula_checkout import idempotency as I  # Keys and the claim registry
    from nebula_checkout import sessions as S     # Payment session lifecycle
    from nebula_checkout import checkout as CO    # Storefront state machine
"""

from nebula_checkout import catalog
from nebula_checkout import cart
from nebula_checkout import rewards
from nebula_checkout import ledger
from nebula_checkout import idempotency
from nebula_checkout import sessions
from nebula_checkout import checkout
from nebula_checkout._settings import Settings
from nebula_checkout._types import (
    Result,
    Ok,
    Error,
    LazyCoroResult,
    Amount,
)

__version__ = "0.1.0"

__all__ = (
    "catalog",
    "cart",
    "rewards",
    "ledger",
    "idempotency",
    "sessions",
    "checkout",
    "Settings",
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    "Amount",
)
