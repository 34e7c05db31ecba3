"""
Idempotency — checkout keys and the keyed claim registry.

    from nebula_checkout import idempotency as I

    key = I.build_key(priced.items, reward_id, method)

    spec = I.ClaimSpec(
        key=key,
        input_value=request,
        operation=open_session,
        store=I.MemoryClaimStore(),
        policy=I.Policy().with_ttl(minutes=10),
    )
    result = await I.run_claim(spec)

Two submissions with the same key resolve to one value: the first claims
the key and runs the operation, concurrent ones wait for it, later ones
reuse the stored value without running anything.
"""

from nebula_checkout.idempotency._key import build_key
from nebula_checkout.idempotency._types import (
    ClaimState,
    Claim,
    ClaimResult,
    ClaimErrorKind,
    ClaimError,
)
from nebula_checkout.idempotency._store import (
    StoreError,
    ClaimStore,
    ClaimStoreAny,
    MemoryClaimStore,
)
from nebula_checkout.idempotency._policy import (
    OnPending,
    WAIT,
    FAIL,
    Policy,
)
from nebula_checkout.idempotency._graph import (
    ClaimSpec,
    run_claim,
)

__all__ = (
    # Key
    "build_key",
    # Types
    "ClaimState",
    "Claim",
    "ClaimResult",
    "ClaimErrorKind",
    "ClaimError",
    # Store
    "StoreError",
    "ClaimStore",
    "ClaimStoreAny",
    "MemoryClaimStore",
    # Policy
    "OnPending",
    "WAIT",
    "FAIL",
    "Policy",
    # Graph
    "ClaimSpec",
    "run_claim",
)
