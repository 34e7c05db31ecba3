"""
Claim graph — keyed create-or-reuse as nodnod nodes.

Architecture:
    ClaimSpec (injected)
         │
         ▼
    SpecNode
         │
         ▼
    FetchClaimNode
         │
         ├── CompletedClaimNode ──┐
         ├── PendingClaimNode ────┤
         ├── NoClaimNode ─────────┼── ClaimOutcome (@polymorphic)
         └── StoreErrorNode ──────┘             │
                                                ▼
                                         FinalResultNode

Note: no 'from __future__ import annotations' here, nodnod resolves
__compose__ type hints at runtime.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from nodnod import NodeError, polymorphic, case

from kungfu import Result, Ok, Error

from nebula_checkout import _graph as G
from nebula_checkout.idempotency._types import (
    ClaimState,
    Claim,
    ClaimResult,
    ClaimError,
    ClaimErrorKind,
)
from nebula_checkout.idempotency._store import StoreError, ClaimStoreAny
from nebula_checkout.idempotency._policy import Policy, OnPending

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Input — Spec (injected)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ClaimSpec:
    """
    Everything needed to resolve one key.

    operation(input_value) must return an awaitable Result
    (a LazyCoroResult). It runs at most once per live claim.
    """

    key: str
    input_value: Any
    operation: Any
    store: ClaimStoreAny
    policy: Policy


# ═══════════════════════════════════════════════════════════════════════════════
# Entry + Fetch
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class SpecNode:
    def __init__(self, spec: ClaimSpec) -> None:
        self.spec = spec

    @classmethod
    def __compose__(cls, spec: ClaimSpec) -> "SpecNode":
        return cls(spec)


@G.node
class FetchClaimNode:
    """Reads the current claim for the key."""

    def __init__(
        self,
        claim: Claim[Any] | None,
        spec: ClaimSpec,
        store_error: StoreError | None = None,
    ) -> None:
        self.claim = claim
        self.spec = spec
        self.store_error = store_error

    @classmethod
    async def __compose__(cls, spec_node: SpecNode) -> "FetchClaimNode":
        spec = spec_node.spec
        result = await spec.store.get(spec.key)

        match result:
            case Ok(claim):
                return cls(claim, spec)
            case Error(err):
                return cls(None, spec, store_error=err)


# ═══════════════════════════════════════════════════════════════════════════════
# State Nodes — each validates one claim state
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class CompletedClaimNode:
    """Validates: claim exists and is COMPLETED."""

    def __init__(self, claim: Claim[Any], spec: ClaimSpec) -> None:
        self.claim = claim
        self.spec = spec

    @classmethod
    def __compose__(cls, fetch: FetchClaimNode) -> "CompletedClaimNode":
        claim = fetch.claim
        if claim is None:
            raise NodeError("No claim")
        if claim.state != ClaimState.COMPLETED:
            raise NodeError("Not completed")
        return cls(claim, fetch.spec)


@G.node
class PendingClaimNode:
    """Validates: claim exists and is PENDING."""

    def __init__(self, claim: Claim[Any], spec: ClaimSpec) -> None:
        self.claim = claim
        self.spec = spec

    @classmethod
    def __compose__(cls, fetch: FetchClaimNode) -> "PendingClaimNode":
        claim = fetch.claim
        if claim is None:
            raise NodeError("No claim")
        if claim.state != ClaimState.PENDING:
            raise NodeError("Not pending")
        return cls(claim, fetch.spec)


@G.node
class NoClaimNode:
    """Validates: key is free."""

    def __init__(self, spec: ClaimSpec) -> None:
        self.spec = spec

    @classmethod
    def __compose__(cls, fetch: FetchClaimNode) -> "NoClaimNode":
        if fetch.store_error is not None:
            raise NodeError("Store error")
        if fetch.claim is not None:
            raise NodeError("Claim exists")
        return cls(fetch.spec)


@G.node
class StoreErrorNode:
    """Validates: store returned error."""

    def __init__(self, error: StoreError, spec: ClaimSpec) -> None:
        self.error = error
        self.spec = spec

    @classmethod
    def __compose__(cls, fetch: FetchClaimNode) -> "StoreErrorNode":
        if fetch.store_error is None:
            raise NodeError("No store error")
        return cls(fetch.store_error, fetch.spec)


# ═══════════════════════════════════════════════════════════════════════════════
# Outcome Types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class OutcomeOk:
    value: Any
    reused: bool
    key: str


@dataclass(frozen=True)
class OutcomeError:
    kind: ClaimErrorKind
    message: str
    original_error: Any | None


type Outcome = OutcomeOk | OutcomeError


def _store_failure(err: StoreError) -> OutcomeError:
    return OutcomeError(
        kind=ClaimErrorKind.STORE_ERROR,
        message=err.message,
        original_error=err.cause,
    )


async def _wait_for_completion(spec: ClaimSpec) -> Outcome:
    """Poll a PENDING claim until it completes, disappears or times out."""
    timeout = spec.policy.pending_wait_timeout.total_seconds()
    interval = spec.policy.pending_poll_interval.total_seconds()
    elapsed = 0.0

    while elapsed < timeout:
        await asyncio.sleep(interval)
        elapsed += interval

        match await spec.store.get(spec.key):
            case Error(err):
                return _store_failure(err)
            case Ok(None):
                # the winner released its claim: its operation failed
                return OutcomeError(
                    kind=ClaimErrorKind.CONFLICT,
                    message=f"Concurrent submission for {spec.key} failed",
                    original_error=None,
                )
            case Ok(claim) if claim.state == ClaimState.COMPLETED:
                return OutcomeOk(value=claim.value, reused=True, key=spec.key)
            case Ok(_):
                pass

    return OutcomeError(
        kind=ClaimErrorKind.TIMEOUT,
        message=f"Timeout waiting for pending claim {spec.key}",
        original_error=None,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Polymorphic Outcome
# ═══════════════════════════════════════════════════════════════════════════════


@polymorphic[Outcome]
class ClaimOutcome:
    """
    Router: each @case depends on a validated state node.

    Note: state checks live in the state nodes, cases only act.
    """

    @case
    def store_error(cls, node: StoreErrorNode) -> Outcome:
        return _store_failure(node.error)

    @case
    def reuse_completed(cls, node: CompletedClaimNode) -> Outcome:
        """Key already resolved, return the stored value untouched."""
        return OutcomeOk(value=node.claim.value, reused=True, key=node.spec.key)

    @case
    def pending_conflict(cls, node: PendingClaimNode) -> Outcome:
        if node.spec.policy.conflict_strategy != OnPending.FAIL:
            raise NodeError("Policy not FAIL")
        return OutcomeError(
            kind=ClaimErrorKind.CONFLICT,
            message=f"Pending conflict: {node.spec.key}",
            original_error=None,
        )

    @case
    async def pending_wait(cls, node: PendingClaimNode) -> Outcome:
        if node.spec.policy.conflict_strategy != OnPending.WAIT:
            raise NodeError("Policy not WAIT")
        return await _wait_for_completion(node.spec)

    @case
    async def execute_new(cls, node: NoClaimNode) -> Outcome:
        """Claim the key, run the operation, store its value."""
        spec = node.spec

        match await spec.store.claim(spec.key, spec.policy.result_ttl):
            case Error(err):
                return _store_failure(err)
            case Ok(False):
                # lost the race between fetch and claim
                return await _wait_for_completion(spec)
            case Ok(_):
                pass

        try:
            result: Result[Any, Any] = await spec.operation(spec.input_value)
        except asyncio.CancelledError:
            await spec.store.release(spec.key)
            raise
        except Exception as e:
            await spec.store.release(spec.key)
            return OutcomeError(
                kind=ClaimErrorKind.EXECUTION,
                message=str(e),
                original_error=e,
            )

        match result:
            case Ok(value):
                match await spec.store.fulfil(spec.key, value, spec.policy.result_ttl):
                    case Error(err):
                        return _store_failure(err)
                    case Ok(_):
                        return OutcomeOk(value=value, reused=False, key=spec.key)
            case Error(err):
                # failures are not cached, the key stays retryable
                await spec.store.release(spec.key)
                return OutcomeError(
                    kind=ClaimErrorKind.EXECUTION,
                    message=str(err),
                    original_error=err,
                )


# ═══════════════════════════════════════════════════════════════════════════════
# Final Node
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class FinalResultNode:
    """Converts Outcome to typed Result."""

    def __init__(self, outcome: Outcome) -> None:
        self.outcome = outcome

    @classmethod
    def __compose__(cls, outcome: ClaimOutcome) -> "FinalResultNode":
        return cls(outcome.value)

    def to_result(self) -> Result[ClaimResult[Any], ClaimError[Any]]:
        match self.outcome:
            case OutcomeOk(value=v, reused=reused, key=k):
                return Ok(ClaimResult(value=v, reused=reused, key=k))
            case OutcomeError(kind=kind, message=msg, original_error=orig):
                return Error(ClaimError(kind=kind, message=msg, original_error=orig))


# ═══════════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════════


async def run_claim(spec: ClaimSpec) -> Result[ClaimResult[Any], ClaimError[Any]]:
    """Resolve spec.key: reuse its value or create it exactly once."""
    node = await G.run(FinalResultNode).inject(spec)
    result = node.to_result()
    match result:
        case Ok(r):
            logger.debug("claim %s resolved (reused=%s)", spec.key, r.reused)
        case Error(e):
            logger.warning("claim %s failed: %s %s", spec.key, e.kind.name, e.message)
    return result


__all__ = (
    "ClaimSpec",
    "Outcome",
    "OutcomeOk",
    "OutcomeError",
    "SpecNode",
    "FetchClaimNode",
    "CompletedClaimNode",
    "PendingClaimNode",
    "NoClaimNode",
    "StoreErrorNode",
    "ClaimOutcome",
    "FinalResultNode",
    "run_claim",
)
