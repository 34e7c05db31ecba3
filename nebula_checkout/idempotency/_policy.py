"""
Claim policy — how the registry treats concurrent submissions.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta
from enum import Enum, auto


# ═══════════════════════════════════════════════════════════════════════════════
# On Pending — Conflict Resolution Strategy
# ═══════════════════════════════════════════════════════════════════════════════


class OnPending(Enum):
    """
    What to do when a submission arrives while its key is still being built.

    WAIT: Poll until the claim completes and return its value.
          A retried checkout must see the session of the first one.

    FAIL: Immediately return CONFLICT.
    """

    WAIT = auto()
    FAIL = auto()


WAIT = OnPending.WAIT
FAIL = OnPending.FAIL


# ═══════════════════════════════════════════════════════════════════════════════
# Policy
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Policy:
    """
    Claim policy configuration.

    Example:
        policy = (
            Policy()
            .with_ttl(minutes=10)
            .with_on_pending(WAIT)
            .with_wait_timeout(seconds=30)
        )

    Note: Immutable, each method returns new Policy.
    """

    result_ttl: timedelta | None = None
    conflict_strategy: OnPending = OnPending.WAIT
    pending_wait_timeout: timedelta = timedelta(seconds=30)
    pending_poll_interval: timedelta = timedelta(milliseconds=50)

    def with_ttl(
        self,
        *,
        seconds: float | None = None,
        minutes: float | None = None,
        delta: timedelta | None = None,
    ) -> Policy:
        """
        Set TTL of completed claims. After it the key can be claimed again.

        Example:
            .with_ttl(minutes=10)
            .with_ttl(delta=timedelta(hours=1))
        """
        if delta is not None:
            ttl_val: timedelta | None = delta
        else:
            total_seconds = (seconds or 0) + (minutes or 0) * 60
            ttl_val = timedelta(seconds=total_seconds) if total_seconds > 0 else None
        return replace(self, result_ttl=ttl_val)

    def with_on_pending(self, strategy: OnPending) -> Policy:
        return replace(self, conflict_strategy=strategy)

    def with_wait_timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> Policy:
        """Only applies when on_pending=WAIT."""
        timeout = delta if delta else timedelta(seconds=seconds or 30)
        return replace(self, pending_wait_timeout=timeout)


__all__ = (
    "OnPending",
    "WAIT",
    "FAIL",
    "Policy",
)
