"""
Claim types — per-key records of the session registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")


# ═══════════════════════════════════════════════════════════════════════════════
# Claim State — Lifecycle
# ═══════════════════════════════════════════════════════════════════════════════


class ClaimState(Enum):
    """
    State of a claim.

    Lifecycle:
        PENDING → COMPLETED (value stored)
                → (released on failure, key is free again)
    """

    PENDING = auto()
    COMPLETED = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Claim — Stored State
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Claim(Generic[T]):
    """
    A stored claim on a key.

    value is None while PENDING.
    """

    key: str
    state: ClaimState
    value: T | None
    created_at: datetime
    expires_at: datetime | None

    @property
    def is_completed(self) -> bool:
        return self.state == ClaimState.COMPLETED


# ═══════════════════════════════════════════════════════════════════════════════
# Result Types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ClaimResult(Generic[T]):
    """
    Value resolved for a key.

    Note: reused=True means another submission created it, nothing was executed.
    """

    value: T
    reused: bool
    key: str


class ClaimErrorKind(Enum):
    CONFLICT = auto()  # Lost a race and the winner did not complete
    TIMEOUT = auto()  # Waiting for a pending claim timed out
    STORE_ERROR = auto()  # Storage backend error
    EXECUTION = auto()  # Wrapped operation failed


@dataclass(frozen=True, slots=True)
class ClaimError(Generic[E]):
    """
    Registry error.

    Note: original_error is the operation's own error when kind is EXECUTION.
    """

    kind: ClaimErrorKind
    message: str
    original_error: E | None = None


__all__ = (
    "ClaimState",
    "Claim",
    "ClaimResult",
    "ClaimErrorKind",
    "ClaimError",
)
