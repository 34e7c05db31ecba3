"""
Payment session types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from nebula_checkout._types import Amount
from nebula_checkout.catalog import PaymentMethod


# ═══════════════════════════════════════════════════════════════════════════════
# Session
# ═══════════════════════════════════════════════════════════════════════════════


class SessionStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    EXPIRED = "expired"
    AWAITING_REVIEW = "awaiting_review"

    @property
    def is_settled(self) -> bool:
        """Waiting on this session is over."""
        return self is not SessionStatus.PENDING


@dataclass(frozen=True, slots=True)
class PaymentSession:
    """
    Lifecycle record of one payment attempt.

    Note: Immutable, the manager swaps in a new instance on transition.
    """

    id: str
    method: PaymentMethod
    amount: Amount
    currency: str
    status: SessionStatus
    reference: str
    instructions: tuple[str, ...]
    created_at: datetime
    expires_at: datetime
    address: str | None = None
    memo: str | None = None
    qr_code: str | None = None
    voucher_hint: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Request
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SessionLineItem:
    product_id: str
    name: str
    quantity: int
    unit_amount: Amount


@dataclass(frozen=True, slots=True)
class SessionRequest:
    idempotency_key: str
    subtotal: Amount
    discount: Amount
    total: Amount
    reward_id: str | None
    items: tuple[SessionLineItem, ...]
    method: PaymentMethod


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SessionError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class SessionNotFound(SessionError):
    session_id: str = ""


@dataclass(frozen=True, slots=True)
class SessionExpired(SessionError):
    session_id: str = ""


@dataclass(frozen=True, slots=True)
class SessionUnavailable(SessionError):
    """The registry could not produce a session (store failure, lost race)."""

    key: str = ""


class SessionErrors:
    @staticmethod
    def not_found(session_id: str) -> SessionNotFound:
        return SessionNotFound(f"Unknown payment session {session_id}", session_id)

    @staticmethod
    def expired(session_id: str) -> SessionExpired:
        return SessionExpired(f"Payment session {session_id} expired", session_id)

    @staticmethod
    def unavailable(key: str, message: str) -> SessionUnavailable:
        return SessionUnavailable(f"Payment session unavailable: {message}", key)


__all__ = (
    "SessionStatus",
    "PaymentSession",
    "SessionLineItem",
    "SessionRequest",
    "SessionError",
    "SessionNotFound",
    "SessionExpired",
    "SessionUnavailable",
    "SessionErrors",
)
