"""
Sessions — payment session lifecycle and confirmation.

    from nebula_checkout import sessions as S

    manager = S.SessionManager(settings)
    waiter = S.PollingWaiter(manager)

    session = (await manager.create_session(request)).unwrap()
    final = await waiter.wait(session.id)
"""

from nebula_checkout.sessions._types import (
    SessionStatus,
    PaymentSession,
    SessionLineItem,
    SessionRequest,
    SessionError,
    SessionNotFound,
    SessionExpired,
    SessionUnavailable,
    SessionErrors,
)
from nebula_checkout.sessions._ids import new_session_id, new_reference
from nebula_checkout.sessions._instructions import (
    Settlement,
    settlement_for,
    TREASURY_ADDRESS,
)
from nebula_checkout.sessions._manager import SessionManager, Clock
from nebula_checkout.sessions._waiter import ConfirmationSource, PollingWaiter

__all__ = (
    # Types
    "SessionStatus",
    "PaymentSession",
    "SessionLineItem",
    "SessionRequest",
    "SessionError",
    "SessionNotFound",
    "SessionExpired",
    "SessionUnavailable",
    "SessionErrors",
    # Ids
    "new_session_id",
    "new_reference",
    # Instructions
    "Settlement",
    "settlement_for",
    "TREASURY_ADDRESS",
    # Manager
    "SessionManager",
    "Clock",
    # Waiter
    "ConfirmationSource",
    "PollingWaiter",
)
