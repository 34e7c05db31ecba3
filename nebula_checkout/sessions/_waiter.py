"""
Confirmation waiter — blocks until a session settles.

ConfirmationSource is the seam: PollingWaiter re-reads the session on a
fixed interval, a webhook or event-bus source can replace it without
touching the checkout state machine.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from kungfu import Result, Ok, Error

from nebula_checkout.sessions._manager import SessionManager
from nebula_checkout.sessions._types import PaymentSession, SessionError, SessionErrors

logger = logging.getLogger(__name__)


class ConfirmationSource(Protocol):
    async def wait(self, session_id: str) -> Result[PaymentSession, SessionError]:
        """
        Resolve once the session is confirmed, awaiting review or expired.

        Returns SessionNotFound if the id is unknown.
        """
        ...


class PollingWaiter:
    """
    Polls the manager until the session leaves pending.

    Note: Read-only, it never changes the session. Cancelling the
    awaiting task stops the loop at the next sleep.
    """

    def __init__(self, manager: SessionManager, interval: float | None = None) -> None:
        self._manager = manager
        self._interval = (
            interval
            if interval is not None
            else manager.settings.poll_interval.total_seconds()
        )

    async def wait(self, session_id: str) -> Result[PaymentSession, SessionError]:
        polls = 0
        while True:
            await asyncio.sleep(self._interval)
            polls += 1

            session = await self._manager.get_session(session_id)
            if session is None:
                logger.warning("session %s vanished while waiting", session_id)
                return Error(SessionErrors.not_found(session_id))
            if session.status.is_settled:
                logger.debug(
                    "session %s settled as %s after %d polls",
                    session_id,
                    session.status.value,
                    polls,
                )
                return Ok(session)


__all__ = ("ConfirmationSource", "PollingWaiter")
