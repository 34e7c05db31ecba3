"""
Payment session manager — creates, finalizes and serves sessions.

Sessions are created through the keyed claim registry, so one idempotency
key maps to one session no matter how many submissions race for it.
Finalization runs as cancellable tasks owned by the manager.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime

from kungfu import Result, Ok, Error, LazyCoroResult
from combinators import lift as L

from nebula_checkout import idempotency as I
from nebula_checkout._settings import Settings
from nebula_checkout.catalog import PaymentMethodConfig, PAYMENT_METHODS
from nebula_checkout.sessions._ids import new_session_id, new_reference
from nebula_checkout.sessions._instructions import settlement_for
from nebula_checkout.sessions._types import (
    PaymentSession,
    SessionError,
    SessionErrors,
    SessionRequest,
    SessionStatus,
)

logger = logging.getLogger(__name__)

type Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SessionManager:
    """
    In-process payment session backend.

    Example:
        manager = SessionManager(Settings().with_creation_latency(seconds=0))

        match await manager.create_session(request):
            case Ok(session):
                print(session.reference)
            case Error(e):
                print(e)

    Sessions are reachable by idempotency key (through the claim store) and
    by id. Completed claims live as long as a session, so a retry after
    expiry opens a fresh session. The by-id record goes with its claim:
    once the store drops the key, the id is unknown too.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: I.ClaimStoreAny | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._store: I.ClaimStoreAny = store if store is not None else I.MemoryClaimStore()
        self._clock = clock or _utcnow
        self._policy = (
            I.Policy()
            .with_ttl(delta=self._settings.session_ttl)
            .with_on_pending(I.WAIT)
            .with_wait_timeout(delta=self._settings.claim_wait_timeout)
        )
        self._by_id: dict[str, PaymentSession] = {}
        self._keys: dict[str, str] = {}
        self._tasks: dict[str, asyncio.Task[None]] = {}

    def __len__(self) -> int:
        """Sessions still held by id."""
        return len(self._by_id)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def scheduled(self) -> frozenset[str]:
        """Ids of sessions with a finalize task still running."""
        return frozenset(self._tasks)

    def payment_methods(self) -> tuple[PaymentMethodConfig, ...]:
        return PAYMENT_METHODS

    # ───────────────────────────────────────────────────────────────────────
    # Create
    # ───────────────────────────────────────────────────────────────────────

    async def create_session(
        self,
        request: SessionRequest,
    ) -> Result[PaymentSession, SessionError]:
        """Return the session for request.idempotency_key, opening it once."""
        await self._prune()
        spec = I.ClaimSpec(
            key=request.idempotency_key,
            input_value=request,
            operation=self._open,
            store=self._store,
            policy=self._policy,
        )

        match await I.run_claim(spec):
            case Ok(claimed):
                session: PaymentSession = claimed.value
                if claimed.reused:
                    logger.debug(
                        "session %s reused for %s", session.id, request.idempotency_key
                    )
                # the by-id record is authoritative once finalize has run
                return Ok(self._by_id.get(session.id, session))
            case Error(err) if isinstance(err.original_error, SessionError):
                return Error(err.original_error)
            case Error(err):
                return Error(SessionErrors.unavailable(request.idempotency_key, err.message))

    def _open(self, request: SessionRequest) -> LazyCoroResult[PaymentSession, SessionError]:
        async def impl() -> PaymentSession:
            await asyncio.sleep(self._settings.creation_latency.total_seconds())
            session = self._build(request)
            self._by_id[session.id] = session
            self._keys[session.id] = request.idempotency_key
            self._schedule(session)
            logger.info(
                "session %s opened (%s, %s %s, ref %s)",
                session.id,
                session.method.value,
                session.amount,
                session.currency,
                session.reference,
            )
            return session

        return L.catching_async(
            impl,
            on_error=lambda e: SessionErrors.unavailable(request.idempotency_key, str(e)),
        )

    def _build(self, request: SessionRequest) -> PaymentSession:
        now = self._clock()
        reference = new_reference(now)
        settlement = settlement_for(request.method, reference, request.total, self._settings)
        return PaymentSession(
            id=new_session_id(),
            method=request.method,
            amount=request.total,
            currency=self._settings.currency,
            status=settlement.status,
            reference=reference,
            instructions=settlement.instructions,
            created_at=now,
            expires_at=now + self._settings.session_ttl,
            address=settlement.address,
            memo=settlement.memo,
            qr_code=settlement.qr_code,
            voucher_hint=settlement.voucher_hint,
        )

    # ───────────────────────────────────────────────────────────────────────
    # Finalize
    # ───────────────────────────────────────────────────────────────────────

    def _schedule(self, session: PaymentSession) -> None:
        if session.status is not SessionStatus.PENDING:
            return
        delay = self._settings.finalize_delays.get(session.method)
        if delay is None:
            return
        self._tasks[session.id] = asyncio.create_task(
            self._finalize(session.id, delay.total_seconds()),
            name=f"finalize:{session.id}",
        )

    async def _finalize(self, session_id: str, delay: float) -> None:
        try:
            await asyncio.sleep(delay)
            current = self._by_id.get(session_id)
            if current is None or current.status is not SessionStatus.PENDING:
                return
            if self._is_due(current):
                await self._transition(current, SessionStatus.EXPIRED)
                return
            await self._transition(current, SessionStatus.CONFIRMED)
        finally:
            self._tasks.pop(session_id, None)

    async def _transition(self, session: PaymentSession, status: SessionStatus) -> PaymentSession:
        """Check-then-set: only a pending session moves."""
        current = self._by_id.get(session.id)
        if current is None or current.status is not SessionStatus.PENDING:
            return current or session
        updated = _with_status(current, status)
        self._by_id[session.id] = updated
        logger.info("session %s %s", session.id, status.value)

        key = self._keys.get(session.id)
        if key is not None:
            match await self._store.replace(key, updated):
                case Error(err):
                    logger.warning("session %s not updated in claim store: %s", session.id, err.message)
                case Ok(_):
                    pass
        return updated

    def _is_due(self, session: PaymentSession) -> bool:
        return self._clock() >= session.expires_at

    # ───────────────────────────────────────────────────────────────────────
    # Read
    # ───────────────────────────────────────────────────────────────────────

    async def get_session(self, session_id: str) -> PaymentSession | None:
        """
        Current state of a session, None if unknown.

        A pending session past expires_at is expired here, on read.
        """
        session = self._by_id.get(session_id)
        if session is None:
            return None
        if not await self._retained(session_id):
            self._evict(session_id)
            return None
        if session.status is SessionStatus.PENDING and self._is_due(session):
            task = self._tasks.pop(session_id, None)
            if task is not None:
                task.cancel()
            return await self._transition(session, SessionStatus.EXPIRED)
        return session

    # ───────────────────────────────────────────────────────────────────────
    # Retention
    # ───────────────────────────────────────────────────────────────────────

    async def _retained(self, session_id: str) -> bool:
        """Held while the claim for its key still points at it."""
        key = self._keys.get(session_id)
        if key is None:
            return True
        match await self._store.get(key):
            case Ok(claim):
                if claim is None:
                    return False
                return not claim.is_completed or claim.value.id == session_id
            case Error(err):
                logger.warning("claim for session %s unreadable: %s", session_id, err.message)
                return True

    def _evict(self, session_id: str) -> None:
        self._by_id.pop(session_id, None)
        self._keys.pop(session_id, None)
        task = self._tasks.pop(session_id, None)
        if task is not None:
            task.cancel()
        logger.debug("session %s dropped with its claim", session_id)

    async def _prune(self) -> None:
        for session_id in list(self._keys):
            if not await self._retained(session_id):
                self._evict(session_id)

    # ───────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ───────────────────────────────────────────────────────────────────────

    async def clear(self) -> None:
        """Drop every session and cancel pending finalization."""
        await self.aclose()
        self._by_id.clear()
        self._keys.clear()
        match await self._store.clear():
            case Ok(count):
                logger.debug("cleared %d claims", count)
            case Error(err):
                logger.warning("claim store not cleared: %s", err.message)

    async def aclose(self) -> None:
        """Cancel scheduled finalize tasks and wait for them to stop."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


def _with_status(session: PaymentSession, status: SessionStatus) -> PaymentSession:
    return replace(session, status=status)


__all__ = ("SessionManager", "Clock")
