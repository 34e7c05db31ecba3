"""Polling confirmation waiter."""

import asyncio
from decimal import Decimal

import pytest
from kungfu import Ok, Error

from nebula_checkout import Settings
from nebula_checkout.catalog import PaymentMethod
from nebula_checkout.sessions import (
    PollingWaiter,
    SessionLineItem,
    SessionManager,
    SessionNotFound,
    SessionRequest,
    SessionStatus,
)


def request(method: PaymentMethod) -> SessionRequest:
    return SessionRequest(
        idempotency_key=f"checkout:{method.value}",
        subtotal=Decimal("40"),
        discount=Decimal(0),
        total=Decimal("40"),
        reward_id=None,
        items=(SessionLineItem("cap", "Orbit Cap", 1, Decimal("40")),),
        method=method,
    )


@pytest.mark.asyncio
async def test_resolves_on_confirmation(manager: SessionManager, waiter: PollingWaiter) -> None:
    session = (await manager.create_session(request(PaymentMethod.NEBULA_PAY))).value

    match await waiter.wait(session.id):
        case Ok(final):
            assert final.id == session.id
            assert final.status is SessionStatus.CONFIRMED
        case Error(err):
            pytest.fail(f"unexpected {err}")


@pytest.mark.asyncio
async def test_resolves_on_review(manager: SessionManager, waiter: PollingWaiter) -> None:
    session = (await manager.create_session(request(PaymentMethod.CASH_MEETUP))).value
    final = (await waiter.wait(session.id)).value
    assert final.status is SessionStatus.AWAITING_REVIEW


@pytest.mark.asyncio
async def test_unknown_session(waiter: PollingWaiter) -> None:
    match await waiter.wait("ps_unknown"):
        case Error(err):
            assert isinstance(err, SessionNotFound)
            assert err.session_id == "ps_unknown"
        case Ok(_):
            pytest.fail("expected not found")


@pytest.mark.asyncio
async def test_cancellation_stops_polling(settings: Settings) -> None:
    manager = SessionManager(settings.with_finalize_delay(PaymentMethod.KLARNA, seconds=None))
    waiter = PollingWaiter(manager)
    session = (await manager.create_session(request(PaymentMethod.KLARNA))).value

    task = asyncio.create_task(waiter.wait(session.id))
    await asyncio.sleep(0.03)
    assert not task.done()

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert (await manager.get_session(session.id)).status is SessionStatus.PENDING


@pytest.mark.asyncio
async def test_interval_defaults_to_settings(manager: SessionManager) -> None:
    waiter = PollingWaiter(manager)
    assert waiter._interval == manager.settings.poll_interval.total_seconds()
