"""Payment session manager."""

import asyncio
import re
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from kungfu import Ok, Error

from nebula_checkout import Settings
from nebula_checkout.catalog import PaymentMethod
from nebula_checkout.idempotency import MemoryClaimStore
from nebula_checkout.sessions import (
    SessionLineItem,
    SessionManager,
    SessionRequest,
    SessionStatus,
    SessionUnavailable,
    settlement_for,
)


def request(
    key: str = "checkout:abc",
    method: PaymentMethod = PaymentMethod.NEBULA_PAY,
    total: Decimal = Decimal("100"),
) -> SessionRequest:
    return SessionRequest(
        idempotency_key=key,
        subtotal=total,
        discount=Decimal(0),
        total=total,
        reward_id=None,
        items=(SessionLineItem("tee", "Nebula Tee", 1, total),),
        method=method,
    )


class Clock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class TestCreateSession:
    @pytest.mark.asyncio
    async def test_new_session_shape(self, manager: SessionManager) -> None:
        session = (await manager.create_session(request())).value

        assert re.fullmatch(r"ps_[0-9a-f]{32}", session.id)
        assert re.fullmatch(r"NEB-[0-9A-Z]+-[0-9A-Z]{6}", session.reference)
        assert session.status is SessionStatus.PENDING
        assert session.amount == Decimal("100")
        assert session.currency == "EUR"
        assert session.expires_at - session.created_at == timedelta(minutes=10)
        assert session.instructions

    @pytest.mark.asyncio
    async def test_same_key_returns_same_session(self, manager: SessionManager) -> None:
        first = (await manager.create_session(request())).value
        second = (await manager.create_session(request())).value

        assert second == first
        assert manager.scheduled == frozenset({first.id})

    @pytest.mark.asyncio
    async def test_concurrent_same_key_single_session(self, settings: Settings) -> None:
        manager = SessionManager(settings.with_creation_latency(seconds=0.05))
        try:
            results = await asyncio.gather(*(manager.create_session(request()) for _ in range(4)))
            ids = {r.value.id for r in results}
            assert len(ids) == 1
            assert len(manager.scheduled) == 1
        finally:
            await manager.aclose()

    @pytest.mark.asyncio
    async def test_different_keys_different_sessions(self, manager: SessionManager) -> None:
        a = (await manager.create_session(request("checkout:a"))).value
        b = (await manager.create_session(request("checkout:b"))).value
        assert a.id != b.id
        assert a.reference != b.reference

    @pytest.mark.asyncio
    async def test_retrievable_by_id(self, manager: SessionManager) -> None:
        session = (await manager.create_session(request())).value
        assert await manager.get_session(session.id) == session
        assert await manager.get_session("ps_missing") is None


class TestFinalize:
    @pytest.mark.asyncio
    async def test_async_method_confirms(self, manager: SessionManager) -> None:
        session = (await manager.create_session(request())).value
        await asyncio.sleep(0.1)

        current = await manager.get_session(session.id)
        assert current.status is SessionStatus.CONFIRMED
        assert manager.scheduled == frozenset()

    @pytest.mark.asyncio
    async def test_retry_after_confirm_sees_confirmed(self, manager: SessionManager) -> None:
        session = (await manager.create_session(request())).value
        await asyncio.sleep(0.1)

        again = (await manager.create_session(request())).value
        assert again.id == session.id
        assert again.status is SessionStatus.CONFIRMED
        assert manager.scheduled == frozenset()

    @pytest.mark.asyncio
    async def test_cash_meetup_awaits_review(self, manager: SessionManager) -> None:
        session = (await manager.create_session(request(method=PaymentMethod.CASH_MEETUP))).value

        assert session.status is SessionStatus.AWAITING_REVIEW
        assert manager.scheduled == frozenset()
        assert session.memo.startswith("Selfie with")
        await asyncio.sleep(0.05)
        assert (await manager.get_session(session.id)).status is SessionStatus.AWAITING_REVIEW

    @pytest.mark.asyncio
    async def test_unscheduled_method_stays_pending(self, settings: Settings) -> None:
        manager = SessionManager(settings.with_finalize_delay(PaymentMethod.KLARNA, seconds=None))
        session = (await manager.create_session(request(method=PaymentMethod.KLARNA))).value
        await asyncio.sleep(0.05)
        assert (await manager.get_session(session.id)).status is SessionStatus.PENDING

    @pytest.mark.asyncio
    async def test_clear_cancels_finalize(self, manager: SessionManager) -> None:
        session = (await manager.create_session(request())).value
        await manager.clear()

        assert manager.scheduled == frozenset()
        assert await manager.get_session(session.id) is None


class TestExpiry:
    @pytest.mark.asyncio
    async def test_pending_session_expires_on_read(self, settings: Settings) -> None:
        clock = Clock()
        manager = SessionManager(
            settings.with_finalize_delay(PaymentMethod.BTC_CHAIN, seconds=None),
            clock=clock,
        )
        session = (await manager.create_session(request(method=PaymentMethod.BTC_CHAIN))).value

        clock.advance(timedelta(minutes=9, seconds=59))
        assert (await manager.get_session(session.id)).status is SessionStatus.PENDING

        clock.advance(timedelta(seconds=1))
        assert (await manager.get_session(session.id)).status is SessionStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_finalize_never_confirms_past_deadline(self, settings: Settings) -> None:
        clock = Clock()
        manager = SessionManager(settings, clock=clock)
        session = (await manager.create_session(request())).value

        clock.advance(timedelta(minutes=11))
        await asyncio.sleep(0.1)

        assert (await manager.get_session(session.id)).status is SessionStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_confirmed_session_does_not_expire(self, settings: Settings) -> None:
        clock = Clock()
        manager = SessionManager(settings, clock=clock)
        session = (await manager.create_session(request())).value
        await asyncio.sleep(0.1)

        clock.advance(timedelta(hours=1))
        assert (await manager.get_session(session.id)).status is SessionStatus.CONFIRMED


class TestFailure:
    @pytest.mark.asyncio
    async def test_build_failure_is_unavailable_and_retryable(
        self,
        manager: SessionManager,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def boom(*_: object) -> None:
            raise RuntimeError("rates feed down")

        monkeypatch.setattr("nebula_checkout.sessions._manager.settlement_for", boom)
        match await manager.create_session(request()):
            case Error(err):
                assert isinstance(err, SessionUnavailable)
                assert "rates feed down" in err.message
            case Ok(_):
                pytest.fail("expected failure")

        monkeypatch.setattr("nebula_checkout.sessions._manager.settlement_for", settlement_for)
        assert (await manager.create_session(request())).value.status is SessionStatus.PENDING


class TestRetention:
    @pytest.mark.asyncio
    async def test_claim_and_record_expire_together(self, settings: Settings) -> None:
        store = MemoryClaimStore()
        manager = SessionManager(settings.with_session_ttl(seconds=0.05), store=store)
        try:
            first = (await manager.create_session(request(method=PaymentMethod.CASH_MEETUP))).value
            assert await manager.get_session(first.id) == first
            assert len(manager) == 1

            await asyncio.sleep(0.1)

            assert (await store.get("checkout:abc")).value is None
            assert await manager.get_session(first.id) is None
            assert len(manager) == 0
        finally:
            await manager.aclose()

    @pytest.mark.asyncio
    async def test_retry_after_claim_expiry_replaces_old_record(self, settings: Settings) -> None:
        manager = SessionManager(settings.with_session_ttl(seconds=0.05))
        try:
            first = (await manager.create_session(request(method=PaymentMethod.CASH_MEETUP))).value
            await asyncio.sleep(0.1)

            second = (await manager.create_session(request(method=PaymentMethod.CASH_MEETUP))).value

            assert second.id != first.id
            assert len(manager) == 1
            assert await manager.get_session(first.id) is None
            assert await manager.get_session(second.id) == second
        finally:
            await manager.aclose()

    @pytest.mark.asyncio
    async def test_unread_records_pruned_on_create(self, settings: Settings) -> None:
        manager = SessionManager(settings.with_session_ttl(seconds=0.05))
        try:
            for key in ("checkout:a", "checkout:b"):
                await manager.create_session(request(key, PaymentMethod.CASH_MEETUP))
            assert len(manager) == 2

            await asyncio.sleep(0.1)
            await manager.create_session(request("checkout:c", PaymentMethod.CASH_MEETUP))

            assert len(manager) == 1
        finally:
            await manager.aclose()


class TestInstructions:
    def test_btc_amount_and_qr(self) -> None:
        s = settlement_for(PaymentMethod.BTC_CHAIN, "NEB-X-ABCDEF", Decimal("340"), Settings())
        assert s.address.startswith("bc1p")
        assert s.qr_code == f"bitcoin:{s.address}?amount=0.01000000"

    def test_eth_wei(self) -> None:
        s = settlement_for(PaymentMethod.ETH_CHAIN, "NEB-X-ABCDEF", Decimal("1800"), Settings())
        assert s.address.startswith("0x")
        assert s.qr_code == f"ethereum:{s.address}?value=1000000000000000000"

    def test_on_chain_goes_to_treasury(self) -> None:
        s = settlement_for(PaymentMethod.ON_CHAIN, "NEB-X-ABCDEF", Decimal("12.50"), Settings())
        assert s.address == "nebula.eth"
        assert s.qr_code.endswith("value=12500000")

    def test_deterministic(self) -> None:
        a = settlement_for(PaymentMethod.CASH_MEETUP, "NEB-X-ABCDEF", Decimal("10"), Settings())
        b = settlement_for(PaymentMethod.CASH_MEETUP, "NEB-X-ABCDEF", Decimal("10"), Settings())
        assert a == b
        assert a.status is SessionStatus.AWAITING_REVIEW

    @pytest.mark.parametrize(
        "method",
        [
            PaymentMethod.CRYPTO_VOUCHER,
            PaymentMethod.BANK_TRANSFER,
            PaymentMethod.CREDIT_CARD,
            PaymentMethod.KLARNA,
        ],
    )
    def test_voucher_flows_carry_hint(self, method: PaymentMethod) -> None:
        s = settlement_for(method, "NEB-X-ABCDEF", Decimal("80"), Settings())
        assert s.voucher_hint
        assert s.status is SessionStatus.PENDING
