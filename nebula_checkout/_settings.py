"""
Settings — behaviour configuration for the checkout core.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import timedelta
from decimal import Decimal

from nebula_checkout.catalog._types import PaymentMethod


def _default_finalize_delays() -> dict[PaymentMethod, timedelta]:
    # cash_meetup is absent: it waits for staff review instead
    return {
        PaymentMethod.NEBULA_PAY: timedelta(seconds=2),
        PaymentMethod.CRYPTO_VOUCHER: timedelta(seconds=4),
        PaymentMethod.BTC_CHAIN: timedelta(seconds=6),
        PaymentMethod.ETH_CHAIN: timedelta(seconds=6),
        PaymentMethod.ON_CHAIN: timedelta(seconds=6),
        PaymentMethod.BANK_TRANSFER: timedelta(seconds=6),
        PaymentMethod.CREDIT_CARD: timedelta(seconds=6),
        PaymentMethod.KLARNA: timedelta(seconds=6),
    }


# ═══════════════════════════════════════════════════════════════════════════════
# Settings — Full Configuration
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Checkout configuration.

    Fluent builder pattern: chain methods to configure.

    Example:
        settings = (
            Settings()
            .with_poll_interval(seconds=0.01)
            .with_creation_latency(seconds=0)
            .with_finalize_delay(PaymentMethod.NEBULA_PAY, seconds=0.02)
        )

    Note: Immutable, each method returns new Settings.
    Defaults reproduce the storefront's production timings.
    """

    poll_interval: timedelta = timedelta(milliseconds=750)
    session_ttl: timedelta = timedelta(minutes=10)
    creation_latency: timedelta = timedelta(milliseconds=300)
    claim_wait_timeout: timedelta = timedelta(seconds=30)
    finalize_delays: dict[PaymentMethod, timedelta] = field(
        default_factory=_default_finalize_delays
    )
    currency: str = "EUR"
    ledger_limit: int = 50
    order_history_limit: int = 20
    coins_base: int = 100
    coins_rate: Decimal = Decimal("0.05")
    btc_eur_rate: Decimal = Decimal(34000)
    eth_eur_rate: Decimal = Decimal(1800)

    def with_poll_interval(self, *, seconds: float) -> Settings:
        """How often the confirmation waiter re-reads the session."""
        return replace(self, poll_interval=timedelta(seconds=seconds))

    def with_session_ttl(
        self,
        *,
        seconds: float | None = None,
        minutes: float | None = None,
    ) -> Settings:
        """
        Lifetime of a pending session.

        Example:
            .with_session_ttl(minutes=10)
        """
        total_seconds = (seconds or 0) + (minutes or 0) * 60
        return replace(self, session_ttl=timedelta(seconds=total_seconds))

    def with_creation_latency(self, *, seconds: float) -> Settings:
        """Simulated latency of the session backend."""
        return replace(self, creation_latency=timedelta(seconds=seconds))

    def with_claim_wait_timeout(self, *, seconds: float) -> Settings:
        return replace(self, claim_wait_timeout=timedelta(seconds=seconds))

    def with_finalize_delay(
        self,
        method: PaymentMethod,
        *,
        seconds: float | None,
    ) -> Settings:
        """
        Delay before an asynchronous method settles.

        None removes the method from scheduling (it stays pending).
        """
        delays = dict(self.finalize_delays)
        if seconds is None:
            delays.pop(method, None)
        else:
            delays[method] = timedelta(seconds=seconds)
        return replace(self, finalize_delays=delays)

    def with_all_finalize_delays(self, *, seconds: float) -> Settings:
        delays = {method: timedelta(seconds=seconds) for method in self.finalize_delays}
        return replace(self, finalize_delays=delays)

    def with_limits(
        self,
        *,
        ledger: int | None = None,
        orders: int | None = None,
    ) -> Settings:
        return replace(
            self,
            ledger_limit=ledger if ledger is not None else self.ledger_limit,
            order_history_limit=orders if orders is not None else self.order_history_limit,
        )


__all__ = ("Settings",)
