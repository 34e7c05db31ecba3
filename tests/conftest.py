"""Shared fixtures: a small catalog and fast settings."""

from collections.abc import AsyncIterator
from decimal import Decimal

import pytest
import pytest_asyncio

from nebula_checkout import Settings
from nebula_checkout.catalog import (
    MemoryCatalog,
    PaymentMethod,
    Product,
    RewardTier,
    ShippingOption,
    Variant,
    VariantOption,
)
from nebula_checkout.checkout import Storefront
from nebula_checkout.sessions import PollingWaiter, SessionManager


@pytest.fixture
def settings() -> Settings:
    """Production semantics, test-speed timings."""
    return (
        Settings()
        .with_poll_interval(seconds=0.005)
        .with_creation_latency(seconds=0)
        .with_all_finalize_delays(seconds=0.02)
        .with_claim_wait_timeout(seconds=2)
    )


@pytest.fixture
def catalog() -> MemoryCatalog:
    return MemoryCatalog(
        products=[
            Product(id="tee", name="Nebula Tee", price=Decimal("100")),
            Product(
                id="hoodie",
                name="Void Hoodie",
                price=Decimal("59.90"),
                shipping_options=(
                    ShippingOption("std", "Standard", Decimal("0"), "3-5 days"),
                    ShippingOption("express", "Express", Decimal("9.50"), "1 day"),
                ),
                variants=(
                    Variant("size", (VariantOption("m", "M"), VariantOption("l", "L"))),
                ),
            ),
            Product(
                id="cap",
                name="Orbit Cap",
                price=Decimal("24.50"),
                shipping_options=(
                    ShippingOption("drop", "Dead drop", Decimal("4.00"), "2 days"),
                ),
            ),
        ],
        rewards=[
            RewardTier("r10", Decimal("50"), 300, Decimal("10"), "10 EUR off"),
            RewardTier("r25", Decimal("150"), 500, Decimal("25"), "25 EUR off"),
        ],
    )


@pytest_asyncio.fixture
async def manager(settings: Settings) -> AsyncIterator[SessionManager]:
    sessions = SessionManager(settings)
    yield sessions
    await sessions.aclose()


@pytest.fixture
def waiter(manager: SessionManager) -> PollingWaiter:
    return PollingWaiter(manager)


@pytest.fixture
def shop(catalog: MemoryCatalog, manager: SessionManager) -> Storefront:
    store = Storefront(catalog, manager, balance=200)
    store.set_payment_method(PaymentMethod.NEBULA_PAY)
    return store
