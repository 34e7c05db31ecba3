"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from decimal import Decimal

from nebula_checkout.catalog import (
    MemoryCatalog,
    Product,
    RewardTier,
    ShippingOption,
    Variant,
    VariantOption,
)


# Demo catalog
def demo_catalog() -> MemoryCatalog:
    return MemoryCatalog(
        products=[
            Product(
                id="void-hoodie",
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
            Product(id="orbit-cap", name="Orbit Cap", price=Decimal("24.50")),
        ],
        rewards=[
            RewardTier("ten-off", Decimal("50"), 300, Decimal("10"), "10 EUR off"),
            RewardTier("free-ship", Decimal("80"), 150, Decimal("9.50"), "Free express"),
        ],
    )


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())
