"""
Catalog snapshot — protocol + in-memory implementation.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from nebula_checkout.catalog._types import (
    Anonymity,
    PaymentMethod,
    PaymentMethodConfig,
    Product,
    RewardTier,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class Catalog(Protocol):
    """
    Read-only catalog consumed by the checkout core.

    Implement this over whatever owns product data (API cache, DB view).
    """

    def get_product(self, product_id: str) -> Product | None:
        """Product by id, None if the catalog dropped it."""
        ...

    def get_reward(self, reward_id: str) -> RewardTier | None:
        ...

    def rewards(self) -> tuple[RewardTier, ...]:
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Catalog
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCatalog:
    """Catalog held in dicts. Replace wholesale via load()."""

    def __init__(
        self,
        products: Iterable[Product] = (),
        rewards: Iterable[RewardTier] = (),
    ) -> None:
        self._products: dict[str, Product] = {}
        self._rewards: dict[str, RewardTier] = {}
        self.load(products, rewards)

    def load(
        self,
        products: Iterable[Product],
        rewards: Iterable[RewardTier] = (),
    ) -> None:
        self._products = {p.id: p for p in products}
        self._rewards = {r.id: r for r in rewards}

    def get_product(self, product_id: str) -> Product | None:
        return self._products.get(product_id)

    def get_reward(self, reward_id: str) -> RewardTier | None:
        return self._rewards.get(reward_id)

    def rewards(self) -> tuple[RewardTier, ...]:
        return tuple(self._rewards.values())

    def products(self) -> tuple[Product, ...]:
        return tuple(self._products.values())


# ═══════════════════════════════════════════════════════════════════════════════
# Payment Methods
# ═══════════════════════════════════════════════════════════════════════════════

PAYMENT_METHODS: tuple[PaymentMethodConfig, ...] = (
    PaymentMethodConfig(
        id=PaymentMethod.BTC_CHAIN,
        label="Bitcoin (Bitomatics Relay)",
        description="One-time Taproot address, mixed through Bitomatics nodes.",
        settlement_eta="~1 block (10-30 minutes)",
        anonymity=Anonymity.HIGH,
        fee_hint="Recommended fee is computed dynamically",
    ),
    PaymentMethodConfig(
        id=PaymentMethod.ETH_CHAIN,
        label="Ethereum (Stealth Vault)",
        description="Fresh stealth address, final after 2 confirmations.",
        settlement_eta="< 5 minutes",
        anonymity=Anonymity.HIGH,
        fee_hint="Gas < 0.003 ETH",
    ),
    PaymentMethodConfig(
        id=PaymentMethod.CRYPTO_VOUCHER,
        label="Crypto Voucher (from 50 EUR)",
        description="Buy a voucher, e.g. on dundle.com, and send the code. Free shipping.",
        settlement_eta="Right after the code check",
        anonymity=Anonymity.MEDIUM,
    ),
    PaymentMethodConfig(
        id=PaymentMethod.CASH_MEETUP,
        label="Cash (Telegram Safe-Meet)",
        description="Selfie verification, staff proposes a meeting point.",
        settlement_eta="After manual confirmation",
        anonymity=Anonymity.HIGH,
        requires_review=True,
    ),
    PaymentMethodConfig(
        id=PaymentMethod.NEBULA_PAY,
        label="Nebula Pay (card/wallet)",
        description="PSP processing with automatic idempotency.",
        settlement_eta="< 30 seconds",
        anonymity=Anonymity.LOW,
        fee_hint="1.2 % fee",
    ),
    PaymentMethodConfig(
        id=PaymentMethod.ON_CHAIN,
        label="Stablecoin (USDC/EURC)",
        description="Treasury wallet nebula.eth, 1:1 EUR settlement.",
        settlement_eta="< 5 minutes",
        anonymity=Anonymity.MEDIUM,
    ),
    PaymentMethodConfig(
        id=PaymentMethod.BANK_TRANSFER,
        label="Bank + Voucher Hybrid",
        description="Guide to a crypto voucher instead of a classic transfer.",
        settlement_eta="Once the voucher is accepted",
        anonymity=Anonymity.MEDIUM,
    ),
    PaymentMethodConfig(
        id=PaymentMethod.CREDIT_CARD,
        label="Credit card",
        description="Explains the voucher flow for maximum privacy.",
        settlement_eta="Right after the voucher",
        anonymity=Anonymity.MEDIUM,
    ),
    PaymentMethodConfig(
        id=PaymentMethod.KLARNA,
        label="Klarna / 30 days",
        description="Instead of Klarna directly: buy a voucher, redeem the code.",
        settlement_eta="Right after the voucher",
        anonymity=Anonymity.MEDIUM,
    ),
)


def payment_method_config(method: PaymentMethod) -> PaymentMethodConfig:
    for config in PAYMENT_METHODS:
        if config.id is method:
            return config
    raise KeyError(method)


__all__ = (
    "Catalog",
    "MemoryCatalog",
    "PAYMENT_METHODS",
    "payment_method_config",
)
