"""
Catalog types — read-only product and reward data.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from nebula_checkout._types import Amount


# ═══════════════════════════════════════════════════════════════════════════════
# Products
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ShippingOption:
    id: str
    label: str
    price_adjustment: Amount
    lead_time: str


@dataclass(frozen=True, slots=True)
class VariantOption:
    id: str
    label: str


@dataclass(frozen=True, slots=True)
class Variant:
    """A selectable product dimension, e.g. type="size"."""

    type: str
    options: tuple[VariantOption, ...]


@dataclass(frozen=True, slots=True)
class Product:
    """
    Catalog product.

    Note: shipping_options are ordered, the first one is the default.
    """

    id: str
    name: str
    price: Amount
    shipping_options: tuple[ShippingOption, ...] = ()
    variants: tuple[Variant, ...] = ()

    def shipping_option(self, option_id: str | None) -> ShippingOption | None:
        """Resolve option_id, falling back to the first offered option."""
        if option_id is not None:
            for option in self.shipping_options:
                if option.id == option_id:
                    return option
        return self.shipping_options[0] if self.shipping_options else None

    def offers_shipping(self, option_id: str) -> bool:
        return any(option.id == option_id for option in self.shipping_options)


# ═══════════════════════════════════════════════════════════════════════════════
# Rewards
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RewardTier:
    """Coin-for-discount exchange rule."""

    id: str
    min_spend: Amount
    coins: int
    discount_value: Amount
    label: str


# ═══════════════════════════════════════════════════════════════════════════════
# Payment Methods
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentMethod(Enum):
    BTC_CHAIN = "btc_chain"
    ETH_CHAIN = "eth_chain"
    CRYPTO_VOUCHER = "crypto_voucher"
    CASH_MEETUP = "cash_meetup"
    NEBULA_PAY = "nebula_pay"
    ON_CHAIN = "on_chain"
    BANK_TRANSFER = "bank_transfer"
    CREDIT_CARD = "credit_card"
    KLARNA = "klarna"


class Anonymity(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True, slots=True)
class PaymentMethodConfig:
    id: PaymentMethod
    label: str
    description: str
    settlement_eta: str
    anonymity: Anonymity
    fee_hint: str | None = None
    requires_review: bool = False


__all__ = (
    "ShippingOption",
    "VariantOption",
    "Variant",
    "Product",
    "RewardTier",
    "PaymentMethod",
    "Anonymity",
    "PaymentMethodConfig",
)
