"""Checkout domain models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from nebula_checkout._types import Amount
from nebula_checkout.catalog import PaymentMethod


class CheckoutStatus(Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class OrderStatus(Enum):
    PAID = "paid"
    PENDING = "pending"


@dataclass(frozen=True, slots=True)
class OrderPayment:
    method: PaymentMethod
    reference: str


@dataclass(frozen=True, slots=True)
class OrderItem:
    product_id: str
    name: str
    quantity: int
    unit_price: Amount
    total: Amount
    shipping_label: str | None = None
    selected_options: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Order:
    id: str
    subtotal: Amount
    discount: Amount
    total: Amount
    reward_id: str | None
    coins_earned: int
    created_at: datetime
    status: OrderStatus
    payment: OrderPayment
    items: tuple[OrderItem, ...]


@dataclass(frozen=True, slots=True)
class CheckoutError(Exception):
    code: str
    message: str

    def __str__(self) -> str:
        return self.message


class CheckoutErrors:
    @staticmethod
    def empty_cart() -> CheckoutError:
        return CheckoutError("EMPTY_CART", "cart is empty")

    @staticmethod
    def no_payment_method() -> CheckoutError:
        return CheckoutError("NO_PAYMENT_METHOD", "no payment method selected")

    @staticmethod
    def reward_ineligible(msg: str) -> CheckoutError:
        return CheckoutError("REWARD_INELIGIBLE", msg)

    @staticmethod
    def session_expired() -> CheckoutError:
        return CheckoutError("SESSION_EXPIRED", "payment session expired")

    @staticmethod
    def cancelled() -> CheckoutError:
        return CheckoutError("CANCELLED", "checkout cancelled")

    @staticmethod
    def failed(msg: str | None = None) -> CheckoutError:
        return CheckoutError("CHECKOUT_FAILED", msg or "checkout failed")


__all__ = (
    "CheckoutStatus",
    "OrderStatus",
    "OrderPayment",
    "OrderItem",
    "Order",
    "CheckoutError",
    "CheckoutErrors",
)
