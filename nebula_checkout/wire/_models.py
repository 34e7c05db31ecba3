"""
HTTP models — camelCase on the wire, domain types inside.

Request models expose to_domain(), response models from_domain().
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from nebula_checkout.catalog import Anonymity, PaymentMethod, PaymentMethodConfig
from nebula_checkout.sessions import (
    PaymentSession,
    SessionLineItem,
    SessionRequest,
    SessionStatus,
)

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════


class SessionLineItemIn(_Wire):
    product_id: str
    name: str
    quantity: int = Field(ge=1)
    unit_amount: Money

    def to_domain(self) -> SessionLineItem:
        return SessionLineItem(
            product_id=self.product_id,
            name=self.name,
            quantity=self.quantity,
            unit_amount=self.unit_amount,
        )


class PaymentSessionIn(_Wire):
    idempotency_key: str = Field(min_length=1)
    subtotal: Money = Field(ge=0)
    discount: Money = Field(default=Decimal(0), ge=0)
    total: Money = Field(ge=0)
    reward_id: str | None = None
    items: list[SessionLineItemIn] = Field(default_factory=list)
    method: PaymentMethod

    def to_domain(self) -> SessionRequest:
        return SessionRequest(
            idempotency_key=self.idempotency_key,
            subtotal=self.subtotal,
            discount=self.discount,
            total=self.total,
            reward_id=self.reward_id,
            items=tuple(item.to_domain() for item in self.items),
            method=self.method,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentSessionOut(_Wire):
    id: str
    method: PaymentMethod
    amount: Money
    currency: str
    status: SessionStatus
    reference: str
    instructions: list[str]
    created_at: datetime
    expires_at: datetime
    address: str | None = None
    memo: str | None = None
    qr_code: str | None = None
    voucher_hint: str | None = None

    @classmethod
    def from_domain(cls, dom: PaymentSession) -> "PaymentSessionOut":
        return cls(
            id=dom.id,
            method=dom.method,
            amount=dom.amount,
            currency=dom.currency,
            status=dom.status,
            reference=dom.reference,
            instructions=list(dom.instructions),
            created_at=dom.created_at,
            expires_at=dom.expires_at,
            address=dom.address,
            memo=dom.memo,
            qr_code=dom.qr_code,
            voucher_hint=dom.voucher_hint,
        )


class PaymentMethodOut(_Wire):
    id: PaymentMethod
    label: str
    description: str
    settlement_eta: str
    anonymity: Anonymity
    fee_hint: str | None = None
    requires_review: bool = False

    @classmethod
    def from_domain(cls, dom: PaymentMethodConfig) -> "PaymentMethodOut":
        return cls(
            id=dom.id,
            label=dom.label,
            description=dom.description,
            settlement_eta=dom.settlement_eta,
            anonymity=dom.anonymity,
            fee_hint=dom.fee_hint,
            requires_review=dom.requires_review,
        )


class ErrorOut(_Wire):
    detail: str


__all__ = (
    "Money",
    "SessionLineItemIn",
    "PaymentSessionIn",
    "PaymentSessionOut",
    "PaymentMethodOut",
    "ErrorOut",
)
