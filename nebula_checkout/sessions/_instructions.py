"""
Settlement instructions — what the buyer must do to pay with a method.

Pure: everything random-looking (addresses, challenge) is derived from a
digest of the reference, so the same (method, reference, amount) always
yields the same instructions.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN

from nebula_checkout._types import Amount
from nebula_checkout._settings import Settings
from nebula_checkout.catalog import PaymentMethod
from nebula_checkout.sessions._types import SessionStatus

TREASURY_ADDRESS = "nebula.eth"
CASH_CHALLENGES = ("🌙", "⚡", "🔥", "🍀", "🎲")


@dataclass(frozen=True, slots=True)
class Settlement:
    instructions: tuple[str, ...]
    status: SessionStatus = SessionStatus.PENDING
    address: str | None = None
    memo: str | None = None
    qr_code: str | None = None
    voucher_hint: str | None = None


def _digest(reference: str, salt: str) -> str:
    return hashlib.sha256(f"{salt}:{reference}".encode()).hexdigest()


def _fixed(value: Decimal, places: int) -> str:
    return f"{value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN):.{places}f}"


def _btc(reference: str, total: Amount, settings: Settings) -> Settlement:
    amount = _fixed(total / settings.btc_eur_rate, 8)
    address = f"bc1p{_digest(reference, 'btc')[:40]}"
    return Settlement(
        instructions=(
            f"Send {amount} BTC to {address}",
            "The address was mixed through the Bitomatics whirlpool (Taproot).",
            "We watch the mempool in real time; 1 block confirms the order.",
            f"Reference: {reference}",
        ),
        address=address,
        memo=f"Ref {reference}",
        qr_code=f"bitcoin:{address}?amount={amount}",
    )


def _eth(reference: str, total: Amount, settings: Settings) -> Settlement:
    eth = total / settings.eth_eur_rate
    wei = (eth * Decimal(10) ** 18).to_integral_value(rounding=ROUND_DOWN)
    address = f"0x{_digest(reference, 'eth')[:40]}"
    return Settlement(
        instructions=(
            f"Send {_fixed(eth, 6)} ETH to {address}",
            "The stealth vault rotates the address afterwards; no link to earlier orders.",
            "We settle after 2 confirmations.",
            f"Memo / ref (optional): {reference}",
        ),
        address=address,
        memo=f"Ref {reference}",
        qr_code=f"ethereum:{address}?value={wei}",
    )


def _on_chain(reference: str, total: Amount) -> Settlement:
    usdc = _fixed(total, 2)
    micro = (total * Decimal(10) ** 6).to_integral_value(rounding=ROUND_DOWN)
    return Settlement(
        instructions=(
            f"Send USDC/EURC over Ethereum or Polygon to {TREASURY_ADDRESS}",
            f"Amount: {usdc} (1:1 EUR)",
            f"Memo (optional): {reference}",
            "The rate is fixed on arrival (0 slippage).",
        ),
        address=TREASURY_ADDRESS,
        qr_code=f"ethereum:{TREASURY_ADDRESS}?token=USDC&value={micro}",
    )


def _cash(reference: str) -> Settlement:
    digest = _digest(reference, "cash")
    challenge = CASH_CHALLENGES[int(digest[:8], 16) % len(CASH_CHALLENGES)]
    return Settlement(
        instructions=(
            f"Take a selfie holding a sheet with {challenge} + {reference}.",
            "Upload it under Profile > Cash Requests.",
            "Staff proposes a place and time (SafeMeet partner).",
            "After the handover staff marks the order as paid.",
        ),
        status=SessionStatus.AWAITING_REVIEW,
        memo=f"Selfie with {challenge}",
    )


_VOUCHER_FLOWS: dict[PaymentMethod, Settlement] = {
    PaymentMethod.CRYPTO_VOUCHER: Settlement(
        instructions=(
            "Visit dundle.com or bitnovo.com and buy a crypto voucher (50-500 EUR).",
            "Pay however you like (cash, gift card, prepaid).",
            "Redeem the code at checkout; we validate it automatically.",
            "Once checked, your order is released immediately.",
        ),
        voucher_hint="Codes >= 50 EUR accepted, shipping is waived automatically.",
    ),
    PaymentMethod.BANK_TRANSFER: Settlement(
        instructions=(
            "Pick a voucher provider (cash or prepaid both work).",
            "Buy the amount of your order (>= 50 EUR).",
            "Enter the code at checkout; we credit it 1:1.",
            "No bank trail, shipping is waived automatically.",
        ),
        voucher_hint="Instead of a classic transfer we recommend a crypto voucher, payable in cash.",
    ),
    PaymentMethod.CREDIT_CARD: Settlement(
        instructions=(
            "Open dundle.com and choose 'Voucher > Crypto'.",
            "Pay with your card (Visa/Master/Amex).",
            "Copy the code into our voucher field.",
            "We confirm right after the code check.",
        ),
        voucher_hint="We recommend a crypto voucher: any card works, no card data at Nebula.",
    ),
    PaymentMethod.KLARNA: Settlement(
        instructions=(
            "Start a Klarna purchase on dundle (buy now, pay later).",
            "Choose a crypto voucher, amount >= 50 EUR.",
            "Enter the code at checkout once you receive it.",
            "As soon as it validates, your order is paid.",
        ),
        voucher_hint="For buy-now-pay-later use Klarna on dundle.com and send the voucher code.",
    ),
}


def settlement_for(
    method: PaymentMethod,
    reference: str,
    total: Amount,
    settings: Settings,
) -> Settlement:
    """Instructions and payload fields for a new session."""
    match method:
        case PaymentMethod.BTC_CHAIN:
            return _btc(reference, total, settings)
        case PaymentMethod.ETH_CHAIN:
            return _eth(reference, total, settings)
        case PaymentMethod.ON_CHAIN:
            return _on_chain(reference, total)
        case PaymentMethod.CASH_MEETUP:
            return _cash(reference)
        case PaymentMethod.NEBULA_PAY:
            return Settlement(instructions=(
                "Open the Nebula Pay terminal screen (bot > /pay).",
                f"Transaction {reference} is confirmed with FaceID.",
                "If anything hangs: support via /ticket.",
            ))
        case _:
            return _VOUCHER_FLOWS[method]


__all__ = ("Settlement", "settlement_for", "TREASURY_ADDRESS")
