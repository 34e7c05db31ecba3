"""
Idempotency key — stable fingerprint of a checkout attempt.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable

from nebula_checkout.cart import PricedLineItem
from nebula_checkout.catalog import PaymentMethod


def build_key(
    items: Iterable[PricedLineItem],
    reward_id: str | None,
    method: PaymentMethod,
) -> str:
    """
    Derive the key from semantic cart content.

    Items are sorted by product id, so insertion order never changes the key.
    Prices are deliberately absent: a repriced but otherwise identical cart
    still lands on the same session.
    """
    ordered = sorted(
        items,
        key=lambda item: (item.product_id, item.shipping_option_id or "", item.quantity),
    )
    payload = {
        "reward_id": reward_id,
        "method": method.value,
        "items": [
            {
                "product_id": item.product_id,
                "quantity": item.quantity,
                "shipping_option_id": item.shipping_option_id,
            }
            for item in ordered
        ],
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return f"checkout:{hashlib.sha256(canonical.encode()).hexdigest()}"


__all__ = ("build_key",)
