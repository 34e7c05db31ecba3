"""
Cart types — entries the user owns and the priced view derived from them.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from decimal import Decimal

from nebula_checkout._types import Amount


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Entry
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartEntry:
    """
    One product line in the cart.

    selected_options maps variant type to option id.
    """

    product_id: str
    quantity: int
    selected_options: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {self.quantity}")


# ═══════════════════════════════════════════════════════════════════════════════
# Cart — Immutable Value
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Cart:
    """
    Ordered cart entries, at most one per product.

    Note: Immutable, each mutation returns new Cart.
    """

    entries: tuple[CartEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CartEntry]:
        return iter(self.entries)

    def get(self, product_id: str) -> CartEntry | None:
        for entry in self.entries:
            if entry.product_id == product_id:
                return entry
        return None

    def add(
        self,
        product_id: str,
        quantity: int = 1,
        selected_options: Mapping[str, str] | None = None,
    ) -> Cart:
        """
        Add quantity, merging into an existing entry for the product.

        A merged quantity <= 0 deletes the entry, a new add <= 0 is a no-op.
        """
        existing = self.get(product_id)
        if existing is not None:
            return self.update_quantity(product_id, existing.quantity + quantity)
        if quantity <= 0:
            return self
        entry = CartEntry(product_id, quantity, dict(selected_options or {}))
        return Cart((*self.entries, entry))

    def update_quantity(self, product_id: str, quantity: int) -> Cart:
        """Set quantity. quantity <= 0 deletes the entry."""
        if quantity <= 0:
            return self.remove(product_id)
        return Cart(tuple(
            replace(e, quantity=quantity) if e.product_id == product_id else e
            for e in self.entries
        ))

    def remove(self, product_id: str) -> Cart:
        return Cart(tuple(e for e in self.entries if e.product_id != product_id))

    def clear(self) -> Cart:
        return Cart()

    def with_options(self, product_id: str, selected_options: Mapping[str, str]) -> Cart:
        return Cart(tuple(
            replace(e, selected_options=dict(selected_options)) if e.product_id == product_id else e
            for e in self.entries
        ))


# ═══════════════════════════════════════════════════════════════════════════════
# Priced View
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PricedLineItem:
    """
    Line item with prices resolved against the catalog.

    Invariant: total == quantity * unit_price + shipping_adjustment
    """

    product_id: str
    name: str
    quantity: int
    unit_price: Amount
    shipping_adjustment: Amount
    total: Amount
    shipping_option_id: str | None = None
    shipping_label: str | None = None
    selected_options: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PricedCart:
    items: tuple[PricedLineItem, ...]
    subtotal: Amount
    shipping_total: Amount = Decimal(0)

    @property
    def is_empty(self) -> bool:
        return not self.items


__all__ = (
    "CartEntry",
    "Cart",
    "PricedLineItem",
    "PricedCart",
)
