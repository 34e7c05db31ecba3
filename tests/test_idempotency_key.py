"""Idempotency key derivation."""

from nebula_checkout.cart import Cart, price_cart
from nebula_checkout.catalog import MemoryCatalog, PaymentMethod
from nebula_checkout.idempotency import build_key


def _items(catalog: MemoryCatalog, cart: Cart, shipping: dict[str, str] | None = None):
    return price_cart(cart, catalog, shipping).items


class TestBuildKey:
    def test_prefix_and_digest(self, catalog: MemoryCatalog) -> None:
        key = build_key(_items(catalog, Cart().add("tee")), None, PaymentMethod.NEBULA_PAY)
        assert key.startswith("checkout:")
        assert len(key) == len("checkout:") + 64

    def test_independent_of_insertion_order(self, catalog: MemoryCatalog) -> None:
        a = _items(catalog, Cart().add("tee").add("cap", 2))
        b = _items(catalog, Cart().add("cap", 2).add("tee"))
        assert build_key(a, "r10", PaymentMethod.BTC_CHAIN) == build_key(b, "r10", PaymentMethod.BTC_CHAIN)

    def test_quantity_changes_key(self, catalog: MemoryCatalog) -> None:
        a = _items(catalog, Cart().add("tee"))
        b = _items(catalog, Cart().add("tee", 2))
        assert build_key(a, None, PaymentMethod.KLARNA) != build_key(b, None, PaymentMethod.KLARNA)

    def test_shipping_option_changes_key(self, catalog: MemoryCatalog) -> None:
        cart = Cart().add("hoodie")
        a = _items(catalog, cart, {"hoodie": "std"})
        b = _items(catalog, cart, {"hoodie": "express"})
        assert build_key(a, None, PaymentMethod.KLARNA) != build_key(b, None, PaymentMethod.KLARNA)

    def test_reward_and_method_change_key(self, catalog: MemoryCatalog) -> None:
        items = _items(catalog, Cart().add("tee"))
        base = build_key(items, None, PaymentMethod.NEBULA_PAY)
        assert build_key(items, "r10", PaymentMethod.NEBULA_PAY) != base
        assert build_key(items, None, PaymentMethod.ETH_CHAIN) != base
