"""Cart mutations and pricing."""

from decimal import Decimal

import pytest

from nebula_checkout.cart import Cart, CartEntry, price_cart
from nebula_checkout.catalog import MemoryCatalog


class TestCart:
    def test_add_merges_same_product(self) -> None:
        cart = Cart().add("tee").add("tee", 2)
        assert len(cart) == 1
        assert cart.get("tee") == CartEntry("tee", 3)

    def test_add_keeps_insertion_order(self) -> None:
        cart = Cart().add("cap").add("tee")
        assert [e.product_id for e in cart] == ["cap", "tee"]

    def test_add_non_positive_new_product_is_noop(self) -> None:
        cart = Cart().add("cap")
        assert cart.add("tee", 0) == cart
        assert cart.add("tee", -2).get("tee") is None

    def test_add_merging_to_zero_removes(self) -> None:
        cart = Cart().add("tee").add("cap")
        cart = cart.add("tee", -1)
        assert cart.get("tee") is None
        assert [e.product_id for e in cart] == ["cap"]

    def test_add_merging_below_zero_removes(self) -> None:
        cart = Cart().add("tee", 2).add("tee", -5)
        assert len(cart) == 0

    def test_update_quantity_zero_removes(self) -> None:
        cart = Cart().add("tee", 2).update_quantity("tee", 0)
        assert len(cart) == 0

    def test_update_quantity_negative_removes(self) -> None:
        cart = Cart().add("tee").update_quantity("tee", -3)
        assert cart.get("tee") is None

    def test_update_quantity_sets_value(self) -> None:
        cart = Cart().add("tee").update_quantity("tee", 5)
        assert cart.get("tee").quantity == 5

    def test_entry_rejects_zero_quantity(self) -> None:
        with pytest.raises(ValueError):
            CartEntry("tee", 0)

    def test_mutations_do_not_touch_original(self) -> None:
        cart = Cart().add("tee")
        cart.add("cap")
        cart.remove("tee")
        assert [e.product_id for e in cart] == ["tee"]

    def test_clear(self) -> None:
        assert len(Cart().add("tee").add("cap").clear()) == 0


class TestPriceCart:
    def test_single_item(self, catalog: MemoryCatalog) -> None:
        priced = price_cart(Cart().add("tee"), catalog)
        assert priced.subtotal == Decimal("100")
        assert priced.items[0].total == Decimal("100")
        assert priced.items[0].shipping_option_id is None

    def test_subtotal_is_sum_of_lines_with_shipping(self, catalog: MemoryCatalog) -> None:
        cart = Cart().add("tee", 2).add("hoodie", 3).add("cap")
        priced = price_cart(cart, catalog, {"hoodie": "express"})

        expected = sum(
            (i.quantity * i.unit_price + i.shipping_adjustment for i in priced.items),
            Decimal(0),
        )
        assert priced.subtotal == expected
        assert priced.subtotal == Decimal("200") + Decimal("179.70") + Decimal("9.50") + Decimal("28.50")
        assert priced.shipping_total == Decimal("13.50")

    def test_shipping_defaults_to_first_option(self, catalog: MemoryCatalog) -> None:
        priced = price_cart(Cart().add("hoodie"), catalog)
        assert priced.items[0].shipping_option_id == "std"
        assert priced.items[0].shipping_label == "Standard"

    def test_unknown_shipping_selection_falls_back(self, catalog: MemoryCatalog) -> None:
        priced = price_cart(Cart().add("hoodie"), catalog, {"hoodie": "teleport"})
        assert priced.items[0].shipping_option_id == "std"

    def test_shipping_adjustment_is_per_line(self, catalog: MemoryCatalog) -> None:
        priced = price_cart(Cart().add("cap", 4), catalog)
        assert priced.items[0].shipping_adjustment == Decimal("4.00")
        assert priced.items[0].total == Decimal("102.00")

    def test_missing_products_are_dropped(self, catalog: MemoryCatalog) -> None:
        priced = price_cart(Cart().add("ghost").add("tee"), catalog)
        assert [i.product_id for i in priced.items] == ["tee"]
        assert priced.subtotal == Decimal("100")

    def test_empty_cart(self, catalog: MemoryCatalog) -> None:
        priced = price_cart(Cart(), catalog)
        assert priced.is_empty
        assert priced.subtotal == 0

    def test_variant_labels(self, catalog: MemoryCatalog) -> None:
        priced = price_cart(Cart().add("hoodie", 1, {"size": "l"}), catalog)
        assert priced.items[0].selected_options == {"size": "L"}
