"""
Cart — entries and pricing.

    from nebula_checkout.cart import Cart, price_cart

    c = Cart().add("hoodie", 2).add("cap")
    priced = price_cart(c, catalog)
    priced.subtotal
"""

from nebula_checkout.cart._types import (
    CartEntry,
    Cart,
    PricedLineItem,
    PricedCart,
)
from nebula_checkout.cart._price import price_cart

__all__ = (
    "CartEntry",
    "Cart",
    "PricedLineItem",
    "PricedCart",
    "price_cart",
)
