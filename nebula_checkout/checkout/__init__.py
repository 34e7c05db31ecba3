"""
Checkout — the orchestrating state machine.

    from nebula_checkout import checkout as CO

    shop = CO.Storefront(catalog, manager, balance=200)
    shop.add_to_cart("hoodie")
    shop.set_payment_method(PaymentMethod.NEBULA_PAY)

    await shop.checkout()

    match shop.checkout_status:
        case CO.CheckoutStatus.SUCCEEDED:
            print(shop.orders[0].status)
        case CO.CheckoutStatus.FAILED:
            print(shop.checkout_error)
"""

from nebula_checkout.checkout._types import (
    CheckoutStatus,
    OrderStatus,
    OrderPayment,
    OrderItem,
    Order,
    CheckoutError,
    CheckoutErrors,
)
from nebula_checkout.checkout._transaction import Snapshottable, transaction
from nebula_checkout.checkout._storefront import Storefront, StorefrontSnapshot

__all__ = (
    # Types
    "CheckoutStatus",
    "OrderStatus",
    "OrderPayment",
    "OrderItem",
    "Order",
    "CheckoutError",
    "CheckoutErrors",
    # Transaction
    "Snapshottable",
    "transaction",
    # Storefront
    "Storefront",
    "StorefrontSnapshot",
)
