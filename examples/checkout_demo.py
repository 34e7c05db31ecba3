"""
Checkout Example — validation, a double submit and a cash meetup with a reward.

Run: uv run python examples/checkout_demo.py
"""

import asyncio
import logging

from kungfu import Ok, Error

from nebula_checkout import Settings
from nebula_checkout.catalog import PaymentMethod
from nebula_checkout.checkout import CheckoutStatus, Storefront
from nebula_checkout.sessions import SessionManager
from examples._infra import banner, demo_catalog, run


def show(shop: Storefront) -> None:
    match shop.checkout_status:
        case CheckoutStatus.SUCCEEDED:
            order = shop.orders[0]
            print(f"   order {order.id[:12]}… {order.status.value}, total {order.total}")
            print(f"   ref {order.payment.reference}, coins now {shop.coins_balance}")
        case CheckoutStatus.FAILED:
            print(f"   failed: {shop.checkout_error}")
        case status:
            print(f"   {status.value}")


async def main() -> None:
    banner("Checkout")

    settings = (
        Settings()
        .with_poll_interval(seconds=0.1)
        .with_finalize_delay(PaymentMethod.NEBULA_PAY, seconds=0.5)
    )
    manager = SessionManager(settings)
    shop = Storefront(demo_catalog(), manager, balance=200)

    try:
        # 1. Validation
        print("\n1. Empty cart:")
        shop.set_payment_method(PaymentMethod.NEBULA_PAY)
        await shop.checkout()
        show(shop)
        shop.reset_checkout_status()

        # 2. Reward out of reach
        print("\n2. Reward needing 300 coins with 200:")
        shop.add_to_cart("void-hoodie")
        match shop.select_reward("ten-off"):
            case Ok(tier):
                print(f"   selected {tier.label}")
            case Error(e):
                print(f"   {e}")

        # 3. Double submit: one session, one order
        print("\n3. Double submit:")
        shop.select_shipping_option("void-hoodie", "express")
        await asyncio.gather(shop.checkout(), shop.checkout())
        show(shop)
        print(f"   orders: {len(shop.orders)}")
        shop.reset_checkout_status()

        # 4. Reward + cash meetup: pending order, coins reserved
        print("\n4. Cash meetup with reward:")
        shop.add_coins(250, "Welcome bonus")
        shop.add_to_cart("orbit-cap", 3)
        shop.select_reward("ten-off")
        shop.set_payment_method(PaymentMethod.CASH_MEETUP)
        await shop.checkout()
        show(shop)
        for line in shop.payment_session.instructions:
            print(f"   · {line}")

        print("\nLedger:")
        for item in shop.coin_ledger:
            print(f"   {item.type.value:>4} {item.amount:>4}  {item.description}")
    finally:
        await manager.aclose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    run(main)
