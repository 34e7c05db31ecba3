"""
Storefront — the checkout state machine and the state it commits to.

    idle ──checkout()──► processing ──► succeeded
      ▲                      │
      │                      └────────► failed
      └──── reset_checkout_status() ◄───────┘

Validation failures (empty cart, no method, reward) go straight to failed
without opening a session. Remote failures (session creation, waiting,
commit) leave cart, reward, balance and orders untouched.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from decimal import Decimal

from kungfu import Result, Ok, Error

from nebula_checkout._settings import Settings
from nebula_checkout._types import Amount
from nebula_checkout.cart import Cart, PricedCart, price_cart
from nebula_checkout.catalog import Catalog, PaymentMethod, RewardTier
from nebula_checkout.checkout._transaction import transaction
from nebula_checkout.checkout._types import (
    CheckoutError,
    CheckoutErrors,
    CheckoutStatus,
    Order,
    OrderItem,
    OrderPayment,
    OrderStatus,
)
from nebula_checkout.idempotency import build_key
from nebula_checkout.ledger import (
    CoinLedger,
    CoinLedgerEntry,
    EntryType,
    InsufficientCoins,
    LedgerSnapshot,
    entry,
)
from nebula_checkout.rewards import RewardError, UnknownReward, check_reward, is_eligible
from nebula_checkout.sessions import (
    ConfirmationSource,
    PaymentSession,
    PollingWaiter,
    SessionLineItem,
    SessionManager,
    SessionErrors,
    SessionExpired,
    SessionRequest,
    SessionStatus,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StorefrontSnapshot:
    ledger: LedgerSnapshot
    cart: Cart
    selected_reward_id: str | None
    orders: tuple[Order, ...]


@dataclass(frozen=True, slots=True)
class _Attempt:
    """Everything checkout() derived before going remote."""

    priced: PricedCart
    reward: RewardTier | None
    discount: Amount
    total: Amount
    coins_earned: int
    request: SessionRequest


class Storefront:
    """
    Cart, rewards, coins and the checkout flow of one shopper.

    Example:
        shop = Storefront(catalog, manager, balance=200)
        shop.add_to_cart("hoodie")
        shop.set_payment_method(PaymentMethod.NEBULA_PAY)
        await shop.checkout()
        shop.checkout_status  # CheckoutStatus.SUCCEEDED

    Note: single owner. The processing guard only stops re-entrant
    submissions from the same caller.
    """

    def __init__(
        self,
        catalog: Catalog,
        manager: SessionManager,
        waiter: ConfirmationSource | None = None,
        settings: Settings | None = None,
        balance: int = 0,
    ) -> None:
        self._catalog = catalog
        self._manager = manager
        self._waiter: ConfirmationSource = waiter or PollingWaiter(manager)
        self._settings = settings or manager.settings
        self._ledger = CoinLedger(balance=balance, limit=self._settings.ledger_limit)

        self.cart = Cart()
        self.selections: dict[str, dict[str, str]] = {}
        self.shipping_selections: dict[str, str] = {}
        self.selected_reward_id: str | None = None
        self.payment_method: PaymentMethod | None = None

        self.checkout_status = CheckoutStatus.IDLE
        self.checkout_error: str | None = None
        self.payment_session: PaymentSession | None = None
        self.orders: tuple[Order, ...] = ()
        self.last_checkout_idempotency_key: str | None = None
        self.last_checkout_session_id: str | None = None

    # ═══════════════════════════════════════════════════════════════════════
    # Observable state
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def coins_balance(self) -> int:
        return self._ledger.balance

    @property
    def coin_ledger(self) -> tuple[CoinLedgerEntry, ...]:
        return self._ledger.entries

    @property
    def selected_reward(self) -> RewardTier | None:
        if self.selected_reward_id is None:
            return None
        return self._catalog.get_reward(self.selected_reward_id)

    def price_cart(self) -> PricedCart:
        """Priced view of the current cart. No side effects."""
        return price_cart(self.cart, self._catalog, self.shipping_selections)

    # ═══════════════════════════════════════════════════════════════════════
    # Cart
    # ═══════════════════════════════════════════════════════════════════════

    def add_to_cart(self, product_id: str, quantity: int = 1) -> None:
        self.cart = self.cart.add(product_id, quantity, self.selections.get(product_id))
        self._revalidate_reward()

    def update_cart_quantity(self, product_id: str, quantity: int) -> None:
        self.cart = self.cart.update_quantity(product_id, quantity)
        self._revalidate_reward()

    def remove_from_cart(self, product_id: str) -> None:
        self.cart = self.cart.remove(product_id)
        self._revalidate_reward()

    def select_variant(self, product_id: str, variant_type: str, option_id: str) -> None:
        selection = {**self.selections.get(product_id, {}), variant_type: option_id}
        self.selections[product_id] = selection
        if self.cart.get(product_id) is not None:
            self.cart = self.cart.with_options(product_id, selection)

    def select_shipping_option(self, product_id: str, option_id: str) -> None:
        """Ignored unless the product offers option_id."""
        product = self._catalog.get_product(product_id)
        if product is None or not product.offers_shipping(option_id):
            return
        self.shipping_selections[product_id] = option_id
        self._revalidate_reward()

    # ═══════════════════════════════════════════════════════════════════════
    # Rewards
    # ═══════════════════════════════════════════════════════════════════════

    def select_reward(self, reward_id: str) -> Result[RewardTier, RewardError]:
        """
        Select a reward tier if it is redeemable now.

        On failure the selection is unchanged and checkout_error carries
        the reason.
        """
        reward = self._catalog.get_reward(reward_id)
        if reward is None:
            return Error(UnknownReward(f"Unknown reward {reward_id}", reward_id))

        match check_reward(reward, self.price_cart().subtotal, self.coins_balance):
            case Ok(tier):
                self.selected_reward_id = tier.id
                self.checkout_error = None
                return Ok(tier)
            case Error(err):
                self.checkout_error = err.message
                return Error(err)

    def clear_reward(self) -> None:
        self.selected_reward_id = None

    def _revalidate_reward(self) -> None:
        reward = self.selected_reward
        if reward is None:
            return
        if not is_eligible(reward, self.price_cart().subtotal, self.coins_balance):
            logger.debug("reward %s no longer eligible, cleared", reward.id)
            self.selected_reward_id = None

    # ═══════════════════════════════════════════════════════════════════════
    # Coins
    # ═══════════════════════════════════════════════════════════════════════

    def add_coins(self, amount: int, description: str = "Coin top-up") -> CoinLedgerEntry:
        return self._ledger.earn(amount, description)

    def spend_coins(
        self,
        amount: int,
        description: str = "Coin purchase",
    ) -> Result[CoinLedgerEntry, InsufficientCoins]:
        result = self._ledger.burn(amount, description)
        self._revalidate_reward()
        return result

    def coins_for(self, subtotal: Amount) -> int:
        """Coins a checkout of subtotal earns once confirmed."""
        if subtotal <= 0:
            return 0
        return self._settings.coins_base + math.ceil(subtotal * self._settings.coins_rate)

    # ═══════════════════════════════════════════════════════════════════════
    # Payment
    # ═══════════════════════════════════════════════════════════════════════

    def set_payment_method(self, method: PaymentMethod) -> None:
        self.payment_method = method

    def clear_payment_session(self) -> None:
        self.payment_session = None

    def reset_checkout_status(self) -> None:
        self.checkout_status = CheckoutStatus.IDLE
        self.checkout_error = None

    # ═══════════════════════════════════════════════════════════════════════
    # Checkout
    # ═══════════════════════════════════════════════════════════════════════

    async def checkout(self) -> None:
        """
        Submit the cart. Observe the outcome via checkout_status and
        checkout_error; nothing is raised except cancellation.
        """
        if self.checkout_status is CheckoutStatus.PROCESSING:
            logger.debug("checkout already processing, ignored")
            return

        match self._prepare():
            case Error(err):
                self._fail(err)
                return
            case Ok(attempt):
                pass

        self.checkout_status = CheckoutStatus.PROCESSING
        self.checkout_error = None
        self.last_checkout_idempotency_key = attempt.request.idempotency_key
        logger.info(
            "checkout started (%s, total %s)",
            attempt.request.method.value,
            attempt.total,
        )

        try:
            match await self._settle(attempt):
                case Error(SessionExpired() as err):
                    logger.info("%s", err.message)
                    self._fail(CheckoutErrors.session_expired())
                    return
                case Error(err):
                    self._fail(err)
                    return
                case Ok(session):
                    order = self._commit(attempt, session)
        except asyncio.CancelledError:
            self._fail(CheckoutErrors.cancelled())
            raise
        except Exception as e:
            logger.exception("checkout failed unexpectedly")
            self._fail(CheckoutErrors.failed(str(e)))
            return

        self.checkout_status = CheckoutStatus.SUCCEEDED
        self.checkout_error = None
        logger.info("checkout %s succeeded (%s)", order.id, order.status.value)

    def _prepare(self) -> Result[_Attempt, CheckoutError]:
        priced = self.price_cart()
        if priced.is_empty:
            return Error(CheckoutErrors.empty_cart())

        method = self.payment_method
        if method is None:
            return Error(CheckoutErrors.no_payment_method())

        reward = self.selected_reward
        if reward is not None:
            match check_reward(reward, priced.subtotal, self.coins_balance):
                case Error(err):
                    return Error(CheckoutErrors.reward_ineligible(err.message))
                case Ok(_):
                    pass

        discount = reward.discount_value if reward is not None else Decimal(0)
        total = max(Decimal(0), priced.subtotal - discount)
        reward_id = reward.id if reward is not None else None

        request = SessionRequest(
            idempotency_key=build_key(priced.items, reward_id, method),
            subtotal=priced.subtotal,
            discount=discount,
            total=total,
            reward_id=reward_id,
            items=tuple(
                SessionLineItem(
                    product_id=item.product_id,
                    name=item.name,
                    quantity=item.quantity,
                    unit_amount=item.unit_price,
                )
                for item in priced.items
            ),
            method=method,
        )
        return Ok(_Attempt(
            priced=priced,
            reward=reward,
            discount=discount,
            total=total,
            coins_earned=self.coins_for(priced.subtotal),
            request=request,
        ))

    async def _settle(self, attempt: _Attempt) -> Result[PaymentSession, Exception]:
        """Open the session and wait until it leaves pending."""
        match await self._manager.create_session(attempt.request):
            case Error(err):
                return Error(err)
            case Ok(session):
                self.payment_session = session
                self.last_checkout_session_id = session.id

        match await self._waiter.wait(session.id):
            case Error(err):
                return Error(err)
            case Ok(final):
                self.payment_session = final
                if final.status is SessionStatus.EXPIRED:
                    return Error(SessionErrors.expired(final.id))
                return Ok(final)

    def _commit(self, attempt: _Attempt, session: PaymentSession) -> Order:
        confirmed = session.status is SessionStatus.CONFIRMED
        reward = attempt.reward
        coins_earned = attempt.coins_earned if confirmed else 0

        entries: list[CoinLedgerEntry] = []
        delta = coins_earned
        if confirmed:
            entries.append(entry(EntryType.EARN, coins_earned, f"Checkout {session.id}"))
        if reward is not None:
            delta -= reward.coins
            verb = "redeemed" if confirmed else "reserved"
            entries.append(entry(EntryType.BURN, reward.coins, f"{reward.label} {verb}"))

        order = Order(
            id=session.id,
            subtotal=attempt.priced.subtotal,
            discount=attempt.discount,
            total=attempt.total,
            reward_id=reward.id if reward is not None else None,
            coins_earned=coins_earned,
            created_at=session.created_at,
            status=OrderStatus.PAID if confirmed else OrderStatus.PENDING,
            payment=OrderPayment(method=session.method, reference=session.reference),
            items=tuple(
                OrderItem(
                    product_id=item.product_id,
                    name=item.name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total=item.total,
                    shipping_label=item.shipping_label,
                    selected_options=item.selected_options,
                )
                for item in attempt.priced.items
            ),
        )

        with transaction(self):
            # burn is logged after earn so it ends up first
            self._ledger.apply(delta, *entries)
            self.orders = (order, *self.orders)[: self._settings.order_history_limit]
            self.cart = self.cart.clear()
            self.selected_reward_id = None
        return order

    def _fail(self, err: Exception) -> None:
        self.checkout_status = CheckoutStatus.FAILED
        self.checkout_error = str(err) or CheckoutErrors.failed().message
        logger.warning("checkout failed: %s", self.checkout_error)

    # ═══════════════════════════════════════════════════════════════════════
    # Snapshot
    # ═══════════════════════════════════════════════════════════════════════

    def snapshot(self) -> StorefrontSnapshot:
        return StorefrontSnapshot(
            ledger=self._ledger.snapshot(),
            cart=self.cart,
            selected_reward_id=self.selected_reward_id,
            orders=self.orders,
        )

    def restore(self, snapshot: StorefrontSnapshot) -> None:
        self._ledger.restore(snapshot.ledger)
        self.cart = snapshot.cart
        self.selected_reward_id = snapshot.selected_reward_id
        self.orders = snapshot.orders


__all__ = ("Storefront", "StorefrontSnapshot")
