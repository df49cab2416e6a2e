"""
Checkout execution.

One attempt turns a cart snapshot into exactly one remote order:

    preconditions ──▶ snapshot ──▶ place_order ──ok──▶ clear cart ──▶ invalidate "orders"
         │                              │
         └─ Error, nothing called       └─ Error, cart and cache untouched

There is no automatic retry: without an idempotency key a retry after a
timeout could place the order twice. Retrying is the caller's decision.
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error

from swad.cart import Cart, CartSnapshot
from swad.identity import IdentityGate
from swad.lift import call_remote
from swad.query import QueryClient
from swad.remote import Actor, PaymentMethod
from swad.api import Family
from swad.checkout._types import (
    CheckoutPhase,
    CheckoutErrorKind,
    CheckoutError,
    CheckoutReceipt,
)

logger = logging.getLogger(__name__)


class Checkout:
    """
    Checkout protocol bound to one cart.

    Example:
        checkout = Checkout(cart, actor, client, identity)
        match await checkout.submit(PaymentMethod.UPI):
            case Ok(receipt):
                print(receipt.order_id)
            case Error(e) if e.recoverable:
                print("try again:", e)
            case Error(e):
                print(e.kind)
    """

    def __init__(
        self,
        cart: Cart,
        actor: Actor,
        client: QueryClient,
        identity: IdentityGate,
    ) -> None:
        self._cart = cart
        self._actor = actor
        self._client = client
        self._identity = identity
        self._phase = CheckoutPhase.IDLE
        self._last_error: CheckoutError | None = None

    @property
    def phase(self) -> CheckoutPhase:
        return self._phase

    @property
    def submitting(self) -> bool:
        return self._phase is CheckoutPhase.SUBMITTING

    @property
    def last_error(self) -> CheckoutError | None:
        return self._last_error

    # ───────────────────────────────────────────────────────────────────────────
    # Preconditions
    # ───────────────────────────────────────────────────────────────────────────

    def _check(self) -> Result[CartSnapshot, CheckoutError]:
        if self._phase is CheckoutPhase.SUBMITTING:
            return Error(CheckoutError(CheckoutErrorKind.IN_PROGRESS, "an order is already being placed"))
        if self._identity.current() is None:
            return Error(CheckoutError(CheckoutErrorKind.UNAUTHENTICATED, "log in to place an order"))
        if self._cart.is_empty:
            return Error(CheckoutError(CheckoutErrorKind.EMPTY_CART, "cart is empty"))
        return Ok(self._cart.snapshot())

    # ───────────────────────────────────────────────────────────────────────────
    # submit()
    # ───────────────────────────────────────────────────────────────────────────

    async def submit(
        self,
        payment_method: PaymentMethod | str,
    ) -> Result[CheckoutReceipt, CheckoutError]:
        """
        Place one order for the current cart.

        Preconditions and the snapshot are taken before the first await, so
        edits made while the call is in flight never reach the order.
        """
        match self._check():
            case Error(err):
                logger.info("[CHECKOUT] rejected: %s", err.message)
                return Error(err)
            case Ok(snapshot):
                pass

        method = str(payment_method)
        self._phase = CheckoutPhase.SUBMITTING
        self._last_error = None
        logger.info(
            "[CHECKOUT] placing order: %d item(s), total %d, %s",
            snapshot.total_items,
            snapshot.total,
            method,
        )

        try:
            result = await call_remote(
                lambda: self._actor.place_order(snapshot.order_items(), snapshot.total, method)
            )
        except BaseException:
            # cancelled mid-call: the order may or may not exist, the cart stays
            self._phase = CheckoutPhase.FAILED
            self._last_error = CheckoutError(
                CheckoutErrorKind.REMOTE,
                "order outcome unknown (submission interrupted)",
            )
            logger.warning("[CHECKOUT] %s", self._last_error.message)
            raise

        match result:
            case Ok(order_id):
                self._cart.clear()
                self._phase = CheckoutPhase.SUCCEEDED
                invalidated = await self._client.invalidate(Family.ORDERS)
                logger.info("[CHECKOUT] order %s placed", order_id)
                return Ok(
                    CheckoutReceipt(
                        order_id=order_id,
                        snapshot=snapshot,
                        payment_method=method,
                        invalidated=invalidated,
                    )
                )
            case Error(remote):
                err = CheckoutError(
                    CheckoutErrorKind.REMOTE,
                    f"order could not be placed ({remote})",
                    remote,
                )
                self._phase = CheckoutPhase.FAILED
                self._last_error = err
                logger.warning("[CHECKOUT] %s", err.message)
                return Error(err)


__all__ = ("Checkout",)
