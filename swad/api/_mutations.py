"""
Mutations — remote writes, each with the key families it invalidates.

Nothing here touches the cache directly. A write runs against the actor;
only on success are its families invalidated and refetched.

    dishes        add_dish, edit_dish, delete_dish
    orders        update_order_status   (placing an order lives in checkout)
    reservations  make_reservation
    reviews       submit_review
    coupons       add_coupon
    profile       save_profile
"""

from __future__ import annotations

from kungfu import LazyCoroResult, Option

from swad._types import DishId, OrderId, ReservationId
from swad import query as Q
from swad.query import QueryClient
from swad.lift import call_remote, call_remote_optional
from swad.remote import (
    Actor,
    Coupon,
    DishDraft,
    OrderStatus,
    ReservationRequest,
    UserProfile,
    RemoteError,
)
from swad.api._queries import Family


class Mutations:
    """
    Remote writes bound to one actor and one query client.

    Example:
        mutations = Mutations(actor, client)
        result = await mutations.update_order_status(OrderId(7), OrderStatus.DELIVERED)
    """

    def __init__(self, actor: Actor, client: QueryClient) -> None:
        self._actor = actor
        self._client = client

    @property
    def actor(self) -> Actor:
        return self._actor

    @property
    def client(self) -> QueryClient:
        return self._client

    # ── Menu (admin) ──────────────────────────────────────────────────────────

    def add_dish(self, draft: DishDraft) -> LazyCoroResult[DishId, RemoteError]:
        return Q.mutate(
            self._client,
            call_remote(lambda: self._actor.add_dish(draft)),
            invalidates=[Family.DISHES],
        )

    def edit_dish(self, dish_id: DishId, draft: DishDraft) -> LazyCoroResult[None, RemoteError]:
        return Q.mutate(
            self._client,
            call_remote(lambda: self._actor.edit_dish(dish_id, draft)),
            invalidates=[Family.DISHES],
        )

    def delete_dish(self, dish_id: DishId) -> LazyCoroResult[None, RemoteError]:
        return Q.mutate(
            self._client,
            call_remote(lambda: self._actor.delete_dish(dish_id)),
            invalidates=[Family.DISHES],
        )

    # ── Orders (admin) ────────────────────────────────────────────────────────

    def update_order_status(
        self, order_id: OrderId, status: OrderStatus | str
    ) -> LazyCoroResult[None, RemoteError]:
        return Q.mutate(
            self._client,
            call_remote(lambda: self._actor.update_order_status(order_id, str(status))),
            invalidates=[Family.ORDERS],
        )

    # ── Reservations & reviews ────────────────────────────────────────────────

    def make_reservation(
        self, request: ReservationRequest
    ) -> LazyCoroResult[ReservationId, RemoteError]:
        return Q.mutate(
            self._client,
            call_remote(lambda: self._actor.make_reservation(request)),
            invalidates=[Family.RESERVATIONS],
        )

    def submit_review(self, rating: int, comment: str) -> LazyCoroResult[None, RemoteError]:
        return Q.mutate(
            self._client,
            call_remote(lambda: self._actor.submit_review(rating, comment)),
            invalidates=[Family.REVIEWS],
        )

    # ── Coupons ───────────────────────────────────────────────────────────────

    def add_coupon(self, code: str, discount_percent: int) -> LazyCoroResult[None, RemoteError]:
        """Codes are stored upper-cased."""
        normalized = code.strip().upper()
        return Q.mutate(
            self._client,
            call_remote(lambda: self._actor.add_coupon(normalized, discount_percent)),
            invalidates=[Family.COUPONS],
        )

    def validate_coupon(self, code: str) -> LazyCoroResult[Option[Coupon], RemoteError]:
        # a lookup, not cached: each apply asks the backend again
        normalized = code.strip().upper()
        return call_remote_optional(lambda: self._actor.validate_coupon(normalized))

    # ── Profile ───────────────────────────────────────────────────────────────

    def save_profile(self, profile: UserProfile) -> LazyCoroResult[None, RemoteError]:
        return Q.mutate(
            self._client,
            call_remote(lambda: self._actor.save_caller_user_profile(profile)),
            invalidates=[Family.PROFILE],
        )


__all__ = ("Mutations",)
