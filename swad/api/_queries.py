"""
Queries — every remote read, defined once per actor.

Keys by family:

    dishes        ("dishes", "all") ("dishes", "category", c) ("dishes", "veg")
    orders        ("orders", "user", <principal>) ("orders", "all", <principal>)
    reservations  ("reservations", "user", <principal>)
    reviews       ("reviews", "all")
    profile       ("profile", <principal>)
    admin         ("admin", <principal>)
    role          ("role", <principal>)
"""

from __future__ import annotations

from kungfu import LazyCoroResult, Option

from swad._types import Principal
from swad import query as Q
from swad.query import QueryKey, QueryContext
from swad.lift import call_remote, call_remote_optional
from swad.remote import (
    Actor,
    Dish,
    Order,
    Reservation,
    Review,
    UserProfile,
    UserRole,
    RemoteError,
)


class Family:
    """Cache key families, the unit of invalidation."""

    DISHES = "dishes"
    ORDERS = "orders"
    RESERVATIONS = "reservations"
    REVIEWS = "reviews"
    COUPONS = "coupons"
    PROFILE = "profile"
    ADMIN = "admin"
    ROLE = "role"


def _principal(ctx: QueryContext[object]) -> Principal:
    if ctx.principal is None:
        raise ValueError("authenticated query ran without a principal")
    return ctx.principal


class Queries:
    """
    Query definitions bound to one actor.

    Example:
        queries = Queries(actor)
        result = await client.get(queries.dishes_by_category, "Starters")
    """

    def __init__(self, actor: Actor, *, policy: Q.Policy | None = None) -> None:
        base = policy if policy is not None else Q.Policy()
        self._actor = actor

        # ── Dishes ────────────────────────────────────────────────────────────

        self.all_dishes: Q.QuerySpec[None, list[Dish], RemoteError] = (
            Q.query(lambda _: QueryKey.of(Family.DISHES, "all"), self._all_dishes)
            .policy(base)
            .build()
        )
        self.dishes_by_category: Q.QuerySpec[str, list[Dish], RemoteError] = (
            Q.query(
                lambda category: QueryKey.of(Family.DISHES, "category", category),
                self._dishes_by_category,
            )
            .policy(base)
            .build()
        )
        self.veg_dishes: Q.QuerySpec[None, list[Dish], RemoteError] = (
            Q.query(lambda _: QueryKey.of(Family.DISHES, "veg"), self._veg_dishes)
            .policy(base)
            .build()
        )

        # ── Orders ────────────────────────────────────────────────────────────

        self.own_orders: Q.QuerySpec[None, list[Order], RemoteError] = (
            Q.query(lambda _: QueryKey.of(Family.ORDERS, "user"), self._own_orders)
            .policy(base)
            .authenticated()
            .build()
        )
        # admin-only on the backend, so the answer depends on who asks
        self.all_orders: Q.QuerySpec[None, list[Order], RemoteError] = (
            Q.query(lambda _: QueryKey.of(Family.ORDERS, "all"), self._all_orders)
            .policy(base)
            .authenticated()
            .build()
        )

        # ── Reservations & reviews ────────────────────────────────────────────

        self.own_reservations: Q.QuerySpec[None, list[Reservation], RemoteError] = (
            Q.query(
                lambda _: QueryKey.of(Family.RESERVATIONS, "user"),
                self._own_reservations,
            )
            .policy(base)
            .authenticated()
            .build()
        )
        self.all_reviews: Q.QuerySpec[None, list[Review], RemoteError] = (
            Q.query(lambda _: QueryKey.of(Family.REVIEWS, "all"), self._all_reviews)
            .policy(base)
            .build()
        )

        # ── Identity-scoped flags ─────────────────────────────────────────────

        # A missing profile is an answer (Nothing), never retried into an error.
        self.caller_profile: Q.QuerySpec[None, Option[UserProfile], RemoteError] = (
            Q.query(lambda _: QueryKey.of(Family.PROFILE), self._caller_profile)
            .policy(base.without_retry())
            .authenticated()
            .build()
        )
        self.is_admin: Q.QuerySpec[None, bool, RemoteError] = (
            Q.query(lambda _: QueryKey.of(Family.ADMIN), self._is_admin)
            .policy(base)
            .scoped()
            .build()
        )
        self.caller_role: Q.QuerySpec[None, UserRole, RemoteError] = (
            Q.query(lambda _: QueryKey.of(Family.ROLE), self._caller_role)
            .policy(base)
            .scoped()
            .build()
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Fetch functions
    # ───────────────────────────────────────────────────────────────────────────

    def _all_dishes(self, _: QueryContext[None]) -> LazyCoroResult[list[Dish], RemoteError]:
        return call_remote(self._actor.get_all_dishes)

    def _dishes_by_category(self, ctx: QueryContext[str]) -> LazyCoroResult[list[Dish], RemoteError]:
        return call_remote(lambda: self._actor.get_dishes_by_category(ctx.params))

    def _veg_dishes(self, _: QueryContext[None]) -> LazyCoroResult[list[Dish], RemoteError]:
        return call_remote(self._actor.get_veg_dishes)

    def _own_orders(self, ctx: QueryContext[None]) -> LazyCoroResult[list[Order], RemoteError]:
        owner = _principal(ctx)
        return call_remote(lambda: self._actor.get_user_orders(owner))

    def _all_orders(self, _: QueryContext[None]) -> LazyCoroResult[list[Order], RemoteError]:
        return call_remote(self._actor.get_all_orders)

    def _own_reservations(
        self, ctx: QueryContext[None]
    ) -> LazyCoroResult[list[Reservation], RemoteError]:
        owner = _principal(ctx)
        return call_remote(lambda: self._actor.get_user_reservations(owner))

    def _all_reviews(self, _: QueryContext[None]) -> LazyCoroResult[list[Review], RemoteError]:
        return call_remote(self._actor.get_all_reviews)

    def _caller_profile(
        self, _: QueryContext[None]
    ) -> LazyCoroResult[Option[UserProfile], RemoteError]:
        return call_remote_optional(self._actor.get_caller_user_profile)

    def _is_admin(self, _: QueryContext[None]) -> LazyCoroResult[bool, RemoteError]:
        return call_remote(self._actor.is_caller_admin)

    def _caller_role(self, _: QueryContext[None]) -> LazyCoroResult[UserRole, RemoteError]:
        return call_remote(self._actor.get_caller_user_role)


__all__ = ("Family", "Queries")
