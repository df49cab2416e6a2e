"""
Memory actor — in-process backend for examples and tests.

Note: Single process only. Caller identity comes from an IdentityGate, the way
an authenticated agent would attach it to every call.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import replace

from swad._types import Principal, DishId, OrderId, ReservationId, Clock, utcnow
from swad.identity import IdentityGate
from swad.remote._types import (
    ActorFailure,
    RemoteErrorKind,
    Dish,
    DishDraft,
    OrderItem,
    Order,
    OrderStatus,
    ReservationRequest,
    Reservation,
    Review,
    Coupon,
    UserProfile,
    UserRole,
)


class MemoryActor:
    """
    In-memory implementation of `Actor`.

    Example:
        gate = IdentityState(Principal("alice"))
        actor = MemoryActor(gate, admins={Principal("owner")})
        actor.seed()
        order_id = await actor.place_order(items, 450, "UPI")
    """

    def __init__(
        self,
        identity: IdentityGate,
        *,
        admins: set[Principal] | None = None,
        clock: Clock = utcnow,
        latency: float = 0.0,
    ) -> None:
        self._identity = identity
        self._admins = set(admins or ())
        self._clock = clock
        self._latency = latency
        self._dishes: dict[int, Dish] = {}
        self._orders: dict[int, Order] = {}
        self._reservations: dict[int, Reservation] = {}
        self._reviews: list[Review] = []
        self._coupons: dict[str, Coupon] = {}
        self._profiles: dict[Principal, UserProfile] = {}
        self._dish_counter = 0
        self._order_counter = 0
        self._reservation_counter = 0
        self.calls: list[str] = []

    def seed(self) -> None:
        for draft in (
            DishDraft("Paneer Tikka", 280, "Starters", is_veg=True),
            DishDraft("Chicken 65", 320, "Starters"),
            DishDraft("Dal Makhani", 240, "Main Course", is_veg=True),
            DishDraft("Butter Chicken", 380, "Main Course"),
            DishDraft("Gulab Jamun", 120, "Desserts", is_veg=True),
        ):
            self._insert_dish(draft)
        self._coupons["SWAD10"] = Coupon("SWAD10", 10)

    # ───────────────────────────────────────────────────────────────────────────
    # Helpers
    # ───────────────────────────────────────────────────────────────────────────

    async def _enter(self, name: str) -> None:
        self.calls.append(name)
        if self._latency:
            await asyncio.sleep(self._latency)

    def _caller(self) -> Principal:
        principal = self._identity.current()
        if principal is None:
            raise ActorFailure(RemoteErrorKind.UNAUTHORIZED, "anonymous caller")
        return principal

    def _require_admin(self) -> Principal:
        principal = self._caller()
        if principal not in self._admins:
            raise ActorFailure(RemoteErrorKind.UNAUTHORIZED, f"{principal} is not an admin")
        return principal

    def _insert_dish(self, draft: DishDraft) -> DishId:
        self._dish_counter += 1
        dish_id = DishId(self._dish_counter)
        self._dishes[dish_id.value] = Dish(
            id=dish_id,
            name=draft.name,
            price=draft.price,
            category=draft.category,
            description=draft.description,
            image_url=draft.image_url,
            is_veg=draft.is_veg,
            available=draft.available,
        )
        return dish_id

    # ───────────────────────────────────────────────────────────────────────────
    # Dishes
    # ───────────────────────────────────────────────────────────────────────────

    async def get_all_dishes(self) -> list[Dish]:
        await self._enter("get_all_dishes")
        return list(self._dishes.values())

    async def get_dishes_by_category(self, category: str) -> list[Dish]:
        await self._enter("get_dishes_by_category")
        return [d for d in self._dishes.values() if d.category == category]

    async def get_veg_dishes(self) -> list[Dish]:
        await self._enter("get_veg_dishes")
        return [d for d in self._dishes.values() if d.is_veg]

    async def add_dish(self, draft: DishDraft) -> DishId:
        await self._enter("add_dish")
        self._require_admin()
        return self._insert_dish(draft)

    async def edit_dish(self, dish_id: DishId, draft: DishDraft) -> None:
        await self._enter("edit_dish")
        self._require_admin()
        if dish_id.value not in self._dishes:
            raise ActorFailure(RemoteErrorKind.NOT_FOUND, f"dish {dish_id.value}")
        self._dishes[dish_id.value] = Dish(
            id=dish_id,
            name=draft.name,
            price=draft.price,
            category=draft.category,
            description=draft.description,
            image_url=draft.image_url,
            is_veg=draft.is_veg,
            available=draft.available,
        )

    async def delete_dish(self, dish_id: DishId) -> None:
        await self._enter("delete_dish")
        self._require_admin()
        if self._dishes.pop(dish_id.value, None) is None:
            raise ActorFailure(RemoteErrorKind.NOT_FOUND, f"dish {dish_id.value}")

    # ───────────────────────────────────────────────────────────────────────────
    # Orders
    # ───────────────────────────────────────────────────────────────────────────

    async def place_order(
        self,
        items: Sequence[OrderItem],
        total_amount: int,
        payment_method: str,
    ) -> OrderId:
        owner = self._caller()
        await self._enter("place_order")
        if not items:
            raise ActorFailure(RemoteErrorKind.REJECTED, "order has no items")
        self._order_counter += 1
        order_id = OrderId(self._order_counter)
        self._orders[order_id.value] = Order(
            id=order_id,
            owner=owner,
            items=tuple(items),
            total_amount=total_amount,
            payment_method=payment_method,
            status=OrderStatus.PENDING.value,
            created_at=self._clock(),
        )
        return order_id

    async def get_user_orders(self, owner: Principal) -> list[Order]:
        await self._enter("get_user_orders")
        return [o for o in self._orders.values() if o.owner == owner]

    async def get_all_orders(self) -> list[Order]:
        await self._enter("get_all_orders")
        self._require_admin()
        return list(self._orders.values())

    async def update_order_status(self, order_id: OrderId, status: str) -> None:
        await self._enter("update_order_status")
        self._require_admin()
        order = self._orders.get(order_id.value)
        if order is None:
            raise ActorFailure(RemoteErrorKind.NOT_FOUND, f"order {order_id.value}")
        self._orders[order_id.value] = replace(order, status=status)

    # ───────────────────────────────────────────────────────────────────────────
    # Reservations
    # ───────────────────────────────────────────────────────────────────────────

    async def make_reservation(self, request: ReservationRequest) -> ReservationId:
        owner = self._caller()
        await self._enter("make_reservation")
        self._reservation_counter += 1
        reservation_id = ReservationId(self._reservation_counter)
        self._reservations[reservation_id.value] = Reservation(
            id=reservation_id,
            owner=owner,
            name=request.name,
            phone=request.phone,
            date=request.date,
            time=request.time,
            guests=request.guests,
            created_at=self._clock(),
        )
        return reservation_id

    async def get_user_reservations(self, owner: Principal) -> list[Reservation]:
        await self._enter("get_user_reservations")
        return [r for r in self._reservations.values() if r.owner == owner]

    # ───────────────────────────────────────────────────────────────────────────
    # Reviews
    # ───────────────────────────────────────────────────────────────────────────

    async def submit_review(self, rating: int, comment: str) -> None:
        author = self._caller()
        await self._enter("submit_review")
        if not 1 <= rating <= 5:
            raise ActorFailure(RemoteErrorKind.REJECTED, f"rating {rating} out of range")
        self._reviews.append(Review(author, rating, comment, self._clock()))

    async def get_all_reviews(self) -> list[Review]:
        await self._enter("get_all_reviews")
        return list(self._reviews)

    # ───────────────────────────────────────────────────────────────────────────
    # Coupons
    # ───────────────────────────────────────────────────────────────────────────

    async def add_coupon(self, code: str, discount_percent: int) -> None:
        await self._enter("add_coupon")
        self._require_admin()
        if not 0 <= discount_percent <= 100:
            raise ActorFailure(RemoteErrorKind.REJECTED, f"discount {discount_percent}")
        normalized = code.upper()
        self._coupons[normalized] = Coupon(normalized, discount_percent)

    async def validate_coupon(self, code: str) -> Coupon | None:
        await self._enter("validate_coupon")
        return self._coupons.get(code.upper())

    # ───────────────────────────────────────────────────────────────────────────
    # Identity / roles
    # ───────────────────────────────────────────────────────────────────────────

    async def get_caller_user_profile(self) -> UserProfile | None:
        await self._enter("get_caller_user_profile")
        return self._profiles.get(self._caller())

    async def save_caller_user_profile(self, profile: UserProfile) -> None:
        caller = self._caller()
        await self._enter("save_caller_user_profile")
        self._profiles[caller] = profile

    async def is_caller_admin(self) -> bool:
        await self._enter("is_caller_admin")
        return self._identity.current() in self._admins

    async def get_caller_user_role(self) -> UserRole:
        await self._enter("get_caller_user_role")
        principal = self._identity.current()
        if principal is None:
            return UserRole.GUEST
        return UserRole.ADMIN if principal in self._admins else UserRole.USER


__all__ = ("MemoryActor",)
