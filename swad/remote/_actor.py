"""
Actor protocol — the backend RPC surface.

Every call is a coroutine, may raise on transport failure and carries no
idempotency key. Implementations identify the caller themselves.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from swad._types import Principal, DishId, OrderId, ReservationId
from swad.remote._types import (
    Dish,
    DishDraft,
    OrderItem,
    Order,
    ReservationRequest,
    Reservation,
    Review,
    Coupon,
    UserProfile,
    UserRole,
)


class Actor(Protocol):
    """
    Backend RPC surface consumed by swad.

    Example — wrapping an HTTP gateway:

        class GatewayActor:
            def __init__(self, client: httpx.AsyncClient) -> None:
                self.client = client

            async def get_all_dishes(self) -> list[Dish]:
                resp = await self.client.get("/dishes")
                resp.raise_for_status()
                return [decode_dish(d) for d in resp.json()]

            # ... other methods
    """

    # Dishes
    async def get_all_dishes(self) -> list[Dish]: ...

    async def get_dishes_by_category(self, category: str) -> list[Dish]: ...

    async def get_veg_dishes(self) -> list[Dish]: ...

    async def add_dish(self, draft: DishDraft) -> DishId: ...

    async def edit_dish(self, dish_id: DishId, draft: DishDraft) -> None: ...

    async def delete_dish(self, dish_id: DishId) -> None: ...

    # Orders
    async def place_order(
        self,
        items: Sequence[OrderItem],
        total_amount: int,
        payment_method: str,
    ) -> OrderId: ...

    async def get_user_orders(self, owner: Principal) -> list[Order]: ...

    async def get_all_orders(self) -> list[Order]: ...

    async def update_order_status(self, order_id: OrderId, status: str) -> None: ...

    # Reservations
    async def make_reservation(self, request: ReservationRequest) -> ReservationId: ...

    async def get_user_reservations(self, owner: Principal) -> list[Reservation]: ...

    # Reviews
    async def submit_review(self, rating: int, comment: str) -> None: ...

    async def get_all_reviews(self) -> list[Review]: ...

    # Coupons
    async def add_coupon(self, code: str, discount_percent: int) -> None: ...

    async def validate_coupon(self, code: str) -> Coupon | None: ...

    # Identity / roles
    async def get_caller_user_profile(self) -> UserProfile | None: ...

    async def save_caller_user_profile(self, profile: UserProfile) -> None: ...

    async def is_caller_admin(self) -> bool: ...

    async def get_caller_user_role(self) -> UserRole: ...


__all__ = ("Actor",)
