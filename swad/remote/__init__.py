"""
Remote — backend RPC surface.

    from swad import remote as R

    actor: R.Actor = R.MemoryActor(identity)
    dishes = await actor.get_all_dishes()
"""

from __future__ import annotations

from swad.remote._types import (
    Dish,
    DishDraft,
    OrderStatus,
    PaymentMethod,
    OrderItem,
    Order,
    ReservationRequest,
    Reservation,
    Review,
    Coupon,
    UserProfile,
    UserRole,
    RemoteErrorKind,
    ActorFailure,
    RemoteError,
)
from swad.remote._actor import Actor
from swad.remote._memory import MemoryActor

__all__ = (
    "Dish",
    "DishDraft",
    "OrderStatus",
    "PaymentMethod",
    "OrderItem",
    "Order",
    "ReservationRequest",
    "Reservation",
    "Review",
    "Coupon",
    "UserProfile",
    "UserRole",
    "RemoteErrorKind",
    "ActorFailure",
    "RemoteError",
    "Actor",
    "MemoryActor",
)
