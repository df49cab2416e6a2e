"""
Remote types — backend records and the boundary error.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, StrEnum, auto

from swad._types import Principal, DishId, OrderId, ReservationId

# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Dish:
    id: DishId
    name: str
    price: int  # minor units
    category: str
    description: str = ""
    image_url: str = ""
    is_veg: bool = False
    available: bool = True


@dataclass(frozen=True, slots=True)
class DishDraft:
    """Dish fields without the backend-assigned id."""

    name: str
    price: int
    category: str
    description: str = ""
    image_url: str = ""
    is_veg: bool = False
    available: bool = True


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(StrEnum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    PREPARING = "Preparing"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentMethod(StrEnum):
    UPI = "UPI"
    CARD = "Card"
    CASH = "Cash"


@dataclass(frozen=True, slots=True)
class OrderItem:
    """One line of a placed order, captured at checkout time."""

    name: str
    quantity: int
    unit_price: int


@dataclass(frozen=True, slots=True)
class Order:
    """
    Backend order record.

    `status` stays a plain string: the backend may send values this client
    does not know about.
    """

    id: OrderId
    owner: Principal
    items: tuple[OrderItem, ...]
    total_amount: int
    payment_method: str
    status: str
    created_at: datetime


# ═══════════════════════════════════════════════════════════════════════════════
# Reservations, Reviews, Coupons, Profiles
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ReservationRequest:
    name: str
    phone: str
    date: str
    time: str
    guests: int


@dataclass(frozen=True, slots=True)
class Reservation:
    id: ReservationId
    owner: Principal
    name: str
    phone: str
    date: str
    time: str
    guests: int
    created_at: datetime


@dataclass(frozen=True, slots=True)
class Review:
    author: Principal
    rating: int
    comment: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class Coupon:
    code: str
    discount_percent: int


@dataclass(frozen=True, slots=True)
class UserProfile:
    name: str
    address: str


class UserRole(StrEnum):
    ADMIN = "admin"
    USER = "user"
    GUEST = "guest"


# ═══════════════════════════════════════════════════════════════════════════════
# Boundary Errors
# ═══════════════════════════════════════════════════════════════════════════════


class RemoteErrorKind(Enum):
    """Remote error kinds."""

    TRANSPORT = auto()  # network / timeout / backend busy
    UNAUTHORIZED = auto()  # caller lacks the role for the call
    NOT_FOUND = auto()  # addressed record does not exist
    REJECTED = auto()  # backend refused the payload


class ActorFailure(Exception):
    """Raised by actor implementations; converted to `RemoteError` at the boundary."""

    def __init__(self, kind: RemoteErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass(frozen=True, slots=True)
class RemoteError:
    """A remote call failed. Local state must be left as it was."""

    kind: RemoteErrorKind
    message: str
    cause: Exception | None = None

    @classmethod
    def from_exception(cls, exc: Exception) -> RemoteError:
        if isinstance(exc, ActorFailure):
            return cls(exc.kind, exc.message, exc)
        return cls(RemoteErrorKind.TRANSPORT, str(exc) or type(exc).__name__, exc)

    def __str__(self) -> str:
        return f"{self.kind.name.lower()}: {self.message}"


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

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
)
