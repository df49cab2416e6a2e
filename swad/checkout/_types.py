"""
Checkout types — attempt phases, receipt, error.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from swad._types import OrderId
from swad.cart import CartSnapshot
from swad.remote import RemoteError

# ═══════════════════════════════════════════════════════════════════════════════
# Phase — Per-Attempt State Machine
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutPhase(Enum):
    """
    IDLE ──submit──▶ SUBMITTING ──ack──▶ SUCCEEDED
                          │
                          └──error──▶ FAILED

    SUCCEEDED and FAILED end the attempt; the next submit starts a new one.
    """

    IDLE = auto()
    SUBMITTING = auto()
    SUCCEEDED = auto()
    FAILED = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutErrorKind(Enum):
    """Checkout error kinds."""

    UNAUTHENTICATED = auto()  # no principal, remote not called
    EMPTY_CART = auto()  # nothing to order, remote not called
    IN_PROGRESS = auto()  # another attempt is submitting, remote not called
    REMOTE = auto()  # place_order failed, cart untouched


@dataclass(frozen=True, slots=True)
class CheckoutError:
    """Checkout error. Only REMOTE failures are worth retrying as-is."""

    kind: CheckoutErrorKind
    message: str
    cause: RemoteError | None = None

    @property
    def recoverable(self) -> bool:
        return self.kind is CheckoutErrorKind.REMOTE

    def __str__(self) -> str:
        return self.message


# ═══════════════════════════════════════════════════════════════════════════════
# Receipt
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutReceipt:
    """Successful checkout: the backend order and what was submitted."""

    order_id: OrderId
    snapshot: CartSnapshot
    payment_method: str
    invalidated: int

    @property
    def total_amount(self) -> int:
        return self.snapshot.total


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "CheckoutPhase",
    "CheckoutErrorKind",
    "CheckoutError",
    "CheckoutReceipt",
)
