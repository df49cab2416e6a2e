"""
Cart types — lines and immutable snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass

from swad._types import DishId
from swad.remote._types import OrderItem

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════


def discount_for(subtotal: int, discount_percent: int) -> int:
    """
    Discount in minor units, rounded half up.

    Integer arithmetic only: 500 at 10% is exactly 50, 5 at 10% is 1.
    """
    return (subtotal * discount_percent + 50) // 100


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Line
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLine:
    dish_id: DishId
    name: str
    unit_price: int
    quantity: int

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity

    def to_order_item(self) -> OrderItem:
        return OrderItem(self.name, self.quantity, self.unit_price)


# ═══════════════════════════════════════════════════════════════════════════════
# Snapshot
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartSnapshot:
    """
    Frozen copy of the cart taken at one instant.

    Totals are computed from the captured lines, so a snapshot never disagrees
    with itself.
    """

    lines: tuple[CartLine, ...]
    discount_percent: int
    coupon_code: str | None

    @property
    def subtotal(self) -> int:
        return sum(line.line_total for line in self.lines)

    @property
    def discount_amount(self) -> int:
        return discount_for(self.subtotal, self.discount_percent)

    @property
    def total(self) -> int:
        return self.subtotal - self.discount_amount

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def order_items(self) -> tuple[OrderItem, ...]:
        return tuple(line.to_order_item() for line in self.lines)


__all__ = ("discount_for", "CartLine", "CartSnapshot")
