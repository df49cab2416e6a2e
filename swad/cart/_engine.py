"""
Cart engine — line items, coupon and derived totals.

Synchronous and side-effect free. Totals are read off the current lines every
time, so stored and derived state cannot drift apart.
"""

from __future__ import annotations

from swad._types import DishId
from swad.remote._types import Dish
from swad.cart._types import CartLine, CartSnapshot, discount_for


class Cart:
    """
    Shopping cart owned by one session.

    Example:
        cart = Cart()
        cart.add(paneer_tikka)
        cart.add(paneer_tikka)        # quantity 2
        cart.apply_coupon("SWAD10", 10)
        cart.total                    # subtotal minus 10%
    """

    __slots__ = ("_lines", "_discount_percent", "_coupon_code")

    def __init__(self) -> None:
        # dict keeps insertion order, one entry per dish
        self._lines: dict[DishId, CartLine] = {}
        self._discount_percent = 0
        self._coupon_code: str | None = None

    # ───────────────────────────────────────────────────────────────────────────
    # Lines
    # ───────────────────────────────────────────────────────────────────────────

    def add(self, dish: Dish) -> None:
        existing = self._lines.get(dish.id)
        if existing is not None:
            self._lines[dish.id] = CartLine(
                existing.dish_id, existing.name, existing.unit_price, existing.quantity + 1
            )
            return
        self._lines[dish.id] = CartLine(dish.id, dish.name, dish.price, 1)

    def set_quantity(self, dish_id: DishId, quantity: int) -> None:
        if quantity <= 0:
            self.remove(dish_id)
            return
        existing = self._lines.get(dish_id)
        if existing is None:
            return
        self._lines[dish_id] = CartLine(
            existing.dish_id, existing.name, existing.unit_price, quantity
        )

    def remove(self, dish_id: DishId) -> None:
        self._lines.pop(dish_id, None)

    # ───────────────────────────────────────────────────────────────────────────
    # Coupon
    # ───────────────────────────────────────────────────────────────────────────

    def apply_coupon(self, code: str, discount_percent: int) -> None:
        """Set code and percent together. The caller has validated the percent."""
        self._coupon_code = code
        self._discount_percent = discount_percent

    def clear_coupon(self) -> None:
        self._coupon_code = None
        self._discount_percent = 0

    def clear(self) -> None:
        self._lines.clear()
        self.clear_coupon()

    # ───────────────────────────────────────────────────────────────────────────
    # Reads
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines.values())

    @property
    def discount_percent(self) -> int:
        return self._discount_percent

    @property
    def coupon_code(self) -> str | None:
        return self._coupon_code

    @property
    def subtotal(self) -> int:
        return sum(line.line_total for line in self._lines.values())

    @property
    def discount_amount(self) -> int:
        return discount_for(self.subtotal, self._discount_percent)

    @property
    def total(self) -> int:
        return self.subtotal - self.discount_amount

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def quantity_of(self, dish_id: DishId) -> int:
        line = self._lines.get(dish_id)
        return line.quantity if line is not None else 0

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot(
            lines=self.lines,
            discount_percent=self._discount_percent,
            coupon_code=self._coupon_code,
        )

    def __len__(self) -> int:
        return len(self._lines)

    def __repr__(self) -> str:
        return (
            f"Cart(lines={len(self._lines)}, total={self.total}, "
            f"coupon={self._coupon_code!r})"
        )


__all__ = ("Cart",)
