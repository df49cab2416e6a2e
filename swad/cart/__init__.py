"""
Cart — local line items with coupon discount.

    from swad import cart as K

    cart = K.Cart()
    cart.add(dish)
    snap = cart.snapshot()
"""

from __future__ import annotations

from swad.cart._types import CartLine, CartSnapshot, discount_for
from swad.cart._engine import Cart

__all__ = (
    "CartLine",
    "CartSnapshot",
    "discount_for",
    "Cart",
)
