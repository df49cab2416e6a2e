"""
Checkout — cart snapshot to exactly one remote order.

    from swad.checkout import Checkout, apply_coupon_code

    await apply_coupon_code(cart, mutations, "swad10")
    result = await Checkout(cart, actor, client, identity).submit(PaymentMethod.UPI)
"""

from __future__ import annotations

from swad.checkout._types import (
    CheckoutPhase,
    CheckoutErrorKind,
    CheckoutError,
    CheckoutReceipt,
)
from swad.checkout._run import Checkout
from swad.checkout._coupon import apply_coupon_code

__all__ = (
    "CheckoutPhase",
    "CheckoutErrorKind",
    "CheckoutError",
    "CheckoutReceipt",
    "Checkout",
    "apply_coupon_code",
)
