"""
Coupon application — validate remotely, then apply to the cart.
"""

from __future__ import annotations

import logging

from kungfu import LazyCoroResult, Result, Ok, Error, Option, Some, Nothing

from swad.api import Mutations
from swad.cart import Cart
from swad.remote import Coupon, RemoteError

logger = logging.getLogger(__name__)


def apply_coupon_code(
    cart: Cart,
    mutations: Mutations,
    code: str,
) -> LazyCoroResult[Option[Coupon], RemoteError]:
    """
    Validate `code` and apply it to `cart`.

    Some(coupon): the cart now carries its code and percent.
    Nothing:      unknown code, blank input or a percent outside 0..100;
                  cart untouched.
    Error:        lookup failed, cart untouched.

    Example:
        match await apply_coupon_code(cart, mutations, " swad10 "):
            case Ok(Some(coupon)):
                print(f"{coupon.discount_percent}% off")
            case Ok(_):
                print("invalid coupon")
            case Error(e):
                print(e)
    """
    normalized = code.strip().upper()

    async def execute() -> Result[Option[Coupon], RemoteError]:
        if not normalized:
            return Ok(Nothing())
        result = await mutations.validate_coupon(normalized)
        match result:
            case Ok(Some(coupon)) if not 0 <= coupon.discount_percent <= 100:
                logger.warning(
                    "[CHECKOUT] coupon %s rejected: discount %d%% out of range",
                    coupon.code,
                    coupon.discount_percent,
                )
                return Ok(Nothing())
            case Ok(Some(coupon)):
                cart.apply_coupon(coupon.code, coupon.discount_percent)
                logger.info("[CHECKOUT] coupon %s applied (%d%%)", coupon.code, coupon.discount_percent)
                return Ok(Some(coupon))
            case Ok(_):
                logger.info("[CHECKOUT] coupon %s rejected", normalized)
                return Ok(Nothing())
            case Error(err):
                logger.warning("[CHECKOUT] coupon lookup failed: %s", err)
                return Error(err)

    return LazyCoroResult(execute)


__all__ = ("apply_coupon_code",)
