"""
Query operations — standalone utilities.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from kungfu import LazyCoroResult, Result, Ok, Error

from swad.query._types import KeyLike, as_key
from swad.query._client import QueryClient

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# invalidate() — Several Families At Once
# ═══════════════════════════════════════════════════════════════════════════════


async def invalidate(client: QueryClient, keys: Iterable[KeyLike]) -> int:
    """
    Invalidate every family in `keys`, in order.

    Example:
        hit = await Q.invalidate(client, ["orders", ("dishes", "veg")])
    """
    total = 0
    for key in keys:
        total += await client.invalidate(key)
    return total


# ═══════════════════════════════════════════════════════════════════════════════
# mutate() — Remote Write, Then Invalidate
# ═══════════════════════════════════════════════════════════════════════════════


def mutate[T, E](
    client: QueryClient,
    action: LazyCoroResult[T, E],
    *,
    invalidates: Iterable[KeyLike] = (),
) -> LazyCoroResult[T, E]:
    """
    Run a remote write; on success only, invalidate the given families.

    The cache is never written optimistically: backend-assigned fields (ids,
    timestamps, statuses) only reach views through the refetch.

    Example:
        result = await Q.mutate(
            client,
            call_remote(lambda: actor.update_order_status(order_id, "Delivered")),
            invalidates=["orders"],
        )
    """
    families = tuple(as_key(k) for k in invalidates)

    async def execute() -> Result[T, E]:
        result = await action
        match result:
            case Ok(value):
                if families:
                    await invalidate(client, families)
                return Ok(value)
            case Error(err):
                logger.warning(
                    "[MUTATION] failed, invalidating nothing (%s): %s",
                    ", ".join(str(f) for f in families) or "-",
                    err,
                )
                return Error(err)

    return LazyCoroResult(execute)


__all__ = ("invalidate", "mutate")
