"""
Lift — helpers for lifting remote calls into kungfu values.

Re-exports from combinators.lift with swad-specific additions.
"""

from __future__ import annotations

from collections.abc import Callable, Awaitable

from kungfu import LazyCoroResult, Option, Some, Nothing

# Re-export from combinators.lift
from combinators.lift import catching_async

from swad.remote._types import RemoteError


# ═══════════════════════════════════════════════════════════════════════════════
# swad-specific helpers
# ═══════════════════════════════════════════════════════════════════════════════


def call_remote[T](fn: Callable[[], Awaitable[T]]) -> LazyCoroResult[T, RemoteError]:
    """
    Lift an actor call; any exception it raises becomes a RemoteError.

    Example:
        dishes = await call_remote(actor.get_all_dishes)
    """
    return catching_async(fn, on_error=RemoteError.from_exception)


def to_option[T](value: T | None) -> Option[T]:
    """Backend "record or null" → Some / Nothing."""
    return Nothing() if value is None else Some(value)


def call_remote_optional[T](
    fn: Callable[[], Awaitable[T | None]],
) -> LazyCoroResult[Option[T], RemoteError]:
    """
    Lift an actor call that answers "record or null".

    A null answer is Ok(Nothing()), not an error: "not found" and "call
    failed" stay distinguishable.
    """
    return call_remote(fn).map(to_option)


__all__ = (
    # From combinators.lift
    "catching_async",
    # swad additions
    "call_remote",
    "to_option",
    "call_remote_optional",
)
