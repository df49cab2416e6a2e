"""
Query types.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto

from kungfu import Option

from swad._types import Principal

# ═══════════════════════════════════════════════════════════════════════════════
# Query Key — Structured, Comparable
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class QueryKey:
    """
    Cache key: resource family followed by ordered parameters.

    Example:
        QueryKey.of("orders", "user", alice)
        QueryKey.of("orders", "all")
        QueryKey.of("orders").contains(QueryKey.of("orders", "all"))  # True
    """

    parts: tuple[Hashable, ...]

    @classmethod
    def of(cls, *parts: Hashable) -> QueryKey:
        if not parts:
            raise ValueError("QueryKey needs at least a family")
        return cls(parts)

    @property
    def family(self) -> Hashable:
        return self.parts[0]

    def extend(self, *parts: Hashable) -> QueryKey:
        return QueryKey((*self.parts, *parts))

    def contains(self, other: QueryKey) -> bool:
        """True if `other` is this key or lies under it (prefix match)."""
        n = len(self.parts)
        return other.parts[:n] == self.parts

    def __str__(self) -> str:
        return ":".join("-" if p is None else str(p) for p in self.parts)


type KeyLike = QueryKey | str | tuple[Hashable, ...]


def as_key(key: KeyLike) -> QueryKey:
    match key:
        case QueryKey():
            return key
        case str():
            return QueryKey.of(key)
        case tuple():
            return QueryKey.of(*key)
        case _:
            raise TypeError(f"not a query key: {key!r}")


# ═══════════════════════════════════════════════════════════════════════════════
# Identity Scope
# ═══════════════════════════════════════════════════════════════════════════════


class IdentityScope(Enum):
    """
    How a query relates to the caller identity.

    NONE:          Same answer for everyone. Runs without waiting for identity.
    SCOPED:        Answer depends on the caller. Waits for identity to resolve;
                   the principal (or None) is part of the key.
    AUTHENTICATED: SCOPED, and also needs a logged-in principal.
    """

    NONE = auto()
    SCOPED = auto()
    AUTHENTICATED = auto()


@dataclass(frozen=True, slots=True)
class QueryContext[P]:
    """What a fetch function receives."""

    params: P
    principal: Principal | None


# ═══════════════════════════════════════════════════════════════════════════════
# Status & Errors
# ═══════════════════════════════════════════════════════════════════════════════


class QueryStatus(Enum):
    DISABLED = auto()  # gated: inputs not resolved
    IDLE = auto()  # enabled, never fetched
    PENDING = auto()  # first fetch in flight
    SUCCESS = auto()  # has data
    ERROR = auto()  # last fetch failed and there is no data


class QueryErrorKind(Enum):
    """Query error kinds."""

    DISABLED = auto()  # gated, the remote was not called
    REMOTE = auto()  # the fetch failed after all retries


@dataclass(frozen=True, slots=True)
class QueryError:
    """Query operation error."""

    kind: QueryErrorKind
    message: str
    cause: object | None = None

    def __str__(self) -> str:
        return self.message


# ═══════════════════════════════════════════════════════════════════════════════
# Results
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class QueryResult[T]:
    """Query read result with metadata."""

    value: T
    hit: bool
    key: QueryKey
    fetched_at: datetime | None


@dataclass(frozen=True, slots=True)
class QuerySnapshot[T]:
    """Point-in-time view of one query, as a UI would render it."""

    key: QueryKey | None
    status: QueryStatus
    data: Option[T]
    error: QueryError | None
    fetched_at: datetime | None
    stale: bool
    fetching: bool

    @property
    def enabled(self) -> bool:
        return self.status is not QueryStatus.DISABLED

    @property
    def fetched(self) -> bool:
        """At least one fetch for this key has completed."""
        return self.fetched_at is not None or self.error is not None

    @property
    def loading(self) -> bool:
        return self.status is QueryStatus.PENDING


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "QueryKey",
    "KeyLike",
    "as_key",
    "IdentityScope",
    "QueryContext",
    "QueryStatus",
    "QueryErrorKind",
    "QueryError",
    "QueryResult",
    "QuerySnapshot",
)
