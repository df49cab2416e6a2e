"""
Query — keyed read cache with family invalidation.

    from swad import query as Q

    dishes = Q.query(lambda _: Q.QueryKey.of("dishes"), fetch_dishes).build()
    client = Q.QueryClient(identity)
    result = await client.get(dishes)
    await client.invalidate("dishes")
"""

from __future__ import annotations

from swad.query._types import (
    QueryKey,
    KeyLike,
    as_key,
    IdentityScope,
    QueryContext,
    QueryStatus,
    QueryError,
    QueryErrorKind,
    QueryResult,
    QuerySnapshot,
)
from swad.query._policy import Policy
from swad.query._builder import query, Query, QuerySpec
from swad.query._client import QueryClient, Subscription
from swad.query._ops import invalidate, mutate

__all__ = (
    "QueryKey",
    "KeyLike",
    "as_key",
    "IdentityScope",
    "QueryContext",
    "QueryStatus",
    "QueryError",
    "QueryErrorKind",
    "QueryResult",
    "QuerySnapshot",
    "Policy",
    "query",
    "Query",
    "QuerySpec",
    "QueryClient",
    "Subscription",
    "invalidate",
    "mutate",
)
