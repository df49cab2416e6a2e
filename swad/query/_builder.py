"""
Query builder — fluent API.
"""

from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Callable

from kungfu import LazyCoroResult

from swad._types import Principal
from swad.query._types import QueryKey, QueryContext, IdentityScope
from swad.query._policy import Policy

# ═══════════════════════════════════════════════════════════════════════════════
# Function Types
# ═══════════════════════════════════════════════════════════════════════════════

type KeyFn[P] = Callable[[P], QueryKey]
type FetchFn[P, T, E] = Callable[[QueryContext[P]], LazyCoroResult[T, E]]


# ═══════════════════════════════════════════════════════════════════════════════
# Query Builder
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True, frozen=True)
class Query[P, T, E]:
    """
    Fluent query builder.

    Type parameters:
        P: Parameter type (None for parameterless queries)
        T: Value type
        E: Error type from fetch

    Example:
        own_orders = (
            Q.query(lambda _: QueryKey.of("orders", "user"), fetch_own_orders)
            .authenticated()
            .build()
        )
    """

    _key_fn: KeyFn[P]
    _fetch: FetchFn[P, T, E]
    _policy: Policy
    _scope: IdentityScope

    def policy(self, p: Policy) -> Query[P, T, E]:
        """Set fetch policy."""
        return Query(
            _key_fn=self._key_fn,
            _fetch=self._fetch,
            _policy=p,
            _scope=self._scope,
        )

    def scoped(self) -> Query[P, T, E]:
        """Key and fetch follow the caller identity; wait for it to resolve."""
        return Query(
            _key_fn=self._key_fn,
            _fetch=self._fetch,
            _policy=self._policy,
            _scope=IdentityScope.SCOPED,
        )

    def authenticated(self) -> Query[P, T, E]:
        """Like scoped(), and never run for an anonymous caller."""
        return Query(
            _key_fn=self._key_fn,
            _fetch=self._fetch,
            _policy=self._policy,
            _scope=IdentityScope.AUTHENTICATED,
        )

    def build(self) -> QuerySpec[P, T, E]:
        """Build query definition."""
        return QuerySpec(
            key_fn=self._key_fn,
            fetch=self._fetch,
            policy=self._policy,
            scope=self._scope,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Query Spec
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True, frozen=True)
class QuerySpec[P, T, E]:
    """Compiled query definition. Holds no state; the client owns entries."""

    key_fn: KeyFn[P]
    fetch: FetchFn[P, T, E]
    policy: Policy
    scope: IdentityScope

    @property
    def identity_bound(self) -> bool:
        return self.scope is not IdentityScope.NONE

    def key_for(self, params: P, principal: Principal | None) -> QueryKey:
        """
        Concrete cache key.

        Identity-bound keys always end with the principal, so answers for
        different callers never share an entry.
        """
        key = self.key_fn(params)
        if self.identity_bound:
            return key.extend(principal)
        return key

    def context_for(self, params: P, principal: Principal | None) -> QueryContext[P]:
        return QueryContext(
            params=params,
            principal=principal if self.identity_bound else None,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# query() — Entry Point (Type-Safe)
# ═══════════════════════════════════════════════════════════════════════════════


def query[P, T, E](
    key: KeyFn[P],
    fetch: FetchFn[P, T, E],
) -> Query[P, T, E]:
    """
    Create query builder with key function and fetch.

    Types are inferred from arguments — no manual annotation needed.

    Example:
        from swad import query as Q

        dishes_in = (
            Q.query(
                lambda category: QueryKey.of("dishes", "category", category),
                lambda ctx: call_remote(lambda: actor.get_dishes_by_category(ctx.params)),
            )
            .policy(Q.Policy().with_retries(1))
            .build()
        )

        result = await client.get(dishes_in, "Starters")
    """
    return Query(
        _key_fn=key,
        _fetch=fetch,
        _policy=Policy(),
        _scope=IdentityScope.NONE,
    )


__all__ = ("Query", "QuerySpec", "query", "KeyFn", "FetchFn")
