"""
Query client — keyed entries, coalesced fetches, family invalidation.

The client is the single shared mutable resource of a session. Reads go
through it; mutations go to the backend and then ask it to invalidate.
Nothing is ever written into an entry except a backend answer.

Entry lifecycle:

    (absent) ── get/subscribe ──▶ fetching ──▶ data | error
                                     ▲              │
                                     └─ invalidate ─┘  (refetch if observed,
                                                        else marked stale)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from kungfu import LazyCoroResult, Result, Ok, Error, Option, Some, Nothing
from combinators import parallel as C_parallel, lift as L

from swad.identity import IdentityGate
from swad._types import Principal, Clock, utcnow
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
from swad.query._builder import QuerySpec
from swad.query._policy import Policy

logger = logging.getLogger(__name__)

type AnySpec = QuerySpec[Any, Any, Any]
type Resolved = tuple[QueryKey, QueryContext[Any]]


async def _wait[T](task: asyncio.Task[T]) -> T:
    # shielded: one caller giving up must not cancel a fetch others share
    return await asyncio.shield(task)


# ═══════════════════════════════════════════════════════════════════════════════
# Entry — Per-Key State
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class _Entry:
    key: QueryKey
    data: Option[Any] = field(default_factory=Nothing)
    fetched_at: datetime | None = None
    error: QueryError | None = None
    stale: bool = False
    # bumped on every new fetch; a response from an older generation is dropped
    generation: int = 0
    inflight: asyncio.Task[Result[Any, QueryError]] | None = None
    # definition and context of the latest fetch, reused to restart it
    spec: AnySpec | None = None
    ctx: QueryContext[Any] | None = None

    @property
    def has_data(self) -> bool:
        return isinstance(self.data, Some)

    @property
    def fetching(self) -> bool:
        return self.inflight is not None and not self.inflight.done()

    def current(self) -> Result[Any, QueryError] | None:
        if self.error is not None:
            return Error(self.error)
        match self.data:
            case Some(value):
                return Ok(value)
            case _:
                return None


# ═══════════════════════════════════════════════════════════════════════════════
# Subscription — An Active Observer
# ═══════════════════════════════════════════════════════════════════════════════


class Subscription[P, T, E]:
    """
    Handle for a view that keeps observing a query.

    While open, invalidation refetches the observed entry instead of only
    marking it stale. For identity-bound queries the observed key follows the
    current identity.

    Example:
        with client.subscribe(queries.own_orders) as sub:
            await client.settle()
            snap = sub.snapshot()
    """

    __slots__ = ("_client", "spec", "params", "_open")

    def __init__(self, client: QueryClient, spec: QuerySpec[P, T, E], params: P | None) -> None:
        self._client = client
        self.spec = spec
        self.params = params
        self._open = True

    @property
    def active(self) -> bool:
        return self._open

    @property
    def key(self) -> QueryKey | None:
        """Key under the current identity, or None while gated."""
        match self._client.resolve(self.spec, self.params):
            case Ok((key, _)):
                return key
            case _:
                return None

    def snapshot(self) -> QuerySnapshot[T]:
        return self._client.snapshot(self.spec, self.params)

    def result(self) -> LazyCoroResult[QueryResult[T], QueryError]:
        return self._client.get(self.spec, self.params)

    def close(self) -> None:
        if self._open:
            self._open = False
            self._client._release(self)

    def __enter__(self) -> Subscription[P, T, E]:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


# ═══════════════════════════════════════════════════════════════════════════════
# Query Client
# ═══════════════════════════════════════════════════════════════════════════════


class QueryClient:
    """
    Keyed cache of remote reads.

    Example:
        client = QueryClient(identity)

        result = await client.get(queries.all_dishes)
        match result:
            case Ok(r):
                print(r.hit, len(r.value))
            case Error(e):
                print(e.kind)

        await client.invalidate("dishes")
    """

    def __init__(self, identity: IdentityGate, *, clock: Clock = utcnow) -> None:
        self._identity = identity
        self._clock = clock
        self._entries: dict[QueryKey, _Entry] = {}
        self._subscriptions: list[Subscription[Any, Any, Any]] = []
        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False
        self._unsubscribe_identity = identity.subscribe(self._on_identity_change)

    # ───────────────────────────────────────────────────────────────────────────
    # Resolution & gating
    # ───────────────────────────────────────────────────────────────────────────

    def resolve(self, spec: AnySpec, params: Any = None) -> Result[Resolved, QueryError]:
        """Key and fetch context for `spec`, or DISABLED while inputs are unresolved."""
        if spec.identity_bound and not self._identity.resolved:
            return Error(QueryError(QueryErrorKind.DISABLED, "identity not resolved yet"))
        principal: Principal | None = self._identity.current()
        if spec.scope is IdentityScope.AUTHENTICATED and principal is None:
            return Error(QueryError(QueryErrorKind.DISABLED, "requires a logged-in caller"))
        return Ok((spec.key_for(params, principal), spec.context_for(params, principal)))

    def _entry(self, key: QueryKey) -> _Entry:
        entry = self._entries.get(key)
        if entry is None:
            entry = _Entry(key)
            self._entries[key] = entry
        return entry

    def _is_stale(self, entry: _Entry, policy: Policy) -> bool:
        if entry.stale:
            return True
        if policy.stale_after is None or entry.fetched_at is None:
            return False
        return self._clock() - entry.fetched_at >= policy.stale_after

    # ───────────────────────────────────────────────────────────────────────────
    # Reads
    # ───────────────────────────────────────────────────────────────────────────

    def get[P, T, E](
        self,
        spec: QuerySpec[P, T, E],
        params: P | None = None,
    ) -> LazyCoroResult[QueryResult[T], QueryError]:
        """
        Read through the cache.

        Fresh data is returned without a remote call; otherwise a fetch is
        started, or joined if one is already in flight for the key.
        """

        async def execute() -> Result[QueryResult[T], QueryError]:
            return await self._read(spec, params, force=False)

        return LazyCoroResult(execute)

    def refetch[P, T, E](
        self,
        spec: QuerySpec[P, T, E],
        params: P | None = None,
    ) -> LazyCoroResult[QueryResult[T], QueryError]:
        """Always go to the backend; supersedes any in-flight fetch for the key."""

        async def execute() -> Result[QueryResult[T], QueryError]:
            return await self._read(spec, params, force=True)

        return LazyCoroResult(execute)

    async def _read(self, spec: AnySpec, params: Any, *, force: bool) -> Result[QueryResult[Any], QueryError]:
        match self.resolve(spec, params):
            case Error(err):
                logger.debug("[QUERY] gated: %s", err.message)
                return Error(err)
            case Ok((key, ctx)):
                pass

        entry = self._entry(key)
        if not force and not self._is_stale(entry, spec.policy):
            match entry.data:
                case Some(value):
                    logger.debug("[QUERY] hit %s", key)
                    return Ok(QueryResult(value=value, hit=True, key=key, fetched_at=entry.fetched_at))
                case _:
                    pass

        task = self._start(entry, spec, ctx, force=force)
        result = await asyncio.shield(task)
        match result:
            case Ok(value):
                return Ok(QueryResult(value=value, hit=False, key=key, fetched_at=entry.fetched_at))
            case Error(err):
                return Error(err)

    def _start(
        self,
        entry: _Entry,
        spec: AnySpec,
        ctx: QueryContext[Any],
        *,
        force: bool,
    ) -> asyncio.Task[Result[Any, QueryError]]:
        if entry.inflight is not None and entry.fetching and not force:
            logger.debug("[QUERY] joining in-flight fetch for %s", entry.key)
            return entry.inflight

        entry.generation += 1
        entry.spec = spec
        entry.ctx = ctx
        task = asyncio.get_running_loop().create_task(
            self._fetch(entry, spec, ctx, entry.generation)
        )
        entry.inflight = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug("[QUERY] fetch %s (generation %d)", entry.key, entry.generation)
        return task

    async def _fetch(
        self,
        entry: _Entry,
        spec: AnySpec,
        ctx: QueryContext[Any],
        generation: int,
    ) -> Result[Any, QueryError]:
        result = await self._attempt(spec, ctx, entry.key)

        if entry.generation != generation:
            # A newer fetch owns the entry; hand callers the newest answer.
            logger.debug("[QUERY] dropping superseded response for %s", entry.key)
            newer = entry.inflight
            if newer is not None and not newer.done():
                return await asyncio.shield(newer)
            current = entry.current()
            return current if current is not None else result

        entry.inflight = None
        match result:
            case Ok(value):
                entry.data = Some(value)
                entry.fetched_at = self._clock()
                entry.error = None
                entry.stale = False
            case Error(err):
                # previous data stays; the failure is recorded beside it
                entry.error = err
        return result

    async def _attempt(
        self,
        spec: AnySpec,
        ctx: QueryContext[Any],
        key: QueryKey,
    ) -> Result[Any, QueryError]:
        delays = spec.policy.delays()
        attempt = 0
        while True:
            result = await spec.fetch(ctx)
            match result:
                case Ok(value):
                    return Ok(value)
                case Error(err):
                    if attempt >= len(delays):
                        logger.warning(
                            "[QUERY] %s failed after %d attempt(s): %s", key, attempt + 1, err
                        )
                        return Error(QueryError(QueryErrorKind.REMOTE, str(err), err))
                    logger.info(
                        "[QUERY] %s failed (%s); retry in %.2fs", key, err, delays[attempt]
                    )
                    await asyncio.sleep(delays[attempt])
                    attempt += 1

    # ───────────────────────────────────────────────────────────────────────────
    # Observation
    # ───────────────────────────────────────────────────────────────────────────

    def subscribe[P, T, E](
        self,
        spec: QuerySpec[P, T, E],
        params: P | None = None,
    ) -> Subscription[P, T, E]:
        """Start observing; fetches right away if there is nothing fresh."""
        sub = Subscription(self, spec, params)
        self._subscriptions.append(sub)
        self._prefetch(spec, params)
        return sub

    def _release(self, sub: Subscription[Any, Any, Any]) -> None:
        if sub in self._subscriptions:
            self._subscriptions.remove(sub)

    def _prefetch(self, spec: AnySpec, params: Any) -> None:
        match self.resolve(spec, params):
            case Ok((key, ctx)):
                pass
            case _:
                return

        entry = self._entry(key)
        if entry.fetching or (entry.has_data and not self._is_stale(entry, spec.policy)):
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("[QUERY] no running loop; %s fetches on next read", key)
            return
        self._start(entry, spec, ctx, force=False)

    def _observer_of(self, key: QueryKey) -> Subscription[Any, Any, Any] | None:
        for sub in self._subscriptions:
            if sub.key == key:
                return sub
        return None

    def _on_identity_change(self, principal: Principal | None) -> None:
        if self._closed:
            return
        bound = [s for s in self._subscriptions if s.spec.identity_bound]
        logger.info(
            "[QUERY] identity is now %s; re-resolving %d subscription(s)",
            principal or "anonymous",
            len(bound),
        )
        for sub in bound:
            self._prefetch(sub.spec, sub.params)

    def snapshot[P, T, E](
        self,
        spec: QuerySpec[P, T, E],
        params: P | None = None,
    ) -> QuerySnapshot[T]:
        match self.resolve(spec, params):
            case Ok((key, _)):
                pass
            case _:
                return QuerySnapshot(
                    key=None,
                    status=QueryStatus.DISABLED,
                    data=Nothing(),
                    error=None,
                    fetched_at=None,
                    stale=False,
                    fetching=False,
                )

        entry = self._entries.get(key)
        if entry is None:
            return QuerySnapshot(
                key=key,
                status=QueryStatus.IDLE,
                data=Nothing(),
                error=None,
                fetched_at=None,
                stale=False,
                fetching=False,
            )

        if entry.has_data:
            status = QueryStatus.SUCCESS
        elif entry.fetching:
            status = QueryStatus.PENDING
        elif entry.error is not None:
            status = QueryStatus.ERROR
        else:
            status = QueryStatus.IDLE

        return QuerySnapshot(
            key=key,
            status=status,
            data=entry.data,
            error=entry.error,
            fetched_at=entry.fetched_at,
            stale=self._is_stale(entry, spec.policy),
            fetching=entry.fetching,
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Invalidation
    # ───────────────────────────────────────────────────────────────────────────

    async def invalidate(self, key: KeyLike) -> int:
        """
        Invalidate every entry under `key` (family or longer prefix).

        Observed entries, and entries someone is already waiting on, are
        refetched and awaited; the rest are only marked stale. Returns the
        number of entries hit.
        """
        target = as_key(key)
        matched = [e for k, e in self._entries.items() if target.contains(k)]
        refetches: list[asyncio.Task[Result[Any, QueryError]]] = []

        for entry in matched:
            entry.stale = True
            sub = self._observer_of(entry.key)
            if sub is not None:
                match self.resolve(sub.spec, sub.params):
                    case Ok((_, ctx)):
                        refetches.append(self._start(entry, sub.spec, ctx, force=True))
                    case _:
                        pass
            elif entry.fetching and entry.spec is not None and entry.ctx is not None:
                # someone awaits a response that may predate the mutation
                refetches.append(self._start(entry, entry.spec, entry.ctx, force=True))

        logger.info(
            "[QUERY] invalidated %d entr%s under %s; refetching %d",
            len(matched),
            "y" if len(matched) == 1 else "ies",
            target,
            len(refetches),
        )

        if refetches:
            await C_parallel(*[
                L.catching_async(lambda t=t: _wait(t), on_error=str)
                for t in refetches
            ])
        return len(matched)

    def remove(self, key: KeyLike) -> int:
        """Drop entries under `key` without refetching."""
        target = as_key(key)
        doomed = [k for k in self._entries if target.contains(k)]
        for k in doomed:
            del self._entries[k]
        return len(doomed)

    # ───────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ───────────────────────────────────────────────────────────────────────────

    def keys(self) -> tuple[QueryKey, ...]:
        return tuple(self._entries)

    async def settle(self) -> None:
        """Wait until no background fetch is running."""
        while self._tasks:
            await asyncio.wait(list(self._tasks))

    async def close(self) -> None:
        """Cancel background fetches and forget everything."""
        self._closed = True
        self._unsubscribe_identity()
        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.wait(pending)
        self._entries.clear()
        for sub in list(self._subscriptions):
            sub.close()


__all__ = ("QueryClient", "Subscription")
