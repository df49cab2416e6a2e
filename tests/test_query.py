"""Query client: caching, gating, coalescing, invalidation, retries."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from kungfu import Error, LazyCoroResult, Ok

from conftest import ALICE, err, ok, some, spin
from swad import IdentityState
from swad import query as Q
from swad.query import (
    Policy,
    QueryClient,
    QueryErrorKind,
    QueryKey,
    QueryStatus,
)


class Backend:
    """Counts calls; answers with the value current when the call started."""

    def __init__(self, value: object) -> None:
        self.value = value
        self.calls = 0
        self.fail = 0
        self.gates: list[asyncio.Event] = []

    def fetch(self, ctx: Q.QueryContext) -> LazyCoroResult:
        async def run():
            self.calls += 1
            value = self.value
            if self.gates:
                await self.gates.pop(0).wait()
            if self.fail:
                self.fail -= 1
                return Error("backend unavailable")
            return Ok(value)

        return LazyCoroResult(run)


def _spec(backend: Backend, *parts: object, policy: Policy | None = None) -> Q.QuerySpec:
    return (
        Q.query(lambda _: QueryKey.of(*parts), backend.fetch)
        .policy(policy or Policy().without_retry())
        .build()
    )


async def _read(client: QueryClient, spec: Q.QuerySpec, params: object = None):
    return await client.get(spec, params)


def test_query_key_prefix_matching() -> None:
    orders = QueryKey.of("orders")

    assert orders.contains(QueryKey.of("orders", "all"))
    assert orders.contains(QueryKey.of("orders", "user", ALICE))
    assert not orders.contains(QueryKey.of("dishes"))
    assert not QueryKey.of("orders", "all").contains(orders)
    assert Q.as_key("orders") == orders
    assert Q.as_key(("orders", "all")) == QueryKey.of("orders", "all")
    assert str(QueryKey.of("admin", None)) == "admin:-"


def test_empty_key_is_rejected() -> None:
    with pytest.raises(ValueError):
        QueryKey.of()


def test_negative_retries_are_rejected() -> None:
    with pytest.raises(ValueError):
        Policy().with_retries(-1)


def test_backoff_delays_are_capped() -> None:
    policy = Policy().with_retries(4).with_retry_delay(seconds=10)

    assert policy.delays() == [10.0, 20.0, 30.0, 30.0]
    assert Policy().without_retry().delays() == []


async def test_first_read_fetches_then_hits() -> None:
    backend = Backend(["Paneer Tikka"])
    client = QueryClient(IdentityState(ALICE))
    spec = _spec(backend, "dishes", "all")

    first = ok(await client.get(spec))
    second = ok(await client.get(spec))

    assert not first.hit
    assert second.hit
    assert second.value == ["Paneer Tikka"]
    assert backend.calls == 1


async def test_parameters_are_part_of_the_key() -> None:
    backend = Backend([])
    client = QueryClient(IdentityState(ALICE))
    spec = (
        Q.query(lambda category: QueryKey.of("dishes", "category", category), backend.fetch)
        .policy(Policy().without_retry())
        .build()
    )

    await client.get(spec, "Starters")
    await client.get(spec, "Desserts")
    await client.get(spec, "Starters")

    assert backend.calls == 2
    assert set(client.keys()) == {
        QueryKey.of("dishes", "category", "Starters"),
        QueryKey.of("dishes", "category", "Desserts"),
    }


async def test_concurrent_reads_share_one_fetch() -> None:
    backend = Backend("menu")
    gate = asyncio.Event()
    backend.gates.append(gate)
    client = QueryClient(IdentityState(ALICE))
    spec = _spec(backend, "dishes", "all")

    pending = asyncio.gather(_read(client, spec), _read(client, spec), _read(client, spec))
    await spin()
    gate.set()
    results = await pending

    assert backend.calls == 1
    assert [ok(r).value for r in results] == ["menu", "menu", "menu"]


async def test_scoped_query_waits_for_identity() -> None:
    identity = IdentityState()
    backend = Backend(True)
    client = QueryClient(identity)
    spec = (
        Q.query(lambda _: QueryKey.of("admin"), backend.fetch)
        .policy(Policy().without_retry())
        .scoped()
        .build()
    )

    gated = err(await client.get(spec))

    assert gated.kind is QueryErrorKind.DISABLED
    assert client.snapshot(spec).status is QueryStatus.DISABLED
    assert not client.snapshot(spec).enabled
    assert backend.calls == 0

    identity.resolve(None)
    result = ok(await client.get(spec))

    assert result.key == QueryKey.of("admin", None)
    assert backend.calls == 1


async def test_authenticated_query_needs_a_principal() -> None:
    identity = IdentityState(resolved=True)
    backend = Backend("profile")
    client = QueryClient(identity)
    spec = Q.query(lambda _: QueryKey.of("profile"), backend.fetch).authenticated().build()

    assert err(await client.get(spec)).kind is QueryErrorKind.DISABLED
    assert backend.calls == 0

    identity.login(ALICE)
    result = ok(await client.get(spec))

    assert result.key == QueryKey.of("profile", ALICE)


async def test_invalidate_hits_whole_family() -> None:
    backend = Backend("v1")
    client = QueryClient(IdentityState(ALICE))
    observed = _spec(backend, "orders", "all")
    unobserved = _spec(backend, "orders", "user", ALICE)
    other = _spec(backend, "dishes", "all")

    sub = client.subscribe(observed)
    await client.get(unobserved)
    await client.get(other)
    await client.settle()
    assert backend.calls == 3

    backend.value = "v2"
    hit = await client.invalidate("orders")

    assert hit == 2
    # observed: refetched before invalidate returned
    assert some(sub.snapshot().data) == "v2"
    assert backend.calls == 4
    # unobserved: stale until read again
    assert client.snapshot(unobserved).stale
    assert some(client.snapshot(unobserved).data) == "v1"
    reread = ok(await client.get(unobserved))
    assert not reread.hit
    assert reread.value == "v2"
    # other families untouched
    assert not client.snapshot(other).stale
    sub.close()


async def test_superseded_response_never_overwrites_newer_data() -> None:
    backend = Backend("old")
    slow = asyncio.Event()
    backend.gates.append(slow)
    client = QueryClient(IdentityState(ALICE))
    spec = _spec(backend, "orders", "all")

    first = asyncio.create_task(_read(client, spec))
    await spin()
    backend.value = "new"
    await client.invalidate("orders")
    slow.set()
    result = ok(await first)

    assert result.value == "new"
    assert some(client.snapshot(spec).data) == "new"
    assert backend.calls == 2


async def test_failed_refetch_keeps_previous_data() -> None:
    backend = Backend("v1")
    client = QueryClient(IdentityState(ALICE))
    spec = _spec(backend, "reviews", "all")
    await client.get(spec)

    backend.fail = 1
    failure = err(await client.refetch(spec))

    assert failure.kind is QueryErrorKind.REMOTE
    snap = client.snapshot(spec)
    assert some(snap.data) == "v1"
    assert snap.error is not None
    assert snap.status is QueryStatus.SUCCESS


async def test_first_fetch_failure_is_error_status() -> None:
    backend = Backend("v1")
    backend.fail = 1
    client = QueryClient(IdentityState(ALICE))
    spec = _spec(backend, "reviews", "all")

    await client.get(spec)
    snap = client.snapshot(spec)

    assert snap.status is QueryStatus.ERROR
    assert snap.fetched
    assert not snap.loading


async def test_retries_follow_policy() -> None:
    backend = Backend("ok")
    backend.fail = 2
    client = QueryClient(IdentityState(ALICE))
    policy = Policy().with_retries(2).with_retry_delay(seconds=0)
    spec = _spec(backend, "dishes", "all", policy=policy)

    assert ok(await client.get(spec)).value == "ok"
    assert backend.calls == 3


async def test_without_retry_reports_first_failure() -> None:
    backend = Backend("ok")
    backend.fail = 1
    client = QueryClient(IdentityState(ALICE))
    spec = _spec(backend, "profile")

    err(await client.get(spec))
    assert backend.calls == 1


async def test_mutate_invalidates_only_on_success() -> None:
    backend = Backend("v1")
    client = QueryClient(IdentityState(ALICE))
    spec = _spec(backend, "reviews", "all")
    await client.get(spec)

    async def rejected():
        return Error("rating out of range")

    async def accepted():
        return Ok(None)

    err(await Q.mutate(client, LazyCoroResult(rejected), invalidates=["reviews"]))
    assert not client.snapshot(spec).stale

    ok(await Q.mutate(client, LazyCoroResult(accepted), invalidates=["reviews"]))
    assert client.snapshot(spec).stale


async def test_stale_after_expires_data() -> None:
    now = [datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)]
    backend = Backend("v1")
    client = QueryClient(IdentityState(ALICE), clock=lambda: now[0])
    policy = Policy().without_retry().with_stale_after(minutes=5)
    spec = _spec(backend, "dishes", "all", policy=policy)

    await client.get(spec)
    now[0] += timedelta(minutes=4)
    assert ok(await client.get(spec)).hit
    now[0] += timedelta(minutes=2)
    assert not ok(await client.get(spec)).hit
    assert backend.calls == 2


async def test_close_cancels_and_forgets() -> None:
    backend = Backend("v1")
    backend.gates.append(asyncio.Event())
    client = QueryClient(IdentityState(ALICE))
    spec = _spec(backend, "dishes", "all")

    sub = client.subscribe(spec)
    await spin()
    await client.close()

    assert client.keys() == ()
    assert not sub.active
