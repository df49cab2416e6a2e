"""Identity-scoped queries never show one caller's answers to another."""

import pytest

from conftest import ALICE, BOB, OWNER, ScriptedActor, err, is_nothing, ok, some
from swad import IdentityState, Session, SessionConfig
from swad.query import QueryContext, QueryErrorKind, QueryKey, QueryStatus
from swad.remote import UserProfile, UserRole


async def test_admin_flag_is_unreachable_after_logout(
    session: Session, identity: IdentityState
) -> None:
    identity.login(OWNER)
    assert ok(await session.admin.is_admin()) is True

    identity.logout()

    assert ok(await session.admin.is_admin()) is False


async def test_profile_is_unreachable_after_logout(
    session: Session, identity: IdentityState
) -> None:
    ok(await session.mutations.save_profile(UserProfile("Alice", "12 MG Road")))
    profile = some(ok(await session.client.get(session.queries.caller_profile)).value)
    assert profile.name == "Alice"

    identity.logout()
    gated = err(await session.client.get(session.queries.caller_profile))

    assert gated.kind is QueryErrorKind.DISABLED
    assert session.client.snapshot(session.queries.caller_profile).status is QueryStatus.DISABLED

    identity.login(BOB)
    other = ok(await session.client.get(session.queries.caller_profile))

    assert not other.hit
    assert is_nothing(other.value)


async def test_keys_carry_the_principal(session: Session, identity: IdentityState) -> None:
    await session.client.get(session.queries.caller_role)
    identity.login(OWNER)
    await session.client.get(session.queries.caller_role)

    keys = set(session.client.keys())
    assert QueryKey.of("role", ALICE) in keys
    assert QueryKey.of("role", OWNER) in keys


async def test_subscription_follows_identity(session: Session, identity: IdentityState) -> None:
    identity.login(OWNER)
    sub = session.client.subscribe(session.queries.caller_role)
    await session.client.settle()
    assert some(sub.snapshot().data) is UserRole.ADMIN

    identity.login(BOB)
    await session.client.settle()

    assert sub.key == QueryKey.of("role", BOB)
    assert some(sub.snapshot().data) is UserRole.USER

    identity.logout()
    await session.client.settle()

    assert some(sub.snapshot().data) is UserRole.GUEST
    sub.close()


async def test_nothing_runs_before_identity_resolves() -> None:
    identity = IdentityState()
    pending_actor = ScriptedActor(identity, admins={OWNER})
    async with Session(identity, pending_actor, config=SessionConfig()) as session:
        sub = session.client.subscribe(session.queries.is_admin)
        await session.client.settle()

        assert err(await session.admin.is_admin()).kind is QueryErrorKind.DISABLED
        assert not sub.snapshot().enabled
        assert "is_caller_admin" not in pending_actor.calls

        identity.resolve(OWNER)
        await session.client.settle()

        assert some(sub.snapshot().data) is True
        assert pending_actor.calls.count("is_caller_admin") == 1


async def test_unscoped_queries_run_before_identity_resolves() -> None:
    identity = IdentityState()
    backend = ScriptedActor(identity)
    backend.seed()
    async with Session(identity, backend) as session:
        dishes = ok(await session.client.get(session.queries.all_dishes)).value

    assert len(dishes) == 5


async def test_authenticated_fetch_refuses_an_anonymous_context(session: Session) -> None:
    with pytest.raises(ValueError):
        session.queries.own_orders.fetch(QueryContext(None, None))
