"""Session lifecycle and isolation."""

from conftest import ALICE, ScriptedActor, ok
from swad import IdentityState, Session, SessionConfig
from swad.query import Policy


async def test_close_drops_cache_and_cart(identity: IdentityState, actor: ScriptedActor) -> None:
    async with Session(identity, actor) as session:
        dishes = ok(await session.client.get(session.queries.all_dishes)).value
        session.cart.add(dishes[0])
        assert session.client.keys()

    assert session.closed
    assert session.client.keys() == ()
    assert session.cart.is_empty


async def test_sessions_do_not_share_state(identity: IdentityState, actor: ScriptedActor) -> None:
    async with Session(identity, actor) as first, Session(identity, actor) as second:
        dishes = ok(await first.client.get(first.queries.all_dishes)).value
        first.cart.add(dishes[0])

        assert second.cart.is_empty
        assert second.client.keys() == ()
        assert not ok(await second.client.get(second.queries.all_dishes)).hit


def test_config_is_immutable_and_fluent() -> None:
    base = SessionConfig()
    tuned = base.with_query_policy(Policy().with_retries(1))

    assert base.query_policy.retries == 3
    assert tuned.query_policy.retries == 1
    assert tuned.report_tz is base.report_tz


async def test_close_is_idempotent() -> None:
    identity = IdentityState(ALICE)
    session = Session(identity, ScriptedActor(identity))

    await session.close()
    await session.close()

    assert session.closed
