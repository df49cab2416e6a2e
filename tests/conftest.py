"""Shared fixtures: identity, scripted in-memory backend, session."""

import asyncio
from collections.abc import AsyncIterator

import pytest
from kungfu import Error, Ok, Some

from swad import IdentityState, Principal, Session, SessionConfig
from swad.query import Policy
from swad.remote import ActorFailure, MemoryActor, RemoteErrorKind

ALICE = Principal("alice")
BOB = Principal("bob")
OWNER = Principal("owner")


class ScriptedActor(MemoryActor):
    """MemoryActor that can hold a call on an event or fail it a few times."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.failures: dict[str, int] = {}
        self.holds: dict[str, asyncio.Event] = {}

    async def _enter(self, name: str) -> None:
        await super()._enter(name)
        hold = self.holds.get(name)
        if hold is not None:
            await hold.wait()
        if self.failures.get(name, 0) > 0:
            self.failures[name] -= 1
            raise ActorFailure(RemoteErrorKind.TRANSPORT, f"{name} timed out")


async def spin(times: int = 5) -> None:
    """Let scheduled tasks run up to their next real suspension point."""
    for _ in range(times):
        await asyncio.sleep(0)


@pytest.fixture
def identity() -> IdentityState:
    return IdentityState(ALICE)


@pytest.fixture
def actor(identity: IdentityState) -> ScriptedActor:
    backend = ScriptedActor(identity, admins={OWNER})
    backend.seed()
    return backend


@pytest.fixture
def config() -> SessionConfig:
    return SessionConfig().with_query_policy(Policy().without_retry())


@pytest.fixture
async def session(
    identity: IdentityState,
    actor: ScriptedActor,
    config: SessionConfig,
) -> AsyncIterator[Session]:
    async with Session(identity, actor, config=config) as s:
        yield s


def ok(result):
    """Unwrap Ok, failing the test on Error."""
    match result:
        case Ok(value):
            return value
        case Error(error):
            pytest.fail(f"expected Ok, got Error({error!r})")


def err(result):
    """Unwrap Error, failing the test on Ok."""
    match result:
        case Error(error):
            return error
        case Ok(value):
            pytest.fail(f"expected Error, got Ok({value!r})")


def some(option):
    """Unwrap Some, failing the test on Nothing."""
    match option:
        case Some(value):
            return value
        case _:
            pytest.fail(f"expected Some, got {option!r}")


def is_nothing(option) -> bool:
    return not isinstance(option, Some)
