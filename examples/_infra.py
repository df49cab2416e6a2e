"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine

from swad import IdentityState, Principal, Session, SessionConfig
from swad.query import Policy
from swad.remote import MemoryActor

ALICE = Principal("alice")
OWNER = Principal("owner")


# Backend
def make_session(
    identity: IdentityState,
    *,
    latency: float = 0.05,
) -> tuple[Session, MemoryActor]:
    actor = MemoryActor(identity, admins={OWNER}, latency=latency)
    actor.seed()
    config = SessionConfig().with_query_policy(
        Policy().with_retries(1).with_retry_delay(seconds=0.1)
    )
    return Session(identity, actor, config=config), actor


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def rupees(amount: int) -> str:
    return f"₹{amount:,}"


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s %(message)s")
    asyncio.run(main())
