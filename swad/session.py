"""
Session — one explicitly owned client state.

Everything a running client holds (cart, cache, checkout) lives on a
Session; there are no module-level singletons. Two sessions never share
state.

    async with Session(identity, actor) as session:
        session.cart.add(dish)
        await session.apply_coupon("swad10")
        result = await session.checkout.submit(PaymentMethod.UPI)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import tzinfo, timezone

from kungfu import LazyCoroResult, Option

from swad._types import Clock, utcnow
from swad.identity import IdentityGate
from swad.remote import Actor, Coupon, RemoteError
from swad.cart import Cart
from swad.query import Policy, QueryClient
from swad.api import Queries, Mutations
from swad.checkout import Checkout, apply_coupon_code
from swad.admin import AdminDashboard

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Config
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """
    Session-wide settings.

    Example:
        config = (
            SessionConfig()
            .with_query_policy(Policy().with_retries(1))
            .with_report_tz(ZoneInfo("Asia/Kolkata"))
        )
    """

    query_policy: Policy = field(default_factory=Policy)
    report_tz: tzinfo = timezone.utc
    clock: Clock = utcnow

    def with_query_policy(self, policy: Policy) -> SessionConfig:
        return replace(self, query_policy=policy)

    def with_report_tz(self, tz: tzinfo) -> SessionConfig:
        return replace(self, report_tz=tz)

    def with_clock(self, clock: Clock) -> SessionConfig:
        return replace(self, clock=clock)


# ═══════════════════════════════════════════════════════════════════════════════
# Session
# ═══════════════════════════════════════════════════════════════════════════════


class Session:
    """Wires identity, actor, cart, cache, checkout and admin together."""

    def __init__(
        self,
        identity: IdentityGate,
        actor: Actor,
        *,
        config: SessionConfig | None = None,
    ) -> None:
        self.config = config if config is not None else SessionConfig()
        self.identity = identity
        self.actor = actor
        self.cart = Cart()
        self.client = QueryClient(identity, clock=self.config.clock)
        self.queries = Queries(actor, policy=self.config.query_policy)
        self.mutations = Mutations(actor, self.client)
        self.checkout = Checkout(self.cart, actor, self.client, identity)
        self.admin = AdminDashboard(
            self.client, self.queries, self.mutations, tz=self.config.report_tz
        )
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def apply_coupon(self, code: str) -> LazyCoroResult[Option[Coupon], RemoteError]:
        return apply_coupon_code(self.cart, self.mutations, code)

    async def close(self) -> None:
        """Cancel background fetches, drop the cache, empty the cart."""
        if self._closed:
            return
        self._closed = True
        await self.client.close()
        self.cart.clear()
        logger.info("[SESSION] closed")

    async def __aenter__(self) -> Session:
        logger.info("[SESSION] opened")
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


__all__ = ("SessionConfig", "Session")
