"""
Identity gate — "who is calling, if anyone".

Authentication itself lives elsewhere. This module only models the answer:
unresolved (still asking the provider), resolved to a principal, or resolved
to nobody.

    gate = IdentityState()
    gate.login(Principal("alice"))
    gate.current()  # Principal("alice")
    gate.logout()
    gate.current()  # None
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from swad._types import Principal

logger = logging.getLogger(__name__)

type Listener = Callable[[Principal | None], None]
type Unsubscribe = Callable[[], None]


# ═══════════════════════════════════════════════════════════════════════════════
# IdentityGate Protocol — Provider Adapters Implement This
# ═══════════════════════════════════════════════════════════════════════════════


class IdentityGate(Protocol):
    """
    Identity gate protocol.

    Until `resolved` is True, `current()` is meaningless: a None there means
    "not known yet", not "logged out".
    """

    @property
    def resolved(self) -> bool:
        """Whether the identity provider has answered."""
        ...

    def current(self) -> Principal | None:
        """Current principal, or None when anonymous."""
        ...

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Call `listener` on every change. Returns an unsubscribe callable."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# IdentityState — In-Memory Gate
# ═══════════════════════════════════════════════════════════════════════════════


class IdentityState:
    """
    Mutable identity holder implementing `IdentityGate`.

    Starts unresolved unless a principal (or `resolved=True`) is given.
    """

    def __init__(
        self,
        principal: Principal | None = None,
        *,
        resolved: bool | None = None,
    ) -> None:
        self._principal = principal
        self._resolved = resolved if resolved is not None else principal is not None
        self._listeners: list[Listener] = []

    @property
    def resolved(self) -> bool:
        return self._resolved

    def current(self) -> Principal | None:
        return self._principal

    def subscribe(self, listener: Listener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def resolve(self, principal: Principal | None) -> None:
        """Provider answered: set principal (or anonymous) and notify."""
        changed = not self._resolved or principal != self._principal
        self._principal = principal
        self._resolved = True
        if changed:
            logger.info("[IDENTITY] resolved to %s", principal or "anonymous")
            for listener in list(self._listeners):
                listener(principal)

    def login(self, principal: Principal) -> None:
        self.resolve(principal)

    def logout(self) -> None:
        self.resolve(None)


__all__ = (
    "IdentityGate",
    "IdentityState",
    "Listener",
    "Unsubscribe",
)
