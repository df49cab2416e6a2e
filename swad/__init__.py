"""
swad — transactional client state for a restaurant ordering app.

    from swad import cart              # Cart engine
    from swad import query as Q        # Keyed read cache
    from swad import checkout          # Cart → order
    from swad import admin as A        # Revenue aggregation
    from swad.session import Session   # Everything, wired
"""

from swad import cart
from swad import query
from swad import remote
from swad import api
from swad import checkout
from swad import admin
from swad import selectors
from swad import lift
from swad._types import (
    Clock,
    Principal,
    DishId,
    OrderId,
    ReservationId,
)
from swad.identity import IdentityGate, IdentityState
from swad.session import Session, SessionConfig

__version__ = "0.1.0"

__all__ = (
    "cart",
    "query",
    "remote",
    "api",
    "checkout",
    "admin",
    "selectors",
    "lift",
    "Clock",
    "Principal",
    "DishId",
    "OrderId",
    "ReservationId",
    "IdentityGate",
    "IdentityState",
    "Session",
    "SessionConfig",
)
