"""
Admin dashboard — report and admin writes over the query client.
"""

from __future__ import annotations

from datetime import tzinfo, timezone

from kungfu import LazyCoroResult

from swad._types import OrderId
from swad.api import Queries, Mutations
from swad.query import QueryClient, QueryError, QuerySnapshot
from swad.remote import Order, OrderStatus, RemoteError
from swad.admin._report import RevenueReport, revenue_report


class AdminDashboard:
    """
    Example:
        dashboard = AdminDashboard(client, queries, mutations)
        await dashboard.update_order_status(OrderId(3), OrderStatus.DELIVERED)
        match await dashboard.report():
            case Ok(report):
                print(report.delivered_count)
            case Error(e):
                print(e.kind)
    """

    def __init__(
        self,
        client: QueryClient,
        queries: Queries,
        mutations: Mutations,
        *,
        tz: tzinfo = timezone.utc,
    ) -> None:
        self._client = client
        self._queries = queries
        self._mutations = mutations
        self._tz = tz

    # ── Reads ─────────────────────────────────────────────────────────────────

    def orders(self) -> LazyCoroResult[list[Order], QueryError]:
        return self._client.get(self._queries.all_orders).map(lambda r: r.value)

    def report(self, tz: tzinfo | None = None) -> LazyCoroResult[RevenueReport, QueryError]:
        zone = tz if tz is not None else self._tz
        return self.orders().map(lambda orders: revenue_report(orders, zone))

    def is_admin(self) -> LazyCoroResult[bool, QueryError]:
        return self._client.get(self._queries.is_admin).map(lambda r: r.value)

    def orders_snapshot(self) -> QuerySnapshot[list[Order]]:
        return self._client.snapshot(self._queries.all_orders)

    # ── Writes ────────────────────────────────────────────────────────────────

    def update_order_status(
        self, order_id: OrderId, status: OrderStatus | str
    ) -> LazyCoroResult[None, RemoteError]:
        return self._mutations.update_order_status(order_id, status)

    def add_coupon(self, code: str, discount_percent: int) -> LazyCoroResult[None, RemoteError]:
        return self._mutations.add_coupon(code, discount_percent)


__all__ = ("AdminDashboard",)
