"""
Revenue report — pure aggregation over the all-orders view.

Recomputed from whatever the cache holds; nothing here is stored.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, tzinfo, timezone

from swad.remote import Order, OrderStatus

# ═══════════════════════════════════════════════════════════════════════════════
# Scalars
# ═══════════════════════════════════════════════════════════════════════════════


def total_revenue(orders: Iterable[Order]) -> int:
    """Sum of order totals, whatever their status."""
    return sum(o.total_amount for o in orders)


def count_status(orders: Iterable[Order], status: OrderStatus | str) -> int:
    """Orders whose status string equals `status` exactly."""
    wanted = str(status)
    return sum(1 for o in orders if o.status == wanted)


# ═══════════════════════════════════════════════════════════════════════════════
# Day Buckets
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class DayBucket:
    day: date
    orders: tuple[Order, ...]

    @property
    def revenue(self) -> int:
        return total_revenue(self.orders)

    @property
    def count(self) -> int:
        return len(self.orders)


def orders_by_date(orders: Iterable[Order], tz: tzinfo = timezone.utc) -> list[DayBucket]:
    """
    Group orders by calendar day of `created_at` in `tz`, most recent first.

    Within a bucket orders keep their input order.
    """
    days: dict[date, list[Order]] = {}
    for order in orders:
        day = order.created_at.astimezone(tz).date()
        days.setdefault(day, []).append(order)
    return [
        DayBucket(day=day, orders=tuple(days[day]))
        for day in sorted(days, reverse=True)
    ]


# ═══════════════════════════════════════════════════════════════════════════════
# Report
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RevenueReport:
    total_revenue: int
    order_count: int
    delivered_count: int
    pending_count: int
    by_date: tuple[DayBucket, ...]


def revenue_report(orders: Iterable[Order], tz: tzinfo = timezone.utc) -> RevenueReport:
    """
    Everything the admin revenue tab shows.

    Orders with a status this client does not know count in neither
    delivered nor pending, but still count in totals and buckets.
    """
    items = list(orders)
    return RevenueReport(
        total_revenue=total_revenue(items),
        order_count=len(items),
        delivered_count=count_status(items, OrderStatus.DELIVERED),
        pending_count=count_status(items, OrderStatus.PENDING),
        by_date=tuple(orders_by_date(items, tz)),
    )


__all__ = (
    "total_revenue",
    "count_status",
    "DayBucket",
    "orders_by_date",
    "RevenueReport",
    "revenue_report",
)
