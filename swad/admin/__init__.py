"""
Admin — revenue aggregation and the admin dashboard.

    from swad import admin as A

    report = A.revenue_report(orders, tz=ZoneInfo("Asia/Kolkata"))
    for bucket in report.by_date:
        print(bucket.day, bucket.count, bucket.revenue)
"""

from __future__ import annotations

from swad.admin._report import (
    total_revenue,
    count_status,
    DayBucket,
    orders_by_date,
    RevenueReport,
    revenue_report,
)
from swad.admin._dashboard import AdminDashboard

__all__ = (
    "total_revenue",
    "count_status",
    "DayBucket",
    "orders_by_date",
    "RevenueReport",
    "revenue_report",
    "AdminDashboard",
)
