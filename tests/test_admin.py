"""Admin aggregation and dashboard."""

from datetime import datetime, timedelta, timezone

from conftest import ALICE, OWNER, err, ok
from swad import IdentityState, OrderId, Session
from swad.admin import count_status, orders_by_date, revenue_report, total_revenue
from swad.remote import Order, OrderItem, OrderStatus, PaymentMethod, RemoteErrorKind

IST = timezone(timedelta(hours=5, minutes=30))


def _order(order_id: int, total: int, status: str, created_at: datetime) -> Order:
    return Order(
        id=OrderId(order_id),
        owner=ALICE,
        items=(OrderItem("Dal Makhani", 1, total),),
        total_amount=total,
        payment_method="UPI",
        status=status,
        created_at=created_at,
    )


ORDERS = [
    _order(1, 500, "Pending", datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)),
    _order(2, 300, "Delivered", datetime(2024, 3, 2, 9, 0, tzinfo=timezone.utc)),
    _order(3, 200, "Delivered", datetime(2024, 3, 1, 15, 0, tzinfo=timezone.utc)),
    _order(4, 100, "OutForDelivery", datetime(2024, 3, 2, 11, 0, tzinfo=timezone.utc)),
]


def test_total_revenue_ignores_status() -> None:
    assert total_revenue(ORDERS) == 1100
    assert total_revenue([]) == 0


def test_count_status_matches_exact_strings() -> None:
    assert count_status(ORDERS, OrderStatus.DELIVERED) == 2
    assert count_status(ORDERS, "Pending") == 1
    assert count_status(ORDERS, OrderStatus.CANCELLED) == 0


def test_orders_by_date_most_recent_first() -> None:
    buckets = orders_by_date(ORDERS)

    assert [b.day.isoformat() for b in buckets] == ["2024-03-02", "2024-03-01"]
    assert [b.revenue for b in buckets] == [400, 700]
    assert [[o.id.value for o in b.orders] for b in buckets] == [[2, 4], [1, 3]]


def test_orders_by_date_uses_the_given_timezone() -> None:
    late = _order(5, 250, "Pending", datetime(2024, 3, 1, 20, 0, tzinfo=timezone.utc))

    assert orders_by_date([late])[0].day.isoformat() == "2024-03-01"
    assert orders_by_date([late], IST)[0].day.isoformat() == "2024-03-02"


def test_report_skips_unknown_status_in_counters() -> None:
    report = revenue_report(ORDERS)

    assert report.total_revenue == 1100
    assert report.order_count == 4
    assert report.delivered_count == 2
    assert report.pending_count == 1
    assert len(report.by_date) == 2


async def _place_order(session: Session, identity: IdentityState) -> OrderId:
    identity.login(ALICE)
    dishes = ok(await session.client.get(session.queries.all_dishes)).value
    session.cart.add(dishes[0])
    return ok(await session.checkout.submit(PaymentMethod.UPI)).order_id


async def test_marking_delivered_updates_report(session: Session, identity: IdentityState) -> None:
    order_id = await _place_order(session, identity)
    identity.login(OWNER)
    before = ok(await session.admin.report())
    assert before.pending_count == 1
    assert before.delivered_count == 0

    ok(await session.admin.update_order_status(order_id, OrderStatus.DELIVERED))
    after = ok(await session.admin.report())

    assert after.delivered_count == before.delivered_count + 1
    assert after.pending_count == 0
    assert after.total_revenue == before.total_revenue


async def test_non_admin_cannot_update_status(session: Session, identity: IdentityState) -> None:
    order_id = await _place_order(session, identity)

    failure = err(await session.admin.update_order_status(order_id, OrderStatus.CONFIRMED))

    assert failure.kind is RemoteErrorKind.UNAUTHORIZED


async def test_added_coupon_is_stored_upper_cased(session: Session, identity: IdentityState) -> None:
    identity.login(OWNER)

    ok(await session.admin.add_coupon("feast25", 25))
    identity.login(ALICE)
    dishes = ok(await session.client.get(session.queries.all_dishes)).value
    session.cart.add(dishes[0])
    ok(await session.apply_coupon("Feast25"))

    assert session.cart.coupon_code == "FEAST25"
    assert session.cart.discount_percent == 25
