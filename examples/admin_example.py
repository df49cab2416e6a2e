"""
Admin — revenue report recomputed from the all-orders view.

Level 4: swad.admin
Level 3: swad.query
Level 2: kungfu.Result
"""

from kungfu import Ok, Error

from swad import IdentityState
from swad.remote import OrderStatus, PaymentMethod
from examples._infra import banner, run, make_session, rupees, ALICE, OWNER


async def main() -> None:
    banner("Admin: Orders → Revenue Report")

    identity = IdentityState(ALICE)
    session, _ = make_session(identity, latency=0.0)
    async with session:
        match await session.client.get(session.queries.all_dishes):
            case Ok(r):
                menu = r.value
            case Error(e):
                print(f"menu unavailable: {e}")
                return

        print("\n1. Alice places three orders:")
        placed = []
        for dish in menu[:3]:
            session.cart.add(dish)
            match await session.checkout.submit(PaymentMethod.CASH):
                case Ok(receipt):
                    placed.append(receipt.order_id)
                    print(f"   {receipt.order_id}: {dish.name} {rupees(receipt.total_amount)}")
                case Error(e):
                    print(f"   failed: {e}")

        print("\n2. Owner marks the first one delivered:")
        identity.login(OWNER)
        match await session.admin.update_order_status(placed[0], OrderStatus.DELIVERED):
            case Ok(_):
                print(f"   {placed[0]} → Delivered")
            case Error(e):
                print(f"   failed: {e}")

        print("\n3. Report:")
        match await session.admin.report():
            case Ok(report):
                print(f"   revenue={rupees(report.total_revenue)} orders={report.order_count}")
                print(f"   delivered={report.delivered_count} pending={report.pending_count}")
                for bucket in report.by_date:
                    print(f"   {bucket.day}: {bucket.count} order(s), {rupees(bucket.revenue)}")
            case Error(e):
                print(f"   error: {e}")

    print("\nDone!")


if __name__ == "__main__":
    run(main)
