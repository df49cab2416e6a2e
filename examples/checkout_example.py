"""
Checkout — cart snapshot to exactly one order.

Key concepts:
- Preconditions (caller, non-empty cart, no attempt in flight) fail fast
- The snapshot is taken at call time; edits made meanwhile never reach the order
- Success clears the cart, then invalidates "orders"; failure touches nothing

Level 4: swad.checkout
Level 3: swad.query
Level 2: kungfu.Result
"""

import asyncio

from kungfu import Ok, Error, Some

from swad import IdentityState
from swad.remote import PaymentMethod
from examples._infra import banner, run, make_session, rupees, ALICE


async def main() -> None:
    banner("Checkout: Snapshot → Order → Invalidate")

    identity = IdentityState(ALICE)
    session, actor = make_session(identity)
    async with session:
        dishes = {}
        match await session.client.get(session.queries.all_dishes):
            case Ok(r):
                dishes = {d.name: d for d in r.value}
            case Error(e):
                print(f"menu unavailable: {e}")
                return

        orders = session.client.subscribe(session.queries.own_orders)

        print("\n1. Build a cart and apply a coupon:")
        session.cart.add(dishes["Paneer Tikka"])
        session.cart.add(dishes["Paneer Tikka"])
        session.cart.add(dishes["Butter Chicken"])
        match await session.apply_coupon(" swad10 "):
            case Ok(Some(coupon)):
                print(f"   {coupon.code}: {coupon.discount_percent}% off")
            case Ok(_):
                print("   invalid coupon")
            case Error(e):
                print(f"   lookup failed: {e}")
        cart = session.cart
        print(f"   subtotal={rupees(cart.subtotal)} discount={rupees(cart.discount_amount)} total={rupees(cart.total)}")

        print("\n2. Submit twice at once — the second is rejected:")
        first = asyncio.create_task(session.checkout.submit(PaymentMethod.UPI))
        await asyncio.sleep(0.01)
        match await session.checkout.submit(PaymentMethod.UPI):
            case Error(e):
                print(f"   second submit: {e.kind.name}")
            case Ok(_):
                print("   second submit went through?!")

        print("\n3. First submit completes:")
        match await first:
            case Ok(receipt):
                print(f"   order {receipt.order_id} for {rupees(receipt.total_amount)}")
                print(f"   cart empty={session.cart.is_empty}, entries refreshed={receipt.invalidated}")
            case Error(e):
                print(f"   failed: {e}")

        match orders.snapshot().data:
            case Some(value):
                print(f"   my orders now: {[str(o.id) for o in value]}")
            case _:
                print("   my orders not loaded")
        orders.close()

        print("\n4. Empty cart is rejected without calling the backend:")
        before = actor.calls.count("place_order")
        match await session.checkout.submit(PaymentMethod.CASH):
            case Error(e):
                print(f"   {e.kind.name}: {e}, remote calls unchanged={actor.calls.count('place_order') == before}")
            case Ok(_):
                print("   unexpected success")

    print("\nDone!")


if __name__ == "__main__":
    run(main)
