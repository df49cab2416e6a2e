"""
Query — keyed reads, identity gating, family invalidation.

Key concepts:
- One entry per key; parameters and (for scoped queries) the caller are in it
- Scoped queries wait for identity; authenticated ones also need a caller
- Mutations never write the cache: they invalidate a family, views refetch

Level 4: swad.query
Level 3: combinators.lift
Level 2: kungfu.Result
"""

from kungfu import Ok, Error, Some

from swad import IdentityState
from swad.remote import DishDraft
from swad.selectors import VegFilter, filter_dishes
from examples._infra import banner, run, make_session, ALICE, OWNER


async def main() -> None:
    banner("Query: Gating, Caching, Invalidation")

    identity = IdentityState()  # auth provider has not answered yet
    session, _ = make_session(identity)
    async with session:
        client, queries = session.client, session.queries

        print("\n1. Identity unresolved — menu loads, admin flag is gated:")
        match await client.get(queries.all_dishes):
            case Ok(r):
                veg = filter_dishes(r.value, veg=VegFilter.VEG)
                print(f"   {len(r.value)} dishes ({len(veg)} veg), hit={r.hit}")
            case Error(e):
                print(f"   error: {e}")
        match await client.get(queries.is_admin):
            case Ok(r):
                print(f"   admin={r.value}")
            case Error(e):
                print(f"   admin query: {e.kind.name} ({e})")

        print("\n2. Subscribe to own orders, then log in:")
        orders = client.subscribe(queries.own_orders)
        print(f"   status before login: {orders.snapshot().status.name}")
        identity.resolve(ALICE)
        await client.settle()
        snap = orders.snapshot()
        print(f"   status after login:  {snap.status.name}, key={snap.key}")

        print("\n3. Second read of the menu is a cache hit:")
        match await client.get(queries.all_dishes):
            case Ok(r):
                print(f"   hit={r.hit}")
            case Error(e):
                print(f"   error: {e}")

        print("\n4. Admin adds a dish → every 'dishes' entry is invalidated:")
        identity.login(OWNER)
        await session.mutations.add_dish(DishDraft("Rasmalai", 150, "Desserts", is_veg=True))
        print(f"   menu stale={client.snapshot(queries.all_dishes).stale}")
        match await client.get(queries.all_dishes):
            case Ok(r):
                print(f"   refetched: {len(r.value)} dishes, hit={r.hit}")
            case Error(e):
                print(f"   error: {e}")

        print("\n5. The subscription followed the identity switch:")
        await client.settle()
        match orders.snapshot().data:
            case Some(value):
                print(f"   key={orders.key}, {len(value)} order(s)")
            case _:
                print(f"   key={orders.key}, no data yet")
        orders.close()

    print("\nDone!")


if __name__ == "__main__":
    run(main)
