"""Menu filter, rating average, profile-setup gate."""

from datetime import datetime, timezone

from conftest import ALICE, ok
from swad import DishId, IdentityState, Session
from swad.remote import Dish, Review, UserProfile
from swad.selectors import (
    VegFilter,
    average_rating,
    categories,
    filter_dishes,
    needs_profile_setup,
)

MENU = [
    Dish(DishId(1), "Paneer Tikka", 280, "Starters", is_veg=True),
    Dish(DishId(2), "Chicken 65", 320, "Starters"),
    Dish(DishId(3), "Dal Makhani", 240, "Main Course", is_veg=True),
    Dish(DishId(4), "Butter Chicken", 380, "Main Course"),
]


def _names(dishes: list[Dish]) -> list[str]:
    return [d.name for d in dishes]


def test_filter_by_category_and_veg() -> None:
    assert _names(filter_dishes(MENU)) == _names(MENU)
    assert _names(filter_dishes(MENU, "Starters")) == ["Paneer Tikka", "Chicken 65"]
    assert _names(filter_dishes(MENU, veg=VegFilter.VEG)) == ["Paneer Tikka", "Dal Makhani"]
    assert _names(filter_dishes(MENU, "Main Course", VegFilter.NON_VEG)) == ["Butter Chicken"]
    assert filter_dishes(MENU, "Desserts") == []


def test_categories_keep_menu_order() -> None:
    assert categories(MENU) == ["All", "Starters", "Main Course"]


def test_average_rating() -> None:
    now = datetime(2024, 3, 1, tzinfo=timezone.utc)
    reviews = [Review(ALICE, r, "", now) for r in (5, 4, 3)]

    assert average_rating(reviews) == 4.0
    assert average_rating([]) == 0.0


async def test_profile_setup_prompt(session: Session, identity: IdentityState) -> None:
    profile = session.queries.caller_profile
    assert not needs_profile_setup(identity, session.client.snapshot(profile))

    await session.client.get(profile)
    assert needs_profile_setup(identity, session.client.snapshot(profile))

    ok(await session.mutations.save_profile(UserProfile("Alice", "12 MG Road")))
    await session.client.get(profile)
    assert not needs_profile_setup(identity, session.client.snapshot(profile))

    identity.logout()
    assert not needs_profile_setup(identity, session.client.snapshot(profile))


async def test_no_prompt_when_profile_lookup_failed(session: Session, actor, identity: IdentityState) -> None:
    actor.failures["get_caller_user_profile"] = 1

    await session.client.get(session.queries.caller_profile)

    assert not needs_profile_setup(identity, session.client.snapshot(session.queries.caller_profile))
