"""
Selectors — pure derivations views compute from cached data.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from kungfu import Option, Some

from swad.identity import IdentityGate
from swad.query import QuerySnapshot
from swad.remote import Dish, Review, UserProfile

ALL_CATEGORIES = "All"


class VegFilter(Enum):
    ALL = "all"
    VEG = "veg"
    NON_VEG = "nonveg"


def filter_dishes(
    dishes: Iterable[Dish],
    category: str = ALL_CATEGORIES,
    veg: VegFilter = VegFilter.ALL,
) -> list[Dish]:
    """
    Menu view: one category (or "All"), then the veg toggle.

    Example:
        filter_dishes(menu, "Starters", VegFilter.VEG)
    """
    selected = [d for d in dishes if category == ALL_CATEGORIES or d.category == category]
    match veg:
        case VegFilter.VEG:
            return [d for d in selected if d.is_veg]
        case VegFilter.NON_VEG:
            return [d for d in selected if not d.is_veg]
        case _:
            return selected


def categories(dishes: Iterable[Dish]) -> list[str]:
    """Distinct categories in first-seen order, "All" first."""
    seen = dict.fromkeys(d.category for d in dishes)
    return [ALL_CATEGORIES, *seen]


def average_rating(reviews: Iterable[Review]) -> float:
    ratings = [r.rating for r in reviews]
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)


def needs_profile_setup(
    identity: IdentityGate,
    profile: QuerySnapshot[Option[UserProfile]],
) -> bool:
    """
    True only for a logged-in caller whose profile lookup has completed and
    answered "no profile". Loading, failed, or gated lookups never prompt.
    """
    if identity.current() is None or profile.loading or not profile.fetched:
        return False
    match profile.data:
        case Some(Some(_)):
            return False
        case Some(_):
            return True
        case _:
            return False


__all__ = (
    "ALL_CATEGORIES",
    "VegFilter",
    "filter_dishes",
    "categories",
    "average_rating",
    "needs_profile_setup",
)
