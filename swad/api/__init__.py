"""
Api — the restaurant backend as queries and mutations.

    from swad.api import Queries, Mutations

    queries = Queries(actor)
    mutations = Mutations(actor, client)

    dishes = await client.get(queries.all_dishes)
    await mutations.submit_review(5, "Great biryani")   # refetches "reviews"
"""

from __future__ import annotations

from swad.api._queries import Family, Queries
from swad.api._mutations import Mutations

__all__ = ("Family", "Queries", "Mutations")
