"""Candidate filtering.

Matches if every space-separated query term appears somewhere in the
candidate (case-insensitive substring, any order). Unlike fuzzy ranking,
the candidate order is never changed: filtering only removes.
"""

from __future__ import annotations

from typing import Callable, Sequence

FilterTextFn = Callable[[str], str]


def split_terms(query: str) -> list[str]:
    """Lower-case *query* and split it on single spaces.

    Consecutive spaces produce empty terms, which match everything.
    """
    return query.lower().split(" ")


def matches_all(text: str, terms: Sequence[str]) -> bool:
    return all(term in text for term in terms)


def filter_items(
    items: Sequence[str],
    query: str,
    get_text: FilterTextFn | None = None,
) -> list[str]:
    """Return the items containing every term of *query*, in their original order.

    *get_text* extracts the part of an item to match against, e.g. the file
    name field of a directory listing row.
    """
    if not query:
        return list(items)

    terms = split_terms(query)
    results: list[str] = []
    for item in items:
        text = get_text(item) if get_text is not None else item
        if matches_all(text.lower(), terms):
            results.append(item)
    return results


class Filter:
    """Reusable filter bound to an optional text extraction function."""

    def __init__(self, get_text: FilterTextFn | None = None) -> None:
        self._get_text = get_text

    def __call__(self, items: Sequence[str], query: str) -> list[str]:
        return filter_items(items, query, self._get_text)
