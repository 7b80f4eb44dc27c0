"""vi-style incremental search over the subnet list and the table.

Matching is a literal, case-sensitive substring test.  An empty query
finds no list item but matches every table row.  Searches never
wrap around: a miss past the end (or before the start) is reported
even when the pattern occurs elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence


@dataclass
class SearchResult:
    found: bool
    index: Optional[int]
    message: str


def _hit(query: str, index: int, forward: bool) -> SearchResult:
    marker = "/" if forward else "?"
    return SearchResult(True, index, f"{marker}{query}")


def _miss(query: str) -> SearchResult:
    return SearchResult(False, None, f'Pattern not found "{query}"')


def find_items(items: Sequence[str], query: str) -> list[int]:
    """Indices of all items containing ``query``, in order.

    An empty query matches nothing.
    """
    if not query:
        return []
    return [i for i, text in enumerate(items) if query in text]


def search_list_forward(items: Sequence[str], query: str, current: int) -> SearchResult:
    for i in find_items(items, query):
        if i > current:
            return _hit(query, i, forward=True)
    return _miss(query)


def search_list_backward(items: Sequence[str], query: str, current: int) -> SearchResult:
    # Steps back from the first match at or after ``current``; when every
    # match lies before ``current`` nothing is selected.
    matches = find_items(items, query)
    for j, i in enumerate(matches):
        if i >= current and j > 0:
            previous = matches[j - 1]
            if previous == current:
                return _miss(query)
            return _hit(query, previous, forward=False)
    return _miss(query)


def _row_matches(row: Iterable[str], query: str) -> bool:
    return any(query in cell for cell in row)


def search_table_forward(
    rows: Sequence[Sequence[str]], query: str, current: int,
) -> SearchResult:
    """First row below ``current`` with a cell containing ``query``.

    ``current`` is -1 when no row is selected.
    """
    for i in range(current + 1, len(rows)):
        if _row_matches(rows[i], query):
            return _hit(query, i, forward=True)
    return _miss(query)


def search_table_backward(
    rows: Sequence[Sequence[str]], query: str, current: int,
) -> SearchResult:
    """Nearest row above ``current`` with a cell containing ``query``."""
    for i in range(min(current, len(rows)) - 1, -1, -1):
        if _row_matches(rows[i], query):
            return _hit(query, i, forward=False)
    return _miss(query)
