"""
In-memory filter/sort/paginate over match collections.

Usage:
    from clubber.search import SearchCriteria, execute

    criteria = SearchCriteria(term="cup", status=MatchStatus.LIVE, page=2)
    page = execute(all_matches, criteria)
"""

from clubber.search.paginator import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PageResult,
    SearchCriteria,
    SORT_FIELDS,
    clamp_page,
    clamp_page_size,
    execute,
    paginate,
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "PageResult",
    "SearchCriteria",
    "SORT_FIELDS",
    "clamp_page",
    "clamp_page_size",
    "execute",
    "paginate",
]
