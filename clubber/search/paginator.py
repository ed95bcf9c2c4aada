"""
SearchPaginator: filter, sort and slice a full match collection.

Pure and synchronous: every call works on its own list copies, so concurrent
requests can share the input collection safely.

Pipeline (order matters for total_count):
    clamp -> status filter -> term filter -> count -> stable sort -> slice
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Generic, Iterable, List, Optional, Protocol, TypeVar

from clubber.models import MatchStatus

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
DEFAULT_SORT_FIELD = "date"


class Searchable(Protocol):
    title: str
    competition: str
    date: datetime
    status: MatchStatus


T = TypeVar("T")
U = TypeVar("U")
M = TypeVar("M", bound=Searchable)


def clamp_page(page: Optional[int]) -> int:
    if page is None:
        return 1
    return max(1, page)


def clamp_page_size(page_size: Optional[int]) -> int:
    if page_size is None:
        return DEFAULT_PAGE_SIZE
    return min(max(page_size, 1), MAX_PAGE_SIZE)


SORT_FIELDS: dict[str, Callable[[Searchable], object]] = {
    "title": lambda m: m.title.casefold(),
    "competition": lambda m: m.competition.casefold(),
    "date": lambda m: m.date,
    "status": lambda m: MatchStatus(m.status).sort_rank,
}


@dataclass
class SearchCriteria:
    """
    Per-request search parameters.

    Out-of-range page/page_size are corrected on construction, never rejected.
    Unknown sort fields fall back to date.
    """

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    term: Optional[str] = None
    status: Optional[MatchStatus] = None
    sort_by: str = DEFAULT_SORT_FIELD
    sort_descending: bool = False

    def __post_init__(self):
        self.page = clamp_page(self.page)
        self.page_size = clamp_page_size(self.page_size)
        sort_key = (self.sort_by or "").strip().lower()
        self.sort_by = sort_key if sort_key in SORT_FIELDS else DEFAULT_SORT_FIELD
        if self.term is not None:
            self.term = self.term.strip() or None

    @classmethod
    def from_query(
        cls,
        competition: Optional[str] = None,
        status: Optional[str] = None,
        page: Optional[int] = 1,
        page_size: Optional[int] = DEFAULT_PAGE_SIZE,
        sort_by: Optional[str] = DEFAULT_SORT_FIELD,
        sort_descending: bool = False,
    ) -> "SearchCriteria":
        """Build criteria from raw query parameters (status names are case-insensitive)."""
        return cls(
            page=clamp_page(page),
            page_size=clamp_page_size(page_size),
            term=competition,
            status=MatchStatus.parse(status),
            sort_by=sort_by or DEFAULT_SORT_FIELD,
            sort_descending=sort_descending,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class PageResult(Generic[T]):
    """One page of results plus pre-pagination total."""

    items: List[T] = field(default_factory=list)
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total_count: int = 0

    @property
    def total_pages(self) -> int:
        if self.total_count == 0:
            return 0
        return -(-self.total_count // self.page_size)

    def map(self, fn: Callable[[T], U]) -> "PageResult[U]":
        """Same envelope, items converted (e.g. table rows -> response models)."""
        return PageResult(
            items=[fn(item) for item in self.items],
            page=self.page,
            page_size=self.page_size,
            total_count=self.total_count,
        )


def _matches_term(match: Searchable, needle: str) -> bool:
    return needle in match.title.casefold() or needle in match.competition.casefold()


def paginate(items: Iterable[T], page: Optional[int], page_size: Optional[int]) -> PageResult[T]:
    """Clamp page/page_size and slice an already-ordered collection."""
    page = clamp_page(page)
    page_size = clamp_page_size(page_size)
    rows = list(items)
    start = (page - 1) * page_size
    return PageResult(
        items=rows[start:start + page_size],
        page=page,
        page_size=page_size,
        total_count=len(rows),
    )


def execute(all_matches: Iterable[M], criteria: SearchCriteria) -> PageResult[M]:
    """
    Filter, sort and page `all_matches` according to `criteria`.

    - status filter is exact
    - term is a case-insensitive substring of title OR competition
    - total_count is the filtered size, independent of page/page_size
    - sort is stable, so ties keep input order
    - a page past the end yields no items but keeps total_count
    """
    filtered = list(all_matches)

    if criteria.status is not None:
        filtered = [m for m in filtered if m.status == criteria.status]

    if criteria.term:
        needle = criteria.term.casefold()
        filtered = [m for m in filtered if _matches_term(m, needle)]

    sort_key = SORT_FIELDS.get(criteria.sort_by, SORT_FIELDS[DEFAULT_SORT_FIELD])
    ordered = sorted(filtered, key=sort_key, reverse=criteria.sort_descending)

    return paginate(ordered, criteria.page, criteria.page_size)
