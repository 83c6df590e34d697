"""Page window computation for listing endpoints."""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from sqlalchemy.orm import Query

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 12
MY_EVENTS_DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class Pagination:
    """Page metadata returned alongside a page of records."""

    current_page: int
    total_pages: int
    total_count: int
    has_next_page: bool
    has_prev_page: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'currentPage': self.current_page,
            'totalPages': self.total_pages,
            'totalCount': self.total_count,
            'hasNextPage': self.has_next_page,
            'hasPrevPage': self.has_prev_page,
        }


def compute_skip(page: int, limit: int) -> int:
    return (page - 1) * limit


def compute_pagination(total_count: int, page: int, limit: int) -> Pagination:
    """Describe ``page`` of a result set holding ``total_count`` records.

    Out-of-range pages are not an error; they simply have no records.
    A limit below 1 means a single unbounded page.
    """
    if limit >= 1:
        total_pages = math.ceil(total_count / limit)
    else:
        total_pages = 1 if total_count else 0
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_count=total_count,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


def paginate(query: Query, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT,
             count_query: Query = None) -> Tuple[List[Any], Pagination]:
    """Run ``query`` for one page and count every match.

    ``count_query`` lets callers count without eager-loading options; it
    defaults to ``query`` itself.
    """
    total_count = (count_query if count_query is not None else query).order_by(None).count()

    window = query
    if limit >= 1:
        window = window.offset(max(compute_skip(page, limit), 0)).limit(limit)
    records = window.all()

    return records, compute_pagination(total_count, page, limit)
