"""Translate listing filters into SQLAlchemy criteria and ordering.

The filter vocabulary mirrors the query string of ``GET /api/events``:

    category  exact category, ignored when empty or "all"
    search    case-insensitive substring of title OR description
    date      calendar day (UTC) the event falls on
    location  case-insensitive substring of the address
    price     "free" (price == 0) or "paid" (price > 0); anything else is ignored
    sortBy    date | date-desc | price | price-desc | created

Every query built here is restricted to active events.
"""

from dataclasses import dataclass, fields
from datetime import date, datetime, time, timedelta
from typing import Any, List, Mapping, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session
from sqlalchemy.sql.elements import ColumnElement

from ..models import Event
from ..models.base import to_utc_naive
from .errors import ValidationError

ALL = 'all'
PRICE_FREE = 'free'
PRICE_PAID = 'paid'
DEFAULT_SORT = 'date'

SORT_OPTIONS = {
    'date': (Event.date.asc(),),
    'date-desc': (Event.date.desc(),),
    'price': (Event.price.asc(),),
    'price-desc': (Event.price.desc(),),
    'created': (Event.created_at.desc(),),
}

LIKE_ESCAPE = '\\'


@dataclass(frozen=True)
class EventFilters:
    """Flat filter set for the event listing."""

    category: Optional[str] = None
    search: Optional[str] = None
    date: Optional[str] = None
    location: Optional[str] = None
    price: Optional[str] = None
    sort_by: Optional[str] = None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "EventFilters":
        """Build filters from query parameters (camelCase ``sortBy`` accepted)."""
        values = {}
        for field in fields(cls):
            value = params.get(field.name)
            if value is None and field.name == 'sort_by':
                value = params.get('sortBy')
            values[field.name] = value
        return cls(**values)


def _is_set(value: Optional[str]) -> bool:
    """A filter value constrains the query only when non-empty and not "all"."""
    return value is not None and value.strip() != '' and value != ALL


def _contains_pattern(value: str) -> str:
    escaped = (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace('%', LIKE_ESCAPE + '%')
        .replace('_', LIKE_ESCAPE + '_')
    )
    return f"%{escaped}%"


def parse_day(value: str) -> datetime:
    """Return the UTC midnight starting the calendar day named by ``value``.

    Accepts ``YYYY-MM-DD`` or any ISO 8601 timestamp.

    Raises:
        ValidationError: If the value is not a recognizable date.
    """
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(text), time.min)
        except ValueError:
            raise ValidationError.for_field('date', 'Please provide a valid date')
    parsed = to_utc_naive(parsed)
    return datetime.combine(parsed.date(), time.min)


def build_conditions(filters: Optional[EventFilters] = None) -> List[ColumnElement]:
    """Return the AND-ed criteria selecting events that match ``filters``."""
    filters = filters or EventFilters()
    conditions: List[ColumnElement] = [Event.is_active.is_(True)]

    if _is_set(filters.category):
        conditions.append(Event.category == filters.category)

    if _is_set(filters.search):
        pattern = _contains_pattern(filters.search)
        conditions.append(or_(
            Event.title.ilike(pattern, escape=LIKE_ESCAPE),
            Event.description.ilike(pattern, escape=LIKE_ESCAPE),
        ))

    if _is_set(filters.date):
        start = parse_day(filters.date)
        conditions.append(Event.date >= start)
        conditions.append(Event.date < start + timedelta(days=1))

    if filters.price == PRICE_FREE:
        conditions.append(Event.price == 0)
    elif filters.price == PRICE_PAID:
        conditions.append(Event.price > 0)

    if _is_set(filters.location):
        conditions.append(
            Event.location_address.ilike(_contains_pattern(filters.location), escape=LIKE_ESCAPE)
        )

    return conditions


def resolve_sort(sort_by: Optional[str]) -> List[ColumnElement]:
    """Map a sort key to an ordering; unknown keys sort by date ascending."""
    ordering = SORT_OPTIONS.get(sort_by or DEFAULT_SORT, SORT_OPTIONS[DEFAULT_SORT])
    # Tie-break on id so page windows are stable
    return [*ordering, Event.id.asc()]


def build_event_query(session: Session, filters: Optional[EventFilters] = None) -> Query:
    """Filtered and ordered (but not paginated) event query."""
    filters = filters or EventFilters()
    return (
        session.query(Event)
        .filter(*build_conditions(filters))
        .order_by(*resolve_sort(filters.sort_by))
    )
