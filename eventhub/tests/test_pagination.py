"""Tests for page window computation."""

from datetime import timedelta

import pytest

from eventhub.models import Event
from eventhub.models.base import utcnow
from eventhub.services.pagination import compute_pagination, compute_skip, paginate
from eventhub.services.query_builder import build_event_query


def test_skip():
    assert compute_skip(1, 12) == 0
    assert compute_skip(3, 12) == 24


@pytest.mark.parametrize('page, has_next, has_prev', [
    (1, True, False),
    (2, True, True),
    (3, False, True),
    (4, False, True),
])
def test_twenty_five_records_in_pages_of_twelve(page, has_next, has_prev):
    pagination = compute_pagination(25, page, 12)
    assert pagination.total_pages == 3
    assert pagination.total_count == 25
    assert pagination.current_page == page
    assert pagination.has_next_page is has_next
    assert pagination.has_prev_page is has_prev


def test_empty_result_has_no_pages():
    pagination = compute_pagination(0, 1, 12)
    assert pagination.total_pages == 0
    assert pagination.has_next_page is False
    assert pagination.has_prev_page is False


def test_limit_below_one_is_a_single_page():
    assert compute_pagination(7, 1, 0).total_pages == 1
    assert compute_pagination(0, 1, 0).total_pages == 0


def test_to_dict_uses_response_keys():
    assert compute_pagination(25, 2, 12).to_dict() == {
        'currentPage': 2,
        'totalPages': 3,
        'totalCount': 25,
        'hasNextPage': True,
        'hasPrevPage': True,
    }


@pytest.fixture
def session_with_25_events(database):
    with database.session() as session:
        start = utcnow() + timedelta(days=1)
        for i in range(25):
            session.add(Event(
                title=f'Event {i:02d}',
                description='Paginated sample event.',
                date=start + timedelta(hours=i),
                time='10:00',
                location_address='Somewhere 1',
                category='Other',
                image='https://example.com/e.jpg',
                price=0,
                organizer_id='organizer-1',
                is_active=True,
            ))
        session.flush()
        yield session


def test_paginate_windows(session_with_25_events):
    query = build_event_query(session_with_25_events)

    records, pagination = paginate(query, page=3, limit=12)
    assert [event.title for event in records] == ['Event 24']
    assert pagination.total_pages == 3
    assert pagination.has_next_page is False
    assert pagination.has_prev_page is True

    records, pagination = paginate(query, page=4, limit=12)
    assert records == []
    assert pagination.total_count == 25


def test_paginate_non_positive_page_starts_at_first_record(session_with_25_events):
    records, pagination = paginate(build_event_query(session_with_25_events), page=0, limit=12)
    assert records[0].title == 'Event 00'
    assert pagination.has_prev_page is False
