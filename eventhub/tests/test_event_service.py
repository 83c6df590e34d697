"""Tests for the event and user services against an in-memory database."""

from datetime import timedelta

import pytest
from pydantic import ValidationError as PydanticValidationError

from eventhub.models import SavedEvent, User
from eventhub.models.base import utcnow
from eventhub.schemas import EventCreate, EventUpdate, RegisterRequest
from eventhub.services.errors import AuthorizationError, NotFoundError, ValidationError
from eventhub.services.event_service import EventService
from eventhub.services.user_service import UserService


@pytest.fixture
def session(database):
    with database.session() as session:
        yield session


@pytest.fixture
def users(session, auth_config):
    return UserService(session, auth_config)


@pytest.fixture
def events(session):
    return EventService(session)


def make_user(users: UserService, name: str, email: str) -> User:
    user, _ = users.register(RegisterRequest(name=name, email=email, password='Secret123'))
    return user


def make_event(events: EventService, organizer: User, **overrides):
    data = {
        'title': 'Harbour Food Fair',
        'description': 'Street food from twenty vendors.',
        'date': (utcnow() + timedelta(days=5)).isoformat(),
        'time': '12:00',
        'location': {'address': 'Harbour 3, Bergen'},
        'category': 'Food',
        'image': 'https://example.com/food.jpg',
        'price': 15,
    }
    data.update(overrides)
    return events.create_event(EventCreate(**data), organizer)


@pytest.fixture
def organizer(users):
    return make_user(users, 'Olive Organizer', 'olive@example.com')


@pytest.fixture
def other(users):
    return make_user(users, 'Oscar Other', 'oscar@example.com')


def test_create_sets_organizer_and_active(events, organizer):
    event = make_event(events, organizer)
    assert event.organizer_id == organizer.id
    assert event.is_active is True
    assert event.to_dict()['organizer'] == {'id': organizer.id, 'name': 'Olive Organizer'}


def test_non_organizer_cannot_update_or_delete(events, organizer, other):
    event = make_event(events, organizer)

    with pytest.raises(AuthorizationError):
        events.update_event(event.id, EventUpdate(title='Hijacked title'), other)
    with pytest.raises(AuthorizationError):
        events.delete_event(event.id, other)

    assert events.get_event(event.id).title == 'Harbour Food Fair'


def test_organizer_updates_only_supplied_fields(events, organizer):
    event = make_event(events, organizer)
    updated = events.update_event(event.id, EventUpdate(price=0), organizer)
    assert updated.price == 0
    assert updated.title == 'Harbour Food Fair'
    assert updated.location_address == 'Harbour 3, Bergen'


def test_missing_event_is_not_found_before_ownership(events, other):
    with pytest.raises(NotFoundError):
        events.update_event('does-not-exist', EventUpdate(title='Anything'), other)


def test_organizer_delete_removes_event(events, organizer):
    event = make_event(events, organizer)
    events.delete_event(event.id, organizer)
    with pytest.raises(NotFoundError):
        events.get_event(event.id)


def test_inactive_event_reads_like_missing(events, organizer, session):
    event = make_event(events, organizer)
    event.is_active = False
    session.commit()

    with pytest.raises(NotFoundError) as inactive:
        events.get_event(event.id)
    with pytest.raises(NotFoundError) as missing:
        events.get_event('no-such-id')
    assert inactive.value.message == missing.value.message == 'Event not found'


def test_toggle_save_twice_restores_state(events, organizer, other):
    event = make_event(events, organizer)

    assert events.is_saved(event, other) is False
    assert events.toggle_save(event.id, other) is True
    assert events.is_saved(event, other) is True
    assert events.toggle_save(event.id, other) is False
    assert events.is_saved(event, other) is False
    assert events.toggle_save(event.id, other) is True


def test_saves_are_per_user(events, organizer, other):
    event = make_event(events, organizer)
    events.toggle_save(event.id, other)

    assert events.is_saved(event, other) is True
    assert events.is_saved(event, organizer) is False
    assert events.is_saved(event, None) is False


def test_toggle_save_rejects_inactive_event(events, organizer, other, session):
    event = make_event(events, organizer)
    event.is_active = False
    session.commit()

    with pytest.raises(NotFoundError):
        events.toggle_save(event.id, other)


def test_saved_events_skip_deleted_and_inactive(events, users, organizer, other, session):
    kept = make_event(events, organizer, title='Kept event')
    deleted = make_event(events, organizer, title='Deleted event')
    hidden = make_event(events, organizer, title='Hidden event')
    for event in (kept, deleted, hidden):
        events.toggle_save(event.id, other)

    events.delete_event(deleted.id, organizer)
    hidden.is_active = False
    session.commit()

    assert [event.title for event in events.get_saved_events(other)] == ['Kept event']
    # Dangling references still count on the dashboard
    assert users.dashboard_stats(other)['savedEvents'] == 3


def test_create_rejects_past_date():
    with pytest.raises(PydanticValidationError) as exc_info:
        EventCreate(
            title='Too late',
            description='This already happened.',
            date=(utcnow() - timedelta(days=1)).isoformat(),
            time='10:00',
            location={'address': 'Somewhere'},
            category='Other',
            image='https://example.com/x.jpg',
        )
    assert 'Event date cannot be in the past' in str(exc_info.value)


def test_register_duplicate_email(users, organizer):
    with pytest.raises(ValidationError) as exc_info:
        make_user(users, 'Another Olive', 'OLIVE@example.com')
    assert exc_info.value.errors[0].field == 'email'


def test_delete_account_deactivates_events(events, users, organizer, session):
    event = make_event(events, organizer)
    events.toggle_save(event.id, organizer)
    organizer_id = organizer.id

    users.delete_account(organizer)

    assert session.get(User, organizer_id) is None
    assert session.query(SavedEvent).filter(SavedEvent.user_id == organizer_id).count() == 0
    with pytest.raises(NotFoundError):
        events.get_event(event.id)


def test_my_events_newest_first_with_status(events, users, organizer, session):
    first = make_event(events, organizer, title='First event')
    second = make_event(events, organizer, title='Second event')
    first.created_at = utcnow() - timedelta(days=1)
    second.is_active = False
    session.commit()

    records, pagination = users.my_events(organizer)
    assert [event.title for event in records] == ['Second event', 'First event']
    assert pagination.total_count == 2

    active, _ = users.my_events(organizer, status='active')
    assert [event.title for event in active] == ['First event']
    inactive, _ = users.my_events(organizer, status='inactive')
    assert [event.title for event in inactive] == ['Second event']

    stats = users.dashboard_stats(organizer)
    assert stats['totalEvents'] == 2
    assert stats['activeEvents'] == 1
