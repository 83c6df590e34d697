"""Tests for the HTTP client and the client-side stores.

Most tests drive the real application through FastAPI's TestClient, which
exposes the same ``request`` method as a ``requests.Session``.
"""

from datetime import datetime, timedelta, timezone

import pytest
import requests

from eventhub.client import (
    AUTH_STORAGE_KEY,
    ApiError,
    AuthStore,
    EventHubClient,
    EventStore,
    Filters,
    JSONFileStorage,
    MemoryStorage,
    NetworkError,
)
from eventhub.client.api import NETWORK_ERROR_MESSAGE

from helpers import PASSWORD, create_event, event_payload, register


@pytest.fixture
def api(client):
    return EventHubClient(base_url='http://testserver', session=client)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def auth_store(api, storage):
    return AuthStore(api, storage)


@pytest.fixture
def event_store(api, auth_store):
    return EventStore(api, auth_store)


@pytest.fixture
def signed_in(client, auth_store):
    register(client, 'Store User', 'store@example.com')
    assert auth_store.login('store@example.com', PASSWORD).success
    return auth_store


class UnreachableSession:
    """Session whose every request fails before reaching a server."""

    def request(self, *args, **kwargs):
        raise requests.ConnectionError('connection refused')


# ----------------------------------------------------------------------
# Client
# ----------------------------------------------------------------------

def test_client_raises_api_error_with_field_errors(api, alice):
    with pytest.raises(ApiError) as exc_info:
        api.create_event(event_payload(title='x'), alice['token'])
    assert exc_info.value.status_code == 400
    assert exc_info.value.is_validation_error
    assert exc_info.value.errors[0]['field'] == 'title'


def test_client_network_error():
    api = EventHubClient(base_url='http://unreachable', session=UnreachableSession())
    with pytest.raises(NetworkError) as exc_info:
        api.get_events()
    assert exc_info.value.message == NETWORK_ERROR_MESSAGE


def test_client_calls_unauthorized_hook(api):
    calls = []
    api.on_unauthorized = lambda: calls.append(True)
    with pytest.raises(ApiError):
        api.get_me('bogus-token')
    assert calls == [True]


# ----------------------------------------------------------------------
# Filters
# ----------------------------------------------------------------------

def test_filters_round_trip_through_query_params():
    filters = Filters(category='Music', search='jazz', price='free', sort_by='price-desc')
    params = filters.to_params()
    assert params == {'category': 'Music', 'search': 'jazz', 'price': 'free', 'sortBy': 'price-desc'}
    assert Filters.from_params(params) == filters


def test_default_filters_send_only_sort():
    assert Filters().to_params() == {'sortBy': 'date'}


# ----------------------------------------------------------------------
# Auth store
# ----------------------------------------------------------------------

def test_login_persists_session(signed_in, storage):
    assert signed_in.state.is_authenticated
    persisted = storage.get(AUTH_STORAGE_KEY)
    assert persisted['token'] == signed_in.state.token
    assert persisted['user']['email'] == 'store@example.com'
    assert persisted['isAuthenticated'] is True


def test_session_restored_on_startup(signed_in, api, storage):
    restored = AuthStore(api, storage)
    assert restored.state.token == signed_in.state.token
    assert restored.state.is_authenticated
    assert restored.fetch_current_user().success


def test_login_failure_message(auth_store, storage):
    result = auth_store.login('nobody@example.com', PASSWORD)
    assert result.success is False
    assert result.error == 'Invalid credentials'
    assert auth_store.state.error == 'Invalid credentials'
    assert storage.get(AUTH_STORAGE_KEY) is None


def test_logout_clears_storage(signed_in, storage):
    signed_in.logout()
    assert signed_in.state.token is None
    assert signed_in.state.user is None
    assert storage.get(AUTH_STORAGE_KEY) is None


def test_bad_persisted_token_logs_out(api, storage):
    storage.set(AUTH_STORAGE_KEY, {'user': {'id': 'gone'}, 'token': 'stale', 'isAuthenticated': True})
    store = AuthStore(api, storage)

    result = store.fetch_current_user()

    assert result.success is False
    assert store.state.is_authenticated is False
    assert storage.get(AUTH_STORAGE_KEY) is None


def test_update_profile_and_delete_account(signed_in, storage):
    result = signed_in.update_profile({'name': 'Renamed User'})
    assert result.success
    assert signed_in.state.user['name'] == 'Renamed User'
    assert storage.get(AUTH_STORAGE_KEY)['user']['name'] == 'Renamed User'

    assert signed_in.delete_account().success
    assert signed_in.state.is_authenticated is False
    assert storage.get(AUTH_STORAGE_KEY) is None


def test_is_event_organizer(signed_in):
    assert signed_in.is_event_organizer(signed_in.state.user['id'])
    assert not signed_in.is_event_organizer('someone-else')
    assert not signed_in.is_event_organizer(None)


def test_subscribers_see_every_replacement(auth_store):
    seen = []
    unsubscribe = auth_store.subscribe(seen.append)
    auth_store.logout()
    unsubscribe()
    auth_store.logout()
    assert len(seen) == 1
    assert seen[0] is not None


def test_json_file_storage(tmp_path):
    path = tmp_path / 'nested' / 'storage.json'
    storage = JSONFileStorage(path)
    storage.set(AUTH_STORAGE_KEY, {'token': 'abc'})

    assert JSONFileStorage(path).get(AUTH_STORAGE_KEY) == {'token': 'abc'}
    storage.remove(AUTH_STORAGE_KEY)
    assert JSONFileStorage(path).get(AUTH_STORAGE_KEY) is None


# ----------------------------------------------------------------------
# Event store
# ----------------------------------------------------------------------

def test_set_filters_fetches_page_one(client, alice, event_store):
    create_event(client, alice['headers'], title='Free concert', price=0)
    create_event(client, alice['headers'], title='Paid concert', price=20)

    result = event_store.set_filters(price='paid')

    assert result.success
    assert [e['title'] for e in event_store.state.events] == ['Paid concert']
    assert event_store.state.pagination.total_count == 1
    assert event_store.state.filters.price == 'paid'


def test_set_filters_without_fetch_keeps_events(client, alice, event_store):
    create_event(client, alice['headers'])
    event_store.fetch_events()
    before = event_store.state.events

    event_store.set_filters(fetch=False, category='Sports')

    assert event_store.state.events == before
    event_store.clear_filters()
    assert event_store.state.filters == Filters()


def test_actions_require_authentication(event_store):
    for result in (
        event_store.create_event(event_payload()),
        event_store.toggle_save_event('any'),
        event_store.fetch_saved_events(),
        event_store.fetch_dashboard_stats(),
    ):
        assert result.success is False
        assert result.error == 'Not authenticated'


def test_create_prepends_and_refreshes_stats(client, alice, signed_in, event_store):
    create_event(client, alice['headers'], title='Somebody else')
    event_store.fetch_events()

    result = event_store.create_event(event_payload(title='My own event'))

    assert result.success
    assert event_store.state.events[0]['title'] == 'My own event'
    assert len(event_store.state.events) == 2
    assert event_store.state.dashboard_stats.total_events == 1


def test_create_reraises_field_errors(signed_in, event_store):
    with pytest.raises(ApiError) as exc_info:
        event_store.create_event(event_payload(category='Cooking'))
    assert exc_info.value.errors[0]['field'] == 'category'
    assert event_store.state.error == 'Validation failed'
    assert event_store.state.is_loading is False


def test_update_replaces_list_entry_and_current_event(signed_in, event_store):
    event = event_store.create_event(event_payload()).data
    event_store.fetch_event(event['id'])

    result = event_store.update_event(event['id'], {'title': 'Renamed event'})

    assert result.success
    assert event_store.state.current_event['title'] == 'Renamed event'
    assert event_store.state.events[0]['title'] == 'Renamed event'


def test_update_by_non_organizer_reports_message(client, alice, signed_in, event_store):
    event = create_event(client, alice['headers'])
    result = event_store.update_event(event['id'], {'title': 'Not mine'})
    assert result.success is False
    assert result.error == 'Not authorized to update this event'


def test_delete_removes_entry_and_refreshes_stats(signed_in, event_store):
    event = event_store.create_event(event_payload()).data

    assert event_store.delete_event(event['id']).success

    assert event_store.state.events == []
    assert event_store.state.dashboard_stats.total_events == 0


def test_toggle_save_reconciles_state(client, alice, signed_in, event_store):
    event = create_event(client, alice['headers'])
    event_store.fetch_events()
    event_store.fetch_event(event['id'])

    result = event_store.toggle_save_event(event['id'])

    assert result.success and result.data is True
    assert event_store.state.events[0]['isSaved'] is True
    assert event_store.state.current_event['isSaved'] is True
    assert [e['id'] for e in event_store.state.saved_events] == [event['id']]
    assert event_store.state.dashboard_stats.saved_events == 1

    event_store.toggle_save_event(event['id'])

    assert event_store.state.events[0]['isSaved'] is False
    assert event_store.state.current_event['isSaved'] is False
    assert event_store.state.saved_events == []
    assert event_store.state.dashboard_stats.saved_events == 0


def test_toggle_save_leaves_other_current_event(client, alice, signed_in, event_store):
    shown = create_event(client, alice['headers'], title='Shown event')
    other = create_event(client, alice['headers'], title='Other event')
    event_store.fetch_event(shown['id'])

    event_store.toggle_save_event(other['id'])

    assert event_store.state.current_event['isSaved'] is False

    event_store.clear_current_event()
    assert event_store.state.current_event is None


def test_fetch_missing_event_clears_current(signed_in, event_store):
    result = event_store.fetch_event('missing')
    assert result.success is False
    assert result.error == 'Event not found'
    assert event_store.state.current_event is None

    event_store.clear_error()
    assert event_store.state.error is None


def test_fetch_my_events(signed_in, event_store):
    event_store.create_event(event_payload(title='Mine'))
    event_store.fetch_events()

    assert event_store.fetch_my_events().success
    assert [e['title'] for e in event_store.state.events] == ['Mine']


def test_fetch_my_events_by_status(client, signed_in, event_store):
    event_store.create_event(event_payload(title='Running'))
    stopped = event_store.create_event(event_payload(title='Stopped')).data
    headers = {'Authorization': f'Bearer {signed_in.state.token}'}
    client.put(f"/api/events/{stopped['id']}", json={'isActive': False}, headers=headers)

    assert event_store.fetch_my_events(status='inactive').success
    assert [e['title'] for e in event_store.state.events] == ['Stopped']

    event_store.fetch_my_events()
    assert {e['title'] for e in event_store.state.events} == {'Running', 'Stopped'}


def test_network_error_surfaces_distinct_message(storage):
    api = EventHubClient(base_url='http://unreachable', session=UnreachableSession())
    store = EventStore(api, AuthStore(api, storage))

    result = store.fetch_events()

    assert result.success is False
    assert result.error == NETWORK_ERROR_MESSAGE
    assert store.state.error == NETWORK_ERROR_MESSAGE
    assert store.state.is_loading is False


# ----------------------------------------------------------------------
# Local selectors
# ----------------------------------------------------------------------

def _local_event(title, category='Music', days=1, address='Main Street 1'):
    date = datetime.now(timezone.utc) + timedelta(days=days)
    return {
        'id': title,
        'title': title,
        'description': f'{title} description',
        'category': category,
        'date': date.isoformat(),
        'location': {'address': address},
    }


def test_local_selectors(event_store):
    events = [
        _local_event('Past show', days=-2),
        _local_event('Football', category='Sports', address='Stadium Road'),
    ] + [_local_event(f'Show {i}', days=i + 1) for i in range(7)]
    event_store._set(events=events)

    assert [e['title'] for e in event_store.events_by_category('Sports')] == ['Football']
    assert len(event_store.events_by_category('all')) == 9

    upcoming = event_store.upcoming_events()
    assert len(upcoming) == 6
    assert 'Past show' not in [e['title'] for e in upcoming]

    assert [e['title'] for e in event_store.search_events('stadium')] == ['Football']
    assert [e['title'] for e in event_store.search_events('SPORTS')] == ['Football']
