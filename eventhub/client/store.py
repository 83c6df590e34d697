"""Client-side state stores for auth and events.

Each store holds one immutable state object. Actions build a new state and
swap it in whole; subscribers are called after every swap. Stores are plain
objects: create them once and pass them to whatever needs them.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..models.event import CATEGORIES
from .api import ApiError, EventHubClient, NetworkError
from .session_storage import AUTH_STORAGE_KEY, JSONFileStorage

logger = logging.getLogger(__name__)

EVENTS_PAGE_SIZE = 12
MY_EVENTS_PAGE_SIZE = 10
UPCOMING_EVENTS_COUNT = 6
NOT_AUTHENTICATED = 'Not authenticated'


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a store action."""

    success: bool
    data: Any = None
    error: Optional[str] = None


@dataclass(frozen=True)
class Filters:
    """Listing filters as the user sees them; 'all' and '' mean no filter."""

    category: str = 'all'
    search: str = ''
    date: str = ''
    location: str = ''
    price: str = 'all'
    sort_by: str = 'date'

    def to_params(self) -> Dict[str, str]:
        """Query parameters for the listing endpoint, omitting unset filters."""
        params = {
            'category': self.category,
            'search': self.search,
            'date': self.date,
            'location': self.location,
            'price': self.price,
            'sortBy': self.sort_by,
        }
        return {key: value for key, value in params.items() if value and value != 'all'}

    @classmethod
    def from_params(cls, params: Dict[str, str]) -> 'Filters':
        """Rebuild filters from query parameters; missing keys keep their defaults."""
        defaults = cls()
        return cls(
            category=params.get('category') or defaults.category,
            search=params.get('search') or defaults.search,
            date=params.get('date') or defaults.date,
            location=params.get('location') or defaults.location,
            price=params.get('price') or defaults.price,
            sort_by=params.get('sortBy') or params.get('sort_by') or defaults.sort_by,
        )


@dataclass(frozen=True)
class PaginationState:
    current_page: int = 1
    total_pages: int = 1
    total_count: int = 0
    has_next_page: bool = False
    has_prev_page: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PaginationState':
        return cls(
            current_page=data.get('currentPage', 1),
            total_pages=data.get('totalPages', 1),
            total_count=data.get('totalCount', 0),
            has_next_page=data.get('hasNextPage', False),
            has_prev_page=data.get('hasPrevPage', False),
        )


@dataclass(frozen=True)
class DashboardStats:
    total_events: int = 0
    active_events: int = 0
    saved_events: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DashboardStats':
        return cls(
            total_events=data.get('totalEvents', 0),
            active_events=data.get('activeEvents', 0),
            saved_events=data.get('savedEvents', 0),
        )


@dataclass(frozen=True)
class AuthState:
    user: Optional[Dict[str, Any]] = None
    token: Optional[str] = None
    is_authenticated: bool = False
    is_loading: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class EventState:
    events: List[Dict[str, Any]] = field(default_factory=list)
    saved_events: List[Dict[str, Any]] = field(default_factory=list)
    current_event: Optional[Dict[str, Any]] = None
    categories: Tuple[str, ...] = CATEGORIES
    is_loading: bool = False
    error: Optional[str] = None
    pagination: PaginationState = field(default_factory=PaginationState)
    dashboard_stats: DashboardStats = field(default_factory=DashboardStats)
    filters: Filters = field(default_factory=Filters)


def error_message(error: Exception, default: str) -> str:
    """User-facing message for a failed request."""
    if isinstance(error, NetworkError):
        return error.message
    if isinstance(error, ApiError) and error.message:
        return error.message
    return default


class _Store:
    """Holds a state object and notifies subscribers when it is replaced."""

    def __init__(self, state):
        self._state = state
        self._listeners: List[Callable[[Any], None]] = []

    @property
    def state(self):
        return self._state

    def subscribe(self, listener: Callable[[Any], None]) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)

    def _fail(self, error: Exception, default: str, **changes) -> ActionResult:
        message = error_message(error, default)
        logger.info(f"{default}: {message}")
        self._set(is_loading=False, error=message, **changes)
        return ActionResult(False, error=message)

    def clear_error(self) -> None:
        self._set(error=None)


class AuthStore(_Store):
    """Session state: the signed-in user and their token.

    ``user``, ``token`` and ``is_authenticated`` are persisted under the
    ``auth-storage`` key and restored when the store is created. The client's
    unauthorized callback is wired to :meth:`logout`.
    """

    def __init__(self, client: EventHubClient, storage=None):
        self.client = client
        self.storage = storage if storage is not None else JSONFileStorage()
        super().__init__(self._restore())
        client.on_unauthorized = self.logout

    def _restore(self) -> AuthState:
        persisted = self.storage.get(AUTH_STORAGE_KEY)
        if not isinstance(persisted, dict) or not persisted.get('token'):
            return AuthState()
        return AuthState(
            user=persisted.get('user'),
            token=persisted['token'],
            is_authenticated=bool(persisted.get('isAuthenticated')),
        )

    def _set(self, **changes) -> None:
        super()._set(**changes)
        if self._state.token:
            self.storage.set(AUTH_STORAGE_KEY, {
                'user': self._state.user,
                'token': self._state.token,
                'isAuthenticated': self._state.is_authenticated,
            })
        else:
            self.storage.remove(AUTH_STORAGE_KEY)

    @property
    def token(self) -> Optional[str]:
        return self._state.token

    def login(self, email: str, password: str) -> ActionResult:
        self._set(is_loading=True, error=None)
        try:
            response = self.client.login(email, password)
        except (ApiError, NetworkError) as e:
            return self._fail(e, 'Login failed')
        return self._signed_in(response)

    def register(self, name: str, email: str, password: str) -> ActionResult:
        self._set(is_loading=True, error=None)
        try:
            response = self.client.register(name, email, password)
        except (ApiError, NetworkError) as e:
            return self._fail(e, 'Registration failed')
        return self._signed_in(response)

    def _signed_in(self, response: Dict[str, Any]) -> ActionResult:
        self._set(
            user=response.get('user'),
            token=response.get('token'),
            is_authenticated=True,
            is_loading=False,
            error=None,
        )
        return ActionResult(True, data=self._state.user)

    def logout(self) -> None:
        """Forget the session, including the persisted copy."""
        self._set(user=None, token=None, is_authenticated=False, error=None)

    def fetch_current_user(self) -> ActionResult:
        """Refresh the user from the server; any failure signs the user out."""
        if not self._state.token:
            return ActionResult(False, error=NOT_AUTHENTICATED)

        self._set(is_loading=True)
        try:
            response = self.client.get_me(self._state.token)
        except (ApiError, NetworkError) as e:
            logger.info(f"Session refresh failed, signing out: {e}")
            self.logout()
            self._set(is_loading=False)
            return ActionResult(False, error=error_message(e, 'Session expired'))

        self._set(user=response.get('user'), is_authenticated=True, is_loading=False)
        return ActionResult(True, data=self._state.user)

    def update_profile(self, data: Dict[str, Any]) -> ActionResult:
        if not self._state.token:
            return ActionResult(False, error=NOT_AUTHENTICATED)

        self._set(is_loading=True, error=None)
        try:
            response = self.client.update_profile(self._state.token, data)
        except (ApiError, NetworkError) as e:
            return self._fail(e, 'Profile update failed')

        self._set(user=response.get('user'), is_loading=False, error=None)
        return ActionResult(True, data=self._state.user)

    def delete_account(self) -> ActionResult:
        if not self._state.token:
            return ActionResult(False, error=NOT_AUTHENTICATED)

        self._set(is_loading=True, error=None)
        try:
            self.client.delete_account(self._state.token)
        except (ApiError, NetworkError) as e:
            return self._fail(e, 'Failed to delete account')

        self.logout()
        self._set(is_loading=False)
        return ActionResult(True)

    def is_event_organizer(self, organizer_id: Optional[str]) -> bool:
        user = self._state.user
        return bool(user) and organizer_id is not None and user.get('id') == organizer_id


class EventStore(_Store):
    """Cached view of events for the signed-in (or anonymous) user."""

    def __init__(self, client: EventHubClient, auth_store: AuthStore):
        super().__init__(EventState())
        self.client = client
        self.auth_store = auth_store

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def set_filters(self, fetch: bool = True, **changes) -> Optional[ActionResult]:
        """Merge ``changes`` into the filters and, by default, refetch page 1.

        The event list itself only changes when the fetch completes.
        """
        self._set(filters=replace(self._state.filters, **changes))
        if fetch:
            return self.fetch_events(1)
        return None

    def clear_filters(self) -> None:
        self._set(filters=Filters())

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def fetch_events(self, page: int = 1) -> ActionResult:
        self._set(is_loading=True, error=None)
        try:
            response = self.client.get_events(
                self._state.filters.to_params(), page, EVENTS_PAGE_SIZE, token=self.auth_store.token,
            )
        except (ApiError, NetworkError) as e:
            return self._fail(e, 'Failed to fetch events')

        events = response.get('events', [])
        self._set(
            events=events,
            pagination=PaginationState.from_dict(response.get('pagination', {})),
            is_loading=False,
            error=None,
        )
        return ActionResult(True, data=events)

    def fetch_event(self, event_id: str) -> ActionResult:
        self._set(is_loading=True, error=None)
        try:
            response = self.client.get_event(event_id, token=self.auth_store.token)
        except (ApiError, NetworkError) as e:
            return self._fail(e, 'Failed to fetch event', current_event=None)

        event = response.get('event')
        self._set(current_event=event, is_loading=False, error=None)
        return ActionResult(True, data=event)

    def fetch_saved_events(self) -> ActionResult:
        token = self.auth_store.token
        if not token:
            return ActionResult(False, error=NOT_AUTHENTICATED)

        self._set(is_loading=True, error=None)
        try:
            response = self.client.get_saved_events(token)
        except (ApiError, NetworkError) as e:
            return self._fail(e, 'Failed to fetch saved events')

        events = response.get('events', [])
        self._set(saved_events=events, is_loading=False, error=None)
        return ActionResult(True, data=events)

    def fetch_my_events(self, page: int = 1, limit: int = MY_EVENTS_PAGE_SIZE,
                        status: Optional[str] = None) -> ActionResult:
        """Load the user's own events into ``events`` (dashboard view).

        ``status`` is 'active' or 'inactive'; left unset, every event is listed.
        """
        token = self.auth_store.token
        if not token:
            return ActionResult(False, error=NOT_AUTHENTICATED)

        self._set(is_loading=True, error=None)
        try:
            response = self.client.get_my_events(token, page, limit, status)
        except (ApiError, NetworkError) as e:
            return self._fail(e, 'Failed to fetch my events')

        events = response.get('events', [])
        self._set(
            events=events,
            pagination=PaginationState.from_dict(response.get('pagination', {})),
            is_loading=False,
            error=None,
        )
        return ActionResult(True, data=events)

    def fetch_dashboard_stats(self) -> ActionResult:
        token = self.auth_store.token
        if not token:
            return ActionResult(False, error=NOT_AUTHENTICATED)

        self._set(is_loading=True, error=None)
        try:
            response = self.client.get_dashboard_stats(token)
        except (ApiError, NetworkError) as e:
            return self._fail(e, 'Failed to fetch dashboard stats')

        stats = DashboardStats.from_dict(response.get('stats', {}))
        self._set(dashboard_stats=stats, is_loading=False, error=None)
        return ActionResult(True, data=stats)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_event(self, data: Dict[str, Any]) -> ActionResult:
        """Create an event and put it at the front of the list.

        Raises:
            ApiError: If the server rejected individual fields, so a form can
                show them next to the inputs.
        """
        token = self.auth_store.token
        if not token:
            return ActionResult(False, error=NOT_AUTHENTICATED)

        self._set(is_loading=True, error=None)
        try:
            response = self.client.create_event(data, token)
        except ApiError as e:
            if e.is_validation_error:
                self._set(is_loading=False, error=e.message or 'Validation failed')
                raise
            return self._fail(e, 'Failed to create event')
        except NetworkError as e:
            return self._fail(e, 'Failed to create event')

        event = response.get('event')
        self._set(events=[event] + self._state.events, is_loading=False, error=None)
        self.fetch_dashboard_stats()
        return ActionResult(True, data=event)

    def update_event(self, event_id: str, data: Dict[str, Any]) -> ActionResult:
        """Update an event and swap it into the list and the detail view.

        Raises:
            ApiError: If the server rejected individual fields.
        """
        token = self.auth_store.token
        if not token:
            return ActionResult(False, error=NOT_AUTHENTICATED)

        self._set(is_loading=True, error=None)
        try:
            response = self.client.update_event(event_id, data, token)
        except ApiError as e:
            if e.is_validation_error:
                self._set(is_loading=False, error=e.message or 'Validation failed')
                raise
            return self._fail(e, 'Failed to update event')
        except NetworkError as e:
            return self._fail(e, 'Failed to update event')

        updated = response.get('event')
        self._set(
            events=[updated if event.get('id') == event_id else event for event in self._state.events],
            current_event=updated,
            is_loading=False,
            error=None,
        )
        return ActionResult(True, data=updated)

    def delete_event(self, event_id: str) -> ActionResult:
        token = self.auth_store.token
        if not token:
            return ActionResult(False, error=NOT_AUTHENTICATED)

        self._set(is_loading=True, error=None)
        try:
            self.client.delete_event(event_id, token)
        except (ApiError, NetworkError) as e:
            return self._fail(e, 'Failed to delete event')

        self._set(
            events=[event for event in self._state.events if event.get('id') != event_id],
            is_loading=False,
            error=None,
        )
        self.fetch_dashboard_stats()
        return ActionResult(True)

    def toggle_save_event(self, event_id: str) -> ActionResult:
        """Flip the saved flag for an event.

        The flag is patched in ``events`` and ``current_event``; the saved
        list and dashboard counts are always refetched from the server.
        """
        token = self.auth_store.token
        if not token:
            return ActionResult(False, error=NOT_AUTHENTICATED)

        try:
            response = self.client.toggle_save_event(event_id, token)
        except (ApiError, NetworkError) as e:
            message = error_message(e, 'Failed to save event')
            self._set(error=message)
            return ActionResult(False, error=message)

        is_saved = bool(response.get('isSaved'))
        current = self._state.current_event
        if current is not None and current.get('id') == event_id:
            current = {**current, 'isSaved': is_saved}
        self._set(
            events=[
                {**event, 'isSaved': is_saved} if event.get('id') == event_id else event
                for event in self._state.events
            ],
            current_event=current,
        )

        self.fetch_saved_events()
        self.fetch_dashboard_stats()
        return ActionResult(True, data=is_saved)

    def clear_current_event(self) -> None:
        self._set(current_event=None)

    # ------------------------------------------------------------------
    # Local selectors
    # ------------------------------------------------------------------

    def events_by_category(self, category: str) -> List[Dict[str, Any]]:
        if category == 'all':
            return list(self._state.events)
        return [event for event in self._state.events if event.get('category') == category]

    def upcoming_events(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """The first few loaded events that start after ``now``."""
        now = now or datetime.now(timezone.utc)
        upcoming = []
        for event in self._state.events:
            starts = _parse_datetime(event.get('date'))
            if starts is not None and starts > now:
                upcoming.append(event)
        return upcoming[:UPCOMING_EVENTS_COUNT]

    def search_events(self, query: str) -> List[Dict[str, Any]]:
        """Case-insensitive match on title, description, category or address."""
        term = query.lower()

        def matches(event: Dict[str, Any]) -> bool:
            fields = (
                event.get('title'),
                event.get('description'),
                event.get('category'),
                (event.get('location') or {}).get('address'),
            )
            return any(term in value.lower() for value in fields if value)

        return [event for event in self._state.events if matches(event)]


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
