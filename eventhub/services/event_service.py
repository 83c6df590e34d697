"""Event service - listing, CRUD and save/unsave logic.

The service works on a SQLAlchemy session provided by the caller (one
session per request) and raises ``ServiceError`` subclasses that the HTTP
layer maps to status codes.
"""

import logging
from typing import Dict, List, Optional, Set, Tuple

from sqlalchemy.orm import Session, joinedload

from ..models import Event, SavedEvent, User
from ..schemas import EventCreate, EventUpdate
from .errors import AuthorizationError, NotFoundError
from .pagination import DEFAULT_LIMIT, DEFAULT_PAGE, Pagination, paginate
from .query_builder import EventFilters, build_event_query

logger = logging.getLogger(__name__)


class EventService:
    """Service for event catalog operations."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_events(
        self,
        filters: Optional[EventFilters] = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> Tuple[List[Event], Pagination]:
        """Return one page of active events matching ``filters``."""
        query = build_event_query(self.session, filters)
        return paginate(query.options(joinedload(Event.organizer)), page, limit, count_query=query)

    def get_event(self, event_id: str) -> Event:
        """Return an active event by ID.

        Raises:
            NotFoundError: If the event does not exist or is inactive; the two
                cases are indistinguishable to callers.
        """
        event = self._find(event_id)
        if event is None or not event.is_active:
            raise NotFoundError("Event")
        return event

    def saved_event_ids(self, user: Optional[User]) -> Set[str]:
        """IDs the user has saved; empty for anonymous callers."""
        if user is None:
            return set()
        rows = self.session.query(SavedEvent.event_id).filter(SavedEvent.user_id == user.id).all()
        return {event_id for (event_id,) in rows}

    def is_saved(self, event: Event, user: Optional[User]) -> bool:
        if user is None:
            return False
        return bool(self.session.query(
            self.session.query(SavedEvent)
            .filter(SavedEvent.user_id == user.id, SavedEvent.event_id == event.id)
            .exists()
        ).scalar())

    def serialize(self, events: List[Event], user: Optional[User]) -> List[Dict]:
        """Serialize events with the caller's isSaved flag."""
        saved = self.saved_event_ids(user)
        return [event.to_dict(is_saved=event.id in saved) for event in events]

    def get_saved_events(self, user: User) -> List[Event]:
        """The user's saved events that still exist and are active, in save order."""
        return (
            self.session.query(Event)
            .join(SavedEvent, SavedEvent.event_id == Event.id)
            .options(joinedload(Event.organizer))
            .filter(SavedEvent.user_id == user.id, Event.is_active.is_(True))
            .order_by(SavedEvent.saved_at.asc(), SavedEvent.id.asc())
            .all()
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_event(self, payload: EventCreate, organizer: User) -> Event:
        """Create an event owned by ``organizer``."""
        event = Event(**payload.to_columns(), organizer_id=organizer.id, is_active=True)
        self.session.add(event)
        self.session.commit()
        logger.info(f"Event {event.id} created by user {organizer.id}")
        return self._reload(event.id)

    def update_event(self, event_id: str, payload: EventUpdate, user: User) -> Event:
        """Apply a partial update on behalf of the organizer.

        Raises:
            NotFoundError: If the event does not exist.
            AuthorizationError: If ``user`` is not the organizer.
        """
        event = self._owned_event(event_id, user, action="update")
        for column, value in payload.to_columns().items():
            setattr(event, column, value)
        self.session.commit()
        logger.info(f"Event {event_id} updated by user {user.id}")
        return self._reload(event_id)

    def delete_event(self, event_id: str, user: User) -> None:
        """Permanently remove an event on behalf of the organizer.

        Saved references to the event are left in place; read paths skip them.

        Raises:
            NotFoundError: If the event does not exist.
            AuthorizationError: If ``user`` is not the organizer.
        """
        event = self._owned_event(event_id, user, action="delete")
        self.session.delete(event)
        self.session.commit()
        logger.info(f"Event {event_id} deleted by user {user.id}")

    def toggle_save(self, event_id: str, user: User) -> bool:
        """Flip whether ``user`` has saved the event; returns the new state.

        Raises:
            NotFoundError: If the event does not exist or is inactive.
        """
        self.get_event(event_id)

        saved = (
            self.session.query(SavedEvent)
            .filter(SavedEvent.user_id == user.id, SavedEvent.event_id == event_id)
            .first()
        )
        if saved is not None:
            self.session.delete(saved)
            is_saved = False
        else:
            self.session.add(SavedEvent(user_id=user.id, event_id=event_id))
            is_saved = True
        self.session.commit()

        logger.info(f"User {user.id} {'saved' if is_saved else 'unsaved'} event {event_id}")
        return is_saved

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _find(self, event_id: str) -> Optional[Event]:
        return (
            self.session.query(Event)
            .options(joinedload(Event.organizer))
            .filter(Event.id == event_id)
            .first()
        )

    def _reload(self, event_id: str) -> Event:
        event = self._find(event_id)
        if event is None:
            raise NotFoundError("Event")
        return event

    def _owned_event(self, event_id: str, user: User, action: str) -> Event:
        event = self._find(event_id)
        if event is None:
            raise NotFoundError("Event")
        if event.organizer_id != user.id:
            logger.warning(f"User {user.id} attempted to {action} event {event_id} owned by {event.organizer_id}")
            raise AuthorizationError(f"Not authorized to {action} this event")
        return event
