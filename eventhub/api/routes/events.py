"""Events router module."""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from ...models import User
from ...schemas import EventCreate, EventUpdate
from ...services.event_service import EventService
from ...services.pagination import DEFAULT_LIMIT, DEFAULT_PAGE
from ...services.query_builder import EventFilters
from ..dependencies import get_current_user, get_event_service, get_optional_user

router = APIRouter(prefix="/events", tags=["events"])

@router.get("")
def list_events(
    request: Request,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
    service: EventService = Depends(get_event_service),
    user: Optional[User] = Depends(get_optional_user),
):
    """List active events matching the filters, one page at a time.

    Filters come from the query string: category, search, date, location,
    price and sortBy.
    """
    filters = EventFilters.from_params(request.query_params)
    events, pagination = service.list_events(filters, page, limit)
    return {
        "events": service.serialize(events, user),
        "pagination": pagination.to_dict(),
    }

# Declared before /{event_id} so "saved" is not taken for an id
@router.get("/saved")
def get_saved_events(
    service: EventService = Depends(get_event_service),
    user: User = Depends(get_current_user),
):
    """The caller's saved events that are still active."""
    events = service.get_saved_events(user)
    return {"events": [event.to_dict(is_saved=True) for event in events]}

@router.get("/{event_id}")
def get_event(
    event_id: str,
    service: EventService = Depends(get_event_service),
    user: Optional[User] = Depends(get_optional_user),
):
    """Get a single active event."""
    event = service.get_event(event_id)
    return {"event": event.to_dict(is_saved=service.is_saved(event, user))}

@router.post("", status_code=201)
def create_event(
    payload: EventCreate,
    service: EventService = Depends(get_event_service),
    user: User = Depends(get_current_user),
):
    """Create an event organized by the caller."""
    event = service.create_event(payload, user)
    return {
        "message": "Event created successfully",
        "event": event.to_dict(is_saved=False),
    }

@router.put("/{event_id}")
def update_event(
    event_id: str,
    payload: EventUpdate,
    service: EventService = Depends(get_event_service),
    user: User = Depends(get_current_user),
):
    """Update an event the caller organizes."""
    event = service.update_event(event_id, payload, user)
    return {
        "message": "Event updated successfully",
        "event": event.to_dict(is_saved=service.is_saved(event, user)),
    }

@router.delete("/{event_id}")
def delete_event(
    event_id: str,
    service: EventService = Depends(get_event_service),
    user: User = Depends(get_current_user),
):
    """Delete an event the caller organizes."""
    service.delete_event(event_id, user)
    return {"message": "Event deleted successfully"}

@router.post("/{event_id}/save")
def toggle_save_event(
    event_id: str,
    service: EventService = Depends(get_event_service),
    user: User = Depends(get_current_user),
):
    """Save the event for the caller, or unsave it if already saved."""
    is_saved = service.toggle_save(event_id, user)
    return {
        "message": "Event saved successfully" if is_saved else "Event removed from saved events",
        "isSaved": is_saved,
    }
