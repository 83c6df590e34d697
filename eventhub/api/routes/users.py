"""User dashboard router module. Every route requires authentication."""

from fastapi import APIRouter, Depends

from ...models import User
from ...schemas import ProfileUpdate
from ...services.pagination import DEFAULT_PAGE, MY_EVENTS_DEFAULT_LIMIT
from ...services.user_service import UserService
from ..dependencies import get_current_user, get_user_service

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/profile")
def get_profile(user: User = Depends(get_current_user), users: UserService = Depends(get_user_service)):
    return {"user": users.serialize(user)}

@router.put("/profile")
def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    user = users.update_profile(user, payload)
    return {"message": "Profile updated successfully", "user": users.serialize(user)}

@router.get("/dashboard")
def dashboard(user: User = Depends(get_current_user), users: UserService = Depends(get_user_service)):
    """Event and saved-event counts for the caller."""
    return {"stats": users.dashboard_stats(user)}

@router.get("/events")
def my_events(
    page: int = DEFAULT_PAGE,
    limit: int = MY_EVENTS_DEFAULT_LIMIT,
    status: str = "all",
    user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Events organized by the caller, newest first."""
    events, pagination = users.my_events(user, page, limit, status)
    saved = set(users.saved_event_ids(user))
    return {
        "events": [event.to_dict(is_saved=event.id in saved) for event in events],
        "pagination": pagination.to_dict(),
    }

@router.delete("/account")
def delete_account(user: User = Depends(get_current_user), users: UserService = Depends(get_user_service)):
    """Delete the caller's account; their events are deactivated, not removed."""
    users.delete_account(user)
    return {"message": "Account deleted successfully"}
