"""Request-scoped dependencies: database session, services and the caller."""

from typing import Generator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..models import User
from ..services.errors import AuthenticationError
from ..services.event_service import EventService
from ..services.user_service import UserService

bearer_scheme = HTTPBearer(auto_error=False)


def get_session(request: Request) -> Generator[Session, None, None]:
    """One transactional session per request."""
    with request.app.state.db.session() as session:
        yield session


def get_event_service(session: Session = Depends(get_session)) -> EventService:
    return EventService(session)


def get_user_service(request: Request, session: Session = Depends(get_session)) -> UserService:
    return UserService(session, request.app.state.auth_config)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    users: UserService = Depends(get_user_service),
) -> User:
    """The authenticated caller; raises when the token is missing or invalid."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access denied. No token provided.")
    return users.authenticate(credentials.credentials)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    users: UserService = Depends(get_user_service),
) -> Optional[User]:
    """The caller when a valid token is supplied, otherwise None."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return users.authenticate(credentials.credentials)
    except AuthenticationError:
        return None
