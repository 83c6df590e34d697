"""User service - accounts, authentication and dashboard data."""

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ..config.auth import AuthConfig
from ..models import Event, SavedEvent, User
from ..schemas import LoginRequest, ProfileUpdate, RegisterRequest
from .errors import AuthenticationError, ValidationError
from .pagination import DEFAULT_PAGE, MY_EVENTS_DEFAULT_LIMIT, Pagination, paginate
from .security import create_access_token, decode_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


class UserService:
    """Service for user accounts."""

    def __init__(self, session: Session, auth_config: Optional[AuthConfig] = None) -> None:
        self.session = session
        self.auth_config = auth_config or AuthConfig()

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def register(self, payload: RegisterRequest) -> Tuple[User, str]:
        """Create an account and return it with a fresh token.

        Raises:
            ValidationError: If the email is already registered.
        """
        if self._find_by_email(payload.email) is not None:
            raise ValidationError.for_field('email', 'User already exists with this email')

        user = User(
            name=payload.name,
            email=payload.email,
            password_hash=hash_password(payload.password, self.auth_config),
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ValidationError.for_field('email', 'User already exists with this email')

        logger.info(f"Registered user {user.id}")
        return user, create_access_token(user.id, self.auth_config)

    def login(self, payload: LoginRequest) -> Tuple[User, str]:
        """Check credentials and return the user with a fresh token.

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong.
        """
        user = self._find_by_email(payload.email)
        if user is None or not verify_password(payload.password, user.password_hash):
            logger.info(f"Failed login attempt for {payload.email}")
            raise AuthenticationError("Invalid credentials")
        return user, create_access_token(user.id, self.auth_config)

    def authenticate(self, token: str) -> User:
        """Resolve a bearer token to its user.

        Raises:
            AuthenticationError: If the token is invalid or the user no longer exists.
        """
        user_id = decode_access_token(token, self.auth_config)
        user = self.session.get(User, user_id)
        if user is None:
            raise AuthenticationError("Invalid token")
        return user

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def serialize(self, user: User) -> Dict:
        return user.to_dict(saved_event_ids=self.saved_event_ids(user))

    def saved_event_ids(self, user: User) -> List[str]:
        rows = (
            self.session.query(SavedEvent.event_id)
            .filter(SavedEvent.user_id == user.id)
            .order_by(SavedEvent.saved_at.asc(), SavedEvent.id.asc())
            .all()
        )
        return [event_id for (event_id,) in rows]

    def update_profile(self, user: User, payload: ProfileUpdate) -> User:
        for field in payload.model_fields_set & {'name', 'avatar'}:
            setattr(user, field, getattr(payload, field))
        self.session.commit()
        logger.info(f"Profile updated for user {user.id}")
        return user

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def dashboard_stats(self, user: User) -> Dict[str, int]:
        """Counts shown on the dashboard.

        savedEvents counts every saved reference, including ones whose event
        has since been deactivated or deleted.
        """
        organized = self.session.query(Event).filter(Event.organizer_id == user.id)
        return {
            'totalEvents': organized.count(),
            'activeEvents': organized.filter(Event.is_active.is_(True)).count(),
            'savedEvents': self.session.query(SavedEvent).filter(SavedEvent.user_id == user.id).count(),
        }

    def my_events(
        self,
        user: User,
        page: int = DEFAULT_PAGE,
        limit: int = MY_EVENTS_DEFAULT_LIMIT,
        status: str = 'all',
    ) -> Tuple[List[Event], Pagination]:
        """Events the user organizes, newest first.

        ``status`` narrows to 'active' or 'inactive' events; any other value lists all of them.
        """
        query = self.session.query(Event).filter(Event.organizer_id == user.id)
        if status == 'active':
            query = query.filter(Event.is_active.is_(True))
        elif status == 'inactive':
            query = query.filter(Event.is_active.is_(False))
        query = query.order_by(Event.created_at.desc(), Event.id.asc())
        return paginate(query.options(joinedload(Event.organizer)), page, limit, count_query=query)

    # ------------------------------------------------------------------
    # Account removal
    # ------------------------------------------------------------------

    def delete_account(self, user: User) -> None:
        """Deactivate the user's events and delete the account.

        Events are kept (inactive) rather than removed.
        """
        user_id = user.id
        deactivated = (
            self.session.query(Event)
            .filter(Event.organizer_id == user_id)
            .update({Event.is_active: False}, synchronize_session=False)
        )
        self.session.query(SavedEvent).filter(SavedEvent.user_id == user_id).delete(synchronize_session=False)
        self.session.delete(user)
        self.session.commit()
        logger.info(f"Deleted user {user_id}; deactivated {deactivated} events")

    def _find_by_email(self, email: str) -> Optional[User]:
        return self.session.query(User).filter(User.email == email.lower()).first()
