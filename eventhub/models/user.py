"""User and saved-event models."""

from typing import Dict, Any

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint

from .base import Base, new_id, utcnow, isoformat_utc


class User(Base):
    """
    Registered user.

    Fields:
        id: Unique identifier (UUID string)
        name: Display name
        email: Login email, unique and stored lower-cased
        password_hash: bcrypt hash, never serialized
        avatar: Optional avatar image URL
        created_at / updated_at: Bookkeeping timestamps
    """
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    avatar = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self, saved_event_ids=None) -> Dict[str, Any]:
        """Convert to the public dictionary form (no password)."""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'avatar': self.avatar,
            'savedEvents': list(saved_event_ids or []),
            'createdAt': isoformat_utc(self.created_at),
        }

    def __str__(self) -> str:
        """String representation."""
        return f"User(id={self.id}, email={self.email})"


class SavedEvent(Base):
    """
    A user's saved reference to an event.

    event_id carries no foreign key: removing an event leaves the reference
    in place, and read paths skip references to missing or inactive events.
    """
    __tablename__ = 'saved_events'
    __table_args__ = (
        UniqueConstraint('user_id', 'event_id', name='uq_saved_events_user_event'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    event_id = Column(String(36), nullable=False, index=True)
    saved_at = Column(DateTime, default=utcnow, nullable=False)

    def __str__(self) -> str:
        """String representation."""
        return f"SavedEvent(user_id={self.user_id}, event_id={self.event_id})"
