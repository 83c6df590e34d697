"""Models package initialization."""

from .base import Base
from .event import Event, CATEGORIES
from .user import User, SavedEvent

__all__ = ['Base', 'Event', 'CATEGORIES', 'User', 'SavedEvent']
