"""Request validation schemas."""

from .base import field_errors
from .events import EventCreate, EventUpdate, LocationIn, Coordinates
from .users import RegisterRequest, LoginRequest, ProfileUpdate

__all__ = [
    'field_errors',
    'EventCreate',
    'EventUpdate',
    'LocationIn',
    'Coordinates',
    'RegisterRequest',
    'LoginRequest',
    'ProfileUpdate',
]
