"""API route modules."""

from . import auth, events, health, users

__all__ = ['auth', 'events', 'health', 'users']
