"""Python client for the EventHub API, with stateful stores on top."""

from .api import ApiError, EventHubClient, NetworkError
from .session_storage import AUTH_STORAGE_KEY, JSONFileStorage, MemoryStorage
from .store import (
    ActionResult,
    AuthState,
    AuthStore,
    DashboardStats,
    EventState,
    EventStore,
    Filters,
    PaginationState,
)

__all__ = [
    'ApiError',
    'EventHubClient',
    'NetworkError',
    'AUTH_STORAGE_KEY',
    'JSONFileStorage',
    'MemoryStorage',
    'ActionResult',
    'AuthState',
    'AuthStore',
    'DashboardStats',
    'EventState',
    'EventStore',
    'Filters',
    'PaginationState',
]
