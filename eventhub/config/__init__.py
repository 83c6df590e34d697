"""Configuration package."""

from .environment import ENVIRONMENT, IS_PRODUCTION_ENVIRONMENT
from .auth import AuthConfig
from .cors import CORS_CONFIG

__all__ = ['ENVIRONMENT', 'IS_PRODUCTION_ENVIRONMENT', 'AuthConfig', 'CORS_CONFIG']
