"""Authentication settings."""

import os
from dataclasses import dataclass

from .environment import IS_PRODUCTION_ENVIRONMENT, env_int

DEVELOPMENT_JWT_SECRET = "eventhub-development-secret"


@dataclass
class AuthConfig:
    """Token and password hashing settings."""

    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 0
    bcrypt_rounds: int = 0

    def __post_init__(self):
        """Load settings from environment where not provided."""
        if not self.jwt_secret:
            self.jwt_secret = os.environ.get('JWT_SECRET', '')
        if not self.jwt_expires_days:
            self.jwt_expires_days = env_int('JWT_EXPIRES_DAYS', 7)
        if not self.bcrypt_rounds:
            self.bcrypt_rounds = env_int('BCRYPT_ROUNDS', 12)

        if not self.jwt_secret:
            if IS_PRODUCTION_ENVIRONMENT:
                raise ValueError("JWT_SECRET environment variable is required in production")
            self.jwt_secret = DEVELOPMENT_JWT_SECRET
