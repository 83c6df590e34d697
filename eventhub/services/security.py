"""Password hashing and bearer token helpers."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from ..config.auth import AuthConfig
from .errors import AuthenticationError

logger = logging.getLogger(__name__)

# bcrypt only considers the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode('utf-8')[:BCRYPT_MAX_BYTES]


def hash_password(password: str, config: Optional[AuthConfig] = None) -> str:
    config = config or AuthConfig()
    salt = bcrypt.gensalt(rounds=config.bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed stored hash
        logger.warning("Stored password hash could not be parsed")
        return False


def create_access_token(user_id: str, config: Optional[AuthConfig] = None) -> str:
    """Issue a signed token identifying the user."""
    config = config or AuthConfig()
    now = datetime.now(timezone.utc)
    claims = {
        'sub': user_id,
        'iat': now,
        'exp': now + timedelta(days=config.jwt_expires_days),
    }
    return jwt.encode(claims, config.jwt_secret, algorithm=config.jwt_algorithm)


def decode_access_token(token: str, config: Optional[AuthConfig] = None) -> str:
    """Return the user id carried by a token.

    Raises:
        AuthenticationError: If the token is expired, malformed or unsigned.
    """
    config = config or AuthConfig()
    try:
        claims = jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")

    user_id = claims.get('sub')
    if not user_id:
        raise AuthenticationError("Invalid token")
    return user_id
