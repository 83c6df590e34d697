"""Request schemas for registration, login and profile updates."""

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, TypeAdapter, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from .base import is_http_url

NAME_LENGTH = (2, 50)
MIN_PASSWORD_LENGTH = 6
PASSWORD_PATTERN = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)')

_email_adapter = TypeAdapter(EmailStr)


def check_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError('Name is required')
    value = value.strip()
    if not NAME_LENGTH[0] <= len(value) <= NAME_LENGTH[1]:
        raise ValueError('Name must be between 2 and 50 characters')
    return value


def check_email(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError('Please provide a valid email')
    try:
        email = _email_adapter.validate_python(value.strip())
    except PydanticValidationError:
        raise ValueError('Please provide a valid email')
    return email.lower()


def check_avatar(value: Any) -> str:
    if not isinstance(value, str) or not is_http_url(value.strip()):
        raise ValueError('Avatar must be a valid URL')
    return value.strip()


class RegisterRequest(BaseModel):
    model_config = ConfigDict(validate_default=True)

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator('name', 'email', mode='before')
    @classmethod
    def validate_identity(cls, value, info: ValidationInfo):
        if info.field_name == 'name':
            return check_name(value)
        return check_email(value)

    @field_validator('password', mode='before')
    @classmethod
    def validate_password(cls, value):
        if not isinstance(value, str) or len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError('Password must be at least 6 characters long')
        if not PASSWORD_PATTERN.match(value):
            raise ValueError(
                'Password must contain at least one lowercase letter, '
                'one uppercase letter, and one number'
            )
        return value


class LoginRequest(BaseModel):
    model_config = ConfigDict(validate_default=True)

    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator('email', mode='before')
    @classmethod
    def validate_email(cls, value):
        return check_email(value)

    @field_validator('password', mode='before')
    @classmethod
    def validate_password(cls, value):
        if not isinstance(value, str) or not value:
            raise ValueError('Password is required')
        return value


class ProfileUpdate(BaseModel):
    """Partial profile update; only name and avatar are editable."""

    name: Optional[str] = None
    avatar: Optional[str] = None

    @field_validator('name', mode='before')
    @classmethod
    def validate_name(cls, value):
        return check_name(value)

    @field_validator('avatar', mode='before')
    @classmethod
    def validate_avatar(cls, value):
        return check_avatar(value)
