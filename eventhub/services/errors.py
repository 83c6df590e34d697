"""Service error codes and exceptions."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Dict, Any


class ErrorCode(Enum):
    """Service error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    NOT_FOUND = "NOT_FOUND"


@dataclass(frozen=True)
class FieldError:
    """A single invalid input field."""

    field: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {'field': self.field, 'message': self.message}


class ServiceError(Exception):
    """Base service error with code, HTTP status and user-safe message."""

    code: ErrorCode
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {'message': self.message}

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(ServiceError):
    """Raised when input fails field-level validation."""

    code = ErrorCode.VALIDATION_FAILED
    status_code = 400

    def __init__(self, errors: List[FieldError], message: str = "Validation failed") -> None:
        super().__init__(message)
        self.errors = list(errors)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls([FieldError(field, message)])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'message': self.message,
            'errors': [error.to_dict() for error in self.errors],
        }


class AuthenticationError(ServiceError):
    """Raised when a credential is missing, invalid or expired."""

    code = ErrorCode.NOT_AUTHENTICATED
    status_code = 401

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class AuthorizationError(ServiceError):
    """Raised when an authenticated caller does not own the resource."""

    code = ErrorCode.NOT_AUTHORIZED
    status_code = 403

    def __init__(self, message: str = "Not authorized") -> None:
        super().__init__(message)


class NotFoundError(ServiceError):
    """Raised when a resource is missing or hidden from readers."""

    code = ErrorCode.NOT_FOUND
    status_code = 404

    def __init__(self, resource: str = "Resource") -> None:
        super().__init__(f"{resource} not found")
