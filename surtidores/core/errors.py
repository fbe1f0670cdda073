"""
Domain error taxonomy.

Services raise these; the application maps each class to an HTTP status in
``surtidores.main``. Routers never build error responses themselves.
"""

from dataclasses import dataclass


class DomainError(Exception):
    """Base class for every expected failure of a domain operation."""

    status_code: int = 400
    default_message: str = "Invalid request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(DomainError):
    status_code = 401
    default_message = "Not authenticated"


class ForbiddenError(DomainError):
    status_code = 403
    default_message = "Not allowed"


class NotFoundError(DomainError):
    """Entity missing, or present but not owned by the caller when ownership is non-disclosed."""

    status_code = 404
    default_message = "Not found"


class InvalidStateError(DomainError):
    status_code = 400
    default_message = "Operation not allowed in the current state"


class InvalidSourceError(DomainError):
    status_code = 400
    default_message = "Operation not allowed for this source"


class InvalidTargetError(DomainError):
    status_code = 400
    default_message = "Operation not allowed on this target"


class SelfActionError(DomainError):
    status_code = 400
    default_message = "You cannot perform this action on your own content"


class ConflictError(DomainError):
    status_code = 409
    default_message = "Already exists"


@dataclass
class FieldError:
    field: str
    message: str


class ValidationError(DomainError):
    """Malformed input; carries one message per offending field."""

    status_code = 400
    default_message = "Invalid data"

    def __init__(self, message: str | None = None, errors: list[FieldError] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, [FieldError(field=field, message=message)])
