"""Error taxonomy shared by the lifecycle modules and the HTTP layer.

Every error carries the status code and message the API reports for it, so
route handlers can let them propagate and the exception handlers in
``main`` turn them into the response envelope.
"""
from typing import Optional


class AppError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[dict[str, list[str]]] = None):
        self.message = message or self.message
        self.errors = errors
        super().__init__(self.message)


class Unauthenticated(AppError):
    status_code = 401
    message = "Authentication required"


class InvalidCredentials(Unauthenticated):
    message = "Invalid credentials"


class UserNotFound(Unauthenticated):
    message = "User not found"


class TokenExpiredOrInvalid(AppError):
    status_code = 403
    message = "Invalid or expired token"


class InsufficientPermissions(AppError):
    status_code = 403
    message = "Insufficient permissions"


class ValidationFailed(AppError):
    status_code = 400
    message = "Validation failed"

    @classmethod
    def field(cls, name: str, message: str) -> "ValidationFailed":
        return cls(errors={name: [message]})


class NotFound(AppError):
    status_code = 404
    message = "Not found"


class ConflictError(AppError):
    status_code = 409
    message = "Conflict"


class AlreadyCheckedIn(ConflictError):
    message = "User is already checked in"


class InvalidTransition(ConflictError):
    message = "Invalid status transition"


class StaleWrite(ConflictError):
    message = "Record was modified by another request"


class DuplicateValue(ConflictError):
    message = "Value already exists"


class FieldErrors:
    """Accumulates field level messages and raises them all at once."""

    def __init__(self):
        self.errors: dict[str, list[str]] = {}

    def add(self, name: str, message: str) -> None:
        self.errors.setdefault(name, []).append(message)

    def __bool__(self) -> bool:
        return bool(self.errors)

    def raise_if_any(self) -> None:
        if self.errors:
            raise ValidationFailed(errors=self.errors)
