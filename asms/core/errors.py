"""Service-level error taxonomy.

Services raise these exceptions; the API layer turns them into JSON error
responses carrying ``status_code``.
"""

from fastapi import status


class ServiceError(Exception):
    """Base class for errors deliberately produced by a service."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Raised when a required field is missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class AuthenticationError(ServiceError):
    """Raised when a credential is missing, invalid or expired."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class AuthorizationError(ServiceError):
    """Raised when the caller does not own the resource or lacks the role."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(ServiceError):
    """Raised on duplicate applications, bank details or accounts."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class PreconditionError(ServiceError):
    """Raised when an operation is not allowed in the current state."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Precondition failed"


class StorageError(ServiceError):
    """Raised on persistence or filesystem failures.

    The message is safe to return to callers; details go to the log.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Storage failure"


def format_validation_errors(errors: list[dict]) -> str:
    """Join pydantic error entries into one ``location: message`` string."""
    return "; ".join(f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in errors)
