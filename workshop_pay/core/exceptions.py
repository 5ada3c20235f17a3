"""Service error taxonomy.

Every error carries the HTTP status it maps to. Upstream and persistence
failures keep the original exception for logging while exposing only a
generic message to callers.
"""

from fastapi import status


class ServiceError(Exception):
    """Base exception for errors raised by the service layer."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str | None = None

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    @property
    def client_message(self) -> str:
        """Message that is safe to return to the caller."""
        return self.public_message or self.message


class ValidationError(ServiceError):
    """Raised when required input is missing or invalid."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(ServiceError):
    """Raised when a webhook signature does not match the payload."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ServiceError):
    """Raised when a correlation key matches no registrant."""

    status_code = status.HTTP_404_NOT_FOUND


class UpstreamError(ServiceError):
    """Raised when the payment provider or mail relay call fails."""

    public_message = "server error"


class PersistenceError(ServiceError):
    """Raised when a registrant store read or write fails."""

    public_message = "server error"


__all__ = [
    "AuthenticationError",
    "NotFoundError",
    "PersistenceError",
    "ServiceError",
    "UpstreamError",
    "ValidationError",
]
