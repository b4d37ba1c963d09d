"""
Domain errors raised by the service layer.

Services never build HTTP responses themselves.  They raise one of the
exceptions below and ``main.create_app`` registers handlers that turn
each class into a JSON body of the form ``{"error": "<message>"}`` with
the class's ``status_code``.
"""

from fastapi import status


class RegistryError(Exception):
    """Base class for all errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgument(RegistryError):
    """Malformed or missing request fields."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(RegistryError):
    """No product or registry entry matches the given keys."""

    status_code = status.HTTP_404_NOT_FOUND


class InvalidState(RegistryError):
    """The requested status transition is not allowed."""

    status_code = status.HTTP_409_CONFLICT


class ResourceExhausted(RegistryError):
    """All registry ids for the day are taken."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class StorageFailure(RegistryError):
    """The backing store could not be read or written.

    The message is kept for logs; clients only see a generic failure.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Storage failure."
