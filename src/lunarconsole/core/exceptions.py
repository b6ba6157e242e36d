"""Exceptions raised by the console core.

Validation failures are returned as values, not raised. These exceptions
cover the remote backend and schema definitions that cannot be compiled.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lunarconsole.domain.services.collection_validator import CollectionValidationError


class ConsoleError(Exception):
    """Base class for all console errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BackendError(ConsoleError):
    """Raised when a call to the backend API does not succeed."""


class NetworkFailure(BackendError):
    """Raised when the backend cannot be reached, times out, or the call is aborted."""


class ServerRejected(BackendError):
    """Raised when the backend answers with a 4xx or 5xx status.

    Args:
        message: Best-available message extracted from the response body.
        status_code: HTTP status code returned by the backend.
        validation_errors: Server-side validation messages, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        validation_errors: list[str] | None = None,
    ) -> None:
        self.status_code = status_code
        self.validation_errors = validation_errors or []
        super().__init__(message)


class SchemaValidationError(ConsoleError):
    """Raised when a collection schema cannot be compiled into a validator."""

    def __init__(self, errors: "list[CollectionValidationError]") -> None:
        self.errors = errors
        super().__init__("; ".join(e.message for e in errors) or "Invalid collection schema")
