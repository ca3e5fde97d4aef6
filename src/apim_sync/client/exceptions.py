"""Custom exceptions for APIM Sync.

This module defines exception classes for the error conditions that can occur
while talking to API management platforms and while reading or writing the
staging area.
"""


class ApimSyncError(Exception):
    """Base exception for all APIM Sync errors."""

    pass


class APIError(ApimSyncError):
    """Base class for platform API errors."""

    def __init__(self, message: str, status_code: int | None = None, response: dict | None = None):
        """Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code
            response: API response body
        """
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with status code and response."""
        msg = self.message
        if self.status_code:
            msg = f"[{self.status_code}] {msg}"
        if self.response:
            msg = f"{msg}: {self.response}"
        return msg


class AuthenticationError(APIError):
    """Raised when authentication fails (401 Unauthorized)."""

    pass


class AuthorizationError(APIError):
    """Raised when authorization fails (403 Forbidden)."""

    pass


class NotFoundError(APIError):
    """Raised when a resource is not found (404 Not Found)."""

    pass


class ConflictError(APIError):
    """Raised when a resource already exists (409 Conflict)."""

    pass


class RateLimitError(APIError):
    """Raised when API rate limit is exceeded (429 Too Many Requests)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: dict | None = None,
        retry_after: int | None = None,
    ):
        super().__init__(message, status_code, response)
        self.retry_after = retry_after


class ServerError(APIError):
    """Raised when server returns 5xx error."""

    pass


class NetworkError(ApimSyncError):
    """Raised when network-related errors occur (timeouts, connection failures)."""

    pass


class ConfigurationError(ApimSyncError):
    """Raised when the configuration cannot be loaded or is invalid."""

    pass


class StagingError(ApimSyncError):
    """Raised when a staging file cannot be read or written.

    Attributes:
        path: The staging path involved
    """

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(f"{message}: {path}" if path else message)


class TransformationError(ApimSyncError):
    """Raised when a staged payload cannot be mapped to the target form."""

    pass
