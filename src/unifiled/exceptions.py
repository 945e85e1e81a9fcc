"""Custom exceptions for unifiled."""


class UnifiLedException(Exception):
    """Base class for unifiled exceptions."""


class AuthError(UnifiLedException):
    """Raised when the login exchange with the controller fails."""


class ApiError(UnifiLedException):
    """Raised when a controller request fails."""

    def __init__(self, status_code: int, error_message: str) -> None:
        """Initialize the API error."""
        self.status_code = status_code
        self.error_message = error_message
        super().__init__(f"API Error {status_code}: {error_message}")
