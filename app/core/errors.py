"""Application exception types rendered as `{"error": message}` responses."""


class ApiError(Exception):
    """Base error for failures that end the current request with a JSON error body."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BadRequestError(ApiError):
    """Raised when request input is missing or unsafe."""

    status_code = 400


class TokenError(ApiError):
    """Raised for any missing, invalid, expired or tampered token.

    The message is deliberately the same for every cause.
    """

    status_code = 400

    def __init__(self, message: str = "Invalid or expired token.") -> None:
        super().__init__(message)


class RateLimitError(ApiError):
    """Raised when the caller exceeded a magic-link send limit."""

    status_code = 429

    def __init__(self, message: str, retry_after: int | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(message)


class ConfigurationError(ApiError):
    """Raised when a setting required by the operation is missing."""

    status_code = 500


class ServiceError(ApiError):
    """Raised when the datastore or mail transport fails; message is safe for clients."""

    status_code = 500
