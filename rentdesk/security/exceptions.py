"""Security-layer exceptions. Typed, no HTTP."""


class SecurityError(Exception):
    """Base for all security-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuthenticationError(SecurityError):
    """Raised when no identity can be loaded for the request (missing/invalid token, unknown user)."""


class AuthorizationError(SecurityError):
    """Raised when the caller's role or scope does not allow the operation."""


class RateLimitExceededError(SecurityError):
    """Raised when an identifier exhausted its request budget for the current window."""

    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message)
        self.retry_after = retry_after
