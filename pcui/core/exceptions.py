"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
Resource clients never let these escape; they are folded into failed
OperationResult values at the client boundary.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class AuthError(ApplicationError):
    """Raised when the token exchange fails."""

    def __init__(self, message: str = "Login failed.") -> None:
        super().__init__(message, code="AUTH_LOGIN_FAILED")


class TransportError(ApplicationError):
    """Raised when an HTTP call fails at the network or status level."""

    def __init__(self, message: str = "Transport error", status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message, code="SYS_TRANSPORT_ERROR")


class NotFoundError(TransportError):
    """Raised when the target Box or file does not exist."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=404)
        self.code = "RES_NOT_FOUND"


class MalformedResponseError(ApplicationError):
    """Raised when a response body does not have the expected shape."""

    def __init__(self, message: str = "Malformed response") -> None:
        super().__init__(message, code="SYS_MALFORMED_RESPONSE")
