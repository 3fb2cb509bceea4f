"""
Custom Exceptions.

Relay-specific exception classes for consistent error handling.
Every error carries a stable ``code`` (the error kind) and, when it wraps a
lower-level failure, the original exception as ``cause``.
"""


class RelayError(Exception):
    """Base exception for all relay errors."""

    def __init__(
        self,
        message: str,
        code: str = "RELAY_INTERNAL_ERROR",
        cause: BaseException | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class CommandDecodeError(RelayError):
    """Raised when an inbound bus message cannot be decoded into a command."""

    def __init__(self, message: str = "Malformed notification", cause: BaseException | None = None) -> None:
        super().__init__(message, code="RELAY_DECODE_ERROR", cause=cause)


class FileAccessError(RelayError):
    """Raised when a local file needed by a command cannot be opened."""

    def __init__(self, message: str = "File not accessible", cause: BaseException | None = None) -> None:
        super().__init__(message, code="RELAY_FILE_ACCESS_ERROR", cause=cause)


class RequestBuildError(RelayError):
    """Raised when an outbound request body cannot be constructed."""

    def __init__(self, message: str = "Request construction failed", cause: BaseException | None = None) -> None:
        super().__init__(message, code="RELAY_REQUEST_BUILD_ERROR", cause=cause)


class TransportError(RelayError):
    """Raised when an outbound request fails before a response is received."""

    def __init__(self, message: str = "Transport failure", cause: BaseException | None = None) -> None:
        super().__init__(message, code="RELAY_TRANSPORT_ERROR", cause=cause)


class UnexpectedStatusError(RelayError):
    """Raised when the Bot API answers with a status other than 200."""

    def __init__(self, status_code: int, url: str = "", body: str = "") -> None:
        self.status_code = status_code
        self.url = url
        self.body = body
        super().__init__(
            f"Http status {status_code} not equals 200",
            code="RELAY_UNEXPECTED_STATUS",
        )
