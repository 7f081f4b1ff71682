"""
Custom exception classes for the relay.

Each exception carries the HTTP status used when it escapes an HTTP
handler. WebSocket code handles them explicitly and turns them into
error envelopes instead.
"""


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    Attributes:
        message: Human-readable error message.
        http_status: HTTP status code for HTTP responses.
    """

    http_status: int = 500

    def __init__(self, message: str):
        """
        Initialize the exception with a message.

        Args:
            message: Human-readable error description.
        """
        self.message = message
        super().__init__(message)


class InvalidMessageError(AppException):
    """
    Inbound WebSocket payload failed parsing or validation.

    HTTP Status: 400 Bad Request
    """

    http_status = 400

    def __init__(self, message: str, reason: str = ""):
        super().__init__(message)
        self.reason = reason


class StaticFileError(AppException):
    """
    A static file could not be read from disk.

    HTTP Status: 500 Internal Server Error
    """

    http_status = 500
