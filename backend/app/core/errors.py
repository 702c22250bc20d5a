"""
Domain exceptions shared by connectors, services and API handlers.
"""


class AppError(Exception):
    """Base class for errors rendered as ``{success: false, error}`` payloads."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UpstreamError(AppError):
    """Raised when the commerce API fails at transport or application level."""

    status_code = 502


class NotFoundError(AppError):
    """Raised when a batch job id is unknown to the registry."""

    status_code = 404


class SerializationError(AppError):
    """Raised when orders cannot be flattened or encoded as CSV."""

    status_code = 500
