"""Error taxonomy for processing sessions."""
from typing import Optional


class ImageToolError(RuntimeError):
    """Base class for errors converted into user notices."""

    kind = "error"


class ValidationError(ImageToolError):
    """Raised when a local precondition fails before any request is made."""

    kind = "validation"


class TransportError(ImageToolError):
    """Raised on network failure or a non-success HTTP status."""

    kind = "transport"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ResponseFormatError(ImageToolError):
    """Raised when a response body matches no expected shape."""

    kind = "format"
