"""
Models for imagetool module.

Immutable dataclasses following Single Responsibility Principle.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Optional
from enum import Enum


DEFAULT_BASE_URL = "https://image-backend-u2dd.onrender.com"
NO_IMAGE_MESSAGE = "Please upload an image first"


class Operation(Enum):
    """Remote transformation offered by the processing service."""
    REMOVE_BACKGROUND = "remove-background"
    ENHANCE_QUALITY = "enhance-quality"

    @property
    def endpoint(self) -> str:
        return _ENDPOINTS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def error_message(self) -> str:
        """User-facing message shown when the operation fails."""
        return _ERROR_MESSAGES[self]


_ENDPOINTS = {
    Operation.REMOVE_BACKGROUND: "/remove-background",
    Operation.ENHANCE_QUALITY: "/upload",
}

_LABELS = {
    Operation.REMOVE_BACKGROUND: "Remove Background",
    Operation.ENHANCE_QUALITY: "Enhance Quality",
}

_ERROR_MESSAGES = {
    Operation.REMOVE_BACKGROUND: "Error removing background",
    Operation.ENHANCE_QUALITY: "Error enhancing quality",
}


class RequestState(Enum):
    """Request lifecycle status."""
    IDLE = "idle"
    BUSY = "busy"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ResponseShape(Enum):
    """Body contract of a processing endpoint."""
    JSON_PATH = "json"  # {"processed_image_url": "/path"}
    BINARY = "binary"


@dataclass(frozen=True)
class SelectedImage:
    """Immutable raw image chosen by the user."""
    payload: bytes
    media_type: str = "application/octet-stream"
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.payload)

    def __bool__(self) -> bool:
        return bool(self.payload)


@dataclass(frozen=True)
class ProcessedResult:
    """Immutable displayable reference to a remote operation's output."""
    locator: str
    operation: Operation
    generation: int
    owned: bool = False  # locator is an in-memory handle that must be released


@dataclass(frozen=True)
class ErrorNotice:
    """Immutable user-facing error message."""
    message: str
    kind: str = "error"
    visible: bool = True

    def hidden(self) -> "ErrorNotice":
        return ErrorNotice(self.message, self.kind, visible=False)


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration for a processing session."""
    base_url: str = DEFAULT_BASE_URL
    image_field: str = "image"
    notice_timeout: float = 6.0
    request_timeout: Optional[float] = None  # None waits indefinitely
    binary_operations: FrozenSet[Operation] = field(default_factory=frozenset)

    def shape_for(self, operation: Operation) -> ResponseShape:
        if operation in self.binary_operations:
            return ResponseShape.BINARY
        return ResponseShape.JSON_PATH

    def resolve_url(self, path: str) -> str:
        """Turn a path returned by the service into an absolute URL."""
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
