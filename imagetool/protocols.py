"""
Protocols (Interfaces) for Dependency Inversion.

Following Interface Segregation Principle - small, focused interfaces.
"""
from typing import Any, Protocol, runtime_checkable

from .models import SelectedImage


@runtime_checkable
class IProcessingClient(Protocol):
    """Interface for the remote processing service."""

    async def post_image(self, endpoint: str, image: SelectedImage) -> Any:
        """POST the image as multipart form data and return the response."""
        ...
