"""
imagetool - client for a remote image processing service.

Select an image, send it for background removal or quality enhancement,
and get back a displayable reference to the result.

Usage:
    from imagetool import UploadOrchestrator, ClientConfig, Operation, load_image

    config = ClientConfig(base_url="https://svc.example")
    async with UploadOrchestrator(config) as session:
        await session.acquire_image(load_image(path))
        state = await session.submit(Operation.ENHANCE_QUALITY)
        if state is RequestState.SUCCEEDED:
            print(session.result.locator)
        else:
            print(session.notice.message)
"""
from .errors import ImageToolError, ResponseFormatError, TransportError, ValidationError
from .models import (
    ClientConfig,
    ErrorNotice,
    Operation,
    ProcessedResult,
    RequestState,
    ResponseShape,
    SelectedImage,
)
from .orchestrator import SessionView, UploadOrchestrator
from .services import HTTPProcessingClient, LocatorRegistry, load_image

__version__ = "0.1.0"
__all__ = [
    # Main
    "UploadOrchestrator",
    "SessionView",
    # Models
    "ClientConfig",
    "ErrorNotice",
    "Operation",
    "ProcessedResult",
    "RequestState",
    "ResponseShape",
    "SelectedImage",
    # Errors
    "ImageToolError",
    "ResponseFormatError",
    "TransportError",
    "ValidationError",
    # Services
    "HTTPProcessingClient",
    "LocatorRegistry",
    "load_image",
]
