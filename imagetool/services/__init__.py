"""Services for imagetool module."""
from .api_client import HTTPProcessingClient
from .image_loader import detect_media_type, load_image
from .locators import LocatorRegistry
from .responses import ResponseNormalizer

__all__ = [
    "HTTPProcessingClient",
    "LocatorRegistry",
    "ResponseNormalizer",
    "detect_media_type",
    "load_image",
]
