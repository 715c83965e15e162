"""
Response normalization - Single Responsibility: turn a service response
into one displayable locator.

Two body contracts exist:
- JSON ``{"processed_image_url": "/path"}``, resolved against the base URL
- a raw image body, registered as an in-memory handle
"""
import logging
from typing import Any

from ..errors import ResponseFormatError
from ..models import ClientConfig, Operation, ProcessedResult, ResponseShape
from .locators import LocatorRegistry

logger = logging.getLogger(__name__)

RESULT_KEY = "processed_image_url"


def _media_type(response: Any) -> str:
    content_type = response.headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower()


class ResponseNormalizer:
    """Maps a successful response onto a ProcessedResult."""

    def __init__(self, config: ClientConfig, locators: LocatorRegistry):
        self._config = config
        self._locators = locators

    def normalize(self, response: Any, operation: Operation, generation: int) -> ProcessedResult:
        if self._config.shape_for(operation) is ResponseShape.BINARY:
            return self._from_binary(response, operation, generation)
        return self._from_json(response, operation, generation)

    def _from_json(self, response: Any, operation: Operation, generation: int) -> ProcessedResult:
        try:
            data = response.json()
        except ValueError as exc:
            raise ResponseFormatError(
                f"{operation.endpoint}: expected JSON body, got {_media_type(response) or 'unknown'}"
            ) from exc

        if not isinstance(data, dict):
            raise ResponseFormatError(
                f"{operation.endpoint}: expected JSON object, got {type(data).__name__}"
            )

        path = data.get(RESULT_KEY)
        if not isinstance(path, str) or not path.strip():
            raise ResponseFormatError(
                f"{operation.endpoint}: missing or empty '{RESULT_KEY}' in {sorted(data)}"
            )

        return ProcessedResult(
            locator=self._config.resolve_url(path.strip()),
            operation=operation,
            generation=generation,
        )

    def _from_binary(self, response: Any, operation: Operation, generation: int) -> ProcessedResult:
        media_type = _media_type(response)
        if not media_type.startswith("image/"):
            raise ResponseFormatError(
                f"{operation.endpoint}: expected image body, got {media_type or 'no content type'}"
            )

        content = response.content
        if not content:
            raise ResponseFormatError(f"{operation.endpoint}: empty image body")

        return ProcessedResult(
            locator=self._locators.create(content, media_type),
            operation=operation,
            generation=generation,
            owned=True,
        )
