"""HTTP adapter for the remote processing service."""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..errors import TransportError
from ..models import SelectedImage

logger = logging.getLogger(__name__)


class HTTPProcessingClient:
    """
    HTTP client adapter for processing calls.

    Implements IProcessingClient protocol. Every call is a single attempt;
    failures are reported to the caller, never retried here.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        image_field: str = "image",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url
        self._timeout = timeout
        self._image_field = image_field
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def post_image(self, endpoint: str, image: SelectedImage) -> httpx.Response:
        if not self._client:
            raise RuntimeError("HTTPProcessingClient not initialized. Use 'async with' context.")

        files = {
            self._image_field: (image.filename or "image", image.payload, image.media_type),
        }
        logger.debug("POST %s (%d bytes, %s)", endpoint, image.size, image.media_type)

        try:
            response = await self._client.post(endpoint, files=files)
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {endpoint} failed: {exc}") from exc

        if not response.is_success:
            try:
                error_detail = response.json()
            except ValueError:
                error_detail = response.text
            raise TransportError(
                f"API error {response.status_code} on POST {endpoint}: {error_detail}",
                status_code=response.status_code,
            )

        return response
