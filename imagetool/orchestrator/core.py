"""Core orchestrator - owns the session state machine."""
import asyncio
import logging
from typing import Callable, Optional, Union

from ..errors import ImageToolError, ResponseFormatError, ValidationError
from ..models import (
    NO_IMAGE_MESSAGE,
    ClientConfig,
    ErrorNotice,
    Operation,
    ProcessedResult,
    RequestState,
    SelectedImage,
)
from ..protocols import IProcessingClient
from ..services.api_client import HTTPProcessingClient
from ..services.locators import LocatorRegistry
from ..services.responses import ResponseNormalizer
from ..utils.events import EventEmitter
from .notice import NoticeTimer
from .state import SessionState, SessionView

logger = logging.getLogger(__name__)


class UploadOrchestrator:
    """
    Orchestrates image selection, processing requests and result display.

    Follows:
    - Dependency Injection (processing client injected)
    - Single Responsibility (wire format in services, state in SessionState)

    Usage:
        async with UploadOrchestrator(ClientConfig(base_url=url)) as session:
            session.on("state_changed", render)
            await session.acquire_image(load_image(path))
            state = await session.submit(Operation.REMOVE_BACKGROUND)

    Every failure ends up as an ErrorNotice; nothing raised by the service
    escapes ``submit``.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        client: Optional[IProcessingClient] = None,
        locators: Optional[LocatorRegistry] = None,
        events: Optional[EventEmitter] = None,
    ):
        """
        Initialize orchestrator with dependencies.

        Args:
            config: Session configuration
            client: Pre-built processing client; an HTTPProcessingClient
                is created (and closed) by the orchestrator when omitted
            locators: Registry for in-memory display handles
            events: Emitter receiving ``state_changed`` notifications
        """
        self._config = config or ClientConfig()
        self._external_client = client
        self._client: Optional[IProcessingClient] = client
        self._owned_client: Optional[HTTPProcessingClient] = None
        self._locators = locators or LocatorRegistry()
        self._events = events or EventEmitter()
        self._normalizer = ResponseNormalizer(self._config, self._locators)
        self._notice_timer = NoticeTimer(self._config.notice_timeout, self._expire_notice)
        self._state = SessionState()

    async def __aenter__(self):
        """Initialize the processing client."""
        if self._external_client is None:
            self._owned_client = HTTPProcessingClient(
                self._config.base_url,
                timeout=self._config.request_timeout,
                image_field=self._config.image_field,
            )
            await self._owned_client.__aenter__()
            self._client = self._owned_client
        return self

    async def __aexit__(self, *args):
        """Cleanup resources; session state does not outlive the session."""
        self._notice_timer.cancel()
        if self._owned_client:
            await self._owned_client.__aexit__(*args)
            self._owned_client = None
            self._client = None
        released = self._locators.revoke_all()
        if released:
            logger.debug("Released %d display handle(s) on close", released)

    # -- read side ---------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def locators(self) -> LocatorRegistry:
        return self._locators

    @property
    def request_state(self) -> RequestState:
        return self._state.request_state

    @property
    def selected_image(self) -> Optional[SelectedImage]:
        return self._state.image

    @property
    def result(self) -> Optional[ProcessedResult]:
        return self._state.result

    @property
    def notice(self) -> Optional[ErrorNotice]:
        notice = self._state.notice
        return notice if notice and notice.visible else None

    def view(self) -> SessionView:
        return self._state.view()

    def on(self, event_name: str, callback: Callable) -> None:
        self._events.on(event_name, callback)

    def off(self, event_name: str, callback: Callable) -> None:
        self._events.off(event_name, callback)

    # -- transitions -------------------------------------------------------

    async def acquire_image(self, image: Optional[SelectedImage]) -> bool:
        """Store ``image`` as the selection. Empty input is ignored."""
        if not image:
            logger.debug("Ignoring empty image acquisition")
            return False

        previous_locator = self._state.image_locator
        locator = self._locators.create(image.payload, image.media_type)
        dropped = self._state.select(image, locator)
        self._notice_timer.cancel()

        if previous_locator:
            self._locators.revoke(previous_locator)
        self._release(dropped)

        logger.info(
            "Acquired %s (%d bytes, %s)",
            image.filename or "image", image.size, image.media_type,
        )
        if self._state.busy:
            logger.info("Image replaced while a request is in flight; its result will be discarded")

        await self._notify()
        return True

    async def submit(self, operation: Union[Operation, str]) -> RequestState:
        """
        Process the selected image remotely.

        Returns the request state once the call settles. A call made while
        another request is in flight is ignored.
        """
        operation = Operation(operation)

        if self._state.busy:
            logger.warning("Ignoring %s: a request is already in flight", operation.label)
            return self._state.request_state

        image = self._state.image
        if image is None:
            error = ValidationError(NO_IMAGE_MESSAGE)
            logger.info("Rejected %s: %s", operation.label, error)
            await self._show_notice(ErrorNotice(str(error), kind=error.kind))
            return self._state.request_state

        generation = self._state.generation
        self._release(self._state.begin())
        await self._notify()

        logger.info("Submitting %s to %s", operation.label, operation.endpoint)
        result: Optional[ProcessedResult] = None
        error_kind = None
        try:
            response = await self._client.post_image(operation.endpoint, image)
            result = self._normalizer.normalize(response, operation, generation)
        except asyncio.CancelledError as cancelled:
            self._state.settle_stale()
            try:
                await self._notify()
            finally:
                raise cancelled
        except ResponseFormatError as exc:
            logger.error("Unexpected response from %s: %s", operation.endpoint, exc)
            error_kind = exc.kind
        except ImageToolError as exc:
            logger.error("%s failed: %s", operation.label, exc)
            error_kind = exc.kind
        except Exception as exc:
            logger.error("%s failed unexpectedly: %s", operation.label, exc, exc_info=True)
            error_kind = "transport"

        return await self._complete(operation, generation, result, error_kind)

    async def dismiss_error(self) -> bool:
        """Hide the visible notice; nothing else changes."""
        self._notice_timer.cancel()
        if not self._state.hide_notice():
            return False
        await self._notify()
        return True

    # -- internals ---------------------------------------------------------

    async def _complete(
        self,
        operation: Operation,
        generation: int,
        result: Optional[ProcessedResult],
        error_kind: Optional[str],
    ) -> RequestState:
        if generation != self._state.generation:
            logger.info("Discarding stale %s response for a replaced image", operation.label)
            self._release(result)
            self._state.settle_stale()
            await self._notify()
            return self._state.request_state

        if result is not None:
            self._state.succeed(result)
            logger.info("%s succeeded: %s", operation.label, result.locator)
            await self._notify()
        else:
            notice = ErrorNotice(operation.error_message, kind=error_kind or "transport")
            self._state.fail(notice)
            self._notice_timer.schedule(notice)
            await self._notify()
        return self._state.request_state

    async def _show_notice(self, notice: ErrorNotice) -> None:
        self._state.show_notice(notice)
        self._notice_timer.schedule(notice)
        await self._notify()

    async def _expire_notice(self, notice: ErrorNotice) -> None:
        if self._state.notice is not notice:
            return
        if self._state.hide_notice():
            logger.debug("Notice expired: %s", notice.message)
            await self._notify()

    def _release(self, result: Optional[ProcessedResult]) -> None:
        if result is not None and result.owned:
            self._locators.revoke(result.locator)

    async def _notify(self) -> None:
        await self._events.state_changed(self.view())
