"""Session state record and its transitions."""
from dataclasses import dataclass
from typing import Optional

from ..models import ErrorNotice, ProcessedResult, RequestState, SelectedImage


@dataclass(frozen=True)
class SessionView:
    """Read-only snapshot handed to the display layer."""
    request_state: RequestState
    original_locator: Optional[str] = None
    result_locator: Optional[str] = None
    notice_message: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self.request_state is RequestState.BUSY

    @property
    def actions_enabled(self) -> bool:
        return not self.busy

    @property
    def notice_visible(self) -> bool:
        return self.notice_message is not None


@dataclass
class SessionState:
    """
    Mutable state for a single session.

    Fields are only changed through the transition methods below, so that
    image, result, busy flag and notice never disagree. Methods that drop a
    ProcessedResult return it so the caller can release its locator.
    """
    image: Optional[SelectedImage] = None
    image_locator: Optional[str] = None
    generation: int = 0
    result: Optional[ProcessedResult] = None
    request_state: RequestState = RequestState.IDLE
    notice: Optional[ErrorNotice] = None

    @property
    def busy(self) -> bool:
        return self.request_state is RequestState.BUSY

    def select(self, image: SelectedImage, locator: str) -> Optional[ProcessedResult]:
        dropped = self.result
        self.image = image
        self.image_locator = locator
        self.generation += 1
        self.result = None
        self.notice = None
        if not self.busy:
            self.request_state = RequestState.IDLE
        return dropped

    def begin(self) -> Optional[ProcessedResult]:
        if self.busy:
            raise RuntimeError("A request is already in flight")
        dropped = self.result
        self.result = None
        self.request_state = RequestState.BUSY
        return dropped

    def succeed(self, result: ProcessedResult) -> None:
        self.result = result
        self.request_state = RequestState.SUCCEEDED

    def fail(self, notice: ErrorNotice) -> None:
        self.request_state = RequestState.FAILED
        self.notice = notice

    def settle_stale(self) -> None:
        """End an in-flight request whose image has been replaced."""
        self.request_state = RequestState.IDLE

    def show_notice(self, notice: ErrorNotice) -> None:
        self.notice = notice

    def hide_notice(self) -> bool:
        if self.notice is None or not self.notice.visible:
            return False
        self.notice = self.notice.hidden()
        return True

    def view(self) -> SessionView:
        notice = self.notice
        return SessionView(
            request_state=self.request_state,
            original_locator=self.image_locator,
            result_locator=self.result.locator if self.result else None,
            notice_message=notice.message if notice and notice.visible else None,
        )
