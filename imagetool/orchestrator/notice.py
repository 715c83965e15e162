"""Auto-expiry for error notices."""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class NoticeTimer:
    """Runs ``on_expire(token)`` once ``timeout`` seconds after ``schedule``.

    Scheduling again or cancelling drops the pending expiry.
    """

    def __init__(self, timeout: float, on_expire: Callable[[Any], Awaitable[None]]):
        self._timeout = timeout
        self._on_expire = on_expire
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self, token: Any) -> None:
        self.cancel()
        if self._timeout is None or self._timeout <= 0:
            return
        self._task = asyncio.create_task(self._expire_after(token))

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _expire_after(self, token: Any) -> None:
        await asyncio.sleep(self._timeout)
        self._task = None
        try:
            await self._on_expire(token)
        except Exception:
            logger.exception("Notice expiry handler failed")
