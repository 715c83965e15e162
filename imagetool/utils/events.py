"""Session event dispatch for front ends."""
from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, Union

if TYPE_CHECKING:
    from ..orchestrator.state import SessionView

logger = logging.getLogger(__name__)

STATE_CHANGED = "state_changed"

Listener = Callable[[Any], Optional[Awaitable[None]]]
StateListener = Callable[["SessionView"], Union[None, Awaitable[None]]]


class EventEmitter:
    """
    Delivers session events to subscribed listeners.

    Listeners run in subscription order on the emitting task. A listener may
    call back into the session; the nested event is delivered before the
    outer emit continues with the remaining listeners.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    def on(self, event_name: str, callback: Listener) -> None:
        listeners = self._listeners[event_name]
        if callback not in listeners:
            listeners.append(callback)

    def off(self, event_name: str, callback: Listener) -> None:
        listeners = self._listeners.get(event_name)
        if listeners and callback in listeners:
            listeners.remove(callback)

    def on_state_changed(self, callback: StateListener) -> None:
        self.on(STATE_CHANGED, callback)

    async def emit(self, event_name: str, payload: Any) -> int:
        """Send ``payload`` to every listener; returns how many were called."""
        delivered = 0
        for callback in tuple(self._listeners.get(event_name, ())):
            delivered += 1
            try:
                outcome = callback(payload)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.exception("Listener %r failed on %s", callback, event_name)
        return delivered

    async def state_changed(self, view: "SessionView") -> int:
        return await self.emit(STATE_CHANGED, view)
