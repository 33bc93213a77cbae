from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from ..webspace import RequestAttributes

LOGGER = logging.getLogger(__name__)

PRE_RENDER = "preview.pre_render"

Listener = Callable[[Any], None]

__all__ = ["PRE_RENDER", "EventDispatcher", "Listener", "PreRenderEvent"]


@dataclass(frozen=True)
class PreRenderEvent:
    """Dispatched right before a preview request enters the website kernel."""

    attributes: RequestAttributes


class EventDispatcher:
    """Synchronous event dispatcher.

    Listeners run in registration order on the dispatching thread. Exceptions
    raised by a listener propagate to the caller of :meth:`dispatch`.
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}
        self._lock = threading.Lock()

    def add_listener(self, event_name: str, listener: Listener) -> None:
        with self._lock:
            self._listeners.setdefault(event_name, []).append(listener)

    def remove_listener(self, event_name: str, listener: Listener) -> None:
        """Unregister ``listener``; removing one that is not registered is a no-op."""

        with self._lock:
            listeners = self._listeners.get(event_name, [])
            if listener in listeners:
                listeners.remove(listener)

    def get_listeners(self, event_name: str) -> List[Listener]:
        with self._lock:
            return list(self._listeners.get(event_name, ()))

    def dispatch(self, event_name: str, event: Any) -> Any:
        listeners = self.get_listeners(event_name)
        LOGGER.debug("Dispatching %s to %d listener(s)", event_name, len(listeners))
        for listener in listeners:
            listener(event)
        return event
