# ============================================================================
# EVENT CHANNEL
# ============================================================================
# EPOCH: 1 - RESULT PRIMITIVE
# STATUS: Core - Generic multi-fire events
# PURPOSE: Auxiliary notifications (e.g. "sql") independent of settlement
# CREATED: 16 OCT 2026
# ============================================================================
"""
Event Channel

An ordinary multi-fire event channel owned by one promise. Listeners
persist for the life of the channel; each emit() delivers its arguments
to the listeners registered at that moment, in registration order, on
a later loop turn. Nothing here knows about settlement.
"""

from typing import Any, Callable, Dict, List

from core.logging import ComponentType, get_logger, log_context
from dualpromise.scheduler import Scheduler

logger = get_logger(__name__, ComponentType.EVENTS)

Listener = Callable[..., Any]


class EventChannel:
    """Named, persistent listeners with deferred delivery."""

    def __init__(self, scheduler: Scheduler, owner_id: str = ""):
        self.scheduler = scheduler
        self.owner_id = owner_id
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event: str, listener: Listener) -> None:
        """Register a listener. The same listener may be registered twice."""
        self._listeners.setdefault(event, []).append(listener)

    def off(self, event: str, listener: Listener) -> bool:
        """
        Remove the first registration of `listener` for `event`.

        Returns:
            True if a registration was removed
        """
        registered = self._listeners.get(event)
        if not registered:
            return False
        try:
            registered.remove(listener)
        except ValueError:
            return False
        if not registered:
            del self._listeners[event]
        return True

    def listeners(self, event: str) -> List[Listener]:
        """Copy of the listeners currently registered for `event`."""
        return list(self._listeners.get(event, ()))

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def emit(self, event: str, *args: Any) -> bool:
        """
        Queue delivery of `args` to every current listener of `event`.

        Returns:
            True if the event had listeners
        """
        registered = self._listeners.get(event)
        if not registered:
            return False
        for listener in list(registered):
            self.scheduler.call_soon(self._deliver, event, listener, args)
        return True

    def _deliver(self, event: str, listener: Listener, args: tuple) -> None:
        with log_context(promise_id=self.owner_id, event=event):
            try:
                listener(*args)
            except Exception:
                logger.exception(f"Listener for '{event}' raised")
