# ============================================================================
# SCHEDULER
# ============================================================================
# EPOCH: 1 - RESULT PRIMITIVE
# STATUS: Core - Deferred callback dispatch
# PURPOSE: Run continuations and listeners on a later event loop turn
# CREATED: 16 OCT 2026
# ============================================================================
"""
Scheduler

Every observer invocation (continuations, compatibility listeners,
generic event listeners, proxy forwarders) goes through a Scheduler so
nothing ever runs synchronously inside resolve/reject/emit.

Design:
- Backed by the asyncio loop's call_soon queue (FIFO, single thread)
- Binds to an explicit loop, the running loop at construction, or lazily
  to the running loop the first time it must schedule
- Callback failures are logged, never re-raised into the loop
"""

import asyncio
from typing import Any, Callable, Dict, Optional

from core.logging import ComponentType, get_logger
from dualpromise.errors import NoEventLoopError

logger = get_logger(__name__, ComponentType.SCHEDULER)


class Scheduler:
    """Defers callbacks to the next turn of one asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
        self._loop = loop

    @property
    def bound(self) -> bool:
        """True once a loop is known."""
        return self._loop is not None

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        """The bound loop, binding to the running loop if necessary."""
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError as exc:
                raise NoEventLoopError("schedule a callback") from exc
        return self._loop

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        """Queue `callback(*args)` behind everything already queued."""
        self.loop.call_soon(self._run, callback, args)

    @staticmethod
    def _run(callback: Callable[..., Any], args: tuple) -> None:
        try:
            callback(*args)
        except Exception:
            logger.exception(f"Scheduled callback {getattr(callback, '__qualname__', callback)!s} failed")

    def report(self, message: str, context: Dict[str, Any]) -> None:
        """
        Report an asynchronous failure nobody observed.

        Goes to loop.call_exception_handler when the loop is usable,
        otherwise to the package logger.
        """
        loop = self._loop
        if loop is not None and not loop.is_closed():
            loop.call_exception_handler({"message": message, **context})
            return
        exc = context.get("exception")
        logger.error(
            message,
            exc_info=(type(exc), exc, exc.__traceback__) if isinstance(exc, BaseException) else None,
            extra={key: repr(value) for key, value in context.items() if key != "exception"},
        )
