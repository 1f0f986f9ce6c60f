# ============================================================================
# RESULT PROMISE
# ============================================================================
# EPOCH: 1 - RESULT PRIMITIVE
# STATUS: Core - Promise with legacy callback/event compatibility
# PURPOSE: One owning type composing settlement, events and proxying
# CREATED: 16 OCT 2026
# ============================================================================
"""
Result Promise

ResultPromise composes three facets on one instance:

- SettlementCore: the canonical pending -> fulfilled | rejected transition
- EventChannel:   generic multi-fire events such as "sql"
- ProxyLink:      forwarding of this promise's events onto other promises

Two consumption models are served from the single settlement:

    Chain style                 Legacy style
    -----------                 ------------
    then / catch / spread       success / ok,  on("success")
    await promise               error / fail / failure,  on("error")
                                done / complete  (node-style (err, *values))

Every legacy method is a projection over the same transition, selected
through a dispatch table keyed by Outcome. Emitting "success" or "error"
settles the promise; any other event name goes to the event channel.

Usage:
    promise = ResultPromise(lambda resolve, reject: resolve("abc"))
    promise.complete(lambda err, value: print(err, value))   # None abc
    value = await promise.then(lambda v: v + "123")           # "abc123"
"""

import asyncio
import inspect
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from core.config import PromiseDefaults, get_defaults
from core.contracts import (
    Outcome,
    PromiseEvent,
    ResultState,
    ResultStatus,
    outcome_for_event,
    project_values,
)
from core.logging import ComponentType, get_logger
from dualpromise.errors import RejectedValueError
from dualpromise.events import EventChannel, Listener
from dualpromise.proxy import ProxyLink, resolve_events
from dualpromise.scheduler import Scheduler
from dualpromise.settlement import SettlementCore

logger = get_logger(__name__, ComponentType.COMPAT)

Setup = Callable[[Callable[..., None], Callable[[Any], None]], Any]


def spread_args(values: Tuple[Any, ...]) -> Tuple[Any, ...]:
    """
    Positional arguments for a spread-style handler.

    A multi-value fulfillment is passed as-is; a single list or tuple
    value is spread as well (the conventional `[model, created]` pair).
    """
    if len(values) == 1 and isinstance(values[0], (list, tuple)):
        return tuple(values[0])
    return values


_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def node_args(handler: Callable[..., Any], *args: Any) -> Tuple[Any, ...]:
    """
    Arguments for a node-style callback, padded with None.

    A callback written as (err, value) must also be callable on
    rejection, when only the reason is known. Required positional
    parameters that `args` does not cover receive None.
    """
    try:
        parameters = inspect.signature(handler).parameters.values()
    except (TypeError, ValueError):
        return args
    required = sum(
        1 for p in parameters
        if p.kind in _POSITIONAL and p.default is inspect.Parameter.empty
    )
    return args + (None,) * max(0, required - len(args))


class ResultPromise:
    """Deferred result satisfying both the promise and the legacy event contract."""

    def __init__(
        self,
        setup: Optional[Setup] = None,
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        name: Optional[str] = None,
        defaults: Optional[PromiseDefaults] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        """
        Create a promise and run its setup procedure synchronously.

        Args:
            setup: Called as setup(resolve, reject); an exception raised
                by it becomes the rejection reason
            loop: Event loop used for deferred delivery
            name: Identifier used in logs (random when omitted)
            defaults: Compatibility settings (global defaults when omitted)
            scheduler: Shared scheduler (derived promises reuse their parent's)
        """
        self._defaults = defaults or get_defaults().promise
        scheduler = scheduler or Scheduler(loop)
        self._core = SettlementCore(
            scheduler,
            promise_id=name,
            report_unhandled=self._defaults.report_unhandled_rejections,
        )
        self._events = EventChannel(scheduler, self._core.promise_id)
        self._proxy_links: List[ProxyLink] = []
        self._sql: List[Any] = []

        if setup is not None:
            try:
                setup(self.resolve, self.reject)
            except Exception as exc:
                logger.debug(f"Setup of {self.id} raised {type(exc).__name__}")
                self.reject(exc)

    # =========================================================================
    # CONSTRUCTORS
    # =========================================================================

    @classmethod
    def resolved(cls, *values: Any, loop: Optional[asyncio.AbstractEventLoop] = None) -> "ResultPromise":
        """A promise already fulfilled with `values` (or adopting a nested one)."""
        promise = cls(loop=loop)
        promise.resolve(*values)
        return promise

    @classmethod
    def rejected(cls, reason: Any, loop: Optional[asyncio.AbstractEventLoop] = None) -> "ResultPromise":
        """A promise already rejected with `reason`."""
        promise = cls(loop=loop)
        promise.reject(reason)
        return promise

    @classmethod
    def all(cls, items: Iterable[Any], loop: Optional[asyncio.AbstractEventLoop] = None) -> "ResultPromise":
        """Aggregate several computations into one multi-value fulfillment."""
        from dualpromise.aggregate import all_of
        return all_of(items, loop=loop)

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def id(self) -> str:
        return self._core.promise_id

    @property
    def settlement(self) -> SettlementCore:
        """The settlement facet (observers for internal collaborators)."""
        return self._core

    @property
    def channel(self) -> EventChannel:
        """The generic event facet."""
        return self._events

    @property
    def state(self) -> ResultState:
        return self._core.snapshot()

    @property
    def status(self) -> ResultStatus:
        return self._core.status

    def is_pending(self) -> bool:
        return self._core.status == ResultStatus.PENDING

    def is_fulfilled(self) -> bool:
        return self._core.status == ResultStatus.FULFILLED

    def is_rejected(self) -> bool:
        return self._core.status == ResultStatus.REJECTED

    @property
    def sql_statements(self) -> List[Any]:
        """Every sql payload emitted on (or forwarded to) this promise, in order."""
        return list(self._sql)

    @property
    def proxy_links(self) -> List[ProxyLink]:
        return list(self._proxy_links)

    # =========================================================================
    # PRODUCER ENTRY POINTS
    # =========================================================================

    def resolve(self, *values: Any) -> None:
        self._core.resolve(*values)

    def reject(self, reason: Any = None) -> None:
        self._core.reject(reason)

    # =========================================================================
    # CHAIN STYLE
    # =========================================================================

    def then(
        self,
        on_fulfilled: Optional[Callable[[Any], Any]] = None,
        on_rejected: Optional[Callable[[Any], Any]] = None,
    ) -> "ResultPromise":
        """
        Register a continuation and return the derived promise.

        on_fulfilled receives the single-value projection (a list for a
        multi-value fulfillment). A missing handler passes the outcome
        through unchanged; a raising handler rejects the derived promise.
        """
        core = self._core
        fulfilled = None
        if on_fulfilled is not None:
            fulfilled = lambda values: on_fulfilled(project_values(values, core.multi))
        return self._chain(fulfilled, on_rejected)

    def catch(self, on_rejected: Callable[[Any], Any]) -> "ResultPromise":
        return self._chain(None, on_rejected)

    def spread(
        self,
        on_fulfilled: Callable[..., Any],
        on_rejected: Optional[Callable[[Any], Any]] = None,
    ) -> "ResultPromise":
        """Like then(), with the fulfillment values passed positionally."""
        return self._chain(lambda values: on_fulfilled(*spread_args(values)), on_rejected)

    def __await__(self):
        loop = self._core.scheduler.loop
        future = loop.create_future()
        core = self._core

        def fulfilled(values: Tuple[Any, ...]) -> None:
            if not future.done():
                future.set_result(project_values(values, core.multi))

        def rejected(reason: Any) -> None:
            if future.done():
                return
            if isinstance(reason, asyncio.CancelledError):
                future.cancel()
            elif isinstance(reason, BaseException) and not isinstance(reason, StopIteration):
                future.set_exception(reason)
            else:
                future.set_exception(RejectedValueError(reason))

        core.subscribe(fulfilled, rejected, consumes_rejection=True)
        return future.__await__()

    # =========================================================================
    # LEGACY CALLBACK STYLE
    # =========================================================================

    def success(self, handler: Callable[..., Any]) -> "ResultPromise":
        """handler(*values) on fulfillment."""
        return self._chain(lambda values: handler(*values), None)

    ok = success

    def error(self, handler: Callable[[Any], Any]) -> "ResultPromise":
        """handler(reason) on rejection; compound reasons are passed whole."""
        return self._chain(None, handler)

    fail = error
    failure = error

    def done(self, handler: Callable[..., Any]) -> "ResultPromise":
        """
        Node-style handler: (None, *values) on fulfillment, (reason,) on rejection.

        Missing required positional parameters receive None, so one
        (err, value) callback serves both outcomes.
        """
        return self._chain(
            lambda values: handler(*node_args(handler, None, *values)),
            lambda reason: handler(*node_args(handler, reason)),
        )

    complete = done

    def sql(self, handler: Listener) -> "ResultPromise":
        return self.on(PromiseEvent.SQL.value, handler)

    # =========================================================================
    # EVENT STYLE
    # =========================================================================

    def on(self, event: str, handler: Listener) -> "ResultPromise":
        """
        Subscribe to an event.

        "success" and "error" are settlement projections (fire once);
        every other name is a persistent multi-fire listener.
        """
        outcome = outcome_for_event(event)
        if outcome is not None:
            _PROJECTIONS[outcome](self, handler)
        else:
            self._events.on(str(getattr(event, "value", event)), handler)
        return self

    def off(self, event: str, handler: Listener) -> bool:
        """Remove a generic listener. Settlement projections cannot be removed."""
        if outcome_for_event(event) is not None:
            return False
        return self._events.off(str(getattr(event, "value", event)), handler)

    def listeners(self, event: str) -> List[Listener]:
        return self._events.listeners(str(getattr(event, "value", event)))

    def emit(self, event: str, *args: Any) -> "ResultPromise":
        """
        Emit an event.

        "success" resolves with args, "error" rejects with args[0];
        other names are delivered to generic listeners.
        """
        outcome = outcome_for_event(event)
        if outcome is not None:
            _SETTLERS[outcome](self, args)
            return self

        name = str(getattr(event, "value", event))
        if name == PromiseEvent.SQL.value and self._defaults.record_sql:
            self._sql.append(args[0] if len(args) == 1 else args)
        self._events.emit(name, *args)
        return self

    def proxy(
        self,
        target: "ResultPromise",
        events: Optional[Iterable[str]] = None,
        skip_events: Optional[Iterable[str]] = None,
    ) -> "ResultPromise":
        """
        Forward this promise's events onto `target`.

        Args:
            target: Promise that re-emits the forwarded events
            events: Event names to forward (default: PromiseDefaults.proxy_events)
            skip_events: Names removed from `events`

        Returns:
            self
        """
        link = ProxyLink(
            source=self,
            target=target,
            events=resolve_events(self._defaults.proxy_events, events, skip_events),
        )
        self._proxy_links.append(link.attach())
        return self

    # =========================================================================
    # INTERNAL
    # =========================================================================

    def _derive(self) -> "ResultPromise":
        derived = ResultPromise(scheduler=self._core.scheduler, defaults=self._defaults)
        if self._defaults.forward_sql_to_derived:
            ProxyLink(self, derived, (PromiseEvent.SQL.value,), weak=True).attach()
        return derived

    def _chain(
        self,
        on_fulfilled: Optional[Callable[[Tuple[Any, ...]], Any]],
        on_rejected: Optional[Callable[[Any], Any]],
    ) -> "ResultPromise":
        derived = self._derive()
        core = self._core

        def fulfilled(values: Tuple[Any, ...]) -> None:
            if on_fulfilled is None:
                derived._core.fulfill(values, multi=core.multi)
            else:
                derived._settle_from(on_fulfilled, values)

        def rejected(reason: Any) -> None:
            if on_rejected is None:
                derived._core.reject(reason, passthrough_from=core)
            else:
                derived._settle_from(on_rejected, reason)

        core.subscribe(fulfilled, rejected, consumes_rejection=on_rejected is not None)
        return derived

    def _settle_from(self, handler: Callable[[Any], Any], argument: Any) -> None:
        """Run a continuation and settle this (derived) promise with its outcome."""
        try:
            result = handler(argument)
        except Exception as exc:
            self._core.reject(exc)
            return
        if asyncio.iscoroutine(result):
            result = self._core.scheduler.loop.create_task(result)
        self._core.resolve(result)

    def __repr__(self) -> str:
        return f"<ResultPromise {self.id} {self._core.status.value}>"


# ============================================================================
# OUTCOME DISPATCH TABLES
# ============================================================================

# outcome -> legacy registrar used by on("success"/"error")
_PROJECTIONS: Dict[Outcome, Callable[[ResultPromise, Listener], Any]] = {
    Outcome.FULFILLED: ResultPromise.success,
    Outcome.REJECTED: ResultPromise.error,
}

# outcome -> settlement entry point used by emit("success"/"error")
_SETTLERS: Dict[Outcome, Callable[[ResultPromise, Tuple[Any, ...]], None]] = {
    Outcome.FULFILLED: lambda promise, args: promise.resolve(*args),
    Outcome.REJECTED: lambda promise, args: promise.reject(args[0] if args else None),
}
