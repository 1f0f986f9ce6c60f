# ============================================================================
# SETTLEMENT CORE
# ============================================================================
# EPOCH: 1 - RESULT PRIMITIVE
# STATUS: Core - Canonical promise state machine
# PURPOSE: Single-transition settlement with ordered, deferred observers
# CREATED: 16 OCT 2026
# ============================================================================
"""
Settlement Core

Holds the canonical state of one asynchronous computation:

    PENDING -> FULFILLED (values)
            -> REJECTED  (reason)

Exactly one transition ever happens; later resolve/reject calls are
no-ops. Observers registered before or after settlement are invoked once
each, in registration order, always on a later loop turn.

Resolution with a single nested computation (another promise's core or
an asyncio future) adopts its outcome. Adoption is one level deep: the
nested computation's own values are taken as-is.

Unhandled rejection tracking:
- subscribe(..., consumes_rejection=True) marks the core handled
- a rejection passed through a derived core (then without a rejection
  handler) makes the derived core responsible; handling it marks the
  whole pass-through chain handled
- a rejected core collected while unhandled is reported once
"""

import asyncio
import uuid
from typing import Any, Callable, List, Optional, Tuple

from core.contracts import ResultState, ResultStatus, project_values
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from dualpromise.errors import ChainingCycleError
from dualpromise.scheduler import Scheduler

logger = get_logger(__name__, ComponentType.SETTLEMENT)

FulfilledCallback = Callable[[Tuple[Any, ...]], Any]
RejectedCallback = Callable[[Any], Any]


class _Subscriber:
    """One registered observer: a fulfillment/rejection callback pair."""

    __slots__ = ("on_fulfilled", "on_rejected")

    def __init__(
        self,
        on_fulfilled: Optional[FulfilledCallback],
        on_rejected: Optional[RejectedCallback],
    ):
        self.on_fulfilled = on_fulfilled
        self.on_rejected = on_rejected


def core_of(value: Any) -> Optional["SettlementCore"]:
    """Return the SettlementCore behind a core or promise, else None."""
    if isinstance(value, SettlementCore):
        return value
    core = getattr(value, "_core", None)
    if isinstance(core, SettlementCore):
        return core
    return None


class SettlementCore:
    """Canonical pending -> fulfilled | rejected state machine."""

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        promise_id: Optional[str] = None,
        report_unhandled: bool = True,
    ):
        self.scheduler = scheduler or Scheduler()
        self.promise_id = promise_id or f"p-{uuid.uuid4().hex[:12]}"
        self.report_unhandled = report_unhandled

        self._status: ResultStatus = ResultStatus.PENDING
        self._values: Tuple[Any, ...] = ()
        self._multi: bool = False
        self._reason: Any = None

        # Set once resolve() adopted a nested computation
        self._locked: bool = False

        self._subscribers: List[_Subscriber] = []
        self._handled: bool = False
        self._passthrough_source: Optional[SettlementCore] = None

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def status(self) -> ResultStatus:
        return self._status

    @property
    def values(self) -> Tuple[Any, ...]:
        return self._values

    @property
    def multi(self) -> bool:
        return self._multi

    @property
    def reason(self) -> Any:
        return self._reason

    @property
    def value(self) -> Any:
        """Single-value projection of the fulfillment (None unless fulfilled)."""
        return project_values(self._values, self._multi)

    @property
    def settled(self) -> bool:
        return self._status.is_terminal()

    @property
    def handled(self) -> bool:
        return self._handled

    @property
    def accepting(self) -> bool:
        """True while resolve/reject would still take effect."""
        return not self._status.is_terminal() and not self._locked

    def snapshot(self) -> ResultState:
        """Immutable view of the current state."""
        return ResultState(
            status=self._status,
            values=self._values,
            reason=self._reason,
            multi=self._multi,
        )

    # =========================================================================
    # SETTLEMENT ENTRY POINTS
    # =========================================================================

    def resolve(self, *values: Any) -> None:
        """
        Fulfill with zero, one or several values.

        A single nested computation is adopted instead of stored.
        Ignored once settled or locked in.
        """
        if self._status.is_terminal() or self._locked:
            return

        if len(values) == 1:
            nested = values[0]
            inner = core_of(nested)
            if inner is not None:
                self._adopt(inner)
                return
            if asyncio.isfuture(nested):
                self._locked = True
                nested.add_done_callback(self._adopt_future)
                return

        self._settle(ResultStatus.FULFILLED, values=tuple(values), multi=len(values) > 1)

    def fulfill(self, values: Tuple[Any, ...], multi: bool = False) -> None:
        """Fulfill with an already-settled values tuple (no adoption)."""
        if self._status.is_terminal() or self._locked:
            return
        self._settle(ResultStatus.FULFILLED, values=tuple(values), multi=multi)

    def resolve_many(self, values: Tuple[Any, ...]) -> None:
        """Fulfill with a multi-value sequence, whatever its length."""
        self.fulfill(values, multi=True)

    def reject(self, reason: Any = None, passthrough_from: Optional["SettlementCore"] = None) -> None:
        """
        Reject with an opaque reason. Ignored once settled or locked in.

        passthrough_from marks a rejection forwarded unchanged from a parent
        core; the parent keeps responsibility for reporting it.
        """
        if self._status.is_terminal() or self._locked:
            return
        if passthrough_from is not None:
            self._passthrough_source = passthrough_from
            if self._handled:
                passthrough_from.mark_handled()
        self._settle(ResultStatus.REJECTED, reason=reason)

    # =========================================================================
    # OBSERVERS
    # =========================================================================

    def subscribe(
        self,
        on_fulfilled: Optional[FulfilledCallback] = None,
        on_rejected: Optional[RejectedCallback] = None,
        consumes_rejection: Optional[bool] = None,
    ) -> None:
        """
        Register an observer.

        on_fulfilled receives the values tuple, on_rejected the reason.
        Registration after settlement schedules the observer immediately.
        consumes_rejection defaults to "on_rejected was given".
        """
        if consumes_rejection is None:
            consumes_rejection = on_rejected is not None
        if consumes_rejection:
            self.mark_handled()

        subscriber = _Subscriber(on_fulfilled, on_rejected)
        if self._status.is_terminal():
            self.scheduler.call_soon(self._notify, subscriber)
        else:
            self._subscribers.append(subscriber)

    def mark_handled(self) -> None:
        """Record that a rejection consumer exists for this core."""
        self._handled = True
        source = self._passthrough_source
        if source is not None and not source._handled:
            source.mark_handled()

    # =========================================================================
    # INTERNAL
    # =========================================================================

    def _adopt(self, inner: "SettlementCore") -> None:
        if inner is self:
            self._settle(ResultStatus.REJECTED, reason=ChainingCycleError(self.promise_id))
            return

        self._locked = True
        inner.subscribe(
            lambda values: self._settle(ResultStatus.FULFILLED, values=values, multi=inner.multi),
            lambda reason: self._settle(ResultStatus.REJECTED, reason=reason),
            consumes_rejection=True,
        )

    def _adopt_future(self, future: "asyncio.Future") -> None:
        if future.cancelled():
            self._settle(ResultStatus.REJECTED, reason=asyncio.CancelledError())
            return
        exc = future.exception()
        if exc is not None:
            self._settle(ResultStatus.REJECTED, reason=exc)
        else:
            self._settle(ResultStatus.FULFILLED, values=(future.result(),), multi=False)

    def _settle(
        self,
        status: ResultStatus,
        values: Tuple[Any, ...] = (),
        multi: bool = False,
        reason: Any = None,
    ) -> None:
        if self._status.is_terminal():
            return

        self._status = status
        if status == ResultStatus.FULFILLED:
            self._values = values
            self._multi = multi
        else:
            self._reason = reason

        subscribers, self._subscribers = self._subscribers, []

        with log_context(promise_id=self.promise_id, outcome=status.value):
            log_checkpoint("settled", {"subscribers": len(subscribers)})

        for subscriber in subscribers:
            self.scheduler.call_soon(self._notify, subscriber)

    def _notify(self, subscriber: _Subscriber) -> None:
        with log_context(promise_id=self.promise_id, outcome=self._status.value):
            if self._status == ResultStatus.FULFILLED:
                if subscriber.on_fulfilled is not None:
                    subscriber.on_fulfilled(self._values)
            elif subscriber.on_rejected is not None:
                subscriber.on_rejected(self._reason)

    def __del__(self):
        if getattr(self, "_status", None) != ResultStatus.REJECTED:
            return
        if self._handled or not self.report_unhandled or self._passthrough_source is not None:
            return
        reason = self._reason
        self.scheduler.report(
            "Promise rejection was never handled",
            {
                "exception": reason if isinstance(reason, BaseException) else None,
                "reason": reason,
                "promise_id": self.promise_id,
            },
        )

    def __repr__(self) -> str:
        return f"<SettlementCore {self.promise_id} {self._status.value}>"
