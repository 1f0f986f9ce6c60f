# ============================================================================
# PROXY FORWARDER
# ============================================================================
# EPOCH: 1 - RESULT PRIMITIVE
# STATUS: Core - Event forwarding between promises
# PURPOSE: Re-emit one promise's events on another, unchanged
# CREATED: 16 OCT 2026
# ============================================================================
"""
Proxy Forwarder

A ProxyLink is a registration on the source: "when you emit X, also emit
X on the target". It is additive (the source's own listeners still run)
and sits in the source's registration order like any other observer.

Settlement events are observed on the source's core, so a link never
creates a derived promise. A forwarded rejection counts as handled only
when the target is still pending and takes it over; otherwise the source
still reports it. Generic events are observed on the source's event channel.

The link holds the target, never the other way round; once the source
is gone nothing is forwarded any more. Links from a promise to the
promises derived from it hold the target weakly.
"""

import weakref
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Optional, Tuple

from core.contracts import Outcome, PromiseEvent, outcome_for_event
from core.logging import ComponentType, get_logger, log_checkpoint, log_context

if TYPE_CHECKING:
    from dualpromise.promise import ResultPromise

logger = get_logger(__name__, ComponentType.PROXY)


def resolve_events(
    default: Iterable[str],
    events: Optional[Iterable[str]] = None,
    skip_events: Optional[Iterable[str]] = None,
) -> Tuple[str, ...]:
    """Event names a link forwards: `events` (or default) minus `skip_events`."""
    chosen = [str(getattr(e, "value", e)) for e in (events if events is not None else default)]
    skipped = {str(getattr(e, "value", e)) for e in (skip_events or ())}
    result = []
    for name in chosen:
        if name not in skipped and name not in result:
            result.append(name)
    return tuple(result)


@dataclass
class ProxyLink:
    """
    Directed forwarding registration from `source` to `target`.

    With weak=True the link holds only a weak reference to the target and
    removes its listeners from the source once the target is collected.
    """
    source: "ResultPromise"
    target: Any
    events: Tuple[str, ...] = field(default_factory=tuple)
    attached: bool = False
    weak: bool = False
    _listeners: Dict[str, Callable[..., None]] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        if self.weak and not isinstance(self.target, weakref.ref):
            self.target = weakref.ref(self.target, self._target_collected)

    @property
    def receiver(self) -> Optional["ResultPromise"]:
        """The target promise, or None once a weakly held target is gone."""
        if self.weak:
            return self.target()
        return self.target

    def attach(self) -> "ProxyLink":
        """Register the forwarders on the source. Idempotent per link."""
        if self.attached:
            return self

        for event in self.events:
            outcome = outcome_for_event(event)
            if outcome == Outcome.FULFILLED:
                self.source.settlement.subscribe(self._forward_success, None, consumes_rejection=False)
            elif outcome == Outcome.REJECTED:
                self.source.settlement.subscribe(None, self._forward_error, consumes_rejection=False)
            else:
                listener = partial(self._forward, event)
                self._listeners[event] = listener
                self.source.channel.on(event, listener)

        self.attached = True
        receiver = self.receiver
        with log_context(promise_id=self.source.id):
            log_checkpoint("proxy_attached", {
                "target": receiver.id if receiver is not None else None,
                "events": list(self.events),
            })
        return self

    def detach(self) -> None:
        """Remove the generic-event forwarders from the source."""
        for event, listener in self._listeners.items():
            self.source.channel.off(event, listener)
        self._listeners.clear()

    def _target_collected(self, ref: "weakref.ref") -> None:
        self.detach()

    def _forward_success(self, values: Tuple[Any, ...]) -> None:
        receiver = self.receiver
        if receiver is not None:
            receiver.emit(PromiseEvent.SUCCESS.value, *values)

    def _forward_error(self, reason: Any) -> None:
        receiver = self.receiver
        if receiver is None or not receiver.settlement.accepting:
            # Nobody takes the rejection over; the source keeps reporting it
            return
        self.source.settlement.mark_handled()
        receiver.emit(PromiseEvent.ERROR.value, reason)

    def _forward(self, event: str, *args: Any) -> None:
        receiver = self.receiver
        if receiver is not None:
            receiver.emit(event, *args)
