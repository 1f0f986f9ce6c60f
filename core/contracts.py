# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# EPOCH: 1 - RESULT PRIMITIVE
# STATUS: Foundation - Settlement enums and state snapshot contract
# PURPOSE: Define status enums, event names and the ResultState snapshot
# LAST_REVIEWED: 16 OCT 2026
# EXPORTS: ResultStatus, Outcome, PromiseEvent, SETTLEMENT_EVENTS, ResultState
# DEPENDENCIES: enum, pydantic
# ============================================================================
"""
Base contracts for the asynchronous result primitive.

These define the vocabulary shared by every facet:
- Settlement core (status transitions)
- Compatibility layer (event names mapped to outcomes)
- Callers (read-only state snapshots)
"""

from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# STATUS ENUMS
# ============================================================================

class ResultStatus(str, Enum):
    """
    Lifecycle of one asynchronous computation.

    State transitions (exactly one, ever):
        PENDING -> FULFILLED
                -> REJECTED
    """
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"

    def is_terminal(self) -> bool:
        """Check if this is a terminal state (no further transitions)."""
        return self in (ResultStatus.FULFILLED, ResultStatus.REJECTED)


class Outcome(str, Enum):
    """Logical settlement outcome, the key of the compatibility dispatch table."""
    FULFILLED = "fulfilled"
    REJECTED = "rejected"

    @property
    def status(self) -> ResultStatus:
        return ResultStatus(self.value)


class PromiseEvent(str, Enum):
    """Event names with a meaning on the compatibility surface."""

    # Settlement-linked
    SUCCESS = "success"
    ERROR = "error"

    # Auxiliary, multi-fire
    SQL = "sql"


# event name -> outcome it is a projection of
SETTLEMENT_EVENTS: Dict[str, Outcome] = {
    PromiseEvent.SUCCESS.value: Outcome.FULFILLED,
    PromiseEvent.ERROR.value: Outcome.REJECTED,
}


def outcome_for_event(event: str) -> Optional[Outcome]:
    """Return the outcome an event name projects, or None for generic events."""
    return SETTLEMENT_EVENTS.get(str(getattr(event, "value", event)))


# ============================================================================
# STATE SNAPSHOT
# ============================================================================

class ResultState(BaseModel):
    """
    Read-only snapshot of one computation's canonical state.

    `values` is the ordered fulfillment sequence (empty, one or many).
    `reason` is the opaque rejection payload; compound payloads such as
    nested lists of errors are carried as a single object.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: ResultStatus = Field(default=ResultStatus.PENDING)
    values: Tuple[Any, ...] = Field(default=())
    reason: Any = Field(default=None, description="Present only when REJECTED")
    multi: bool = Field(
        default=False,
        description="True when fulfilled with a multi-value sequence",
    )

    @property
    def is_pending(self) -> bool:
        return self.status == ResultStatus.PENDING

    @property
    def is_fulfilled(self) -> bool:
        return self.status == ResultStatus.FULFILLED

    @property
    def is_rejected(self) -> bool:
        return self.status == ResultStatus.REJECTED

    @property
    def value(self) -> Any:
        """Single-value projection of the fulfillment."""
        return project_values(self.values, self.multi)


def project_values(values: Tuple[Any, ...], multi: bool) -> Any:
    """
    Collapse a fulfillment sequence to the single value a chain sees.

    no values -> None, one value -> the value, multi-value -> list.
    """
    if multi:
        return list(values)
    if values:
        return values[0]
    return None


__all__ = [
    "ResultStatus",
    "Outcome",
    "PromiseEvent",
    "SETTLEMENT_EVENTS",
    "outcome_for_event",
    "ResultState",
    "project_values",
]
