# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - RESULT PRIMITIVE
# STATUS: Core module initialization
# PURPOSE: Export contracts shared by every facet
# LAST_REVIEWED: 16 OCT 2026
# ============================================================================

from core.contracts import (
    ResultStatus,
    Outcome,
    PromiseEvent,
    SETTLEMENT_EVENTS,
    ResultState,
    outcome_for_event,
    project_values,
)

__all__ = [
    # Enums
    "ResultStatus",
    "Outcome",
    "PromiseEvent",
    # Dispatch table
    "SETTLEMENT_EVENTS",
    "outcome_for_event",
    # Models
    "ResultState",
    "project_values",
]
