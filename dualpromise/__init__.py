# ============================================================================
# DUALPROMISE PACKAGE
# ============================================================================
# EPOCH: 1 - RESULT PRIMITIVE
# STATUS: Package initialization
# PURPOSE: Export the result primitive and its helpers
# LAST_REVIEWED: 16 OCT 2026
# ============================================================================
"""
Asynchronous result primitive with a legacy callback/event surface.

    from dualpromise import ResultPromise

    promise = ResultPromise(lambda resolve, reject: resolve("abc"))
    promise.done(lambda err, value: ...)       # legacy callback
    value = await promise                      # chain / await
"""

from dualpromise.errors import (
    PromiseError,
    NoEventLoopError,
    ChainingCycleError,
    RejectedValueError,
)
from dualpromise.scheduler import Scheduler
from dualpromise.settlement import SettlementCore
from dualpromise.events import EventChannel
from dualpromise.proxy import ProxyLink
from dualpromise.promise import ResultPromise, node_args, spread_args
from dualpromise.aggregate import all_of
from dualpromise.producer import from_awaitable, run_statement, run_statements

__all__ = [
    # Primitive
    "ResultPromise",
    "SettlementCore",
    "EventChannel",
    "ProxyLink",
    "Scheduler",
    # Helpers
    "all_of",
    "spread_args",
    "node_args",
    "from_awaitable",
    "run_statement",
    "run_statements",
    # Errors
    "PromiseError",
    "NoEventLoopError",
    "ChainingCycleError",
    "RejectedValueError",
]
