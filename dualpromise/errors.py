"""
Exceptions raised by the result primitive itself.

Rejection reasons supplied by producers are never wrapped, except when
`await` has to raise something and the reason is not an exception.
"""

from typing import Any


class PromiseError(Exception):
    """Base exception for result primitive errors."""
    pass


class NoEventLoopError(PromiseError, RuntimeError):
    """Raised when a callback must be scheduled but no event loop is available."""
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            f"Cannot {operation}: no running event loop. "
            "Create the promise inside a coroutine or pass loop=."
        )


class ChainingCycleError(PromiseError, TypeError):
    """Raised (as a rejection) when a promise is resolved with itself."""
    def __init__(self, promise_id: str):
        self.promise_id = promise_id
        super().__init__(f"Chaining cycle detected: promise {promise_id} resolved with itself")


class RejectedValueError(PromiseError):
    """
    Raised by `await` when the rejection reason is not an exception.

    The untouched reason is available as `.reason`.
    """
    def __init__(self, reason: Any):
        self.reason = reason
        super().__init__(f"Promise rejected with non-exception reason: {reason!r}")
