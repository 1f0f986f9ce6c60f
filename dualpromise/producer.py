# ============================================================================
# PRODUCER HELPERS
# ============================================================================
# EPOCH: 1 - RESULT PRIMITIVE
# STATUS: Core - Boundary with code that produces results
# PURPOSE: Wrap awaitables and statement executors in ResultPromise
# CREATED: 16 OCT 2026
# ============================================================================
"""
Producer Helpers

The boundary used by collaborators that produce results (query
executors and the like):

- from_awaitable(): adopt a coroutine or future
- run_statement(): announce a statement on the "sql" event, execute it,
  settle with the executor's result
- run_statements(): the same for several statements in order

Executors may be sync or async. Sync executors run in the loop's
default thread pool so they never block the loop.
"""

import asyncio
import inspect
from functools import partial
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Union

from core.contracts import PromiseEvent
from core.logging import ComponentType, get_logger, log_context
from dualpromise.promise import ResultPromise
from dualpromise.scheduler import Scheduler

logger = get_logger(__name__, ComponentType.PRODUCER)

Executor = Callable[..., Union[Any, Awaitable[Any]]]


def from_awaitable(
    awaitable: Awaitable[Any],
    loop: Optional[asyncio.AbstractEventLoop] = None,
    name: Optional[str] = None,
    scheduler: Optional[Scheduler] = None,
) -> ResultPromise:
    """
    Wrap a coroutine, task or future in a ResultPromise.

    Coroutines are scheduled as tasks on the promise's loop. The promise
    fulfills with the awaitable's result or rejects with its exception.
    """
    promise = ResultPromise(loop=loop, name=name, scheduler=scheduler)
    if asyncio.isfuture(awaitable):
        future = awaitable
    else:
        future = asyncio.ensure_future(awaitable, loop=promise.settlement.scheduler.loop)
    promise.resolve(future)
    return promise


async def _execute(executor: Executor, statement: Any, params: tuple) -> Any:
    if inspect.iscoroutinefunction(executor):
        return await executor(statement, *params)

    # Run sync executor in thread pool
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(None, partial(executor, statement, *params))
    if asyncio.iscoroutine(result):
        result = await result
    return result


def run_statement(
    executor: Executor,
    statement: Any,
    *params: Any,
    loop: Optional[asyncio.AbstractEventLoop] = None,
    name: Optional[str] = None,
) -> ResultPromise:
    """
    Execute one statement and return its result promise.

    The "sql" event is emitted on a later turn, so listeners attached
    right after this call observe it before the promise settles.

    Args:
        executor: Called as executor(statement, *params)
        statement: Opaque statement descriptor (usually the SQL text)
        *params: Extra executor arguments
        loop: Event loop to run on
        name: Identifier used in logs

    Returns:
        Promise fulfilled with the executor's return value
    """
    return run_statements(executor, [statement], *params, loop=loop, name=name, single=True)


def run_statements(
    executor: Executor,
    statements: Sequence[Any],
    *params: Any,
    loop: Optional[asyncio.AbstractEventLoop] = None,
    name: Optional[str] = None,
    single: bool = False,
) -> ResultPromise:
    """
    Execute statements one after another on the same promise.

    Each statement is announced on the "sql" event right before it runs.
    The first failure rejects the promise and stops the sequence.

    Returns:
        Promise fulfilled with the list of results (or the only result
        when single=True)
    """
    promise = ResultPromise(loop=loop, name=name)

    async def _run_all() -> Any:
        results: List[Any] = []
        for statement in statements:
            with log_context(promise_id=promise.id, event=PromiseEvent.SQL.value):
                promise.emit(PromiseEvent.SQL.value, statement)
                logger.debug(f"Executing statement {len(results) + 1}/{len(statements)}")
            results.append(await _execute(executor, statement, params))
        if single:
            return results[0] if results else None
        return results

    promise.resolve(promise.settlement.scheduler.loop.create_task(_run_all()))
    return promise


__all__ = ["from_awaitable", "run_statement", "run_statements"]
