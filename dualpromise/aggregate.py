# ============================================================================
# MULTI-VALUE AGGREGATION
# ============================================================================
# EPOCH: 1 - RESULT PRIMITIVE
# STATUS: Core - Combine several computations into one
# PURPOSE: Ordered multi-value fulfillment, first-failure-wins rejection
# CREATED: 16 OCT 2026
# ============================================================================
"""
Multi-value Aggregation

all_of() waits for every input and fulfills with their values as a
multi-value sequence, so consumers can unwrap it either way:

    ResultPromise.all([find_user, was_created]).spread(lambda user, created: ...)
    ResultPromise.all([find_user, was_created]).done(lambda err, user, created: ...)

Inputs may be promises, asyncio futures, coroutines or plain values
(plain values count as already fulfilled). The first rejection settles
the aggregate; later rejections are consumed without being reported.
"""

import asyncio
from functools import partial
from typing import Any, Iterable, List, Optional, Tuple

from core.contracts import project_values
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from dualpromise.promise import ResultPromise
from dualpromise.settlement import SettlementCore, core_of

logger = get_logger(__name__, ComponentType.AGGREGATE)


class _Aggregation:
    """Bookkeeping for one all_of() call."""

    def __init__(self, aggregate: ResultPromise, size: int):
        self.aggregate = aggregate
        self.results: List[Any] = [None] * size
        self.remaining = size

    def fulfilled(self, index: int, source: SettlementCore, values: Tuple[Any, ...]) -> None:
        self.results[index] = project_values(values, source.multi)
        self.remaining -= 1
        if self.remaining == 0:
            self.aggregate.settlement.resolve_many(tuple(self.results))

    def rejected(self, index: int, reason: Any) -> None:
        if self.aggregate.is_pending():
            with log_context(promise_id=self.aggregate.id):
                log_checkpoint("aggregate_rejected", {"input": index})
        self.aggregate.reject(reason)


def all_of(items: Iterable[Any], loop: Optional[asyncio.AbstractEventLoop] = None) -> ResultPromise:
    """
    Aggregate computations into one promise.

    Args:
        items: Promises, futures, coroutines or plain values
        loop: Event loop for the aggregate (and any wrapped coroutines)

    Returns:
        Promise fulfilled with one value per input, in input order
    """
    items = list(items)
    aggregate = ResultPromise(loop=loop)
    aggregation = _Aggregation(aggregate, len(items))

    for index, item in enumerate(items):
        source = core_of(item)
        if source is None and (asyncio.isfuture(item) or asyncio.iscoroutine(item)):
            from dualpromise.producer import from_awaitable
            source = from_awaitable(item, scheduler=aggregate.settlement.scheduler).settlement

        if source is None:
            aggregation.results[index] = item
            aggregation.remaining -= 1
            continue

        source.subscribe(
            partial(aggregation.fulfilled, index, source),
            partial(aggregation.rejected, index),
            consumes_rejection=True,
        )

    if aggregation.remaining == 0:
        aggregate.settlement.resolve_many(tuple(aggregation.results))

    logger.debug(f"Aggregating {len(items)} inputs into {aggregate.id}")
    return aggregate


__all__ = ["all_of"]
