# ============================================================================
# COMPATIBILITY LAYER TESTS
# ============================================================================
# EPOCH: 1 - RESULT PRIMITIVE
# STATUS: Tests - Legacy callback and event surfaces
# PURPOSE: Verify success/error/done/complete/on/emit projections
# CREATED: 16 OCT 2026
# ============================================================================
"""
Compatibility Layer Tests

Covers:
1. success/ok, error/fail/failure, done/complete projections
2. on("success"/"error") and emit("success"/"error") settle-linked events
3. Compound rejection reasons are passed whole (never spread)
4. Generic "sql" events fire many times, independent of settlement
5. Listener faults are logged and never escape
6. await on non-exception reasons
7. Backwards compatible scenarios of the legacy event emitter API

Run with:
    pytest tests/test_compat.py -v
"""

import asyncio
import logging
from unittest.mock import MagicMock

import pytest

from core.config import PromiseDefaults
from core.contracts import PromiseEvent, ResultStatus
from dualpromise import RejectedValueError, ResultPromise


async def _drain(turns: int = 20) -> None:
    """Let queued loop callbacks run."""
    for _ in range(turns):
        await asyncio.sleep(0)


# ============================================================================
# SETTLEMENT PROJECTIONS
# ============================================================================

class TestSuccessProjection:
    """success(fn) receives the fulfillment values positionally."""

    def test_single_value(self):
        async def scenario():
            spy = MagicMock()
            await ResultPromise.resolved("yay").success(spy)
            return spy

        asyncio.run(scenario()).assert_called_once_with("yay")

    def test_multi_value_spread(self):
        async def scenario():
            spy = MagicMock()
            await ResultPromise.resolved("a", "b").success(spy)
            return spy

        asyncio.run(scenario()).assert_called_once_with("a", "b")

    def test_no_value(self):
        async def scenario():
            spy = MagicMock()
            await ResultPromise.resolved().success(spy)
            return spy

        asyncio.run(scenario()).assert_called_once_with()

    def test_not_called_on_rejection(self):
        async def scenario():
            spy = MagicMock()
            promise = ResultPromise.rejected(ValueError())
            derived = promise.success(spy)
            await derived.catch(lambda e: None)
            return spy

        asyncio.run(scenario()).assert_not_called()

    def test_ok_is_alias(self):
        assert ResultPromise.ok is ResultPromise.success

    def test_handler_fault_rejects_derived(self):
        def explode(value):
            raise ValueError("bad handler")

        async def scenario():
            derived = ResultPromise.resolved(1).success(explode)
            with pytest.raises(ValueError, match="bad handler"):
                await derived

        asyncio.run(scenario())


class TestErrorProjection:
    """error(fn) receives exactly the rejection reason."""

    def test_receives_reason(self):
        async def scenario():
            spy = MagicMock()
            error = ValueError("no")
            await ResultPromise.rejected(error).error(spy)
            return spy, error

        spy, error = asyncio.run(scenario())
        spy.assert_called_once_with(error)

    def test_array_of_errors_is_not_spread(self):
        async def scenario():
            spy = MagicMock()
            errors = [
                [ValueError("First error"), ValueError("Second error")],
                [ValueError("Third error")],
            ]
            promise = ResultPromise()
            derived = promise.error(spy)
            promise.emit("error", errors)
            await derived
            return spy, errors

        spy, errors = asyncio.run(scenario())
        spy.assert_called_once()
        args, _ = spy.call_args
        assert len(args) == 1
        assert args[0] is errors

    def test_error_and_on_error_see_same_instance(self):
        async def scenario():
            direct, event = MagicMock(), MagicMock()
            error = ValueError("no")
            promise = ResultPromise(lambda resolve, reject: reject(error))
            promise.error(direct)
            promise.on("error", event)
            await _drain()
            return direct, event, error

        direct, event, error = asyncio.run(scenario())
        assert direct.call_args[0][0] is error
        assert event.call_args[0][0] is error

    def test_aliases(self):
        assert ResultPromise.fail is ResultPromise.error
        assert ResultPromise.failure is ResultPromise.error

    def test_not_called_on_fulfillment(self):
        async def scenario():
            spy = MagicMock()
            await ResultPromise.resolved(1).error(spy)
            return spy

        asyncio.run(scenario()).assert_not_called()


class TestDoneProjection:
    """done/complete is a node-style callback unifying both outcomes."""

    def test_fulfilled(self):
        async def scenario():
            spy = MagicMock()
            await ResultPromise.resolved("abc").done(spy)
            return spy

        asyncio.run(scenario()).assert_called_once_with(None, "abc")

    def test_fulfilled_multi_value(self):
        async def scenario():
            spy = MagicMock()
            await ResultPromise.resolved("model", True).done(spy)
            return spy

        asyncio.run(scenario()).assert_called_once_with(None, "model", True)

    def test_rejected(self):
        async def scenario():
            spy = MagicMock()
            error = ValueError("no")
            await ResultPromise.rejected(error).done(spy)
            return spy, error

        spy, error = asyncio.run(scenario())
        spy.assert_called_once_with(error)

    def test_complete_is_alias(self):
        assert ResultPromise.complete is ResultPromise.done

    def test_called_exactly_once_when_registered_late(self):
        async def scenario():
            spy = MagicMock()
            promise = ResultPromise.resolved("abc")
            await _drain()
            promise.done(spy)
            promise.resolve("again")
            await _drain()
            return spy

        asyncio.run(scenario()).assert_called_once_with(None, "abc")

    def test_after_chaining(self):
        async def scenario():
            results = []
            promise = ResultPromise(lambda resolve, reject: resolve("Heyo"))
            await promise.then(lambda result: result + "123").complete(
                lambda err, result: results.append((err, result))
            )
            return results

        assert asyncio.run(scenario()) == [(None, "Heyo123")]

    def test_two_parameter_callback_on_rejection(self):
        async def scenario():
            seen = []
            error = ValueError("no")
            derived = ResultPromise.rejected(error).done(lambda err, value: seen.append((err, value)))
            await derived
            return seen, error, derived.status

        seen, error, status = asyncio.run(scenario())
        assert seen == [(error, None)]
        assert status == ResultStatus.FULFILLED

    def test_aggregate_callback_on_rejection(self):
        async def scenario():
            seen = []
            error = KeyError("user")
            await ResultPromise.all([ResultPromise.rejected(error), True]).done(
                lambda err, user, created: seen.append((err, user, created))
            )
            return seen, error

        seen, error = asyncio.run(scenario())
        assert seen == [(error, None, None)]

    def test_missing_values_padded_on_fulfillment(self):
        async def scenario():
            seen = []
            await ResultPromise.resolved().done(lambda err, value: seen.append((err, value)))
            return seen

        assert asyncio.run(scenario()) == [(None, None)]

    def test_optional_parameters_not_padded(self):
        async def scenario():
            seen = []
            error = ValueError("no")
            await ResultPromise.rejected(error).done(
                lambda err, value="unset": seen.append((err, value))
            )
            return seen, error

        seen, error = asyncio.run(scenario())
        assert seen == [(error, "unset")]


# ============================================================================
# EVENT SURFACE
# ============================================================================

class TestEventSurface:
    """on/emit/off over settlement events and generic events."""

    def test_emit_success_resolves(self):
        async def scenario():
            spy = MagicMock()
            promise = ResultPromise()
            promise.success(spy)
            promise.emit("success", "yay")
            value = await promise
            return spy, value, promise.status

        spy, value, status = asyncio.run(scenario())
        spy.assert_called_once_with("yay")
        assert value == "yay"
        assert status == ResultStatus.FULFILLED

    def test_emit_error_rejects(self):
        async def scenario():
            promise = ResultPromise()
            promise.emit(PromiseEvent.ERROR, KeyError("k"))
            return await promise.catch(lambda e: e)

        assert isinstance(asyncio.run(scenario()), KeyError)

    def test_emit_after_settlement_is_ignored(self):
        async def scenario():
            promise = ResultPromise.resolved("first")
            promise.emit("success", "second")
            promise.emit("error", ValueError())
            return await promise

        assert asyncio.run(scenario()) == "first"

    def test_on_and_emit_return_self(self):
        async def scenario():
            promise = ResultPromise()
            assert promise.on("sql", lambda s: None) is promise
            assert promise.on("success", lambda *v: None) is promise
            assert promise.emit("sql", "SELECT 1") is promise

        asyncio.run(scenario())

    def test_sql_events_before_settlement(self):
        async def scenario():
            order = []
            promise = ResultPromise(lambda resolve, reject: resolve("yay"))
            promise.on("sql", lambda statement: order.append(("sql", statement)))
            promise.emit("sql", "SQL STATEMENT 1")
            promise.emit("sql", "SQL STATEMENT 2")
            await promise.then(lambda value: order.append(("fulfilled", value)))
            return order, promise.sql_statements

        order, statements = asyncio.run(scenario())
        assert order == [
            ("sql", "SQL STATEMENT 1"),
            ("sql", "SQL STATEMENT 2"),
            ("fulfilled", "yay"),
        ]
        assert statements == ["SQL STATEMENT 1", "SQL STATEMENT 2"]

    def test_sql_registrar(self):
        async def scenario():
            spy = MagicMock()
            promise = ResultPromise()
            assert promise.sql(spy) is promise
            promise.emit("sql", "SELECT 1")
            await _drain()
            return spy

        asyncio.run(scenario()).assert_called_once_with("SELECT 1")

    def test_generic_events_fire_after_settlement(self):
        async def scenario():
            spy = MagicMock()
            promise = ResultPromise.resolved(1)
            promise.on("progress", spy)
            promise.emit("progress", 1, 2)
            promise.emit("progress", 2, 2)
            await _drain()
            return spy

        spy = asyncio.run(scenario())
        assert [c.args for c in spy.call_args_list] == [(1, 2), (2, 2)]

    def test_emit_is_deferred(self):
        async def scenario():
            spy = MagicMock()
            promise = ResultPromise()
            promise.on("sql", spy)
            promise.emit("sql", "SELECT 1")
            synchronous = spy.called
            await _drain()
            return synchronous, spy.called

        assert asyncio.run(scenario()) == (False, True)

    def test_off_removes_generic_listener(self):
        async def scenario():
            spy = MagicMock()
            promise = ResultPromise()
            promise.on("sql", spy)
            removed = promise.off("sql", spy)
            promise.emit("sql", "SELECT 1")
            await _drain()
            return removed, spy, promise.listeners("sql")

        removed, spy, listeners = asyncio.run(scenario())
        assert removed is True
        spy.assert_not_called()
        assert listeners == []

    def test_off_cannot_remove_settlement_projection(self):
        async def scenario():
            handler = MagicMock()
            promise = ResultPromise()
            promise.on("success", handler)
            return promise.off("success", handler)

        assert asyncio.run(scenario()) is False

    def test_listener_fault_is_logged(self, caplog):
        def explode(statement):
            raise RuntimeError("listener fault")

        async def scenario():
            spy = MagicMock()
            promise = ResultPromise()
            promise.on("sql", explode)
            promise.on("sql", spy)
            promise.emit("sql", "SELECT 1")
            await _drain()
            return spy

        with caplog.at_level(logging.ERROR):
            spy = asyncio.run(scenario())

        spy.assert_called_once_with("SELECT 1")
        assert "Listener for 'sql' raised" in caplog.text

    def test_sql_recording_can_be_disabled(self):
        async def scenario():
            promise = ResultPromise(defaults=PromiseDefaults(record_sql=False))
            promise.emit("sql", "SELECT 1")
            return promise.sql_statements

        assert asyncio.run(scenario()) == []


# ============================================================================
# AWAIT
# ============================================================================

class TestAwait:
    """await projects the fulfillment or raises the reason."""

    def test_await_multi_value_is_list(self):
        async def scenario():
            return await ResultPromise.resolved("a", "b")

        assert asyncio.run(scenario()) == ["a", "b"]

    def test_await_non_exception_reason(self):
        async def scenario():
            errors = [[ValueError("a")], [ValueError("b")]]
            with pytest.raises(RejectedValueError) as excinfo:
                await ResultPromise.rejected(errors)
            return excinfo.value, errors

        raised, errors = asyncio.run(scenario())
        assert raised.reason is errors

    def test_await_pending_then_resolved(self):
        async def scenario():
            promise = ResultPromise()
            asyncio.get_running_loop().call_later(0.01, promise.resolve, "later")
            return await promise

        assert asyncio.run(scenario()) == "later"


# ============================================================================
# BACKWARDS COMPATIBILITY
# ============================================================================

class TestBackwardsCompat:
    """Scenarios the legacy event emitter API guaranteed."""

    def test_complete_when_resolving(self):
        async def scenario():
            spy = MagicMock()
            promise = ResultPromise(lambda resolve, reject: resolve("abc"))
            promise.complete(spy)
            await promise.then(lambda v: None)
            return spy

        spy = asyncio.run(scenario())
        spy.assert_called_once()
        assert spy.call_args.args == (None, "abc")

    def test_success_when_resolving(self):
        async def scenario():
            spy = MagicMock()
            promise = ResultPromise(lambda resolve, reject: resolve("yay"))
            promise.success(spy)
            await promise.then(lambda v: None)
            return spy

        asyncio.run(scenario()).assert_called_once_with("yay")

    def test_on_success_when_resolving(self):
        async def scenario():
            spy = MagicMock()
            promise = ResultPromise(lambda resolve, reject: resolve("yoohoo"))
            promise.on("success", spy)
            await promise.then(lambda v: None)
            return spy

        asyncio.run(scenario()).assert_called_once_with("yoohoo")

    def test_done_when_resolving_multiple_results(self):
        async def scenario():
            spy = MagicMock()
            seen = []
            promise = ResultPromise(
                lambda resolve, reject: resolve(ResultPromise.all(["MyModel", True]))
            )
            promise.spread(spy)
            await promise.done(lambda err, model, created: seen.append((err, model, created)))
            return spy, seen

        spy, seen = asyncio.run(scenario())
        spy.assert_called_once_with("MyModel", True)
        assert seen == [(None, "MyModel", True)]

    def test_success_when_emitting(self):
        async def scenario():
            spy = MagicMock()
            promise = ResultPromise(lambda resolve, reject: None)
            promise.success(spy)
            chained = promise.then(lambda v: None)
            promise.emit("success", "yay")
            await chained
            return spy

        asyncio.run(scenario()).assert_called_once_with("yay")

    def test_done_when_rejecting(self):
        async def scenario():
            spy = MagicMock()
            promise = ResultPromise(lambda resolve, reject: reject(ValueError("no")))
            promise.done(spy)
            await promise.catch(lambda e: None)
            return spy

        spy = asyncio.run(scenario())
        spy.assert_called_once()
        assert isinstance(spy.call_args.args[0], ValueError)

    def test_error_when_throwing(self):
        def setup(resolve, reject):
            raise ValueError("no")

        async def scenario():
            spy = MagicMock()
            promise = ResultPromise(setup)
            promise.error(spy)
            await promise.catch(lambda e: None)
            return spy

        spy = asyncio.run(scenario())
        spy.assert_called_once()
        assert isinstance(spy.call_args.args[0], ValueError)

    def test_on_error_when_throwing(self):
        def setup(resolve, reject):
            raise ValueError("noway")

        async def scenario():
            spy = MagicMock()
            promise = ResultPromise(setup)
            promise.on("error", spy)
            await promise.catch(lambda e: None)
            return spy

        spy = asyncio.run(scenario())
        spy.assert_called_once()
        assert isinstance(spy.call_args.args[0], ValueError)

    def test_on_error_when_emitting(self):
        async def scenario():
            spy = MagicMock()
            promise = ResultPromise(lambda resolve, reject: None)
            promise.on("error", spy)
            caught = promise.catch(lambda e: None)
            promise.emit("error", ValueError("noway"))
            await caught
            return spy

        spy = asyncio.run(scenario())
        spy.assert_called_once()
        assert isinstance(spy.call_args.args[0], ValueError)
