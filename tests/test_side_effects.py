from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest

from app.services.side_effects import SideEffectLog


class TestSideEffectLog:
    """Verify best-effort step execution and failure bookkeeping."""

    @pytest.mark.asyncio
    async def test_successful_step_returns_value(self):
        log = SideEffectLog()
        value = await log.attempt("calendar_event", AsyncMock(return_value=42))

        assert value == 42
        assert log.failures == []
        assert log.results[0].ok is True

    @pytest.mark.asyncio
    async def test_failed_step_is_recorded_not_raised(self):
        log = SideEffectLog()
        value = await log.attempt(
            "reminder_notification",
            AsyncMock(side_effect=RuntimeError("insert failed")),
        )

        assert value is None
        assert log.failed_names == ["reminder_notification"]
        assert log.failures[0].error == "insert failed"

    @pytest.mark.asyncio
    async def test_later_steps_run_after_a_failure(self):
        log = SideEffectLog()
        second = AsyncMock(return_value="ok")

        await log.attempt("first", AsyncMock(side_effect=ValueError("boom")))
        await log.attempt("second", second)

        second.assert_awaited_once()
        assert log.failed_names == ["first"]
        assert [r.name for r in log.results] == ["first", "second"]

    @pytest.mark.asyncio
    async def test_each_step_runs_in_its_own_savepoint(self):
        entered = []

        @asynccontextmanager
        async def savepoint():
            entered.append("enter")
            yield

        log = SideEffectLog(savepoint=savepoint)
        await log.attempt("a", AsyncMock())
        await log.attempt("b", AsyncMock(side_effect=Exception("x")))

        assert entered == ["enter", "enter"]
        assert log.failed_names == ["b"]
