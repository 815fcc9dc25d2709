"""Unit tests for the background session sweeper."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from chatbot_service.schemas.session_schema import SessionData
from chatbot_service.services.session_service import SessionService
from chatbot_service.services.session_sweeper import SessionSweeper
from tests.conftest import FakeClock


class TestSweepOnce:
    @pytest.mark.asyncio
    async def test_removes_expired_sessions(
        self, session_service: SessionService, clock: FakeClock
    ) -> None:
        await session_service.set("s1", SessionData(session_id="s1"), ttl_seconds=5)
        clock.advance(10)

        removed = await SessionSweeper(session_service, 60).sweep_once()

        assert removed == 1

    @pytest.mark.asyncio
    async def test_failure_is_swallowed(self) -> None:
        service = MagicMock(spec=SessionService)
        service.cleanup = AsyncMock(side_effect=RuntimeError("db down"))

        assert await SessionSweeper(service, 60).sweep_once() == 0


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_runs_on_interval_until_stopped(self) -> None:
        service = MagicMock(spec=SessionService)
        service.cleanup = AsyncMock(return_value=0)
        sweeper = SessionSweeper(service, 0.01)

        sweeper.start()
        assert sweeper.running is True
        await asyncio.sleep(0.05)
        await sweeper.stop()

        assert sweeper.running is False
        assert service.cleanup.await_count >= 1

    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_task(self) -> None:
        service = MagicMock(spec=SessionService)
        service.cleanup = AsyncMock(return_value=0)
        sweeper = SessionSweeper(service, 60)

        sweeper.start()
        task = sweeper._task
        sweeper.start()

        assert sweeper._task is task
        await sweeper.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self) -> None:
        service = MagicMock(spec=SessionService)
        await SessionSweeper(service, 60).stop()
