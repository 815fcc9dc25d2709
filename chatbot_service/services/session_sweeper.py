"""Background task purging expired chat sessions."""

import asyncio

import structlog

from chatbot_service.services.session_service import SessionService

logger = structlog.get_logger()


class SessionSweeper:
    """Runs ``SessionService.cleanup`` on a fixed interval.

    Owned by the application lifespan: started on boot, cancelled on shutdown.
    """

    def __init__(self, session_service: SessionService, interval_seconds: float) -> None:
        self._session_service = session_service
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        """Whether the sweep loop is active."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the sweep loop if it is not already running."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="session-sweeper")
        logger.info("Session sweeper started", interval_seconds=self._interval)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Session sweeper stopped")

    async def sweep_once(self) -> int:
        """Run a single cleanup pass, logging instead of raising on failure."""
        try:
            removed = await self._session_service.cleanup()
        except Exception:
            logger.exception("Failed to clean up expired sessions")
            return 0
        if removed:
            logger.info("Cleaned up expired sessions", count=removed)
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.sweep_once()
