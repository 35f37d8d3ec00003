from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..repositories import SessionRepository

logger = logging.getLogger(__name__)

JOB_ID = "session-cleanup"


class SessionCleanupService:
    """
    Periodically deletes expired or deactivated sessions.

    The first sweep runs ``initial_delay_seconds`` after ``start()`` and then
    every ``interval_hours``. A failing sweep is logged and retried on the
    next tick. ``stop()`` waits for an in-flight sweep to finish.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        *,
        enabled: bool = True,
        interval_hours: float = 24,
        initial_delay_seconds: float = 30,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        self._session_maker = session_maker
        self.enabled = enabled
        self.interval_hours = interval_hours
        self.initial_delay_seconds = initial_delay_seconds
        self._scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)
        self._running: asyncio.Task | None = None

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    @property
    def started(self) -> bool:
        return self._scheduler.running

    async def sweep(self) -> int:
        async with self._session_maker() as db:
            deleted = await SessionRepository(db).delete_expired()
        if deleted:
            logger.info("Session cleanup removed %d expired sessions", deleted)
        else:
            logger.debug("Session cleanup found nothing to remove")
        return deleted

    async def run_once(self) -> int | None:
        """Scheduled entry point; never raises. Cancelling it leaves the sweep running."""
        self._running = asyncio.ensure_future(self._guarded_sweep())
        return await asyncio.shield(self._running)

    async def _guarded_sweep(self) -> int | None:
        try:
            return await self.sweep()
        except Exception:
            logger.exception("Session cleanup failed; retrying next interval")
            return None

    def start(self) -> None:
        if not self.enabled:
            logger.info("Session cleanup disabled")
            return
        if self.started:
            return
        first_run = datetime.now(timezone.utc) + timedelta(seconds=self.initial_delay_seconds)
        self._scheduler.add_job(
            self.run_once,
            "interval",
            hours=self.interval_hours,
            next_run_time=first_run,
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(
            "Session cleanup scheduled every %sh, first run in %ss",
            self.interval_hours, self.initial_delay_seconds,
        )

    async def stop(self) -> None:
        if self.started:
            self._scheduler.shutdown(wait=False)
            # shutdown is scheduled on the loop and cancels pending job tasks
            while self._scheduler.running:
                await asyncio.sleep(0)
        running = self._running
        if running is not None and not running.done():
            await asyncio.wait({running})
        logger.info("Session cleanup stopped")
