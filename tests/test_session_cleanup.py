# tests/test_session_cleanup.py
import asyncio
import logging
from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from egghunt.models import Session, User, utcnow
from egghunt.repositories import SessionRepository, UserRepository
from egghunt.services.session_cleanup import JOB_ID, SessionCleanupService


async def _sessions(session_maker):
    async with session_maker() as db:
        user = await UserRepository(db).add(User(name="alice"))
        repo = SessionRepository(db)
        live = await repo.add(Session.start(user.id))
        expired = Session.start(user.id)
        expired.expires_at = utcnow() - timedelta(seconds=1)
        await repo.add(expired)
        inactive = Session.start(user.id)
        inactive.deactivate()
        await repo.add(inactive)
        return user.id, live.id


@pytest.mark.asyncio
class TestSessionCleanupService:
    async def test_sweep_removes_only_dead_sessions(self, session_maker):
        user_id, live_id = await _sessions(session_maker)
        service = SessionCleanupService(session_maker)

        assert await service.sweep() == 2
        assert await service.sweep() == 0

        async with session_maker() as db:
            assert [s.id for s in await SessionRepository(db).get_by_user(user_id)] == [live_id]

    async def test_failed_sweep_is_logged_not_raised(self, session_maker, caplog):
        service = SessionCleanupService(session_maker)
        with patch.object(SessionRepository, "delete_expired", AsyncMock(side_effect=RuntimeError("db down"))):
            with caplog.at_level(logging.ERROR, logger="egghunt.services.session_cleanup"):
                assert await service.run_once() is None
        assert "Session cleanup failed" in caplog.text

        # next tick works again
        await _sessions(session_maker)
        assert await service.run_once() == 2

    async def test_start_schedules_job_after_initial_delay(self, session_maker):
        service = SessionCleanupService(session_maker, interval_hours=24, initial_delay_seconds=30)
        service.start()
        try:
            job = service.scheduler.get_job(JOB_ID)
            assert job is not None
            assert job.trigger.interval == timedelta(hours=24)
            delay = (job.next_run_time - utcnow()).total_seconds()
            assert 25 < delay <= 30
            # second start is a no-op
            service.start()
            assert len(service.scheduler.get_jobs()) == 1
        finally:
            await service.stop()
        assert not service.started

    async def test_disabled_service_never_schedules(self, session_maker):
        service = SessionCleanupService(session_maker, enabled=False)
        service.start()
        assert not service.started
        assert service.scheduler.get_jobs() == []
        await service.stop()

    async def test_stop_waits_for_running_sweep(self, session_maker):
        service = SessionCleanupService(session_maker)
        release = asyncio.Event()
        finished = []

        async def slow_sweep():
            await release.wait()
            finished.append(True)
            return 0

        service.sweep = slow_sweep
        task = asyncio.create_task(service.run_once())
        await asyncio.sleep(0)

        stopper = asyncio.create_task(service.stop())
        await asyncio.sleep(0)
        assert not stopper.done()

        release.set()
        await stopper
        assert finished == [True]
        assert await task == 0

    async def test_stop_waits_for_sweep_when_job_is_cancelled(self, session_maker):
        service = SessionCleanupService(session_maker)
        release = asyncio.Event()
        finished = []

        async def slow_sweep():
            await release.wait()
            finished.append(True)
            return 0

        service.sweep = slow_sweep
        task = asyncio.create_task(service.run_once())
        await asyncio.sleep(0)
        task.cancel()

        stopper = asyncio.create_task(service.stop())
        await asyncio.sleep(0)
        assert not stopper.done()

        release.set()
        await stopper
        assert finished == [True]
        with pytest.raises(asyncio.CancelledError):
            await task
