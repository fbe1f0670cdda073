"""Tests for the arq client used to queue notification emails."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from surtidores.config import NotificationKind
from surtidores.tasks.queue import NOTIFICATION_JOB, enqueue_notification
from surtidores.tasks.worker import WorkerSettings


@pytest.mark.unit
class TestEnqueueNotification:
    async def test_enqueues_worker_job(self):
        pool = MagicMock()
        pool.enqueue_job = AsyncMock(return_value=MagicMock(job_id="job-42"))

        with patch("surtidores.tasks.queue.get_queue", AsyncMock(return_value=pool)):
            job_id = await enqueue_notification(
                NotificationKind.station_approved, 7, {"station_name": "YPF Centro"}
            )

        assert job_id == "job-42"
        pool.enqueue_job.assert_awaited_once_with(
            NOTIFICATION_JOB,
            kind="station_approved",
            user_id=7,
            context={"station_name": "YPF Centro"},
        )

    def test_job_name_matches_worker(self):
        names = {func.coroutine.__name__ for func in WorkerSettings.functions}
        assert NOTIFICATION_JOB in names

    async def test_duplicate_job_returns_none(self):
        pool = MagicMock()
        pool.enqueue_job = AsyncMock(return_value=None)

        with patch("surtidores.tasks.queue.get_queue", AsyncMock(return_value=pool)):
            job_id = await enqueue_notification(NotificationKind.station_created, 7, {})

        assert job_id is None

    async def test_redis_error_returns_none(self):
        with patch(
            "surtidores.tasks.queue.get_queue",
            AsyncMock(side_effect=ConnectionError("redis down")),
        ):
            job_id = await enqueue_notification(NotificationKind.station_created, 7, {})

        assert job_id is None
