"""Tests for arq background jobs."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import structlog
from arq import Retry

from surtidores.models.user import Users
from surtidores.tasks.email_jobs import send_notification_email_job


def mock_session_for(user):
    """Build a get_async_session replacement whose session returns ``user``."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = user
    session = AsyncMock()
    session.execute.return_value = result

    cm = MagicMock()
    cm.__aenter__ = AsyncMock(return_value=session)
    cm.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=cm)


@pytest.mark.unit
@pytest.mark.asyncio
class TestSendNotificationEmailJob:
    async def test_sends_email_to_active_user(self):
        user = Users(user_id=3, name="Ana", email="ana@example.com", active=True)
        ctx = {"job_try": 1}

        with (
            patch("surtidores.tasks.email_jobs.get_async_session", mock_session_for(user)),
            patch(
                "surtidores.tasks.email_jobs.send_notification_email", new_callable=AsyncMock
            ) as mock_send,
        ):
            mock_send.return_value = True

            await send_notification_email_job(
                ctx, "station_approved", 3, {"station_id": 1, "station_name": "YPF"}
            )

        mock_send.assert_awaited_once()
        assert mock_send.call_args[0][1] is user
        assert mock_send.call_args[0][2] == {"station_id": 1, "station_name": "YPF"}

    async def test_unknown_kind_is_dropped(self):
        with patch(
            "surtidores.tasks.email_jobs.send_notification_email", new_callable=AsyncMock
        ) as mock_send:
            await send_notification_email_job({"job_try": 1}, "not_a_kind", 3, {})

        mock_send.assert_not_called()

    async def test_missing_user_is_skipped(self):
        with (
            patch("surtidores.tasks.email_jobs.get_async_session", mock_session_for(None)),
            patch(
                "surtidores.tasks.email_jobs.send_notification_email", new_callable=AsyncMock
            ) as mock_send,
        ):
            await send_notification_email_job({"job_try": 1}, "station_created", 3, {})

        mock_send.assert_not_called()

    async def test_inactive_user_is_skipped(self):
        user = Users(user_id=3, name="Ana", email="ana@example.com", active=False)

        with (
            patch("surtidores.tasks.email_jobs.get_async_session", mock_session_for(user)),
            patch(
                "surtidores.tasks.email_jobs.send_notification_email", new_callable=AsyncMock
            ) as mock_send,
        ):
            await send_notification_email_job({"job_try": 1}, "station_created", 3, {})

        mock_send.assert_not_called()

    async def test_failed_send_retries(self):
        user = Users(user_id=3, name="Ana", email="ana@example.com", active=True)

        with (
            patch("surtidores.tasks.email_jobs.get_async_session", mock_session_for(user)),
            patch(
                "surtidores.tasks.email_jobs.send_notification_email", new_callable=AsyncMock
            ) as mock_send,
        ):
            mock_send.return_value = False

            with pytest.raises(Retry):
                await send_notification_email_job({"job_try": 2}, "station_rejected", 3, {})

    async def test_database_error_retries(self):
        broken = MagicMock(side_effect=ConnectionError("db down"))

        with patch("surtidores.tasks.email_jobs.get_async_session", broken):
            with pytest.raises(Retry):
                await send_notification_email_job({"job_try": 1}, "station_created", 3, {})


@pytest.mark.unit
async def test_job_fields_do_not_leak_after_job():
    with patch("surtidores.tasks.email_jobs.get_async_session", mock_session_for(None)):
        await send_notification_email_job(
            {"job_try": 1}, kind="station_approved", user_id=3, context={}
        )

    assert "kind" not in structlog.contextvars.get_contextvars()
