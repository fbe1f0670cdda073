"""Tests for email service retry logic."""

from unittest.mock import AsyncMock, patch

import pytest
from aiosmtplib.errors import (
    SMTPAuthenticationError,
    SMTPConnectError,
    SMTPConnectTimeoutError,
    SMTPDataError,
    SMTPReadTimeoutError,
)

from surtidores.config import settings
from surtidores.services.email import send_email


@pytest.fixture(autouse=True)
def smtp_configured():
    with patch.object(settings, "SMTP_HOST", "smtp.test"):
        yield


async def _send() -> bool:
    return await send_email(to="test@example.com", subject="Test", body="Test body")


@pytest.mark.unit
class TestEmailRetryLogic:
    """Test email retry logic for different SMTP errors."""

    async def test_send_email_success(self):
        with patch("surtidores.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            mock_send.return_value = None

            assert await _send() is True
            assert mock_send.call_count == 1

    async def test_not_configured_skips_smtp(self):
        with patch.object(settings, "SMTP_HOST", None):
            with patch(
                "surtidores.services.email.aiosmtplib.send", new_callable=AsyncMock
            ) as mock_send:
                assert await _send() is False
                mock_send.assert_not_called()

    async def test_send_email_read_timeout_no_retry(self):
        """The server may already have queued the message."""
        with patch("surtidores.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            mock_send.side_effect = SMTPReadTimeoutError("Timeout reading response")

            assert await _send() is False
            assert mock_send.call_count == 1

    async def test_send_email_auth_error_no_retry(self):
        with patch("surtidores.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            mock_send.side_effect = SMTPAuthenticationError(535, "Authentication failed")

            assert await _send() is False
            assert mock_send.call_count == 1

    async def test_send_email_connection_error_retries(self):
        with patch("surtidores.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            with patch("surtidores.services.email.asyncio.sleep", new_callable=AsyncMock):
                mock_send.side_effect = SMTPConnectError("Cannot connect")

                assert await _send() is False
                assert mock_send.call_count == 3

    async def test_send_email_connection_timeout_retries(self):
        with patch("surtidores.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            with patch("surtidores.services.email.asyncio.sleep", new_callable=AsyncMock):
                mock_send.side_effect = SMTPConnectTimeoutError("Connection timeout")

                assert await _send() is False
                assert mock_send.call_count == 3

    async def test_send_email_connection_error_succeeds_on_retry(self):
        with patch("surtidores.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            with patch("surtidores.services.email.asyncio.sleep", new_callable=AsyncMock):
                mock_send.side_effect = [SMTPConnectError("Cannot connect"), None]

                assert await _send() is True
                assert mock_send.call_count == 2

    async def test_send_email_other_smtp_error_no_retry(self):
        with patch("surtidores.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            mock_send.side_effect = SMTPDataError(550, "Recipient not found")

            assert await _send() is False
            assert mock_send.call_count == 1

    async def test_send_email_unexpected_error_no_retry(self):
        with patch("surtidores.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            mock_send.side_effect = RuntimeError("Unexpected error")

            assert await _send() is False
            assert mock_send.call_count == 1

    async def test_send_email_exponential_backoff(self):
        with patch("surtidores.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            with patch(
                "surtidores.services.email.asyncio.sleep", new_callable=AsyncMock
            ) as mock_sleep:
                mock_send.side_effect = SMTPConnectError("Cannot connect")

                await _send()

                # 2^0=1s, 2^1=2s; no sleep after the last attempt
                assert [c[0][0] for c in mock_sleep.call_args_list] == [1, 2]
