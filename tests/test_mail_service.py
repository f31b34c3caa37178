"""
DevCamper API — Mailer Tests
=============================

aiosmtplib.send is patched; no SMTP server is needed.
"""

from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from devcamper.config import Settings
from devcamper.exceptions import MailDeliveryError
from devcamper.services.mail_service import Mailer


@pytest.fixture
def mailer():
    return Mailer(
        Settings(
            smtp_host="smtp.test",
            smtp_port=2525,
            smtp_user="mailer",
            smtp_password="secret",
            from_name="DevCamper",
            from_email="noreply@devcamper.io",
        )
    )


class TestMailer:
    def test_message_headers(self, mailer):
        message = mailer.build_message("jane@example.com", "Password reset token", "body")
        assert message["From"] == "DevCamper <noreply@devcamper.io>"
        assert message["To"] == "jane@example.com"
        assert message["Subject"] == "Password reset token"
        assert message.get_content().strip() == "body"

    @pytest.mark.asyncio
    async def test_send_uses_configured_server(self, mailer):
        with patch("devcamper.services.mail_service.aiosmtplib.send", new_callable=AsyncMock) as send:
            await mailer.send("jane@example.com", "Hi", "body")

        send.assert_awaited_once()
        kwargs = send.await_args.kwargs
        assert kwargs["hostname"] == "smtp.test"
        assert kwargs["port"] == 2525
        assert kwargs["username"] == "mailer"
        assert kwargs["password"] == "secret"

    @pytest.mark.asyncio
    async def test_smtp_failure_raises_mail_delivery_error(self, mailer):
        failure = AsyncMock(side_effect=aiosmtplib.SMTPException("refused"))
        with patch("devcamper.services.mail_service.aiosmtplib.send", failure):
            with pytest.raises(MailDeliveryError, match="Email could not be sent"):
                await mailer.send("jane@example.com", "Hi", "body")

    @pytest.mark.asyncio
    async def test_connection_failure_raises_mail_delivery_error(self, mailer):
        failure = AsyncMock(side_effect=OSError("unreachable"))
        with patch("devcamper.services.mail_service.aiosmtplib.send", failure):
            with pytest.raises(MailDeliveryError):
                await mailer.send("jane@example.com", "Hi", "body")
