"""
DevCamper API — Transactional Mail
===================================

What:  Sends plain-text emails (password reset) over SMTP.
How:   aiosmtplib with credentials from settings; one connection per message.
Failures raise MailDeliveryError (500 "Email could not be sent").
"""

import logging
from email.message import EmailMessage

import aiosmtplib

from devcamper.config import Settings
from devcamper.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.sender = f"{settings.from_name} <{settings.from_email}>"

    def build_message(self, to: str, subject: str, text: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text)
        return message

    async def send(self, to: str, subject: str, text: str) -> None:
        message = self.build_message(to, subject, text)
        try:
            await aiosmtplib.send(
                message,
                hostname=self.settings.smtp_host,
                port=self.settings.smtp_port,
                username=self.settings.smtp_user or None,
                password=self.settings.smtp_password or None,
                start_tls=self.settings.smtp_use_tls,
                timeout=self.settings.smtp_timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("Failed to send '%s' to %s: %s", subject, to, e)
            raise MailDeliveryError(context={"to": to, "error": str(e)})
        logger.info("Message sent: '%s' to %s", subject, to)
