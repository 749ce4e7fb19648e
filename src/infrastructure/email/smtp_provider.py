"""SMTP and logging implementations of the email provider."""

import asyncio
import smtplib
from email.message import EmailMessage as MIMEMessage
from email.utils import formataddr

import structlog

from core.config import Settings, settings
from core.exceptions import EmailNotConfiguredError, EmailSendError
from infrastructure.email.provider import EmailMessage

logger = structlog.get_logger()


class SMTPEmailProvider:
    """Sends HTML email over SMTP.

    ``smtplib`` is blocking, so each send runs in a worker thread.
    """

    def __init__(self, config: Settings | None = None) -> None:
        config = config or settings
        if not config.smtp_host:
            raise EmailNotConfiguredError("smtp_host")
        if not config.smtp_from:
            raise EmailNotConfiguredError("smtp_from")

        self._host = config.smtp_host
        self._port = config.smtp_port
        self._username = config.smtp_username
        self._password = config.smtp_password
        self._use_tls = config.smtp_use_tls
        self._sender = config.smtp_from
        self._timeout = config.smtp_timeout_seconds

    def _build(self, message: EmailMessage) -> MIMEMessage:
        mime = MIMEMessage()
        mime["From"] = formataddr((message.from_name, self._sender))
        mime["To"] = message.to
        mime["Subject"] = message.subject
        mime.set_content("This message requires an HTML-capable email client.")
        mime.add_alternative(message.body, subtype="html")
        return mime

    def _send_blocking(self, mime: MIMEMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
            if self._use_tls:
                server.starttls()
            if self._username and self._password:
                server.login(self._username, self._password)
            server.send_message(mime)

    async def send(self, message: EmailMessage) -> None:
        mime = self._build(message)
        try:
            await asyncio.to_thread(self._send_blocking, mime)
        except (OSError, smtplib.SMTPException) as e:
            raise EmailSendError(message.to, str(e)) from e

        logger.info("email_sent", to=message.to, subject=message.subject)


class LoggingEmailProvider:
    """Logs emails instead of sending them (no SMTP host configured)."""

    async def send(self, message: EmailMessage) -> None:
        logger.info(
            "email_send_skipped",
            reason="smtp_not_configured",
            to=message.to,
            subject=message.subject,
        )


def create_email_provider(
    config: Settings | None = None,
) -> SMTPEmailProvider | LoggingEmailProvider:
    """Pick the SMTP provider when configured, the logging one otherwise."""
    config = config or settings
    if config.smtp_host:
        return SMTPEmailProvider(config)
    return LoggingEmailProvider()
