import asyncio
import smtplib
from email.message import EmailMessage
from typing import Protocol

from backend.app.core.config import Settings
from backend.app.core.errors import NotificationError


class MailTransport(Protocol):
    async def send(self, message: EmailMessage) -> None: ...


class SmtpTransport:
    """Send messages over SMTP from a worker thread."""

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        *,
        secure: bool = False,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.secure = secure
        self.timeout = timeout

    async def send(self, message: EmailMessage) -> None:
        try:
            await asyncio.to_thread(self._send, message)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(exc) from exc

    def _send(self, message: EmailMessage) -> None:
        if self.secure:
            client = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        else:
            client = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        with client as smtp:
            if not self.secure:
                smtp.ehlo()
                if smtp.has_extn("starttls"):
                    smtp.starttls()
                    smtp.ehlo()
            smtp.login(self.user, self.password)
            smtp.send_message(message)


def build_transport(app_settings: Settings) -> SmtpTransport | None:
    """Return an SMTP transport, or ``None`` when credentials are incomplete."""
    if not app_settings.smtp_configured:
        return None
    return SmtpTransport(
        app_settings.SMTP_HOST,
        app_settings.SMTP_PORT,
        app_settings.SMTP_USER,
        app_settings.SMTP_PASS,
        secure=app_settings.SMTP_SECURE,
        timeout=app_settings.SMTP_TIMEOUT,
    )
