"""Emails rendered exports as attachments.

The transport is configured once at startup (``configure_mailer``). Request
handlers get it through the ``get_mailer`` dependency, which tests override.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional, Protocol

from fastapi.concurrency import run_in_threadpool

from ...core.config import REQUEST_TIMEOUT_SECONDS, MailSettings
from ...core.errors import DeliveryError

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    async def send(
        self, to: str, subject: str, body: str, attachment: bytes, filename: str, media_type: str
    ) -> None: ...


class SmtpMailer:
    def __init__(self, settings: MailSettings, timeout: float = REQUEST_TIMEOUT_SECONDS):
        self.settings = settings
        self.timeout = timeout

    def build_message(
        self, to: str, subject: str, body: str, attachment: bytes, filename: str, media_type: str
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.settings.sender
        msg["To"] = to
        msg.set_content(body)
        maintype, _, subtype = media_type.partition("/")
        msg.add_attachment(attachment, maintype=maintype, subtype=subtype, filename=filename)
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.settings.host, self.settings.port, timeout=self.timeout) as s:
            if self.settings.use_tls:
                s.starttls()
            s.login(self.settings.username, self.settings.password)
            s.send_message(msg)

    async def send(
        self, to: str, subject: str, body: str, attachment: bytes, filename: str, media_type: str
    ) -> None:
        """Sends one message, raising DeliveryError on any transport failure."""
        msg = self.build_message(to, subject, body, attachment, filename, media_type)
        try:
            # smtplib blocks, so it runs in the threadpool
            await asyncio.wait_for(run_in_threadpool(self._deliver, msg), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise DeliveryError(
                f"Timed out sending {filename} to {to}", filename=filename, retryable=True
            )
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"Could not send {filename} to {to}: {e}", filename=filename)
        logger.info(f"Mailed {filename} to {to}")


_mailer: Optional[Mailer] = None


def configure_mailer(mailer: Optional[Mailer]) -> None:
    global _mailer
    _mailer = mailer


def get_mailer() -> Optional[Mailer]:
    return _mailer
