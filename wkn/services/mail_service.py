from __future__ import annotations

import logging
from typing import Protocol

import anyio
import resend

from wkn.core import settings

logger = logging.getLogger(__name__)


class MailSender(Protocol):
    async def send(self, *, to: str, subject: str, text: str) -> None: ...


class ResendMailSender:
    """Delivers plain-text mail through the Resend API."""

    def __init__(self, api_key: str | None = None, from_email: str | None = None):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.from_email = from_email or settings.MAIL_FROM

    async def send(self, *, to: str, subject: str, text: str) -> None:
        if not self.api_key:
            raise RuntimeError("RESEND_API_KEY is not configured")
        resend.api_key = self.api_key
        params = {
            "from": self.from_email,
            "to": [to],
            "subject": subject,
            "text": text,
        }
        # resend's client is blocking
        await anyio.to_thread.run_sync(resend.Emails.send, params)
        logger.info("mail sent to %s", to)


def get_mail_sender() -> MailSender:
    return ResendMailSender()
