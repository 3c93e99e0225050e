"""
Email Service using Resend

Thin delivery layer shared by every outgoing message. Templates live with
the module that sends them; this layer only knows recipients, subjects,
HTML bodies and attachments.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

import resend

from gold2money.core.config import Settings
from gold2money.core.errors import DeliveryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attachment:
    """A file attached to an outgoing email."""

    filename: str
    path: Path

    def to_params(self) -> dict:
        # Resend accepts raw bytes as a list of ints
        return {"filename": self.filename, "content": list(self.path.read_bytes())}


class Mailer:
    """Sends HTML email through Resend."""

    def __init__(self, settings: Settings):
        self.api_key = settings.resend_api_key

    def _send(self, params: resend.Emails.SendParams) -> dict:
        # Resend reads the key from module state shared by the whole process
        resend.api_key = self.api_key
        return resend.Emails.send(params)

    async def send(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        sender: str,
        attachments: list[Attachment] | None = None,
    ) -> str | None:
        """
        Send an email using Resend.

        Args:
            to_email: Recipient email address
            subject: Email subject line
            html_content: HTML content of the email
            sender: RFC 5322 "From" value
            attachments: Files to attach, read at send time

        Returns:
            The Resend message id, or None when delivery is disabled

        Raises:
            DeliveryError: If the message could not be handed to Resend
        """
        if not self.api_key:
            logger.warning("RESEND_API_KEY not set - logging email instead of sending")
            logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
            return None

        try:
            params: resend.Emails.SendParams = {
                "from": sender,
                "to": [to_email],
                "subject": subject,
                "html": html_content,
            }
            if attachments:
                params["attachments"] = await asyncio.to_thread(
                    lambda: [attachment.to_params() for attachment in attachments]
                )

            # Run sync Resend call in thread pool to avoid blocking event loop
            email = await asyncio.to_thread(self._send, params)
        except Exception as e:
            raise DeliveryError(to_email, str(e)) from e

        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return email["id"]
