"""
Loan Application Notifications

Two emails follow every accepted application:
- a staff notification with every submitted field and the uploaded
  document attached
- an auto-reply acknowledging receipt to the applicant

Both run after the HTTP response has been sent. Delivery failures are
logged and otherwise ignored. The uploaded document is deleted only after
the staff notification went out; if it failed the file stays on disk.
"""

import asyncio
import logging
from datetime import datetime
from html import escape

from gold2money.core.config import Settings
from gold2money.core.email import Attachment, Mailer
from gold2money.core.errors import DeliveryError
from gold2money.modules.loan_applications.schemas import ApplicationSubmission
from gold2money.modules.loan_applications.uploads import UploadedFile, UploadStorage

logger = logging.getLogger(__name__)

PLACEHOLDER = "N/A"
BRAND_COLOR = "#D4AF37"


def _display(value: str | None) -> str:
    """Escape a submitted value for HTML, or show the placeholder."""
    return escape(value) if value else PLACEHOLDER


def _single_line(value: str) -> str:
    return " ".join(value.split())


def _table_rows(rows: list[tuple[str, str | None]]) -> str:
    html_rows = []
    for index, (label, value) in enumerate(rows):
        shaded = ' style="background-color: #f2f2f2;"' if index % 2 == 0 else ""
        html_rows.append(
            f'<tr{shaded}><td style="width: 30%;" valign="top"><strong>{label}:</strong></td>'
            f'<td valign="top">{_display(value)}</td></tr>'
        )
    return "\n".join(html_rows)


def build_notification_html(submission: ApplicationSubmission) -> str:
    """Staff notification listing every submitted field."""
    rows = _table_rows(
        [
            ("Name", submission.name),
            ("Phone", submission.phone),
            ("Email", submission.email),
            ("City", submission.city),
            ("Loan Type", submission.loan_type),
            ("Desired Amount (₹)", submission.loan_amount),
            ("Jewelry Type", submission.jewelry_type),
            ("Grams", submission.grams),
            ("Document Path", submission.loan_document_path),
            ("Message", submission.message),
        ]
    )
    return f"""
    <h1 style="color: {BRAND_COLOR};">New Loan Application Received</h1>
    <p>A new application has been submitted via the website.</p>
    <hr>
    <h3 style="color: #333;">Applicant Details:</h3>
    <table border="1" cellpadding="10" cellspacing="0" style="border-collapse: collapse; width: 100%;">
        {rows}
    </table>
    """


def build_auto_reply_html(submission: ApplicationSubmission, settings: Settings) -> str:
    """Acknowledgement sent to the applicant with a short summary."""
    safe_name = escape(submission.name)
    company = escape(settings.company_name)
    phone = escape(settings.company_phone)
    phone_href = "".join(ch for ch in settings.company_phone if ch.isdigit() or ch == "+")
    rows = _table_rows(
        [
            ("Name", submission.name),
            ("Phone", submission.phone),
            ("Loan Type", submission.loan_type),
            ("Desired Amount (₹)", submission.loan_amount),
        ]
    )
    year = datetime.now().year
    return f"""
    <div style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
        <div style="max-width: 600px; margin: 20px auto; padding: 20px; border: 1px solid #ddd; border-radius: 10px; background-color: #f9f9f9;">
            <div style="text-align: center; border-bottom: 2px solid {BRAND_COLOR}; padding-bottom: 15px; margin-bottom: 20px;">
                <h1 style="color: {BRAND_COLOR}; margin: 0;">{company}</h1>
            </div>
            <h2 style="color: #333;">Thank You for Your Application, {safe_name}!</h2>
            <p>Dear {safe_name},</p>
            <p>We have successfully received your loan application/enquiry. Thank you for choosing {company}.</p>
            <p>Our team is reviewing your details and will get in touch with you shortly to discuss the next steps.</p>
            <p><strong>Here is a summary of the information you submitted:</strong></p>
            <table border="1" cellpadding="8" cellspacing="0" style="border-collapse: collapse; width: 100%; background-color: #fff;">
                {rows}
            </table>
            <p style="margin-top: 20px;">If you have any immediate questions, please feel free to contact us at <a href="tel:{phone_href}">{phone}</a> or reply to this email.</p>
            <p>Best Regards,<br><strong>The {company} Team</strong></p>
            <div style="text-align: center; font-size: 12px; color: #777; margin-top: 20px; border-top: 1px solid #ddd; padding-top: 15px;">
                <p>&copy; {year} {company}. All Rights Reserved.</p>
            </div>
        </div>
    </div>
    """


class Notifier:
    """Sends the emails that follow an accepted application."""

    def __init__(self, mailer: Mailer, storage: UploadStorage, settings: Settings):
        self.mailer = mailer
        self.storage = storage
        self.settings = settings

    async def send_notification_email(
        self,
        submission: ApplicationSubmission,
        upload: UploadedFile | None = None,
    ) -> bool:
        """
        Email the application to staff, attaching the uploaded document.

        Returns:
            True if the email was handed to the transport
        """
        recipient = self.settings.notification_recipient
        if not recipient:
            logger.warning("NOTIFICATION_RECIPIENT not set - skipping notification email")
            return False

        attachments = None
        if upload is not None:
            attachments = [Attachment(filename=upload.original_name, path=upload.stored_path)]

        try:
            await self.mailer.send(
                to_email=recipient,
                subject=f"New Loan Application from {_single_line(submission.name)}",
                html_content=build_notification_html(submission),
                sender=self.settings.sender,
                attachments=attachments,
            )
        except DeliveryError as e:
            logger.error(f"Error sending notification email: {e}")
            return False

        logger.info("Notification email sent successfully.")

        # The document only needed to live until staff had a copy
        if upload is not None:
            self.storage.discard(upload)

        return True

    async def send_auto_reply_email(self, submission: ApplicationSubmission) -> bool:
        """
        Acknowledge the application to the applicant.

        Returns:
            True if the email was handed to the transport
        """
        if not submission.email:
            logger.info("No user email provided, skipping auto-reply.")
            return False

        try:
            await self.mailer.send(
                to_email=submission.email,
                subject=f"We Have Received Your Loan Application - {self.settings.company_name}",
                html_content=build_auto_reply_html(submission, self.settings),
                sender=self.settings.auto_reply_sender,
            )
        except DeliveryError as e:
            logger.error(f"Error sending auto-reply email to {submission.email}: {e}")
            return False

        logger.info(f"Auto-reply email sent successfully to {submission.email}.")
        return True

    async def dispatch(
        self,
        submission: ApplicationSubmission,
        upload: UploadedFile | None = None,
    ) -> None:
        """
        Send both emails concurrently. Never raises.

        Scheduled as a background task once the response has been sent.
        """
        results = await asyncio.gather(
            self.send_notification_email(submission, upload),
            self.send_auto_reply_email(submission),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                logger.error(
                    f"Unexpected error while sending application emails: {result}",
                    exc_info=result,
                )
