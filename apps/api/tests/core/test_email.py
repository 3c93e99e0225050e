"""
Unit tests for the Resend mailer.
"""

from unittest.mock import patch

import pytest
import resend

from gold2money.core.email import Attachment, Mailer
from gold2money.core.errors import DeliveryError


@pytest.fixture
def mailer(settings):
    return Mailer(settings.model_copy(update={"resend_api_key": "re_test_key"}))


class TestMailer:
    """Tests for Mailer.send."""

    @pytest.mark.asyncio
    async def test_without_api_key_logs_instead_of_sending(self, settings):
        with patch("gold2money.core.email.resend.Emails.send") as send:
            result = await Mailer(settings).send(
                to_email="a@b.com", subject="Hi", html_content="<p>x</p>", sender=settings.sender
            )

        assert result is None
        send.assert_not_called()

    @pytest.mark.asyncio
    async def test_sends_through_resend(self, mailer, settings):
        with patch(
            "gold2money.core.email.resend.Emails.send", return_value={"id": "msg_1"}
        ) as send:
            result = await mailer.send(
                to_email="a@b.com", subject="Hi", html_content="<p>x</p>", sender=settings.sender
            )

        assert result == "msg_1"
        params = send.call_args.args[0]
        assert params["to"] == ["a@b.com"]
        assert params["from"] == '"Gold 2 Money Notifier" <noreply@gold2money.in>'
        assert "attachments" not in params

    @pytest.mark.asyncio
    async def test_attachments_are_read_at_send_time(self, mailer, settings, tmp_path):
        document = tmp_path / "stored.pdf"
        document.write_bytes(b"%PDF")

        with patch(
            "gold2money.core.email.resend.Emails.send", return_value={"id": "msg_2"}
        ) as send:
            await mailer.send(
                to_email="a@b.com",
                subject="Hi",
                html_content="<p>x</p>",
                sender=settings.sender,
                attachments=[Attachment(filename="loan.pdf", path=document)],
            )

        assert send.call_args.args[0]["attachments"] == [
            {"filename": "loan.pdf", "content": list(b"%PDF")}
        ]

    @pytest.mark.asyncio
    async def test_transport_failure_raises_delivery_error(self, mailer, settings):
        with patch(
            "gold2money.core.email.resend.Emails.send", side_effect=RuntimeError("rejected")
        ):
            with pytest.raises(DeliveryError) as exc_info:
                await mailer.send(
                    to_email="a@b.com", subject="Hi", html_content="", sender=settings.sender
                )

        assert exc_info.value.to_email == "a@b.com"

    @pytest.mark.asyncio
    async def test_missing_attachment_raises_delivery_error(self, mailer, settings, tmp_path):
        with pytest.raises(DeliveryError):
            await mailer.send(
                to_email="a@b.com",
                subject="Hi",
                html_content="",
                sender=settings.sender,
                attachments=[Attachment(filename="x.pdf", path=tmp_path / "gone.pdf")],
            )

    @pytest.mark.asyncio
    async def test_each_mailer_sends_with_its_own_key(self, settings):
        first = Mailer(settings.model_copy(update={"resend_api_key": "re_first"}))
        Mailer(settings.model_copy(update={"resend_api_key": "re_second"}))
        keys_at_send = []

        def record_key(_params):
            keys_at_send.append(resend.api_key)
            return {"id": "msg_3"}

        with patch("gold2money.core.email.resend.Emails.send", side_effect=record_key):
            await first.send(
                to_email="a@b.com", subject="Hi", html_content="", sender=settings.sender
            )

        assert keys_at_send == ["re_first"]
