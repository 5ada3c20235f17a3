"""Tests for EmailService.send_workshop_links."""

import base64
import email
import email.message
from unittest.mock import MagicMock, patch

import pytest

from workshop_pay.email.service import EmailService
from workshop_pay.registrants.models import LinkKind, create_pending_registrant


@pytest.fixture
def gmail():
    """Mocked Gmail API resource."""
    resource = MagicMock()
    resource.users.return_value.messages.return_value.send.return_value.execute.return_value = {
        "id": "msg123",
        "threadId": "thr123",
    }
    return resource


@pytest.fixture
def email_service(gmail):
    with patch.object(EmailService, "_get_service", return_value=gmail):
        yield EmailService(
            credentials_path="/fake/path.json",
            sender_address="no-reply@wclan.in",
        )


@pytest.fixture
def registrant():
    registrant = create_pending_registrant(
        "order_1", "Asha", "asha@example.com", bundle=True
    )
    registrant.mark_verified(
        "pay_1",
        {
            LinkKind.WHATSAPP: "https://chat.whatsapp.com/wclan",
            LinkKind.TELEGRAM: "https://t.me/wclan",
            LinkKind.DOWNLOAD: "https://cdn.wclan.in/bundle.zip",
        },
    )
    return registrant


def sent_message(gmail) -> email.message.Message:
    body = gmail.users.return_value.messages.return_value.send.call_args.kwargs["body"]
    return email.message_from_bytes(base64.urlsafe_b64decode(body["raw"]))


class TestSendWorkshopLinks:
    """Tests for the post-payment email."""

    @pytest.mark.asyncio
    async def test_success(self, email_service, registrant):
        result = await email_service.send_workshop_links(registrant)

        assert result.success is True
        assert result.message_id == "msg123"

    @pytest.mark.asyncio
    async def test_headers(self, email_service, gmail, registrant):
        await email_service.send_workshop_links(registrant)

        message = sent_message(gmail)
        assert message["To"] == "Asha <asha@example.com>"
        assert message["From"] == "WCLAN <no-reply@wclan.in>"
        assert "workshop links" in message["Subject"]

    @pytest.mark.asyncio
    async def test_failure_is_reported_not_raised(self, email_service, gmail, registrant):
        gmail.users.return_value.messages.return_value.send.return_value.execute.side_effect = RuntimeError(
            "quota"
        )

        result = await email_service.send_workshop_links(registrant)

        assert result.success is False
        assert "quota" in result.error

    @pytest.mark.asyncio
    async def test_missing_credentials(self, registrant):
        service = EmailService(
            credentials_path="/does/not/exist.json",
            sender_address="no-reply@wclan.in",
        )

        result = await service.send_workshop_links(registrant)

        assert result.success is False
        assert "credentials" in result.error
