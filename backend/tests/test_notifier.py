"""Tests for ledger event delivery."""

import hashlib
import hmac
import json
from unittest.mock import MagicMock, patch
from uuid import uuid4

import httpx
import pytest

from fee_ledger.services.notifier import (
    DeliveryOutcome,
    LedgerEvent,
    LedgerEventType,
    WebhookNotifier,
    generate_hmac_signature,
    get_notifier,
    publish,
)
from tests.fakes import RecordingNotifier


@pytest.fixture
def event() -> LedgerEvent:
    return LedgerEvent(
        type=LedgerEventType.REMINDER_DUE,
        invoice_id=uuid4(),
        student_ref="stu-001",
        invoice_number="INV-2023-07-001",
    )


def _mock_client(mock_client_cls: MagicMock, response: MagicMock) -> MagicMock:
    mock_client = MagicMock()
    mock_client.__enter__ = MagicMock(return_value=mock_client)
    mock_client.__exit__ = MagicMock(return_value=False)
    mock_client.post.return_value = response
    mock_client_cls.return_value = mock_client
    return mock_client


class TestLedgerEvent:
    def test_payload_is_json_ready(self, event: LedgerEvent):
        payload = event.to_payload()
        assert payload == {
            "type": "reminder_due",
            "invoice_id": str(event.invoice_id),
            "student_ref": "stu-001",
            "invoice_number": "INV-2023-07-001",
        }
        json.dumps(payload)


class TestWebhookNotifier:
    def test_posts_signed_payload(self, event: LedgerEvent):
        notifier = WebhookNotifier("https://hooks.example.com/ledger", "s3cret")

        with patch("fee_ledger.services.notifier.httpx.Client") as mock_client_cls:
            mock_client = _mock_client(mock_client_cls, MagicMock(status_code=200))
            assert notifier.notify(event) is True

        call = mock_client.post.call_args
        assert call.args[0] == "https://hooks.example.com/ledger"
        body = call.kwargs["content"]
        expected = hmac.new(b"s3cret", body, hashlib.sha256).hexdigest()
        assert call.kwargs["headers"]["X-Ledger-Signature"] == expected
        assert call.kwargs["headers"]["X-Ledger-Event"] == "reminder_due"
        assert json.loads(body)["invoice_number"] == "INV-2023-07-001"

    def test_error_status_raises(self, event: LedgerEvent):
        notifier = WebhookNotifier("https://hooks.example.com/ledger", "s3cret")
        response = MagicMock(status_code=500)
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Server error", request=MagicMock(), response=response
        )

        with patch("fee_ledger.services.notifier.httpx.Client") as mock_client_cls:
            _mock_client(mock_client_cls, response)
            with pytest.raises(httpx.HTTPStatusError):
                notifier.notify(event)

    def test_unconfigured_url_skips_delivery(self, event: LedgerEvent):
        notifier = WebhookNotifier("", "s3cret")
        with patch("fee_ledger.services.notifier.httpx.Client") as mock_client_cls:
            assert notifier.notify(event) is False
        mock_client_cls.assert_not_called()

    def test_get_notifier_uses_settings(self):
        with patch("fee_ledger.services.notifier.settings") as mock_settings:
            mock_settings.NOTIFICATION_WEBHOOK_URL = "https://hooks.example.com/x"
            mock_settings.webhook_secret = "abc"
            notifier = get_notifier()
        assert isinstance(notifier, WebhookNotifier)
        assert notifier.url == "https://hooks.example.com/x"
        assert notifier.secret == "abc"


class TestPublish:
    def test_reports_sent_on_delivery(self, event: LedgerEvent):
        notifier = RecordingNotifier()
        assert publish(notifier, event) == DeliveryOutcome.SENT
        assert notifier.events == [event]

    def test_reports_skipped_without_destination(self, event: LedgerEvent):
        assert publish(WebhookNotifier("", "s3cret"), event) == DeliveryOutcome.SKIPPED

    def test_failure_is_logged_not_raised(self, event: LedgerEvent, caplog):
        assert publish(RecordingNotifier(fail=True), event) == DeliveryOutcome.FAILED
        assert "INV-2023-07-001" in caplog.text


def test_generate_hmac_signature():
    signature = generate_hmac_signature(b'{"a": 1}', "key")
    assert signature == hmac.new(b"key", b'{"a": 1}', hashlib.sha256).hexdigest()
