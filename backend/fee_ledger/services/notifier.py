"""Outbound ledger events for the notification collaborator.

Events are fire-and-forget: they are published after the ledger write has
committed, and a delivery failure is logged against the event's invoice
without touching the ledger.
"""

import hashlib
import hmac
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from enum import Enum
from uuid import UUID

import httpx

from fee_ledger.core.config import settings

logger = logging.getLogger(__name__)


class LedgerEventType(str, Enum):
    REMINDER_DUE = "reminder_due"
    PAYMENT_RECORDED = "payment_recorded"


class DeliveryOutcome(str, Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class LedgerEvent:
    type: LedgerEventType
    invoice_id: UUID
    student_ref: str
    invoice_number: str

    def to_payload(self) -> dict[str, str]:
        payload = asdict(self)
        payload["type"] = self.type.value
        payload["invoice_id"] = str(self.invoice_id)
        return payload


def generate_hmac_signature(payload_bytes: bytes, secret: str) -> str:
    """Generate HMAC-SHA256 signature for a webhook payload."""
    return hmac.new(
        secret.encode("utf-8"),
        payload_bytes,
        hashlib.sha256,
    ).hexdigest()


class Notifier(ABC):
    """Receiver of ledger events."""

    @abstractmethod
    def notify(self, event: LedgerEvent) -> bool:
        """Deliver one event.

        Returns False when the event was deliberately not sent, for example
        because no destination is configured. May raise on delivery failure.
        """
        ...  # pragma: no cover


class WebhookNotifier(Notifier):
    """Posts each event as a signed JSON webhook."""

    def __init__(self, url: str, secret: str, timeout: float = 10.0) -> None:
        self.url = url
        self.secret = secret
        self.timeout = timeout

    def notify(self, event: LedgerEvent) -> bool:
        if not self.url:
            logger.info(
                "Notification webhook not configured, skipping %s for invoice %s",
                event.type.value,
                event.invoice_number,
            )
            return False

        payload_bytes = json.dumps(event.to_payload()).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "X-Ledger-Signature": generate_hmac_signature(payload_bytes, self.secret),
            "X-Ledger-Event": event.type.value,
        }
        with httpx.Client(timeout=self.timeout) as client:
            resp = client.post(self.url, content=payload_bytes, headers=headers)
        resp.raise_for_status()
        return True


def publish(notifier: Notifier, event: LedgerEvent) -> DeliveryOutcome:
    """Deliver ``event``; failures are logged and reported, never raised."""
    try:
        sent = notifier.notify(event)
    except Exception:
        logger.exception(
            "Failed to deliver %s event for invoice %s (student %s)",
            event.type.value,
            event.invoice_number,
            event.student_ref,
        )
        return DeliveryOutcome.FAILED
    return DeliveryOutcome.SENT if sent else DeliveryOutcome.SKIPPED


def get_notifier() -> Notifier:
    return WebhookNotifier(settings.NOTIFICATION_WEBHOOK_URL, settings.webhook_secret)
