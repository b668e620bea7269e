"""Time based transition of unpaid invoices to overdue."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.orm import Session

from fee_ledger.core.cancellation import CancellationToken
from fee_ledger.core.errors import OperationCancelledError
from fee_ledger.models.invoice import InvoiceStatus
from fee_ledger.models.shared import utc_now
from fee_ledger.repositories.invoice_repository import InvoiceRepository
from fee_ledger.services.batch import BatchItemFailure
from fee_ledger.services.notifier import (
    DeliveryOutcome,
    LedgerEvent,
    LedgerEventType,
    Notifier,
    publish,
)

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    swept_at: datetime
    transitioned: list[str] = field(default_factory=list)
    reminders_sent: int = 0
    reminders_skipped: int = 0
    reminders_failed: int = 0
    failed: list[BatchItemFailure] = field(default_factory=list)
    cancelled: bool = False

    @property
    def transitioned_count(self) -> int:
        return len(self.transitioned)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


class OverdueSweeper:
    """Marks unpaid invoices past their due date as overdue.

    Every transition is a conditional update keyed on the ``unpaid`` status
    and commits on its own. An invoice paid after it was read, or already
    moved by an overlapping sweep, simply does not match and gets neither a
    transition nor a reminder, which makes the sweep safe to re-run.
    """

    def __init__(
        self,
        db: Session,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.notifier = notifier
        self.clock = clock
        self.invoice_repo = InvoiceRepository(db)

    def sweep(
        self,
        now: datetime | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> SweepResult:
        now = now or self.clock()
        result = SweepResult(swept_at=now)

        candidates = self.invoice_repo.get_overdue_candidates(now.date())
        # Plain snapshots so nothing is lazily reloaded after the per-invoice commits
        rows = [
            (inv.id, str(inv.invoice_number), str(inv.student_ref)) for inv in candidates
        ]
        self.db.rollback()

        for invoice_id, invoice_number, student_ref in rows:
            if cancel_token is not None and cancel_token.is_cancelled():
                result.cancelled = True
                logger.warning(
                    "Overdue sweep cancelled after %d transitions", result.transitioned_count
                )
                raise OperationCancelledError("overdue sweep", result)

            try:
                changed = self.invoice_repo.transition_status(
                    invoice_id, InvoiceStatus.UNPAID, InvoiceStatus.OVERDUE, now
                )
                self.db.commit()
            except Exception as exc:
                self.db.rollback()
                logger.warning("Failed to mark invoice %s overdue: %s", invoice_number, exc)
                result.failed.append(BatchItemFailure(entity_ref=invoice_number, reason=str(exc)))
                continue

            if not changed:
                continue

            result.transitioned.append(invoice_number)
            if self.notifier is not None:
                outcome = publish(
                    self.notifier,
                    LedgerEvent(
                        type=LedgerEventType.REMINDER_DUE,
                        invoice_id=invoice_id,
                        student_ref=student_ref,
                        invoice_number=invoice_number,
                    ),
                )
                if outcome == DeliveryOutcome.SENT:
                    result.reminders_sent += 1
                elif outcome == DeliveryOutcome.SKIPPED:
                    result.reminders_skipped += 1
                else:
                    result.reminders_failed += 1

        logger.info(
            "Overdue sweep at %s: %d transitioned, %d failed",
            now.isoformat(),
            result.transitioned_count,
            result.failed_count,
        )
        return result
