"""Monthly billing cycle generation."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from fee_ledger.core.cancellation import CancellationToken
from fee_ledger.core.config import settings
from fee_ledger.core.errors import OperationCancelledError
from fee_ledger.models.shared import utc_now
from fee_ledger.repositories.invoice_repository import InvoiceRepository
from fee_ledger.services.batch import BatchItemFailure
from fee_ledger.services.billing_period import BillingPeriod
from fee_ledger.services.invoice_service import InvoiceService, validate_amount
from fee_ledger.services.student_directory import StudentDirectory

logger = logging.getLogger(__name__)


@dataclass
class CycleGenerationResult:
    period: BillingPeriod
    created: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[BatchItemFailure] = field(default_factory=list)
    cancelled: bool = False

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


class BillingCycleGenerator:
    """Creates one invoice per active student for a billing period.

    Running a cycle again for the same period is a no-op for students that
    are already billed: the (student, period) pair is unique in the store.
    Each student's invoice commits on its own, so one failure never undoes
    or blocks the others.
    """

    def __init__(
        self,
        db: Session,
        student_directory: StudentDirectory,
        clock: Callable[[], datetime] = utc_now,
        due_day: int | None = None,
    ):
        self.db = db
        self.student_directory = student_directory
        self.clock = clock
        self.due_day = due_day if due_day is not None else settings.BILLING_DUE_DAY
        self.invoice_repo = InvoiceRepository(db)
        self.invoice_service = InvoiceService(db, student_directory, clock)

    def generate_cycle(
        self,
        period: BillingPeriod,
        amount: Decimal,
        description: str | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> CycleGenerationResult:
        """Bill every active student for ``period``.

        Raises:
            InvalidAmountError: ``amount`` is not positive.
            OperationCancelledError: ``cancel_token`` fired; the partial
                result is attached to the error.
        """
        amount = validate_amount(amount)
        due_date = period.due_date(self.due_day)
        result = CycleGenerationResult(period=period)

        students = self.student_directory.list_active_students()
        already_billed = self.invoice_repo.billed_students(period.year, period.month)

        for student_ref in dict.fromkeys(students):
            if cancel_token is not None and cancel_token.is_cancelled():
                result.cancelled = True
                logger.warning(
                    "Billing cycle %s cancelled after %d invoices", period, result.created_count
                )
                raise OperationCancelledError("billing cycle generation", result)

            if student_ref in already_billed:
                result.skipped.append(student_ref)
                continue

            try:
                invoice = self.invoice_service.insert_invoice(
                    student_ref=student_ref,
                    amount=amount,
                    due_date=due_date,
                    description=description,
                    numbering_period=period,
                    billing_period=period,
                    now=self.clock(),
                )
            except Exception as exc:
                logger.warning(
                    "Failed to bill student %s for period %s: %s", student_ref, period, exc
                )
                result.failed.append(BatchItemFailure(entity_ref=student_ref, reason=str(exc)))
                continue

            if invoice is None:
                result.skipped.append(student_ref)
            else:
                result.created.append(str(invoice.invoice_number))

        logger.info(
            "Billing cycle %s: %d created, %d skipped, %d failed",
            period,
            result.created_count,
            result.skipped_count,
            result.failed_count,
        )
        return result
