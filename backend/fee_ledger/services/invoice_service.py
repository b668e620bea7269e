"""Invoice creation and the read side of the ledger."""

import logging
from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fee_ledger.core.config import settings
from fee_ledger.core.errors import (
    DuplicateInvoiceNumberError,
    InvalidAmountError,
    NotFoundError,
    ReferentialConflictError,
)
from fee_ledger.models.invoice import Invoice, InvoiceStatus
from fee_ledger.models.shared import utc_now
from fee_ledger.repositories.invoice_repository import InvoiceRepository
from fee_ledger.repositories.payment_repository import PaymentRepository
from fee_ledger.services.billing_period import BillingPeriod
from fee_ledger.services.invoice_numbering import InvoiceNumberAllocator
from fee_ledger.services.reconciliation import InvoiceBalance, compute_balance, derive_status
from fee_ledger.services.student_directory import StudentDirectory

logger = logging.getLogger(__name__)


def validate_amount(amount: Decimal) -> Decimal:
    amount = Decimal(str(amount))
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError(amount)
    return amount


class InvoiceService:
    """Creates invoices and answers invoice queries."""

    def __init__(
        self,
        db: Session,
        student_directory: StudentDirectory | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.student_directory = student_directory
        self.clock = clock
        self.invoice_repo = InvoiceRepository(db)
        self.payment_repo = PaymentRepository(db)
        self.allocator = InvoiceNumberAllocator(db)

    def create_invoice(
        self,
        student_ref: str,
        amount: Decimal,
        due_date: date,
        description: str | None = None,
    ) -> Invoice:
        """Create an ad-hoc invoice, numbered in the period of its issue date."""
        amount = validate_amount(amount)
        if self.student_directory is None:
            raise RuntimeError("A student directory is required to create invoices")
        if not self.student_directory.student_exists(student_ref):
            raise NotFoundError("student", student_ref)

        now = self.clock()
        invoice = self.insert_invoice(
            student_ref=student_ref,
            amount=amount,
            due_date=due_date,
            description=description,
            numbering_period=BillingPeriod.containing(now.date()),
            now=now,
        )
        assert invoice is not None
        logger.info("Created invoice %s for student %s", invoice.invoice_number, student_ref)
        return invoice

    def insert_invoice(
        self,
        *,
        student_ref: str,
        amount: Decimal,
        due_date: date,
        description: str | None,
        numbering_period: BillingPeriod,
        now: datetime,
        billing_period: BillingPeriod | None = None,
    ) -> Invoice | None:
        """Allocate a number and commit one invoice.

        Returns None when ``billing_period`` is given and the student already
        holds an invoice for it. On an invoice number collision the counter
        is moved past the numbers already issued and allocation is retried,
        up to ``INVOICE_NUMBER_MAX_RETRIES`` attempts in all.
        """
        status = derive_status(amount, Decimal("0"), due_date, now)
        max_attempts = max(1, settings.INVOICE_NUMBER_MAX_RETRIES)
        invoice_number = ""

        for _ in range(max_attempts):
            try:
                invoice_number = self.allocator.next_invoice_number(numbering_period)
                invoice = self.invoice_repo.create(
                    invoice_number=invoice_number,
                    student_ref=student_ref,
                    amount=amount,
                    due_date=due_date,
                    status=status,
                    description=description,
                    billing_period=billing_period.as_tuple() if billing_period else None,
                    issued_at=now,
                )
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                if billing_period is not None and (
                    self.invoice_repo.get_for_student_period(
                        student_ref, billing_period.year, billing_period.month
                    )
                    is not None
                ):
                    return None
                logger.warning("Invoice number %s collided, retrying", invoice_number)
                try:
                    self.allocator.catch_up(numbering_period)
                    self.db.commit()
                except Exception:
                    self.db.rollback()
                    raise
                continue
            except Exception:
                self.db.rollback()
                raise
            self.db.refresh(invoice)
            return invoice

        raise DuplicateInvoiceNumberError(invoice_number, max_attempts)

    def get_invoice(self, invoice_id: UUID) -> Invoice:
        invoice = self.invoice_repo.get_by_id(invoice_id)
        if invoice is None:
            raise NotFoundError("invoice", invoice_id)
        return invoice

    def list_invoices_by_student(
        self, student_ref: str, skip: int = 0, limit: int = 100
    ) -> list[Invoice]:
        return self.invoice_repo.get_all(skip=skip, limit=limit, student_ref=student_ref)

    def list_invoices_by_status(
        self, status: InvoiceStatus, skip: int = 0, limit: int = 100
    ) -> list[Invoice]:
        return self.invoice_repo.get_all(skip=skip, limit=limit, status=status)

    def get_balance(self, invoice_id: UUID) -> InvoiceBalance:
        """Amount, paid total, outstanding amount and overpayment credit."""
        invoice = self.get_invoice(invoice_id)
        return compute_balance(invoice, self.payment_repo.get_total_paid(invoice_id))

    def delete_invoice(self, invoice_id: UUID) -> None:
        """Delete an invoice that has no payments."""
        invoice = self.invoice_repo.get_for_update(invoice_id)
        if invoice is None:
            self.db.rollback()
            raise NotFoundError("invoice", invoice_id)
        payment_count = self.payment_repo.count_by_invoice_id(invoice_id)
        if payment_count:
            self.db.rollback()
            raise ReferentialConflictError(
                f"Invoice {invoice.invoice_number} has {payment_count} payment(s) "
                "and cannot be deleted"
            )
        invoice_number = str(invoice.invoice_number)
        try:
            self.invoice_repo.delete(invoice)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Deleted invoice %s", invoice_number)
