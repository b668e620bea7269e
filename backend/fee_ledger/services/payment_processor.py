"""Payment application and removal."""

import logging
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from fee_ledger.core.errors import NotFoundError
from fee_ledger.models.invoice import Invoice
from fee_ledger.models.payment import Payment, PaymentMethod
from fee_ledger.models.shared import utc_now
from fee_ledger.repositories.invoice_repository import InvoiceRepository
from fee_ledger.repositories.payment_repository import PaymentRepository
from fee_ledger.services.invoice_service import validate_amount
from fee_ledger.services.notifier import LedgerEvent, LedgerEventType, Notifier, publish
from fee_ledger.services.reconciliation import ReconciliationService

logger = logging.getLogger(__name__)


class PaymentProcessor:
    """Applies and removes payments, keeping invoice status in step.

    Each operation locks the owning invoice row, writes the payment change
    and the recomputed status, and commits them together. Payments on
    different invoices never wait on each other.
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
        self.payment_repo = PaymentRepository(db)
        self.reconciliation = ReconciliationService(db)

    def apply_payment(
        self,
        invoice_id: UUID,
        amount: Decimal,
        method: PaymentMethod,
        reference_number: str | None = None,
    ) -> Payment:
        """Record a settled payment against an invoice.

        Overpayment is accepted: the invoice becomes paid and the excess is
        reported as credit by the invoice balance.

        Raises:
            InvalidAmountError: ``amount`` is not positive.
            NotFoundError: the invoice does not exist.
        """
        amount = validate_amount(amount)
        method = PaymentMethod(method)

        invoice = self.invoice_repo.get_for_update(invoice_id)
        if invoice is None:
            self.db.rollback()
            raise NotFoundError("invoice", invoice_id)

        now = self.clock()
        try:
            payment = self.payment_repo.create(
                invoice_id=invoice_id,
                amount=amount,
                method=method,
                reference_number=reference_number,
                recorded_at=now,
            )
            status = self.reconciliation.reconcile(invoice, now)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(payment)
        self.db.refresh(invoice)
        logger.info(
            "Recorded %s payment of %s on invoice %s (now %s)",
            method.value,
            amount,
            invoice.invoice_number,
            status.value,
        )
        self._publish(LedgerEventType.PAYMENT_RECORDED, invoice)
        return payment

    def delete_payment(self, payment_id: UUID) -> Invoice:
        """Remove a payment and re-derive its invoice's status.

        Returns the owning invoice as reconciled after the delete.
        """
        payment = self.payment_repo.get_by_id(payment_id)
        if payment is None:
            self.db.rollback()
            raise NotFoundError("payment", payment_id)

        invoice_id: UUID = payment.invoice_id  # type: ignore[assignment]
        invoice = self.invoice_repo.get_for_update(invoice_id)
        if invoice is None:
            self.db.rollback()
            raise NotFoundError("invoice", invoice_id)

        # A concurrent delete of the same payment may have committed while
        # this one waited for the invoice lock
        if self.payment_repo.get_by_id(payment_id) is None:
            self.db.rollback()
            raise NotFoundError("payment", payment_id)

        now = self.clock()
        try:
            if not self.payment_repo.delete(payment):
                raise NotFoundError("payment", payment_id)
            status = self.reconciliation.reconcile(invoice, now)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(invoice)
        logger.info(
            "Deleted payment %s from invoice %s (now %s)",
            payment_id,
            invoice.invoice_number,
            status.value,
        )
        return invoice

    def get_payment(self, payment_id: UUID) -> Payment:
        payment = self.payment_repo.get_by_id(payment_id)
        if payment is None:
            raise NotFoundError("payment", payment_id)
        return payment

    def list_payments_by_invoice(self, invoice_id: UUID) -> list[Payment]:
        if self.invoice_repo.get_by_id(invoice_id) is None:
            raise NotFoundError("invoice", invoice_id)
        return self.payment_repo.get_by_invoice_id(invoice_id)

    def _publish(self, event_type: LedgerEventType, invoice: Invoice) -> None:
        if self.notifier is None:
            return
        publish(
            self.notifier,
            LedgerEvent(
                type=event_type,
                invoice_id=invoice.id,  # type: ignore[arg-type]
                student_ref=str(invoice.student_ref),
                invoice_number=str(invoice.invoice_number),
            ),
        )
