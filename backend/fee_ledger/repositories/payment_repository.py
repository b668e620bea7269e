"""Payment repository for data access."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import delete as sa_delete
from sqlalchemy import func as sa_func
from sqlalchemy.orm import Session

from fee_ledger.models.payment import Payment, PaymentMethod
from fee_ledger.models.shared import ZERO, to_decimal


class PaymentRepository:
    """Repository for Payment model. Flushes only; callers commit."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, payment_id: UUID) -> Payment | None:
        """Get a payment by ID."""
        return self.db.query(Payment).filter(Payment.id == payment_id).first()

    def get_by_invoice_id(self, invoice_id: UUID) -> list[Payment]:
        """Get all payments for an invoice, oldest first."""
        return (
            self.db.query(Payment)
            .filter(Payment.invoice_id == invoice_id)
            .order_by(Payment.recorded_at.asc())
            .all()
        )

    def count_by_invoice_id(self, invoice_id: UUID) -> int:
        return (
            self.db.query(sa_func.count(Payment.id))
            .filter(Payment.invoice_id == invoice_id)
            .scalar()
            or 0
        )

    def get_total_paid(self, invoice_id: UUID) -> Decimal:
        """Sum of the amounts of every payment on the invoice."""
        amounts = self.db.query(Payment.amount).filter(Payment.invoice_id == invoice_id).all()
        return sum((to_decimal(row[0]) for row in amounts), ZERO)

    def create(
        self,
        invoice_id: UUID,
        amount: Decimal,
        method: PaymentMethod,
        reference_number: str | None = None,
        recorded_at: datetime | None = None,
    ) -> Payment:
        """Create a new payment."""
        payment = Payment(
            invoice_id=invoice_id,
            amount=amount,
            method=method.value,
            reference_number=reference_number,
        )
        if recorded_at is not None:
            payment.recorded_at = recorded_at  # type: ignore[assignment]
        self.db.add(payment)
        self.db.flush()
        return payment

    def delete(self, payment: Payment) -> bool:
        """Delete the payment row. False when it was already gone."""
        result = self.db.execute(sa_delete(Payment).where(Payment.id == payment.id))
        return bool(result.rowcount)
