"""Derivation of invoice status from amount, payments and due date."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from fee_ledger.models.invoice import Invoice, InvoiceStatus
from fee_ledger.models.shared import ZERO, to_decimal
from fee_ledger.repositories.payment_repository import PaymentRepository


def derive_status(
    amount: Decimal, paid_total: Decimal, due_date: date, now: datetime
) -> InvoiceStatus:
    """Pure status function: paid beats overdue beats unpaid."""
    if paid_total >= amount:
        return InvoiceStatus.PAID
    if now.date() > due_date:
        return InvoiceStatus.OVERDUE
    return InvoiceStatus.UNPAID


@dataclass
class InvoiceBalance:
    invoice_id: UUID
    invoice_number: str
    amount: Decimal
    paid_total: Decimal
    outstanding: Decimal
    credit: Decimal
    status: InvoiceStatus


def compute_balance(invoice: Invoice, paid_total: Decimal) -> InvoiceBalance:
    amount = to_decimal(invoice.amount)
    return InvoiceBalance(
        invoice_id=invoice.id,  # type: ignore[arg-type]
        invoice_number=str(invoice.invoice_number),
        amount=amount,
        paid_total=paid_total,
        outstanding=max(amount - paid_total, ZERO),
        credit=max(paid_total - amount, ZERO),
        status=InvoiceStatus(invoice.status),
    )


class ReconciliationService:
    """Recomputes and stores an invoice's status inside the caller's transaction."""

    def __init__(self, db: Session):
        self.db = db
        self.payment_repo = PaymentRepository(db)

    def reconcile(self, invoice: Invoice, now: datetime) -> InvoiceStatus:
        paid_total = self.payment_repo.get_total_paid(invoice.id)  # type: ignore[arg-type]
        status = derive_status(
            to_decimal(invoice.amount),
            paid_total,
            invoice.due_date,  # type: ignore[arg-type]
            now,
        )
        if status == InvoiceStatus.PAID:
            if invoice.status != InvoiceStatus.PAID.value:
                invoice.paid_at = now  # type: ignore[assignment]
        else:
            invoice.paid_at = None  # type: ignore[assignment]
        invoice.status = status.value  # type: ignore[assignment]
        invoice.updated_at = now  # type: ignore[assignment]
        self.db.flush()
        return status
