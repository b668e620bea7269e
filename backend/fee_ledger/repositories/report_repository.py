from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import and_
from sqlalchemy import func as sa_func
from sqlalchemy.orm import Session

from fee_ledger.models.invoice import Invoice
from fee_ledger.models.payment import Payment
from fee_ledger.models.shared import to_decimal


@dataclass
class InvoicePaidRow:
    invoice_id: UUID
    amount: Decimal
    due_date: date
    paid_total: Decimal


@dataclass
class MethodTotalRow:
    method: str
    count: int
    amount: Decimal


class ReportRepository:
    def __init__(self, db: Session):
        self.db = db

    def invoices_with_paid_totals(
        self, start: datetime, end: datetime, as_of: datetime
    ) -> list[InvoicePaidRow]:
        """Invoices issued in ``[start, end)`` with payments recorded up to ``as_of``."""
        paid_total = sa_func.coalesce(sa_func.sum(Payment.amount), 0)
        rows = (
            self.db.query(Invoice.id, Invoice.amount, Invoice.due_date, paid_total)
            .outerjoin(
                Payment,
                and_(Payment.invoice_id == Invoice.id, Payment.recorded_at <= as_of),
            )
            .filter(
                Invoice.issued_at >= start,
                Invoice.issued_at < end,
                Invoice.issued_at <= as_of,
            )
            .group_by(Invoice.id, Invoice.amount, Invoice.due_date)
            .all()
        )
        return [
            InvoicePaidRow(
                invoice_id=row[0],
                amount=to_decimal(row[1]),
                due_date=row[2],
                paid_total=to_decimal(row[3]),
            )
            for row in rows
        ]

    def payment_totals_by_method(
        self, start: datetime, end: datetime, as_of: datetime
    ) -> list[MethodTotalRow]:
        """Payments recorded in ``[start, end)`` and no later than ``as_of``."""
        rows = (
            self.db.query(
                Payment.method,
                sa_func.count(Payment.id),
                sa_func.coalesce(sa_func.sum(Payment.amount), 0),
            )
            .filter(
                Payment.recorded_at >= start,
                Payment.recorded_at < end,
                Payment.recorded_at <= as_of,
            )
            .group_by(Payment.method)
            .all()
        )
        return [
            MethodTotalRow(method=str(row[0]), count=int(row[1]), amount=to_decimal(row[2]))
            for row in rows
        ]
