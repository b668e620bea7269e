from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from fee_ledger.models.invoice import Invoice, InvoiceStatus


class InvoiceRepository:
    """Data access for invoices.

    Methods only flush; the calling service owns the transaction and commits
    once per unit of work.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        student_ref: str | None = None,
        status: InvoiceStatus | None = None,
        billing_period: tuple[int, int] | None = None,
    ) -> list[Invoice]:
        query = self.db.query(Invoice)

        if student_ref:
            query = query.filter(Invoice.student_ref == student_ref)
        if status:
            query = query.filter(Invoice.status == status.value)
        if billing_period:
            year, month = billing_period
            query = query.filter(
                Invoice.billing_period_year == year,
                Invoice.billing_period_month == month,
            )

        return query.order_by(Invoice.issued_at.desc()).offset(skip).limit(limit).all()

    def get_by_id(self, invoice_id: UUID) -> Invoice | None:
        return self.db.query(Invoice).filter(Invoice.id == invoice_id).first()

    def get_for_update(self, invoice_id: UUID) -> Invoice | None:
        """Load an invoice and lock its row until the transaction ends."""
        return (
            self.db.query(Invoice)
            .filter(Invoice.id == invoice_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def get_by_invoice_number(self, invoice_number: str) -> Invoice | None:
        return self.db.query(Invoice).filter(Invoice.invoice_number == invoice_number).first()

    def get_for_student_period(self, student_ref: str, year: int, month: int) -> Invoice | None:
        return (
            self.db.query(Invoice)
            .filter(
                Invoice.student_ref == student_ref,
                Invoice.billing_period_year == year,
                Invoice.billing_period_month == month,
            )
            .first()
        )

    def billed_students(self, year: int, month: int) -> set[str]:
        """Student refs that already hold an invoice for the period."""
        rows = (
            self.db.query(Invoice.student_ref)
            .filter(
                Invoice.billing_period_year == year,
                Invoice.billing_period_month == month,
            )
            .all()
        )
        return {row[0] for row in rows}

    def get_overdue_candidates(self, today: date, limit: int | None = None) -> list[Invoice]:
        """Unpaid invoices whose due date lies before ``today``."""
        query = (
            self.db.query(Invoice)
            .filter(
                Invoice.status == InvoiceStatus.UNPAID.value,
                Invoice.due_date < today,
            )
            .order_by(Invoice.due_date.asc(), Invoice.invoice_number.asc())
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def create(
        self,
        invoice_number: str,
        student_ref: str,
        amount: Decimal,
        due_date: date,
        status: InvoiceStatus,
        description: str | None = None,
        billing_period: tuple[int, int] | None = None,
        issued_at: datetime | None = None,
    ) -> Invoice:
        year, month = billing_period if billing_period else (None, None)
        invoice = Invoice(
            invoice_number=invoice_number,
            student_ref=student_ref,
            amount=amount,
            description=description,
            billing_period_year=year,
            billing_period_month=month,
            due_date=due_date,
            status=status.value,
        )
        if issued_at is not None:
            invoice.issued_at = issued_at  # type: ignore[assignment]
            invoice.updated_at = issued_at  # type: ignore[assignment]
        self.db.add(invoice)
        self.db.flush()
        return invoice

    def transition_status(
        self,
        invoice_id: UUID,
        expected: InvoiceStatus,
        new: InvoiceStatus,
        updated_at: datetime,
    ) -> bool:
        """Conditionally move an invoice from ``expected`` to ``new``.

        Returns False when the row no longer holds ``expected``, which means
        another writer got there first.
        """
        result = self.db.execute(
            update(Invoice)
            .where(Invoice.id == invoice_id, Invoice.status == expected.value)
            .values(status=new.value, updated_at=updated_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def delete(self, invoice: Invoice) -> None:
        self.db.delete(invoice)
        self.db.flush()
