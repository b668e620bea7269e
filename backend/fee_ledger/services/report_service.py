"""Financial reporting over a date window.

A report is consistent as of a single timestamp ``as_of`` taken when it
starts. Invoice statuses are re-derived from the payments recorded up to
``as_of`` rather than read from the stored status, and payment totals stop
at ``as_of`` too, so writes that land while the report runs never show up in
only one half of it. Both queries also run in one read transaction: a
``REPEATABLE READ`` snapshot on PostgreSQL and an explicit ``BEGIN`` on
SQLite, so a payment committed between them is seen by both or by neither.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from fee_ledger.core.errors import InvalidDateRangeError
from fee_ledger.models.invoice import InvoiceStatus
from fee_ledger.models.payment import PaymentMethod
from fee_ledger.models.shared import utc_now
from fee_ledger.repositories.report_repository import ReportRepository
from fee_ledger.services.reconciliation import derive_status


@dataclass
class AmountBreakdown:
    count: int = 0
    amount: Decimal = Decimal("0")


@dataclass
class FinancialReport:
    start_date: date
    end_date: date
    as_of: datetime
    invoice_count: int = 0
    invoiced_amount: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")
    outstanding_amount: Decimal = Decimal("0")
    credit_amount: Decimal = Decimal("0")
    by_status: dict[str, AmountBreakdown] = field(default_factory=dict)
    payment_count: int = 0
    payments_amount: Decimal = Decimal("0")
    by_method: dict[str, AmountBreakdown] = field(default_factory=dict)


class ReportService:
    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock
        self.repo = ReportRepository(db)

    def financial_report(self, start_date: date, end_date: date) -> FinancialReport:
        """Totals for invoices issued and payments recorded between the two dates, inclusive."""
        if start_date > end_date:
            raise InvalidDateRangeError(
                f"start_date {start_date} is after end_date {end_date}"
            )

        as_of = self.clock()
        window_start = datetime.combine(start_date, time.min, tzinfo=UTC)
        window_end = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=UTC)

        report = FinancialReport(start_date=start_date, end_date=end_date, as_of=as_of)
        report.by_status = {status.value: AmountBreakdown() for status in InvoiceStatus}
        report.by_method = {method.value: AmountBreakdown() for method in PaymentMethod}

        try:
            self._begin_snapshot()
            invoices = self.repo.invoices_with_paid_totals(window_start, window_end, as_of)
            methods = self.repo.payment_totals_by_method(window_start, window_end, as_of)
        finally:
            self.db.rollback()

        for row in invoices:
            status = derive_status(row.amount, row.paid_total, row.due_date, as_of)
            bucket = report.by_status[status.value]
            bucket.count += 1
            bucket.amount += row.amount

            report.invoice_count += 1
            report.invoiced_amount += row.amount
            report.paid_amount += min(row.paid_total, row.amount)
            report.outstanding_amount += max(row.amount - row.paid_total, Decimal("0"))
            report.credit_amount += max(row.paid_total - row.amount, Decimal("0"))

        for method_row in methods:
            bucket = report.by_method.setdefault(method_row.method, AmountBreakdown())
            bucket.count += method_row.count
            bucket.amount += method_row.amount
            report.payment_count += method_row.count
            report.payments_amount += method_row.amount

        return report

    def _begin_snapshot(self) -> None:
        """Open one read transaction that both aggregate queries share."""
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            self.db.connection(execution_options={"isolation_level": "REPEATABLE READ"})
        elif dialect == "sqlite":
            # pysqlite only opens a transaction before DML, so a SELECT on its own
            # would read whatever has committed by then
            connection = self.db.connection()
            if not connection.connection.dbapi_connection.in_transaction:
                connection.exec_driver_sql("BEGIN")
