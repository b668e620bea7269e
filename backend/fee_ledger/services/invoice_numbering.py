"""Invoice number allocation.

Numbers look like ``INV-2023-07-001``: a per billing period sequence
that never repeats inside the period, however many callers race for it.
The sequence lives in a counter row that is incremented with a single
``UPDATE``, so the row lock serializes callers of the same period only.
"""

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from fee_ledger.core.errors import InvoiceNumberUnavailableError
from fee_ledger.models.invoice import Invoice
from fee_ledger.models.invoice_number_counter import InvoiceNumberCounter
from fee_ledger.services.billing_period import BillingPeriod

INVOICE_NUMBER_PREFIX = "INV"

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def format_invoice_number(period: BillingPeriod, sequence: int) -> str:
    return f"{INVOICE_NUMBER_PREFIX}-{period.year:04d}-{period.month:02d}-{sequence:03d}"


class InvoiceNumberAllocator:
    """Hands out per-period invoice sequence numbers.

    Allocation joins the caller's transaction: the increment becomes durable
    when the caller commits its invoice and disappears if the caller rolls
    back, so failed invoices never burn numbers.
    """

    def __init__(self, db: Session):
        self.db = db

    def _insert(self):  # type: ignore[no-untyped-def]
        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise InvoiceNumberUnavailableError(
                f"Atomic invoice numbering is not supported on {dialect}"
            )
        return insert

    def allocate(self, period: BillingPeriod) -> int:
        """Atomically increment and return the period's sequence."""
        insert = self._insert()
        self.db.execute(
            insert(InvoiceNumberCounter)
            .values(year=period.year, month=period.month, last_value=0)
            .on_conflict_do_nothing(index_elements=["year", "month"])
        )
        result = self.db.execute(
            update(InvoiceNumberCounter)
            .where(
                InvoiceNumberCounter.year == period.year,
                InvoiceNumberCounter.month == period.month,
            )
            .values(last_value=InvoiceNumberCounter.last_value + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvoiceNumberUnavailableError(f"Counter row for {period} could not be updated")

        return int(
            self.db.execute(
                select(InvoiceNumberCounter.last_value).where(
                    InvoiceNumberCounter.year == period.year,
                    InvoiceNumberCounter.month == period.month,
                )
            ).scalar_one()
        )

    def next_invoice_number(self, period: BillingPeriod) -> str:
        return format_invoice_number(period, self.allocate(period))

    def highest_issued(self, period: BillingPeriod) -> int:
        """Largest sequence already used by an invoice numbered in ``period``."""
        prefix = format_invoice_number(period, 0)[:-3]
        numbers = self.db.scalars(
            select(Invoice.invoice_number).where(Invoice.invoice_number.like(f"{prefix}%"))
        )
        sequences = [int(n[len(prefix) :]) for n in numbers if n[len(prefix) :].isdigit()]
        return max(sequences, default=0)

    def catch_up(self, period: BillingPeriod) -> int:
        """Move the counter past every number already issued in ``period``.

        Needed when invoices were numbered outside the counter, for example
        by an import. The counter never moves backwards.
        """
        highest = self.highest_issued(period)
        insert = self._insert()
        self.db.execute(
            insert(InvoiceNumberCounter)
            .values(year=period.year, month=period.month, last_value=highest)
            .on_conflict_do_nothing(index_elements=["year", "month"])
        )
        self.db.execute(
            update(InvoiceNumberCounter)
            .where(
                InvoiceNumberCounter.year == period.year,
                InvoiceNumberCounter.month == period.month,
                InvoiceNumberCounter.last_value < highest,
            )
            .values(last_value=highest)
            .execution_options(synchronize_session=False)
        )
        return highest
