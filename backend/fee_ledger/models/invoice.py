from enum import Enum

from sqlalchemy import Column, Date, DateTime, Integer, String, Text, UniqueConstraint

from fee_ledger.core.database import Base
from fee_ledger.models.shared import MoneyType, UUIDType, generate_uuid, utc_now


class InvoiceStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    OVERDUE = "overdue"


class Invoice(Base):
    """A fee owed by one student.

    ``status`` is a projection of the amount, the payments and the due date.
    It is written only by the reconciliation paths, never by clients.
    """

    __tablename__ = "invoices"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    invoice_number = Column(String(50), unique=True, index=True, nullable=False)
    student_ref = Column(String(255), nullable=False, index=True)
    amount = Column(MoneyType, nullable=False)
    description = Column(Text, nullable=True)

    # Null for ad-hoc invoices
    billing_period_year = Column(Integer, nullable=True)
    billing_period_month = Column(Integer, nullable=True)

    due_date = Column(Date, nullable=False, index=True)
    status = Column(String(20), nullable=False, default=InvoiceStatus.UNPAID.value, index=True)

    issued_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "student_ref",
            "billing_period_year",
            "billing_period_month",
            name="uq_invoices_student_billing_period",
        ),
    )
