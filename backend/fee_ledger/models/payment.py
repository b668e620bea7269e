"""Payment model for settlements recorded against invoices."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String

from fee_ledger.core.database import Base
from fee_ledger.models.shared import MoneyType, UUIDType, generate_uuid, utc_now


class PaymentMethod(str, Enum):
    """How the funds were settled outside the ledger."""

    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    CREDIT_CARD = "credit_card"
    OTHER = "other"


class Payment(Base):
    """Payment model - an immutable settlement owned by exactly one invoice."""

    __tablename__ = "payments"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    invoice_id = Column(
        UUIDType, ForeignKey("invoices.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    amount = Column(MoneyType, nullable=False)
    method = Column(String(20), nullable=False, default=PaymentMethod.CASH.value)
    reference_number = Column(String(255), nullable=True)

    recorded_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
