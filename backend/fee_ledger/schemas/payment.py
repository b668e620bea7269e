"""Payment schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from fee_ledger.models.payment import PaymentMethod


class PaymentCreate(BaseModel):
    """Schema for recording a payment against an invoice."""

    invoice_id: UUID
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=4)
    method: PaymentMethod = PaymentMethod.CASH
    reference_number: str | None = Field(default=None, max_length=255)


class PaymentResponse(BaseModel):
    """Schema for payment response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    invoice_id: UUID
    amount: Decimal
    method: PaymentMethod
    reference_number: str | None = None
    recorded_at: datetime
