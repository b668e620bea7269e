from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from fee_ledger.models.invoice import InvoiceStatus


class InvoiceCreate(BaseModel):
    student_ref: str = Field(min_length=1, max_length=255)
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=4)
    due_date: date
    description: str | None = None


class InvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    invoice_number: str
    student_ref: str
    amount: Decimal
    description: str | None = None
    billing_period_year: int | None = None
    billing_period_month: int | None = None
    due_date: date
    status: InvoiceStatus
    issued_at: datetime
    updated_at: datetime
    paid_at: datetime | None = None


class InvoiceBalanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    invoice_id: UUID
    invoice_number: str
    amount: Decimal
    paid_total: Decimal
    outstanding: Decimal
    credit: Decimal
    status: InvoiceStatus
