from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class AmountBreakdownResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    count: int
    amount: Decimal


class FinancialReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    start_date: date
    end_date: date
    as_of: datetime
    invoice_count: int
    invoiced_amount: Decimal
    paid_amount: Decimal
    outstanding_amount: Decimal
    credit_amount: Decimal
    by_status: dict[str, AmountBreakdownResponse]
    payment_count: int
    payments_amount: Decimal
    by_method: dict[str, AmountBreakdownResponse]
