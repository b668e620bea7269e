from datetime import datetime

from pydantic import BaseModel, ConfigDict

from fee_ledger.schemas.billing_cycle import BatchItemFailureResponse


class OverdueSweepRequest(BaseModel):
    now: datetime | None = None


class OverdueSweepResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    swept_at: datetime
    transitioned: list[str]
    transitioned_count: int
    reminders_sent: int
    reminders_skipped: int
    reminders_failed: int
    failed: list[BatchItemFailureResponse]
    failed_count: int
    cancelled: bool = False
