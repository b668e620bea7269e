from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class BillingCycleCreate(BaseModel):
    year: int = Field(ge=1, le=9999)
    month: int = Field(ge=1, le=12)
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=4)
    description: str | None = None


class BatchItemFailureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    entity_ref: str
    reason: str


class BillingCycleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    year: int
    month: int
    created: list[str]
    skipped: list[str]
    failed: list[BatchItemFailureResponse]
    created_count: int
    skipped_count: int
    failed_count: int
    cancelled: bool = False


class BillingCycleEnqueuedResponse(BaseModel):
    job_id: str
    year: int
    month: int
