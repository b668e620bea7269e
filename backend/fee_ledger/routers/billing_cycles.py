from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from fee_ledger.core.database import get_db
from fee_ledger.core.errors import InvalidAmountError, OperationCancelledError
from fee_ledger.schemas.billing_cycle import (
    BatchItemFailureResponse,
    BillingCycleCreate,
    BillingCycleEnqueuedResponse,
    BillingCycleResponse,
)
from fee_ledger.services.billing_cycle import BillingCycleGenerator, CycleGenerationResult
from fee_ledger.services.billing_period import BillingPeriod
from fee_ledger.services.student_directory import StudentDirectory, get_student_directory
from fee_ledger.tasks import JobAlreadyQueuedError, enqueue_billing_cycle

router = APIRouter()


def _to_response(result: CycleGenerationResult) -> BillingCycleResponse:
    return BillingCycleResponse(
        year=result.period.year,
        month=result.period.month,
        created=result.created,
        skipped=result.skipped,
        failed=[BatchItemFailureResponse.model_validate(f) for f in result.failed],
        created_count=result.created_count,
        skipped_count=result.skipped_count,
        failed_count=result.failed_count,
        cancelled=result.cancelled,
    )


@router.post(
    "/",
    response_model=BillingCycleResponse | BillingCycleEnqueuedResponse,
    summary="Generate billing cycle",
)
async def generate_billing_cycle(
    data: BillingCycleCreate,
    background: bool = Query(default=False),
    db: Session = Depends(get_db),
    student_directory: StudentDirectory = Depends(get_student_directory),
) -> BillingCycleResponse | BillingCycleEnqueuedResponse:
    """Create one invoice per active student for the period.

    Re-running a period only bills students that have no invoice for it yet.
    With ``background=true`` the cycle is handed to the worker instead.
    """
    period = BillingPeriod(data.year, data.month)
    if background:
        try:
            job = await enqueue_billing_cycle(
                data.year, data.month, str(data.amount), data.description
            )
        except JobAlreadyQueuedError as e:
            raise HTTPException(status_code=409, detail=str(e)) from None
        return BillingCycleEnqueuedResponse(job_id=job.job_id, year=data.year, month=data.month)

    generator = BillingCycleGenerator(db, student_directory)
    try:
        result = generator.generate_cycle(period, data.amount, data.description)
    except InvalidAmountError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None
    except OperationCancelledError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    return _to_response(result)
