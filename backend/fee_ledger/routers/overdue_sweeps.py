from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fee_ledger.core.database import get_db
from fee_ledger.schemas.billing_cycle import BatchItemFailureResponse
from fee_ledger.schemas.overdue_sweep import OverdueSweepRequest, OverdueSweepResponse
from fee_ledger.services.notifier import Notifier, get_notifier
from fee_ledger.services.overdue_sweeper import OverdueSweeper

router = APIRouter()


@router.post("/", response_model=OverdueSweepResponse, summary="Run overdue sweep")
async def sweep_overdue(
    data: OverdueSweepRequest | None = None,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> OverdueSweepResponse:
    """Mark unpaid invoices past their due date as overdue and send reminders."""
    sweeper = OverdueSweeper(db, notifier)
    result = sweeper.sweep(now=data.now if data else None)
    return OverdueSweepResponse(
        swept_at=result.swept_at,
        transitioned=result.transitioned,
        transitioned_count=result.transitioned_count,
        reminders_sent=result.reminders_sent,
        reminders_skipped=result.reminders_skipped,
        reminders_failed=result.reminders_failed,
        failed=[BatchItemFailureResponse.model_validate(f) for f in result.failed],
        failed_count=result.failed_count,
        cancelled=result.cancelled,
    )
