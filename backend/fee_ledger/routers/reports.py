from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from fee_ledger.core.database import get_db
from fee_ledger.core.errors import InvalidDateRangeError
from fee_ledger.schemas.report import FinancialReportResponse
from fee_ledger.services.report_service import FinancialReport, ReportService

router = APIRouter()


@router.get("/financial", response_model=FinancialReportResponse, summary="Financial report")
async def financial_report(
    start_date: date,
    end_date: date,
    db: Session = Depends(get_db),
) -> FinancialReport:
    """Invoice and payment totals for a window, consistent as of ``as_of``."""
    try:
        return ReportService(db).financial_report(start_date, end_date)
    except InvalidDateRangeError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
