from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from fee_ledger.core.database import get_db
from fee_ledger.core.errors import (
    DuplicateInvoiceNumberError,
    InvalidAmountError,
    InvoiceNumberUnavailableError,
    NotFoundError,
    ReferentialConflictError,
)
from fee_ledger.models.invoice import Invoice, InvoiceStatus
from fee_ledger.models.payment import Payment
from fee_ledger.repositories.invoice_repository import InvoiceRepository
from fee_ledger.schemas.invoice import InvoiceBalanceResponse, InvoiceCreate, InvoiceResponse
from fee_ledger.schemas.payment import PaymentResponse
from fee_ledger.services.invoice_service import InvoiceService
from fee_ledger.services.payment_processor import PaymentProcessor
from fee_ledger.services.reconciliation import InvoiceBalance
from fee_ledger.services.student_directory import StudentDirectory, get_student_directory

router = APIRouter()


@router.get("/", response_model=list[InvoiceResponse], summary="List invoices")
async def list_invoices(
    student_ref: str | None = None,
    status: InvoiceStatus | None = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[Invoice]:
    """List invoices for a student, in a status, or both."""
    repo = InvoiceRepository(db)
    return repo.get_all(
        skip=skip, limit=limit, student_ref=student_ref, status=status
    )


@router.post("/", response_model=InvoiceResponse, status_code=201, summary="Create invoice")
async def create_invoice(
    data: InvoiceCreate,
    db: Session = Depends(get_db),
    student_directory: StudentDirectory = Depends(get_student_directory),
) -> Invoice:
    """Create an ad-hoc invoice for one student."""
    service = InvoiceService(db, student_directory)
    try:
        return service.create_invoice(
            student_ref=data.student_ref,
            amount=data.amount,
            due_date=data.due_date,
            description=data.description,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except InvalidAmountError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None
    except DuplicateInvoiceNumberError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    except InvoiceNumberUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e)) from None


@router.get("/{invoice_id}", response_model=InvoiceResponse, summary="Get invoice")
async def get_invoice(invoice_id: UUID, db: Session = Depends(get_db)) -> Invoice:
    try:
        return InvoiceService(db).get_invoice(invoice_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None


@router.get(
    "/{invoice_id}/balance",
    response_model=InvoiceBalanceResponse,
    summary="Get invoice balance",
)
async def get_invoice_balance(invoice_id: UUID, db: Session = Depends(get_db)) -> InvoiceBalance:
    """Paid total, outstanding amount and overpayment credit of an invoice."""
    try:
        return InvoiceService(db).get_balance(invoice_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None


@router.get(
    "/{invoice_id}/payments",
    response_model=list[PaymentResponse],
    summary="List invoice payments",
)
async def list_invoice_payments(invoice_id: UUID, db: Session = Depends(get_db)) -> list[Payment]:
    try:
        return PaymentProcessor(db).list_payments_by_invoice(invoice_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None


@router.delete("/{invoice_id}", status_code=204, summary="Delete invoice")
async def delete_invoice(invoice_id: UUID, db: Session = Depends(get_db)) -> None:
    """Delete an invoice. Invoices with payments cannot be deleted."""
    try:
        InvoiceService(db).delete_invoice(invoice_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except ReferentialConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
