"""Payment API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from fee_ledger.core.database import get_db
from fee_ledger.core.errors import InvalidAmountError, NotFoundError
from fee_ledger.models.invoice import Invoice
from fee_ledger.models.payment import Payment
from fee_ledger.schemas.invoice import InvoiceResponse
from fee_ledger.schemas.payment import PaymentCreate, PaymentResponse
from fee_ledger.services.notifier import Notifier, get_notifier
from fee_ledger.services.payment_processor import PaymentProcessor

router = APIRouter()


@router.post("/", response_model=PaymentResponse, status_code=201, summary="Record payment")
async def apply_payment(
    data: PaymentCreate,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> Payment:
    """Record a settled payment and update the invoice status."""
    processor = PaymentProcessor(db, notifier)
    try:
        return processor.apply_payment(
            invoice_id=data.invoice_id,
            amount=data.amount,
            method=data.method,
            reference_number=data.reference_number,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except InvalidAmountError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None


@router.get("/{payment_id}", response_model=PaymentResponse, summary="Get payment")
async def get_payment(payment_id: UUID, db: Session = Depends(get_db)) -> Payment:
    """Get a payment by ID."""
    try:
        return PaymentProcessor(db).get_payment(payment_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None


@router.delete("/{payment_id}", response_model=InvoiceResponse, summary="Delete payment")
async def delete_payment(payment_id: UUID, db: Session = Depends(get_db)) -> Invoice:
    """Delete a payment and return its invoice with the recomputed status."""
    try:
        return PaymentProcessor(db).delete_payment(payment_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
