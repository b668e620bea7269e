from fee_ledger.schemas.billing_cycle import (
    BatchItemFailureResponse,
    BillingCycleCreate,
    BillingCycleEnqueuedResponse,
    BillingCycleResponse,
)
from fee_ledger.schemas.invoice import InvoiceBalanceResponse, InvoiceCreate, InvoiceResponse
from fee_ledger.schemas.overdue_sweep import OverdueSweepRequest, OverdueSweepResponse
from fee_ledger.schemas.payment import PaymentCreate, PaymentResponse
from fee_ledger.schemas.report import AmountBreakdownResponse, FinancialReportResponse

__all__ = [
    "AmountBreakdownResponse",
    "BatchItemFailureResponse",
    "BillingCycleCreate",
    "BillingCycleEnqueuedResponse",
    "BillingCycleResponse",
    "FinancialReportResponse",
    "InvoiceBalanceResponse",
    "InvoiceCreate",
    "InvoiceResponse",
    "OverdueSweepRequest",
    "OverdueSweepResponse",
    "PaymentCreate",
    "PaymentResponse",
]
