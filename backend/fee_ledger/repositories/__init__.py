from fee_ledger.repositories.invoice_repository import InvoiceRepository
from fee_ledger.repositories.payment_repository import PaymentRepository

__all__ = [
    "InvoiceRepository",
    "PaymentRepository",
]
