from fee_ledger.models.invoice import Invoice, InvoiceStatus
from fee_ledger.models.invoice_number_counter import InvoiceNumberCounter
from fee_ledger.models.payment import Payment, PaymentMethod

__all__ = [
    "Invoice",
    "InvoiceNumberCounter",
    "InvoiceStatus",
    "Payment",
    "PaymentMethod",
]
