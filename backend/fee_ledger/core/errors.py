"""Ledger error taxonomy.

Services raise these; routers translate them into HTTP responses and the
batch operations record them per item.
"""

from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base class for all ledger failures."""


class NotFoundError(LedgerError):
    """A referenced invoice, payment or student does not exist."""

    def __init__(self, kind: str, ref: Any):
        self.kind = kind
        self.ref = ref
        super().__init__(f"{kind.capitalize()} {ref} not found")


class InvalidAmountError(LedgerError):
    """An amount that must be strictly positive was not."""

    def __init__(self, amount: Any):
        self.amount = amount
        super().__init__(f"Amount must be greater than zero, got {amount}")


class DuplicateInvoiceNumberError(LedgerError):
    """Invoice number allocation kept colliding and gave up."""

    def __init__(self, invoice_number: str, attempts: int):
        self.invoice_number = invoice_number
        self.attempts = attempts
        super().__init__(
            f"Invoice number {invoice_number} already in use after {attempts} attempts"
        )


class InvoiceNumberUnavailableError(LedgerError):
    """The store cannot perform an atomic counter increment."""


class ReferentialConflictError(LedgerError):
    """A delete was refused because dependent records exist."""


class InvalidDateRangeError(LedgerError):
    """A reporting window whose start lies after its end."""


class OperationCancelledError(LedgerError):
    """A batch operation stopped early on caller request or deadline.

    ``result`` holds the summary of the work committed before the stop.
    """

    def __init__(self, operation: str, result: Any):
        self.operation = operation
        self.result = result
        super().__init__(f"{operation} cancelled")
