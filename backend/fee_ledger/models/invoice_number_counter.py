"""Per billing period counter backing invoice numbers."""

from sqlalchemy import Column, Integer

from fee_ledger.core.database import Base


class InvoiceNumberCounter(Base):
    """Last sequence handed out for one (year, month) period."""

    __tablename__ = "invoice_number_counters"

    year = Column(Integer, primary_key=True, autoincrement=False)
    month = Column(Integer, primary_key=True, autoincrement=False)
    last_value = Column(Integer, nullable=False, default=0)
