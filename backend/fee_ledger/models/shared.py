"""Column types and helpers shared by the ledger models."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import Numeric, String, TypeDecorator
from sqlalchemy.engine import Dialect

ZERO = Decimal("0")

# Every money column: invoice amounts, payment amounts
MoneyType = Numeric(precision=12, scale=4, asdecimal=True)


class UUIDType(TypeDecorator[uuid.UUID]):
    """UUID stored as its 36 character string form.

    Invoice and payment ids round-trip as ``uuid.UUID`` on every backend.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> str | None:
        if value is None:
            return value
        if isinstance(value, uuid.UUID):
            return str(value)
        return str(uuid.UUID(value))

    def process_result_value(self, value: Any, dialect: Dialect) -> uuid.UUID | None:
        if value is None:
            return value
        if isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


def generate_uuid() -> uuid.UUID:
    return uuid.uuid4()


def utc_now() -> datetime:
    """Default ledger clock."""
    return datetime.now(UTC)


def to_decimal(value: Any) -> Decimal:
    """Money value as ``Decimal``; ``None`` (an empty SUM) counts as zero.

    Goes through ``str`` so floats coming back from SQLite aggregates keep
    their printed value instead of their binary expansion.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
