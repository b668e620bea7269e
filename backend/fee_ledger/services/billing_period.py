"""Billing period value object and due date policy."""

import calendar
from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True, order=True)
class BillingPeriod:
    """A (year, month) billing cycle."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Invalid billing month {self.month}")
        if self.year < 1:
            raise ValueError(f"Invalid billing year {self.year}")

    @classmethod
    def containing(cls, day: date) -> "BillingPeriod":
        return cls(day.year, day.month)

    def as_tuple(self) -> tuple[int, int]:
        return (self.year, self.month)

    def due_date(self, due_day: int) -> date:
        """The ``due_day``-th of the period, clamped to the last day of the month."""
        last_day = calendar.monthrange(self.year, self.month)[1]
        return date(self.year, self.month, max(1, min(due_day, last_day)))

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
