"""Cancellation signal for long batch runs."""

import threading
from datetime import UTC, datetime, timedelta


class CancellationToken:
    """Cooperative stop signal checked between batch items.

    A token is cancelled either explicitly through :meth:`cancel` or
    implicitly once its deadline has passed.
    """

    def __init__(self, deadline: datetime | None = None) -> None:
        self._cancel_event = threading.Event()
        self.deadline = deadline

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancellationToken":
        return cls(deadline=datetime.now(UTC) + timedelta(seconds=seconds))

    def cancel(self) -> None:
        self._cancel_event.set()

    def is_cancelled(self) -> bool:
        if self._cancel_event.is_set():
            return True
        return self.deadline is not None and datetime.now(UTC) >= self.deadline
