"""In-memory collaborators used across the test suite."""

from datetime import UTC, datetime, timedelta

from fee_ledger.services.notifier import LedgerEvent, Notifier
from fee_ledger.services.student_directory import StudentDirectory


class FakeStudentDirectory(StudentDirectory):
    def __init__(self, active: list[str], inactive: list[str] | None = None):
        self.active = list(active)
        self.inactive = list(inactive or [])

    def list_active_students(self) -> list[str]:
        return list(self.active)

    def student_exists(self, student_ref: str) -> bool:
        return student_ref in self.active or student_ref in self.inactive


class RecordingNotifier(Notifier):
    def __init__(self, fail: bool = False):
        self.events: list[LedgerEvent] = []
        self.fail = fail

    def notify(self, event: LedgerEvent) -> bool:
        if self.fail:
            raise ConnectionError("notification service unavailable")
        self.events.append(event)
        return True


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2023, 6, 20, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)
