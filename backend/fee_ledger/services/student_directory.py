"""Read-only access to the external student directory."""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from fee_ledger.core.config import settings

logger = logging.getLogger(__name__)


class StudentDirectory(ABC):
    """Source of student references. The ledger never mutates students."""

    @abstractmethod
    def list_active_students(self) -> list[str]:
        """References of every student currently eligible for billing."""
        ...  # pragma: no cover

    @abstractmethod
    def student_exists(self, student_ref: str) -> bool:
        ...  # pragma: no cover


class HttpStudentDirectory(StudentDirectory):
    """Student directory served over HTTP.

    Expects ``GET /students?status=active`` to return a JSON list of objects
    with an ``id`` field, and ``GET /students/{id}`` to answer 404 for
    unknown students.
    """

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def _client(self) -> httpx.Client:
        headers: dict[str, str] = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return httpx.Client(base_url=self.base_url, headers=headers, timeout=self.timeout)

    def list_active_students(self) -> list[str]:
        with self._client() as client:
            resp = client.get("/students", params={"status": "active"})
        resp.raise_for_status()
        body: Any = resp.json()
        if isinstance(body, dict):
            body = body.get("results", [])
        refs = [str(item["id"]) for item in body]
        logger.info("Student directory returned %d active students", len(refs))
        return refs

    def student_exists(self, student_ref: str) -> bool:
        with self._client() as client:
            resp = client.get(f"/students/{student_ref}")
        if resp.status_code == 404:
            return False
        resp.raise_for_status()
        return True


def get_student_directory() -> StudentDirectory:
    return HttpStudentDirectory(
        settings.STUDENT_DIRECTORY_URL, settings.STUDENT_DIRECTORY_API_KEY
    )
