"""Tests for the HTTP student directory client."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from fee_ledger.services.student_directory import HttpStudentDirectory, get_student_directory


def _mock_client(mock_client_cls: MagicMock, response: MagicMock) -> MagicMock:
    mock_client = MagicMock()
    mock_client.__enter__ = MagicMock(return_value=mock_client)
    mock_client.__exit__ = MagicMock(return_value=False)
    mock_client.get.return_value = response
    mock_client_cls.return_value = mock_client
    return mock_client


@pytest.fixture
def directory() -> HttpStudentDirectory:
    return HttpStudentDirectory("https://students.example.com/api/", api_key="key-1")


class TestListActiveStudents:
    def test_reads_plain_list(self, directory: HttpStudentDirectory):
        response = MagicMock(status_code=200)
        response.json.return_value = [{"id": "stu-001"}, {"id": 42}]

        with patch("fee_ledger.services.student_directory.httpx.Client") as mock_client_cls:
            mock_client = _mock_client(mock_client_cls, response)
            refs = directory.list_active_students()

        assert refs == ["stu-001", "42"]
        mock_client.get.assert_called_once_with("/students", params={"status": "active"})
        kwargs = mock_client_cls.call_args.kwargs
        assert kwargs["base_url"] == "https://students.example.com/api"
        assert kwargs["headers"]["Authorization"] == "Bearer key-1"

    def test_reads_paginated_envelope(self, directory: HttpStudentDirectory):
        response = MagicMock(status_code=200)
        response.json.return_value = {"results": [{"id": "stu-007"}], "next": None}

        with patch("fee_ledger.services.student_directory.httpx.Client") as mock_client_cls:
            _mock_client(mock_client_cls, response)
            assert directory.list_active_students() == ["stu-007"]

    def test_error_status_raises(self, directory: HttpStudentDirectory):
        response = MagicMock(status_code=503)
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Unavailable", request=MagicMock(), response=response
        )

        with patch("fee_ledger.services.student_directory.httpx.Client") as mock_client_cls:
            _mock_client(mock_client_cls, response)
            with pytest.raises(httpx.HTTPStatusError):
                directory.list_active_students()


class TestStudentExists:
    def test_found(self, directory: HttpStudentDirectory):
        with patch("fee_ledger.services.student_directory.httpx.Client") as mock_client_cls:
            mock_client = _mock_client(mock_client_cls, MagicMock(status_code=200))
            assert directory.student_exists("stu-001") is True
        mock_client.get.assert_called_once_with("/students/stu-001")

    def test_missing(self, directory: HttpStudentDirectory):
        with patch("fee_ledger.services.student_directory.httpx.Client") as mock_client_cls:
            _mock_client(mock_client_cls, MagicMock(status_code=404))
            assert directory.student_exists("stu-404") is False

    def test_no_auth_header_without_key(self):
        directory = HttpStudentDirectory("https://students.example.com")
        with patch("fee_ledger.services.student_directory.httpx.Client") as mock_client_cls:
            _mock_client(mock_client_cls, MagicMock(status_code=200))
            directory.student_exists("stu-001")
        assert "Authorization" not in mock_client_cls.call_args.kwargs["headers"]


def test_get_student_directory_uses_settings():
    with patch("fee_ledger.services.student_directory.settings") as mock_settings:
        mock_settings.STUDENT_DIRECTORY_URL = "https://students.example.com"
        mock_settings.STUDENT_DIRECTORY_API_KEY = ""
        directory = get_student_directory()
    assert isinstance(directory, HttpStudentDirectory)
    assert directory.base_url == "https://students.example.com"
