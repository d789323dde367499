from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from placement_api.main import app
from placement_api.services.errors import RepositoryNotFoundError
from placement_api.services.listing import ListQuery
from placement_api.services.student_report import get_student_report_repository


class FakeStudentReportRepository:
    def __init__(self) -> None:
        self.summary_calls: list[dict[str, Any]] = []

    async def get_report(self, student_id: str) -> dict[str, Any]:
        if student_id != "S001":
            raise RepositoryNotFoundError("Student not found")
        return {
            "student": {"student_id": "S001", "full_name": "Asha Rao", "branch": "CSE"},
            "address": None,
            "academics": {"student_id": "S001", "ug_cgpa": 8.4},
            "family": None,
            "languages": [{"language_id": 1, "student_id": "S001", "language": "English", "level": 5}],
            "internships": [],
            "projects": [{"project_id": 3, "student_id": "S001", "title": "Placement portal"}],
            "certifications": [],
            "documents": [],
        }

    async def list_summaries(
        self,
        query: ListQuery,
        *,
        branch: str | None = None,
        graduation_year: int | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        self.summary_calls.append({"branch": branch, "graduation_year": graduation_year, "sort_by": query.sort_by})
        return [{"student_id": "S001", "full_name": "Asha Rao", "project_count": 1, "offer_count": 2}], 11


@pytest.fixture
def repository() -> FakeStudentReportRepository:
    return FakeStudentReportRepository()


@pytest.fixture
def client(repository: FakeStudentReportRepository) -> TestClient:
    app.dependency_overrides[get_student_report_repository] = lambda: repository

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def test_report_bundles_every_section(client: TestClient) -> None:
    response = client.get("/api/student-report/S001")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["student"]["full_name"] == "Asha Rao"
    assert data["address"] is None
    assert data["academics"]["ug_cgpa"] == 8.4
    assert data["languages"][0]["language"] == "English"
    assert data["projects"][0]["title"] == "Placement portal"
    assert data["documents"] == []


def test_report_for_unknown_student_is_404(client: TestClient) -> None:
    response = client.get("/api/student-report/S404")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Student not found"}


def test_summary_is_not_shadowed_by_student_id(client: TestClient, repository: FakeStudentReportRepository) -> None:
    response = client.get(
        "/api/student-report/summary",
        params={"branch": "CSE", "graduation_year": 2026, "limit": 5, "sort_by": "ug_cgpa"},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["students"][0]["offer_count"] == 2
    assert data["students"][0]["internship_count"] == 0
    assert data["pagination"]["total_pages"] == 3
    assert repository.summary_calls == [{"branch": "CSE", "graduation_year": 2026, "sort_by": "ug_cgpa"}]


def test_summary_rejects_out_of_range_year(client: TestClient) -> None:
    assert client.get("/api/student-report/summary", params={"graduation_year": 1800}).status_code == 400
