from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from placement_api.main import app
from placement_api.services.errors import RepositoryConflictError, RepositoryNotFoundError
from placement_api.services.job_requirements import get_job_requirement_repository
from placement_api.services.jobs import get_job_repository
from placement_api.services.listing import ListQuery, provided_fields

COMPANIES = {1: "Acme", 2: "Globex"}


class FakeJobRepository:
    def __init__(self) -> None:
        self._jobs: dict[int, dict[str, Any]] = {}
        self.list_filters: dict[str, Any] = {}

    async def create_job(self, fields: dict[str, Any]) -> dict[str, Any]:
        if fields["company_id"] not in COMPANIES:
            raise RepositoryNotFoundError("Company not found")
        job_id = len(self._jobs) + 1
        row = {"job_id": job_id, "company_name": COMPANIES[fields["company_id"]], **fields}
        self._jobs[job_id] = row
        return row

    async def list_jobs(
        self,
        query: ListQuery,
        *,
        company_id: int | None = None,
        status: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        self.list_filters = {"company_id": company_id, "status": status}
        rows = [
            row
            for row in self._jobs.values()
            if (company_id is None or row["company_id"] == company_id) and (status is None or row["status"] == status)
        ]
        return rows[query.offset : query.offset + query.limit], len(rows)

    async def get_job(self, job_id: int) -> dict[str, Any]:
        if job_id not in self._jobs:
            raise RepositoryNotFoundError("Job not found")
        return self._jobs[job_id]

    async def update_job(self, job_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        row = await self.get_job(job_id)
        row.update(provided_fields(fields))
        return row

    async def delete_job(self, job_id: int) -> dict[str, Any]:
        await self.get_job(job_id)
        return self._jobs.pop(job_id)


class FakeJobRequirementRepository:
    def __init__(self, jobs: FakeJobRepository) -> None:
        self._jobs = jobs
        self._requirements: dict[int, dict[str, Any]] = {}

    async def create_requirement(self, fields: dict[str, Any]) -> dict[str, Any]:
        job = await self._jobs.get_job(fields["job_id"])
        if any(row["job_id"] == fields["job_id"] for row in self._requirements.values()):
            raise RepositoryConflictError("Requirements for this job already exist")
        requirement_id = len(self._requirements) + 1
        row = {"job_requirement_id": requirement_id, "job_title": job["job_title"], **fields}
        self._requirements[requirement_id] = row
        return row

    async def list_requirements(self, query: ListQuery, *, job_id: int | None = None) -> tuple[list[dict[str, Any]], int]:
        rows = [row for row in self._requirements.values() if job_id is None or row["job_id"] == job_id]
        return rows, len(rows)

    async def get_requirement(self, requirement_id: int) -> dict[str, Any]:
        if requirement_id not in self._requirements:
            raise RepositoryNotFoundError("Job requirement not found")
        return self._requirements[requirement_id]

    async def get_requirement_for_job(self, job_id: int) -> dict[str, Any]:
        for row in self._requirements.values():
            if row["job_id"] == job_id:
                return row
        raise RepositoryNotFoundError("Job requirement not found")

    async def update_requirement(self, requirement_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        row = await self.get_requirement(requirement_id)
        row.update(provided_fields(fields))
        return row

    async def update_requirement_for_job(self, job_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        row = await self.get_requirement_for_job(job_id)
        row.update(provided_fields(fields))
        return row

    async def delete_requirement(self, requirement_id: int) -> dict[str, Any]:
        await self.get_requirement(requirement_id)
        return self._requirements.pop(requirement_id)

    async def delete_requirement_for_job(self, job_id: int) -> dict[str, Any]:
        row = await self.get_requirement_for_job(job_id)
        return self._requirements.pop(row["job_requirement_id"])


@pytest.fixture
def job_repo() -> FakeJobRepository:
    return FakeJobRepository()


@pytest.fixture
def client(job_repo: FakeJobRepository) -> TestClient:
    requirement_repo = FakeJobRequirementRepository(job_repo)
    app.dependency_overrides[get_job_repository] = lambda: job_repo
    app.dependency_overrides[get_job_requirement_repository] = lambda: requirement_repo

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def _job_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "company_id": 1,
        "job_title": "Software Engineer",
        "ctc_lpa": "12.345",
        "application_deadline": "2099-01-31",
        "year_of_graduation": 2026,
    }
    payload.update(overrides)
    return payload


def test_create_job_defaults_to_draft_and_rounds_money(client: TestClient) -> None:
    response = client.post("/api/jobs", json=_job_payload())

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "DRAFT"
    assert data["company_name"] == "Acme"
    assert data["ctc_lpa"] == 12.35


def test_create_job_for_unknown_company_is_404(client: TestClient) -> None:
    response = client.post("/api/jobs", json=_job_payload(company_id=9))

    assert response.status_code == 404
    assert response.json()["message"] == "Company not found"


def test_create_job_requires_graduation_year(client: TestClient) -> None:
    payload = _job_payload()
    payload.pop("year_of_graduation")

    response = client.post("/api/jobs", json=payload)

    assert response.status_code == 400
    assert response.json()["message"].startswith("year_of_graduation:")


def test_list_jobs_filters(client: TestClient, job_repo: FakeJobRepository) -> None:
    client.post("/api/jobs", json=_job_payload())
    client.post("/api/jobs", json=_job_payload(company_id=2, status="OPEN"))

    filtered = client.get("/api/jobs", params={"status": "OPEN"})
    by_company = client.get("/api/jobs/company/1")

    assert filtered.status_code == 200
    assert [job["company_id"] for job in filtered.json()["data"]["jobs"]] == [2]
    assert job_repo.list_filters == {"company_id": 1, "status": None}
    assert by_company.json()["data"]["pagination"]["total_count"] == 1


def test_job_crud_round(client: TestClient) -> None:
    client.post("/api/jobs", json=_job_payload())

    updated = client.patch("/api/jobs/1", json={"status": "OPEN", "location": ""})
    fetched = client.get("/api/jobs/1")
    deleted = client.delete("/api/jobs/1")
    missing = client.delete("/api/jobs/1")

    assert updated.json()["data"]["status"] == "OPEN"
    assert fetched.json()["data"]["job_title"] == "Software Engineer"
    assert deleted.status_code == 200
    assert missing.status_code == 404


def test_requirement_accepts_camel_case_and_normalizes_branches(client: TestClient) -> None:
    client.post("/api/jobs", json=_job_payload())

    response = client.post(
        "/api/job-requirements",
        json={"jobId": 1, "tenthPercent": 60, "ugCgpa": "7.255", "allowedBranches": ["cse", "ECE", "cse"]},
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["job_id"] == 1
    assert data["ug_cgpa"] == 7.26
    assert data["allowed_branches"] == ["CSE", "ECE"]


def test_requirement_rejects_unknown_branch(client: TestClient) -> None:
    response = client.post("/api/job-requirements", json={"job_id": 1, "allowed_branches": ["ARTS"]})

    assert response.status_code == 400
    assert response.json()["message"].startswith("allowed_branches:")


def test_requirement_per_job_is_unique(client: TestClient) -> None:
    client.post("/api/jobs", json=_job_payload())

    first = client.post("/api/job-requirements", json={"job_id": 1})
    second = client.post("/api/job-requirements", json={"job_id": 1})
    orphan = client.post("/api/job-requirements", json={"job_id": 5})

    assert first.status_code == 201
    assert second.status_code == 409
    assert orphan.status_code == 404


def test_requirement_routes_by_job(client: TestClient) -> None:
    client.post("/api/jobs", json=_job_payload())
    client.post("/api/job-requirements", json={"job_id": 1, "ug_cgpa": 6})

    fetched = client.get("/api/job-requirements/job/1")
    updated = client.put("/api/job-requirements/job/1", json={"ugCgpa": 7})
    deleted = client.delete("/api/job-requirements/job/1")
    missing = client.get("/api/job-requirements/1")

    assert fetched.json()["data"]["job_requirement_id"] == 1
    assert updated.json()["data"]["ug_cgpa"] == 7.0
    assert deleted.status_code == 200
    assert missing.status_code == 404
