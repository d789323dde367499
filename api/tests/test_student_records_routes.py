from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient

from placement_api.main import app
from placement_api.services.errors import RepositoryNotFoundError
from placement_api.services.listing import ListQuery
from placement_api.services.student_certifications import get_student_certification_repository
from placement_api.services.student_documents import get_student_document_repository
from placement_api.services.student_projects import get_student_project_repository, split_tools

STUDENTS = {"S001": "Asha Rao", "S002": "Ravi Kumar"}


class FakeRecordStore:
    """Rows keyed by a serial id; `import_rows` fails rows for unknown students."""

    def __init__(self, key: str) -> None:
        self.key = key
        self.rows: dict[int, dict[str, Any]] = {}
        self.list_calls: list[dict[str, Any]] = []

    def insert(self, fields: dict[str, Any]) -> dict[str, Any]:
        if fields["student_id"] not in STUDENTS:
            raise RepositoryNotFoundError("Student not found")
        record_id = len(self.rows) + 1
        row = {**fields, self.key: record_id, "student_name": STUDENTS[fields["student_id"]]}
        self.rows[record_id] = row
        return row

    async def import_rows(
        self,
        records: list[tuple[int, dict[str, Any]]],
    ) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        inserted, failures = [], []
        for row_number, fields in records:
            if fields["student_id"] not in STUDENTS:
                failures.append({"row": row_number, "student_id": fields["student_id"], "errors": ["Student not found"]})
                continue
            inserted.append(self.insert(fields))
        return inserted, failures

    def page(self, query: ListQuery, **filters: Any) -> tuple[list[dict[str, Any]], int]:
        self.list_calls.append(filters)
        student_id = filters.get("student_id")
        rows = [row for row in self.rows.values() if student_id is None or row["student_id"] == student_id]
        return rows, len(rows)

    def get(self, record_id: int, message: str) -> dict[str, Any]:
        if record_id not in self.rows:
            raise RepositoryNotFoundError(message)
        return self.rows[record_id]


class FakeCertificationRepository(FakeRecordStore):
    def __init__(self) -> None:
        super().__init__("cert_id")

    async def create_certification(self, fields: dict[str, Any]) -> dict[str, Any]:
        return self.insert(fields)

    async def import_certifications(self, records):
        return await self.import_rows(records)

    async def list_certifications(self, query: ListQuery, **filters: Any):
        return self.page(query, **filters)

    async def get_certification(self, cert_id: int) -> dict[str, Any]:
        return self.get(cert_id, "Certification not found")


class FakeProjectRepository(FakeRecordStore):
    def __init__(self) -> None:
        super().__init__("project_id")

    async def create_project(self, fields: dict[str, Any]) -> dict[str, Any]:
        return self.insert(fields)

    async def list_projects(self, query: ListQuery, **filters: Any):
        return self.page(query, **filters)


class FakeDocumentRepository(FakeRecordStore):
    def __init__(self) -> None:
        super().__init__("doc_id")

    async def create_document(self, fields: dict[str, Any]) -> dict[str, Any]:
        row = self.insert(fields)
        row["uploaded_at"] = row.get("uploaded_at") or datetime.now(timezone.utc)
        return row

    async def import_documents(self, records):
        return await self.import_rows(records)

    async def list_documents(self, query: ListQuery, **filters: Any):
        return self.page(query, **filters)

    async def update_document(self, doc_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        row = self.get(doc_id, "Document not found")
        row.update({name: value for name, value in fields.items() if value is not None})
        return row

    async def delete_document(self, doc_id: int) -> dict[str, Any]:
        return self.rows.pop(doc_id) if doc_id in self.rows else self.get(doc_id, "Document not found")


@pytest.fixture
def certifications() -> FakeCertificationRepository:
    return FakeCertificationRepository()


@pytest.fixture
def projects() -> FakeProjectRepository:
    return FakeProjectRepository()


@pytest.fixture
def documents() -> FakeDocumentRepository:
    return FakeDocumentRepository()


@pytest.fixture
def client(
    certifications: FakeCertificationRepository,
    projects: FakeProjectRepository,
    documents: FakeDocumentRepository,
) -> TestClient:
    app.dependency_overrides[get_student_certification_repository] = lambda: certifications
    app.dependency_overrides[get_student_project_repository] = lambda: projects
    app.dependency_overrides[get_student_document_repository] = lambda: documents

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def test_split_tools_trims_and_drops_duplicates() -> None:
    assert split_tools(" Python, React ,,python, Python ") == ["Python", "React", "python"]
    assert split_tools("  ,  ") == []
    assert split_tools(None) == []


def test_create_certification(client: TestClient) -> None:
    response = client.post(
        "/api/student-certifications",
        json={"student_id": "S001", "skill_name": "AWS Solutions Architect", "vendor": "Amazon"},
    )
    missing = client.post("/api/student-certifications", json={"student_id": "S404", "skill_name": "Go"})
    bad_link = client.post(
        "/api/student-certifications",
        json={"student_id": "S001", "skill_name": "Go", "certificate_file": "not a url"},
    )

    assert response.status_code == 201
    assert response.json()["data"]["student_name"] == "Asha Rao"
    assert missing.status_code == 404
    assert bad_link.status_code == 400


@pytest.mark.parametrize("params", [{}, {"skill": "   "}])
def test_certification_search_requires_skill(client: TestClient, params: dict[str, str]) -> None:
    response = client.get("/api/student-certifications/search", params=params)

    assert response.status_code == 400
    assert response.json()["message"] == "Please provide 'skill' query parameter"


def test_certification_search_forwards_skill(client: TestClient, certifications: FakeCertificationRepository) -> None:
    response = client.get("/api/student-certifications/search", params={"skill": "aws"})

    assert response.status_code == 200
    assert certifications.list_calls == [{"skill": "aws"}]
    assert response.json()["message"] == "Certifications matching 'aws' fetched successfully"


def test_certification_routes_for_student(client: TestClient) -> None:
    client.post("/api/student-certifications", json={"student_id": "S001", "skill_name": "Go"})
    client.post("/api/student-certifications", json={"student_id": "S002", "skill_name": "Rust"})

    response = client.get("/api/student-certifications/student/S002")

    assert [row["skill_name"] for row in response.json()["data"]["student_certifications"]] == ["Rust"]
    assert client.get("/api/student-certifications/7").status_code == 404


def test_certification_import_keeps_row_numbers(client: TestClient) -> None:
    response = client.post(
        "/api/student-certifications/import",
        json={
            "records": [
                {"student_id": "S001", "skill_name": "Go"},
                {"student_id": "S001"},
                {"student_id": "S404", "skill_name": "Rust"},
            ]
        },
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["inserted"] == 1
    assert [(error["row"], error["student_id"]) for error in data["errors"]] == [(3, "S001"), (4, "S404")]
    assert data["errors"][0]["errors"][0].startswith("skill_name")
    assert response.json()["message"] == "Imported 1 of 3 certification records"


@pytest.mark.parametrize("params", [{}, {"tools": " , "}])
def test_project_search_requires_tools(client: TestClient, params: dict[str, str]) -> None:
    response = client.get("/api/student-projects/search", params=params)

    assert response.status_code == 400
    assert response.json()["message"] == "Please provide 'tools' query parameter"


def test_project_search_splits_tools(client: TestClient, projects: FakeProjectRepository) -> None:
    response = client.get("/api/student-projects/search", params={"tools": "FastAPI, Postgres,FastAPI"})

    assert response.status_code == 200
    assert projects.list_calls == [{"tools": ["FastAPI", "Postgres"]}]
    assert response.json()["message"] == "Projects using FastAPI, Postgres fetched successfully"


@pytest.mark.parametrize(
    ("repo_link", "expected_status"),
    [
        ("https://github.com/asha/placement", 201),
        ("github.com/asha/placement", 400),
        ("https://github.com/" + "a" * 300, 400),
    ],
)
def test_project_repo_link_must_be_a_url(client: TestClient, repo_link: str, expected_status: int) -> None:
    response = client.post(
        "/api/student-projects",
        json={"student_id": "S001", "title": "Placement portal", "repo_link": repo_link},
    )

    assert response.status_code == expected_status


def test_document_type_filter_and_update(client: TestClient, documents: FakeDocumentRepository) -> None:
    created = client.post(
        "/api/student-documents",
        json={"student_id": "S001", "document_type": "resume", "file_path": "docs/S001/resume.pdf"},
    )
    doc_id = created.json()["data"]["doc_id"]

    listed = client.get("/api/student-documents", params={"document_type": "resume"})
    updated = client.patch(f"/api/student-documents/{doc_id}", json={"file_path": "docs/S001/resume-v2.pdf"})
    deleted = client.delete(f"/api/student-documents/{doc_id}")

    assert created.json()["data"]["uploaded_at"] is not None
    assert documents.list_calls == [{"document_type": "resume"}]
    assert listed.json()["data"]["pagination"]["total_count"] == 1
    assert updated.json()["data"]["file_path"] == "docs/S001/resume-v2.pdf"
    assert deleted.status_code == 200
    assert client.delete(f"/api/student-documents/{doc_id}").status_code == 404


def test_document_import_with_no_good_rows_is_400(client: TestClient) -> None:
    response = client.post(
        "/api/student-documents/import",
        json={"records": [{"student_id": "S404", "document_type": "resume"}, {"document_type": "offer"}]},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["data"]["failed"] == 2
    assert response.json()["message"] == "No document records were imported"
