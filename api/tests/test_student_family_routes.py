from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from placement_api.main import app
from placement_api.services.errors import (
    RepositoryBusinessRuleError,
    RepositoryConflictError,
    RepositoryNotFoundError,
)
from placement_api.services.listing import ListQuery, provided_fields
from placement_api.services.student_family import get_student_family_repository

KNOWN_STUDENTS = {"S001": "Asha Rao", "S002": "Ravi Kumar", "S003": "Meera Iyer"}


class FakeStudentFamilyRepository:
    def __init__(self) -> None:
        self._families: dict[str, dict[str, Any]] = {}
        self.imported: list[tuple[int, dict[str, Any]]] = []

    def _insert(self, fields: dict[str, Any]) -> dict[str, Any]:
        row = {**fields, "student_name": KNOWN_STUDENTS[fields["student_id"]]}
        self._families[fields["student_id"]] = row
        return row

    async def create_family(self, fields: dict[str, Any]) -> dict[str, Any]:
        if fields["student_id"] not in KNOWN_STUDENTS:
            raise RepositoryNotFoundError("Student not found")
        if fields["student_id"] in self._families:
            raise RepositoryConflictError("Family record already exists for this student")
        return self._insert(fields)

    async def import_families(
        self,
        records: list[tuple[int, dict[str, Any]]],
    ) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        self.imported.extend(records)
        inserted, failures = [], []
        for row_number, fields in records:
            student_id = fields["student_id"]
            if student_id not in KNOWN_STUDENTS:
                failures.append({"row": row_number, "student_id": student_id, "errors": ["Student not found"]})
            elif student_id in self._families:
                failures.append(
                    {
                        "row": row_number,
                        "student_id": student_id,
                        "errors": ["Family record already exists for this student"],
                    }
                )
            else:
                inserted.append(self._insert(fields))
        return inserted, failures

    async def list_families(self, query: ListQuery) -> tuple[list[dict[str, Any]], int]:
        rows = list(self._families.values())
        return rows, len(rows)

    async def get_family(self, student_id: str) -> dict[str, Any]:
        if student_id not in self._families:
            raise RepositoryNotFoundError("Family record not found")
        return self._families[student_id]

    async def update_family(self, student_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        values = provided_fields(fields)
        if not values:
            raise RepositoryBusinessRuleError("No fields provided for update")
        row = await self.get_family(student_id)
        row.update(values)
        return row

    async def delete_family(self, student_id: str) -> dict[str, Any]:
        await self.get_family(student_id)
        return self._families.pop(student_id)


@pytest.fixture
def fake_repo() -> FakeStudentFamilyRepository:
    return FakeStudentFamilyRepository()


@pytest.fixture
def client(fake_repo: FakeStudentFamilyRepository) -> TestClient:
    app.dependency_overrides[get_student_family_repository] = lambda: fake_repo

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def test_family_crud(client: TestClient) -> None:
    created = client.post(
        "/api/student-family",
        json={"student_id": "S001", "father_name": "Kiran Rao", "father_phone": "9876543210", "blood_group": "O+"},
    )
    duplicate = client.post("/api/student-family", json={"student_id": "S001"})
    bad_blood = client.post("/api/student-family", json={"student_id": "S002", "blood_group": "Z+"})
    updated = client.patch("/api/student-family/S001", json={"mother_name": "Lata Rao", "father_phone": ""})
    deleted = client.delete("/api/student-family/S001")
    missing = client.get("/api/student-family/S001")

    assert created.status_code == 201
    assert created.json()["data"]["student_name"] == "Asha Rao"
    assert duplicate.status_code == 409
    assert bad_blood.status_code == 400
    assert updated.json()["data"]["mother_name"] == "Lata Rao"
    assert updated.json()["data"]["father_phone"] == "9876543210"
    assert deleted.status_code == 200
    assert missing.status_code == 404


def test_import_reports_row_numbers_and_inserts_valid_rows(
    client: TestClient,
    fake_repo: FakeStudentFamilyRepository,
) -> None:
    client.post("/api/student-family", json={"student_id": "S003"})

    response = client.post(
        "/api/student-family/import",
        json={
            "records": [
                {"student_id": "S001", "father_name": "Kiran Rao", "blood_group": "B+"},
                {"student_id": "S002", "mother_phone": "123"},
                {"student_id": "S404"},
                {"student_id": "S003"},
                {"father_name": "No Id"},
            ]
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Imported 1 of 5 family records"
    data = body["data"]
    assert (data["total_rows"], data["inserted"], data["failed"]) == (5, 1, 4)
    assert [record["student_id"] for record in data["records"]] == ["S001"]
    assert [(error["row"], error["student_id"]) for error in data["errors"]] == [
        (3, "S002"),
        (4, "S404"),
        (5, "S003"),
        (6, None),
    ]
    assert data["errors"][0]["errors"][0].startswith("mother_phone:")
    assert data["errors"][3]["errors"] == ["student_id: Field required"]
    assert [row_number for row_number, _ in fake_repo.imported] == [2, 4, 5]


def test_import_with_nothing_inserted_is_400(client: TestClient, fake_repo: FakeStudentFamilyRepository) -> None:
    response = client.post("/api/student-family/import", json={"records": [{"student_id": "S001", "blood_group": "X"}]})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "No family records were imported"
    assert body["data"]["failed"] == 1
    assert fake_repo.imported == []


def test_import_requires_records(client: TestClient) -> None:
    response = client.post("/api/student-family/import", json={"records": []})

    assert response.status_code == 400
    assert response.json()["message"].startswith("records:")
