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
from placement_api.services.student_academics import get_student_academics_repository
from placement_api.services.student_addresses import get_student_address_repository
from placement_api.services.student_internships import get_student_internship_repository
from placement_api.services.student_languages import get_student_language_repository
from placement_api.services.students import get_student_repository


class StudentStore:
    def __init__(self) -> None:
        self.students: dict[str, dict[str, Any]] = {}
        self.academics: dict[str, dict[str, Any]] = {}
        self.internships: dict[int, dict[str, Any]] = {}
        self.languages: dict[int, dict[str, Any]] = {}
        self.addresses: dict[int, dict[str, Any]] = {}

    def require_student(self, student_id: str) -> dict[str, Any]:
        if student_id not in self.students:
            raise RepositoryNotFoundError("Student not found")
        return self.students[student_id]


def _update(row: dict[str, Any], fields: dict[str, Any]) -> dict[str, Any]:
    values = provided_fields(fields)
    if not values:
        raise RepositoryBusinessRuleError("No fields provided for update")
    row.update(values)
    return row


class FakeStudentRepository:
    def __init__(self, store: StudentStore) -> None:
        self.store = store
        self.list_filters: dict[str, Any] = {}

    async def create_student(self, fields: dict[str, Any]) -> dict[str, Any]:
        if fields["student_id"] in self.store.students:
            raise RepositoryConflictError("Student with this ID already exists")
        row = {**fields, "branch": fields.get("branch") or "Computer Science"}
        self.store.students[fields["student_id"]] = row
        return row

    async def list_students(
        self,
        query: ListQuery,
        *,
        branch: str | None = None,
        graduation_year: int | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        self.list_filters = {"branch": branch, "graduation_year": graduation_year}
        rows = list(self.store.students.values())
        return rows, len(rows)

    async def get_student(self, student_id: str) -> dict[str, Any]:
        return self.store.require_student(student_id)

    async def update_student(self, student_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        return _update(self.store.require_student(student_id), fields)

    async def delete_student(self, student_id: str) -> dict[str, Any]:
        self.store.require_student(student_id)
        return self.store.students.pop(student_id)


class FakeAcademicsRepository:
    def __init__(self, store: StudentStore) -> None:
        self.store = store

    async def create_academics(self, fields: dict[str, Any]) -> dict[str, Any]:
        student = self.store.require_student(fields["student_id"])
        if fields["student_id"] in self.store.academics:
            raise RepositoryConflictError("Academic record already exists for this student")
        row = {**fields, "full_name": student["full_name"]}
        self.store.academics[fields["student_id"]] = row
        return row

    async def list_academics(self, query: ListQuery) -> tuple[list[dict[str, Any]], int]:
        rows = list(self.store.academics.values())
        return rows, len(rows)

    async def get_academics(self, student_id: str) -> dict[str, Any]:
        if student_id not in self.store.academics:
            raise RepositoryNotFoundError("Academic record not found")
        return self.store.academics[student_id]

    async def update_academics(self, student_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        return _update(await self.get_academics(student_id), fields)

    async def delete_academics(self, student_id: str) -> dict[str, Any]:
        await self.get_academics(student_id)
        return self.store.academics.pop(student_id)


class FakeInternshipRepository:
    def __init__(self, store: StudentStore) -> None:
        self.store = store

    async def create_internship(self, fields: dict[str, Any]) -> dict[str, Any]:
        self.store.require_student(fields["student_id"])
        internship_id = len(self.store.internships) + 1
        row = {"internship_id": internship_id, **fields}
        self.store.internships[internship_id] = row
        return row

    async def list_internships(
        self,
        query: ListQuery,
        *,
        student_id: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        rows = [row for row in self.store.internships.values() if student_id is None or row["student_id"] == student_id]
        return rows, len(rows)

    async def get_internship(self, internship_id: int) -> dict[str, Any]:
        if internship_id not in self.store.internships:
            raise RepositoryNotFoundError("Internship not found")
        return self.store.internships[internship_id]

    async def update_internship(self, internship_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        return _update(await self.get_internship(internship_id), fields)

    async def delete_internship(self, internship_id: int) -> dict[str, Any]:
        await self.get_internship(internship_id)
        return self.store.internships.pop(internship_id)


class FakeLanguageRepository:
    def __init__(self, store: StudentStore) -> None:
        self.store = store

    def _find(self, student_id: str, language: str) -> dict[str, Any] | None:
        for row in self.store.languages.values():
            if row["student_id"] == student_id and row["language"].lower() == language.lower():
                return row
        return None

    def _insert(self, student_id: str, language: str, level: int) -> dict[str, Any]:
        language_id = max(self.store.languages, default=0) + 1
        row = {"language_id": language_id, "student_id": student_id, "language": language, "level": level}
        self.store.languages[language_id] = row
        return row

    async def create_language(self, fields: dict[str, Any]) -> dict[str, Any]:
        self.store.require_student(fields["student_id"])
        if self._find(fields["student_id"], fields["language"]) is not None:
            raise RepositoryConflictError("This language already exists for this student")
        return self._insert(fields["student_id"], fields["language"], fields["level"])

    async def upsert_languages(self, student_id: str, languages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        self.store.require_student(student_id)
        rows = []
        for item in languages:
            row = self._find(student_id, item["language"])
            if row is None:
                row = self._insert(student_id, item["language"], item["level"])
            else:
                row["level"] = item["level"]
            rows.append(row)
        return sorted(rows, key=lambda row: row["language"])

    async def list_languages(
        self,
        query: ListQuery,
        *,
        student_id: str | None = None,
        language: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        rows = list(self.store.languages.values())
        return rows, len(rows)

    async def get_language(self, language_id: int) -> dict[str, Any]:
        if language_id not in self.store.languages:
            raise RepositoryNotFoundError("Language record not found")
        return self.store.languages[language_id]

    async def get_student_languages(self, student_id: str) -> list[dict[str, Any]]:
        self.store.require_student(student_id)
        return [row for row in self.store.languages.values() if row["student_id"] == student_id]

    async def update_language(self, language_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        return _update(await self.get_language(language_id), fields)

    async def delete_language(self, language_id: int) -> dict[str, Any]:
        await self.get_language(language_id)
        return self.store.languages.pop(language_id)

    async def delete_student_language(self, student_id: str, language: str) -> dict[str, Any]:
        row = self._find(student_id, language)
        if row is None:
            raise RepositoryNotFoundError("Language record not found")
        return self.store.languages.pop(row["language_id"])

    async def delete_student_languages(self, student_id: str) -> list[dict[str, Any]]:
        keys = [key for key, row in self.store.languages.items() if row["student_id"] == student_id]
        if not keys:
            raise RepositoryNotFoundError("No languages found for this student")
        return [self.store.languages.pop(key) for key in keys]


class FakeAddressRepository:
    def __init__(self, store: StudentStore) -> None:
        self.store = store

    async def create_address(self, fields: dict[str, Any]) -> dict[str, Any]:
        self.store.require_student(fields["student_id"])
        address_id = len(self.store.addresses) + 1
        row = {"address_id": address_id, **fields}
        self.store.addresses[address_id] = row
        return row

    async def list_addresses(
        self,
        query: ListQuery,
        *,
        student_id: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        rows = [row for row in self.store.addresses.values() if student_id is None or row["student_id"] == student_id]
        return rows, len(rows)

    async def get_address(self, address_id: int) -> dict[str, Any]:
        if address_id not in self.store.addresses:
            raise RepositoryNotFoundError("Student address not found")
        return self.store.addresses[address_id]

    async def get_student_addresses(self, student_id: str) -> list[dict[str, Any]]:
        rows = [row for row in self.store.addresses.values() if row["student_id"] == student_id]
        if not rows:
            raise RepositoryNotFoundError("No addresses found for this student")
        return rows

    async def update_address(self, address_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        return _update(await self.get_address(address_id), fields)

    async def delete_address(self, address_id: int) -> dict[str, Any]:
        await self.get_address(address_id)
        return self.store.addresses.pop(address_id)


@pytest.fixture
def store() -> StudentStore:
    return StudentStore()


@pytest.fixture
def client(store: StudentStore) -> TestClient:
    students = FakeStudentRepository(store)
    app.dependency_overrides[get_student_repository] = lambda: students
    app.dependency_overrides[get_student_academics_repository] = lambda: FakeAcademicsRepository(store)
    app.dependency_overrides[get_student_internship_repository] = lambda: FakeInternshipRepository(store)
    app.dependency_overrides[get_student_language_repository] = lambda: FakeLanguageRepository(store)
    app.dependency_overrides[get_student_address_repository] = lambda: FakeAddressRepository(store)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def _create_student(client: TestClient, student_id: str = "1RV21CS001") -> None:
    response = client.post(
        "/api/students",
        json={"student_id": student_id, "first_name": "Asha", "middle_name": "K", "last_name": "Rao"},
    )
    assert response.status_code == 201


def test_create_student_fills_full_name_and_default_branch(client: TestClient) -> None:
    response = client.post(
        "/api/students",
        json={"student_id": "1RV21CS001", "first_name": "Asha", "last_name": "Rao", "mobile": "9876543210"},
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["full_name"] == "Asha Rao"
    assert data["branch"] == "Computer Science"


@pytest.mark.parametrize(
    ("payload", "field"),
    [
        ({"student_id": "1RV/001", "first_name": "Asha"}, "student_id"),
        ({"student_id": "S1", "first_name": "Asha", "mobile": "12345"}, "mobile"),
        ({"student_id": "S1", "first_name": "Asha", "email": "asha-at-example"}, "email"),
        ({"student_id": "S1", "first_name": "Asha", "gender": "Unknown"}, "gender"),
        ({"student_id": "S1", "first_name": "Asha", "dob": "2999-01-01"}, "dob"),
    ],
)
def test_student_field_validation(client: TestClient, payload: dict[str, Any], field: str) -> None:
    response = client.post("/api/students", json=payload)

    assert response.status_code == 400
    assert response.json()["message"].startswith(f"{field}:")


def test_student_crud(client: TestClient) -> None:
    _create_student(client)

    duplicate = client.post("/api/students", json={"student_id": "1RV21CS001", "first_name": "Other"})
    updated = client.patch("/api/students/1RV21CS001", json={"semester": 6, "email": ""})
    listed = client.get("/api/students", params={"branch": "Computer Science", "graduation_year": 2026})
    deleted = client.delete("/api/students/1RV21CS001")
    missing = client.get("/api/students/1RV21CS001")

    assert duplicate.status_code == 409
    assert updated.json()["data"]["semester"] == 6
    assert listed.json()["data"]["pagination"]["total_count"] == 1
    assert deleted.status_code == 200
    assert missing.status_code == 404


def test_academics_keyed_by_student(client: TestClient) -> None:
    orphan = client.post("/api/student-academics", json={"student_id": "NOPE", "ug_cgpa": 8})
    _create_student(client)

    created = client.post("/api/student-academics", json={"student_id": "1RV21CS001", "tenth_percent": "91.456"})
    duplicate = client.post("/api/student-academics", json={"student_id": "1RV21CS001"})
    updated = client.put("/api/student-academics/1RV21CS001", json={"ug_cgpa": 8.5})
    out_of_range = client.put("/api/student-academics/1RV21CS001", json={"ug_cgpa": 11})

    assert orphan.status_code == 404
    assert orphan.json()["message"] == "Student not found"
    assert created.status_code == 201
    assert created.json()["data"]["tenth_percent"] == 91.46
    assert created.json()["data"]["full_name"] == "Asha K Rao"
    assert duplicate.status_code == 409
    assert updated.json()["data"]["ug_cgpa"] == 8.5
    assert out_of_range.status_code == 400


def test_internships(client: TestClient) -> None:
    _create_student(client)

    bad_dates = client.post(
        "/api/student-internships",
        json={"student_id": "1RV21CS001", "organization": "Acme", "start_date": "2024-06-01", "end_date": "2024-05-01"},
    )
    created = client.post(
        "/api/student-internships",
        json={"student_id": "1RV21CS001", "organization": "Acme", "duration": "6", "stipend": 15000},
    )
    by_student = client.get("/api/student-internships/student/1RV21CS001")
    deleted = client.delete("/api/student-internships/1")
    missing = client.delete("/api/student-internships/1")

    assert bad_dates.status_code == 400
    assert bad_dates.json()["message"] == "body: end_date must not be before start_date"
    assert created.status_code == 201
    assert created.json()["data"]["stipend"] == 15000.0
    assert by_student.json()["data"]["pagination"]["total_count"] == 1
    assert deleted.status_code == 200
    assert missing.status_code == 404


def test_language_rules(client: TestClient) -> None:
    _create_student(client)

    allowed = client.get("/api/student-languages/allowed-languages")
    created = client.post("/api/student-languages", json={"student_id": "1RV21CS001", "language": "python", "level": 7})
    duplicate = client.post("/api/student-languages", json={"student_id": "1RV21CS001", "language": "Python", "level": 3})
    unknown = client.post("/api/student-languages", json={"student_id": "1RV21CS001", "language": "Klingon", "level": 3})
    level = client.post("/api/student-languages", json={"student_id": "1RV21CS001", "language": "Go", "level": 11})

    assert len(allowed.json()["data"]) == 20
    assert "Python" in allowed.json()["data"]
    assert created.status_code == 201
    assert created.json()["data"]["language"] == "Python"
    assert duplicate.status_code == 409
    assert duplicate.json()["message"] == "This language already exists for this student"
    assert unknown.status_code == 400
    assert unknown.json()["message"].startswith("language:")
    assert level.status_code == 400


def test_language_bulk_upsert_and_student_routes(client: TestClient) -> None:
    _create_student(client)
    client.post("/api/student-languages", json={"student_id": "1RV21CS001", "language": "Python", "level": 4})

    bulk = client.post(
        "/api/student-languages/bulk",
        json={
            "student_id": "1RV21CS001",
            "languages": [{"language": "python", "level": 9}, {"language": "SQL", "level": 6}],
        },
    )
    listed = client.get("/api/student-languages/student/1RV21CS001")
    removed = client.delete("/api/student-languages/student/1RV21CS001/sql")
    cleared = client.delete("/api/student-languages/student/1RV21CS001")
    cleared_again = client.delete("/api/student-languages/student/1RV21CS001")

    assert bulk.status_code == 201
    assert [(row["language"], row["level"]) for row in bulk.json()["data"]] == [("Python", 9), ("SQL", 6)]
    assert len(listed.json()["data"]) == 2
    assert removed.json()["data"]["language"] == "SQL"
    assert [row["language"] for row in cleared.json()["data"]] == ["Python"]
    assert cleared_again.status_code == 404


def test_language_update_by_id(client: TestClient) -> None:
    _create_student(client)
    client.post("/api/student-languages", json={"student_id": "1RV21CS001", "language": "Rust", "level": 2})

    updated = client.patch("/api/student-languages/1", json={"level": 5, "language": ""})
    rejected = client.patch("/api/student-languages/1", json={"language": "Cobra"})

    assert updated.status_code == 200
    assert updated.json()["data"] == {
        "language_id": 1,
        "student_id": "1RV21CS001",
        "full_name": None,
        "language": "Rust",
        "level": 5,
        "created_at": None,
        "updated_at": None,
    }
    assert rejected.status_code == 400


def test_addresses(client: TestClient) -> None:
    _create_student(client)

    bad_pin = client.post("/api/student-addresses", json={"student_id": "1RV21CS001", "permanent_pin": "56001"})
    created = client.post(
        "/api/student-addresses",
        json={"student_id": "1RV21CS001", "permanent_city": "Bengaluru", "permanent_pin": "560059"},
    )
    none_yet = client.get("/api/student-addresses/student/OTHER1")
    by_student = client.get("/api/student-addresses/student/1RV21CS001")
    updated = client.put("/api/student-addresses/1", json={"current_city": "Mysuru", "current_pin": ""})

    assert bad_pin.status_code == 400
    assert created.status_code == 201
    assert none_yet.status_code == 404
    assert none_yet.json()["message"] == "No addresses found for this student"
    assert by_student.json()["data"][0]["permanent_city"] == "Bengaluru"
    assert updated.json()["data"]["current_city"] == "Mysuru"
