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
from placement_api.services.permissions import get_permission_repository
from placement_api.services.role_permissions import get_role_permission_repository
from placement_api.services.roles import get_role_repository


class AccessStore:
    """In-memory roles, permissions and their assignments."""

    def __init__(self) -> None:
        self.roles: dict[int, dict[str, Any]] = {}
        self.permissions: dict[int, dict[str, Any]] = {}
        self.assignments: dict[int, dict[str, Any]] = {}


class FakeRoleRepository:
    def __init__(self, store: AccessStore) -> None:
        self.store = store

    async def create_role(self, fields: dict[str, Any]) -> dict[str, Any]:
        if await self.role_name_exists(fields["role_name"]):
            raise RepositoryConflictError("Role name already exists")
        role_id = len(self.store.roles) + 1
        row = {"role_id": role_id, **fields}
        self.store.roles[role_id] = row
        return row

    async def list_roles(self, query: ListQuery) -> tuple[list[dict[str, Any]], int]:
        rows = list(self.store.roles.values())
        return rows, len(rows)

    async def role_name_exists(self, role_name: str) -> bool:
        return any(row["role_name"].lower() == role_name.lower() for row in self.store.roles.values())

    async def get_role(self, role_id: int) -> dict[str, Any]:
        if role_id not in self.store.roles:
            raise RepositoryNotFoundError("Role not found")
        return self.store.roles[role_id]

    async def update_role(self, role_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        values = provided_fields(fields)
        if not values:
            raise RepositoryBusinessRuleError("No fields provided for update")
        row = await self.get_role(role_id)
        row.update(values)
        return row

    async def delete_role(self, role_id: int) -> dict[str, Any]:
        await self.get_role(role_id)
        self.store.assignments = {
            key: row for key, row in self.store.assignments.items() if row["role_id"] != role_id
        }
        return self.store.roles.pop(role_id)


class FakePermissionRepository:
    def __init__(self, store: AccessStore) -> None:
        self.store = store

    async def create_permission(self, fields: dict[str, Any]) -> dict[str, Any]:
        if await self.permission_name_exists(fields["permission_name"]):
            raise RepositoryConflictError("Permission name already exists")
        permission_id = len(self.store.permissions) + 1
        row = {"permission_id": permission_id, **fields}
        self.store.permissions[permission_id] = row
        return row

    async def list_permissions(self, query: ListQuery, *, module: str | None = None) -> tuple[list[dict[str, Any]], int]:
        rows = [row for row in self.store.permissions.values() if module is None or row["module"] == module]
        return rows, len(rows)

    async def permission_name_exists(self, permission_name: str) -> bool:
        return any(
            row["permission_name"].lower() == permission_name.lower() for row in self.store.permissions.values()
        )

    async def get_permission(self, permission_id: int) -> dict[str, Any]:
        if permission_id not in self.store.permissions:
            raise RepositoryNotFoundError("Permission not found")
        return self.store.permissions[permission_id]

    async def update_permission(self, permission_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        row = await self.get_permission(permission_id)
        row.update(provided_fields(fields))
        return row

    async def delete_permission(self, permission_id: int) -> dict[str, Any]:
        await self.get_permission(permission_id)
        return self.store.permissions.pop(permission_id)


class FakeRolePermissionRepository:
    def __init__(self, store: AccessStore) -> None:
        self.store = store

    def _row(self, role_id: int, permission_id: int) -> dict[str, Any]:
        assignment_id = max(self.store.assignments, default=0) + 1
        row = {
            "role_permission_id": assignment_id,
            "role_id": role_id,
            "permission_id": permission_id,
            "role_name": self.store.roles[role_id]["role_name"],
            "permission_name": self.store.permissions[permission_id]["permission_name"],
        }
        self.store.assignments[assignment_id] = row
        return row

    def _assigned(self, role_id: int, permission_id: int) -> bool:
        return any(
            row["role_id"] == role_id and row["permission_id"] == permission_id
            for row in self.store.assignments.values()
        )

    async def assign_permission(self, role_id: int, permission_id: int) -> dict[str, Any]:
        if role_id not in self.store.roles:
            raise RepositoryNotFoundError("Role not found")
        if permission_id not in self.store.permissions:
            raise RepositoryNotFoundError("Permission not found")
        if self._assigned(role_id, permission_id):
            raise RepositoryConflictError("Permission is already assigned to this role")
        return self._row(role_id, permission_id)

    async def assign_permissions(self, role_id: int, permission_ids: list[int]) -> dict[str, Any]:
        if role_id not in self.store.roles:
            raise RepositoryNotFoundError("Role not found")
        requested = list(dict.fromkeys(permission_ids))
        invalid = [pid for pid in requested if pid not in self.store.permissions]
        duplicates = [pid for pid in requested if pid not in invalid and self._assigned(role_id, pid)]
        rows = [self._row(role_id, pid) for pid in requested if pid not in invalid and pid not in duplicates]
        return {
            "assignments": rows,
            "duplicates": duplicates,
            "invalid_permissions": invalid,
            "summary": {
                "total_requested": len(requested),
                "successfully_assigned": len(rows),
                "duplicates": len(duplicates),
                "invalid": len(invalid),
            },
        }

    async def list_assignments(
        self,
        query: ListQuery,
        *,
        role_id: int | None = None,
        permission_id: int | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        rows = [
            row
            for row in self.store.assignments.values()
            if (role_id is None or row["role_id"] == role_id)
            and (permission_id is None or row["permission_id"] == permission_id)
        ]
        return rows, len(rows)

    async def get_role_permissions(self, role_id: int) -> dict[str, Any]:
        if role_id not in self.store.roles:
            raise RepositoryNotFoundError("Role not found")
        rows = [row for row in self.store.assignments.values() if row["role_id"] == role_id]
        return {"role_id": role_id, "role_name": self.store.roles[role_id]["role_name"], "permissions": rows}

    async def remove_permission(self, role_id: int, permission_id: int) -> dict[str, Any]:
        for key, row in self.store.assignments.items():
            if row["role_id"] == role_id and row["permission_id"] == permission_id:
                return self.store.assignments.pop(key)
        raise RepositoryNotFoundError("Permission assignment not found for this role")

    async def remove_all_permissions(self, role_id: int) -> dict[str, Any]:
        if role_id not in self.store.roles:
            raise RepositoryNotFoundError("Role not found")
        keys = [key for key, row in self.store.assignments.items() if row["role_id"] == role_id]
        for key in keys:
            self.store.assignments.pop(key)
        return {"role_id": role_id, "removed_count": len(keys)}


@pytest.fixture
def client() -> TestClient:
    store = AccessStore()
    roles = FakeRoleRepository(store)
    permissions = FakePermissionRepository(store)
    assignments = FakeRolePermissionRepository(store)
    app.dependency_overrides[get_role_repository] = lambda: roles
    app.dependency_overrides[get_permission_repository] = lambda: permissions
    app.dependency_overrides[get_role_permission_repository] = lambda: assignments

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def _seed(client: TestClient) -> None:
    client.post("/api/roles", json={"role_name": "admin", "role_description": "Full access"})
    for name, module in (("companies.read", "companies"), ("companies.update", "companies"), ("jobs.read", "jobs")):
        client.post("/api/permissions", json={"permission_name": name, "module": module})


def test_role_names_are_unique_case_insensitively(client: TestClient) -> None:
    first = client.post("/api/roles", json={"role_name": "admin"})
    second = client.post("/api/roles", json={"role_name": "ADMIN"})
    check = client.get("/api/roles/check/Admin")
    free = client.get("/api/roles/check/recruiter")

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["message"] == "Role name already exists"
    assert check.json()["data"] == {"role_name": "Admin", "exists": True}
    assert check.json()["message"] == "Role name already exists"
    assert free.json()["data"]["exists"] is False


def test_role_name_length_is_validated(client: TestClient) -> None:
    short = client.post("/api/roles", json={"role_name": "ab"})
    blank_update = client.patch("/api/roles/1", json={"role_name": "x"})

    assert short.status_code == 400
    assert short.json()["message"].startswith("role_name:")
    assert blank_update.status_code == 400


def test_role_update_and_hard_delete(client: TestClient) -> None:
    _seed(client)
    client.post("/api/role-permissions/assign", json={"role_id": 1, "permission_id": 1})

    updated = client.put("/api/roles/1", json={"role_description": "Everything"})
    deleted = client.delete("/api/roles/1")
    missing = client.get("/api/roles/1")
    orphaned = client.get("/api/role-permissions", params={"role_id": 1})

    assert updated.json()["data"]["role_description"] == "Everything"
    assert deleted.status_code == 200
    assert missing.status_code == 404
    assert orphaned.json()["data"]["pagination"]["total_count"] == 0


def test_permissions_filter_by_module(client: TestClient) -> None:
    _seed(client)

    response = client.get("/api/permissions", params={"module": "companies"})
    check = client.get("/api/permissions/check/JOBS.READ")

    assert [row["permission_name"] for row in response.json()["data"]["permissions"]] == [
        "companies.read",
        "companies.update",
    ]
    assert check.json()["data"]["exists"] is True


def test_assign_single_permission(client: TestClient) -> None:
    _seed(client)

    created = client.post("/api/role-permissions/assign", json={"role_id": 1, "permission_id": 2})
    duplicate = client.post("/api/role-permissions/assign", json={"role_id": 1, "permission_id": 2})
    unknown = client.post("/api/role-permissions/assign", json={"role_id": 1, "permission_id": 9})

    assert created.status_code == 201
    assert created.json()["data"]["permission_name"] == "companies.update"
    assert duplicate.status_code == 409
    assert unknown.status_code == 404
    assert unknown.json()["message"] == "Permission not found"


def test_assign_multiple_reports_duplicates_and_invalid_ids(client: TestClient) -> None:
    _seed(client)
    client.post("/api/role-permissions/assign", json={"role_id": 1, "permission_id": 1})

    response = client.post("/api/role-permissions/assign-multiple", json={"role_id": 1, "permission_ids": [1, 2, 3, 99]})

    assert response.status_code == 201
    body = response.json()
    assert body["data"]["duplicates"] == [1]
    assert body["data"]["invalid_permissions"] == [99]
    assert [row["permission_id"] for row in body["data"]["assignments"]] == [2, 3]
    assert body["data"]["summary"] == {"total_requested": 4, "successfully_assigned": 2, "duplicates": 1, "invalid": 1}
    assert body["message"] == "Assigned 2 of 4 permissions (1 already assigned, 1 invalid)"


def test_role_permission_listing_and_removal(client: TestClient) -> None:
    _seed(client)
    client.post("/api/role-permissions/assign-multiple", json={"role_id": 1, "permission_ids": [1, 2, 3]})

    by_role = client.get("/api/role-permissions/role/1")
    removed = client.request("DELETE", "/api/role-permissions/remove", json={"role_id": 1, "permission_id": 2})
    removed_again = client.request("DELETE", "/api/role-permissions/remove", json={"role_id": 1, "permission_id": 2})
    cleared = client.delete("/api/role-permissions/role/1")

    assert by_role.json()["data"]["role_name"] == "admin"
    assert len(by_role.json()["data"]["permissions"]) == 3
    assert removed.status_code == 200
    assert removed_again.status_code == 404
    assert cleared.json()["data"] == {"role_id": 1, "removed_count": 2}
    assert cleared.json()["message"] == "Removed 2 permissions from role"
