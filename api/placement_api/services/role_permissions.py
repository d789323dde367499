from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryConflictError, RepositoryNotFoundError
from placement_api.services.listing import ListQuery, WhereBuilder, fetch_page, order_clause

logger = logging.getLogger(__name__)

ASSIGNMENT_SELECT = "rp.*, r.role_name, p.permission_name, p.module, p.description"
ASSIGNMENT_SOURCE = (
    "role_permissions rp "
    "join roles r on r.role_id = rp.role_id "
    "join permissions p on p.permission_id = rp.permission_id"
)
ASSIGNMENT_SORT_COLUMNS = {
    "role_permission_id": "rp.role_permission_id",
    "role_id": "rp.role_id",
    "permission_id": "rp.permission_id",
    "role_name": "r.role_name",
    "permission_name": "p.permission_name",
    "module": "p.module",
    "created_at": "rp.created_at",
}
ASSIGNMENT_SEARCH_COLUMNS = ("r.role_name", "p.permission_name", "p.module")
ROLE_NOT_FOUND = "Role not found"
PERMISSION_NOT_FOUND = "Permission not found"
DUPLICATE = "Permission is already assigned to this role"
ASSIGNMENT_NOT_FOUND = "Permission assignment not found for this role"


class RolePermissionRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def assign_permission(self, role_id: int, permission_id: int) -> dict[str, Any]:
        async with self.database.transaction(conflict_message=DUPLICATE) as conn:
            if await conn.fetchval("select 1 from roles where role_id = $1", role_id) is None:
                raise RepositoryNotFoundError(ROLE_NOT_FOUND)
            if await conn.fetchval("select 1 from permissions where permission_id = $1", permission_id) is None:
                raise RepositoryNotFoundError(PERMISSION_NOT_FOUND)
            existing = await conn.fetchval(
                "select role_permission_id from role_permissions where role_id = $1 and permission_id = $2",
                role_id,
                permission_id,
            )
            if existing is not None:
                raise RepositoryConflictError(DUPLICATE)
            assignment_id = await conn.fetchval(
                "insert into role_permissions (role_id, permission_id) values ($1, $2) returning role_permission_id",
                role_id,
                permission_id,
            )
            row = await conn.fetchrow(
                f"select {ASSIGNMENT_SELECT} from {ASSIGNMENT_SOURCE} where rp.role_permission_id = $1",
                assignment_id,
            )
        logger.info("permission assigned role_id=%s permission_id=%s", role_id, permission_id)
        return dict(row)

    async def assign_permissions(self, role_id: int, permission_ids: list[int]) -> dict[str, Any]:
        """Assign many permissions at once, reporting duplicates and unknown ids instead of failing."""
        requested = list(dict.fromkeys(permission_ids))
        async with self.database.transaction(conflict_message=DUPLICATE) as conn:
            if await conn.fetchval("select 1 from roles where role_id = $1", role_id) is None:
                raise RepositoryNotFoundError(ROLE_NOT_FOUND)
            known = {
                row["permission_id"]
                for row in await conn.fetch(
                    "select permission_id from permissions where permission_id = any($1::int[])",
                    requested,
                )
            }
            assigned = {
                row["permission_id"]
                for row in await conn.fetch(
                    "select permission_id from role_permissions where role_id = $1 and permission_id = any($2::int[])",
                    role_id,
                    requested,
                )
            }
            invalid = [permission_id for permission_id in requested if permission_id not in known]
            duplicates = [permission_id for permission_id in requested if permission_id in assigned]
            to_insert = [
                permission_id for permission_id in requested if permission_id in known and permission_id not in assigned
            ]
            rows: list[dict[str, Any]] = []
            if to_insert:
                inserted_ids = [
                    row["role_permission_id"]
                    for row in await conn.fetch(
                        """
                        insert into role_permissions (role_id, permission_id)
                        select $1, permission_id from unnest($2::int[]) as permission_id
                        returning role_permission_id
                        """,
                        role_id,
                        to_insert,
                    )
                ]
                rows = [
                    dict(row)
                    for row in await conn.fetch(
                        f"""
                        select {ASSIGNMENT_SELECT} from {ASSIGNMENT_SOURCE}
                        where rp.role_permission_id = any($1::int[])
                        order by rp.role_permission_id
                        """,
                        inserted_ids,
                    )
                ]
        logger.info(
            "permissions assigned role_id=%s assigned=%s duplicates=%s invalid=%s",
            role_id,
            len(rows),
            len(duplicates),
            len(invalid),
        )
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
        where = WhereBuilder()
        where.equals("rp.role_id", role_id)
        where.equals("rp.permission_id", permission_id)
        where.search(ASSIGNMENT_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select=ASSIGNMENT_SELECT,
            source=ASSIGNMENT_SOURCE,
            where=where,
            order=order_clause(query, ASSIGNMENT_SORT_COLUMNS, "role_permission_id", "ASC"),
            query=query,
        )

    async def get_role_permissions(self, role_id: int) -> dict[str, Any]:
        role = await self.database.fetchrow("select role_id, role_name from roles where role_id = $1", role_id)
        if role is None:
            raise RepositoryNotFoundError(ROLE_NOT_FOUND)
        rows = await self.database.fetch(
            f"""
            select {ASSIGNMENT_SELECT} from {ASSIGNMENT_SOURCE}
            where rp.role_id = $1
            order by p.module nulls last, p.permission_name
            """,
            role_id,
        )
        return {"role_id": role["role_id"], "role_name": role["role_name"], "permissions": [dict(row) for row in rows]}

    async def remove_permission(self, role_id: int, permission_id: int) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow(
                "delete from role_permissions where role_id = $1 and permission_id = $2 returning *",
                role_id,
                permission_id,
            )
            if row is None:
                raise RepositoryNotFoundError(ASSIGNMENT_NOT_FOUND)
        logger.info("permission removed role_id=%s permission_id=%s", role_id, permission_id)
        return dict(row)

    async def remove_all_permissions(self, role_id: int) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            if await conn.fetchval("select 1 from roles where role_id = $1", role_id) is None:
                raise RepositoryNotFoundError(ROLE_NOT_FOUND)
            removed = await conn.fetch("delete from role_permissions where role_id = $1 returning role_permission_id", role_id)
        logger.info("permissions cleared role_id=%s removed=%s", role_id, len(removed))
        return {"role_id": role_id, "removed_count": len(removed)}


@lru_cache
def get_role_permission_repository() -> RolePermissionRepository:
    return RolePermissionRepository(get_database())
