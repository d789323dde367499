from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryConflictError, RepositoryNotFoundError
from placement_api.services.listing import ListQuery, WhereBuilder, coalesce_assignments, fetch_page, order_clause

logger = logging.getLogger(__name__)

PERMISSION_COLUMNS = ("permission_name", "module", "description")
PERMISSION_SORT_COLUMNS = {name: name for name in ("permission_id", "permission_name", "module", "description")}
PERMISSION_SEARCH_COLUMNS = ("permission_name", "module", "description")
DUPLICATE = "Permission name already exists"
NOT_FOUND = "Permission not found"


class PermissionRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def create_permission(self, fields: dict[str, Any]) -> dict[str, Any]:
        async with self.database.transaction(conflict_message=DUPLICATE) as conn:
            taken = await conn.fetchval(
                "select permission_id from permissions where lower(permission_name) = lower($1)",
                fields["permission_name"],
            )
            if taken is not None:
                raise RepositoryConflictError(DUPLICATE)
            row = await conn.fetchrow(
                """
                insert into permissions (permission_name, module, description)
                values ($1, $2, $3)
                returning *
                """,
                fields["permission_name"],
                fields.get("module"),
                fields.get("description"),
            )
        logger.info("permission created permission_id=%s", row["permission_id"])
        return dict(row)

    async def list_permissions(
        self,
        query: ListQuery,
        *,
        module: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.equals("module", module)
        where.search(PERMISSION_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select="*",
            source="permissions",
            where=where,
            order=order_clause(query, PERMISSION_SORT_COLUMNS, "permission_id", "ASC"),
            query=query,
        )

    async def get_permission(self, permission_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow("select * from permissions where permission_id = $1", permission_id)
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def permission_name_exists(self, permission_name: str) -> bool:
        permission_id = await self.database.fetchval(
            "select permission_id from permissions where lower(permission_name) = lower($1)",
            permission_name.strip(),
        )
        return permission_id is not None

    async def update_permission(self, permission_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(PERMISSION_COLUMNS, fields, where)
        async with self.database.transaction(conflict_message=DUPLICATE) as conn:
            exists = await conn.fetchval("select 1 from permissions where permission_id = $1", permission_id)
            if exists is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            if fields.get("permission_name"):
                taken = await conn.fetchval(
                    """
                    select permission_id from permissions
                    where lower(permission_name) = lower($1) and permission_id <> $2
                    """,
                    fields["permission_name"],
                    permission_id,
                )
                if taken is not None:
                    raise RepositoryConflictError(DUPLICATE)
            row = await conn.fetchrow(
                f"""
                update permissions
                set {assignments}, updated_at = now()
                where permission_id = {where.bind(permission_id)}
                returning *
                """,
                *where.args,
            )
        logger.info("permission updated permission_id=%s", permission_id)
        return dict(row)

    async def delete_permission(self, permission_id: int) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow("delete from permissions where permission_id = $1 returning *", permission_id)
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("permission deleted permission_id=%s", permission_id)
        return dict(row)


@lru_cache
def get_permission_repository() -> PermissionRepository:
    return PermissionRepository(get_database())
