from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

import asyncpg  # type: ignore[import-untyped]

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryConflictError, RepositoryNotFoundError
from placement_api.services.listing import ListQuery, WhereBuilder, coalesce_assignments, fetch_page, order_clause

logger = logging.getLogger(__name__)

ROLE_COLUMNS = ("role_name", "role_description")
ROLE_SORT_COLUMNS = {name: name for name in ("role_id", "role_name", "role_description", "created_at")}
ROLE_SEARCH_COLUMNS = ("role_name", "role_description")
DUPLICATE = "Role name already exists"
NOT_FOUND = "Role not found"


class RoleRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def create_role(self, fields: dict[str, Any]) -> dict[str, Any]:
        async with self.database.transaction(conflict_message=DUPLICATE) as conn:
            if await self._name_taken(conn, fields["role_name"]):
                raise RepositoryConflictError(DUPLICATE)
            row = await conn.fetchrow(
                "insert into roles (role_name, role_description) values ($1, $2) returning *",
                fields["role_name"],
                fields.get("role_description"),
            )
        logger.info("role created role_id=%s", row["role_id"])
        return dict(row)

    async def list_roles(self, query: ListQuery) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.search(ROLE_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select="*",
            source="roles",
            where=where,
            order=order_clause(query, ROLE_SORT_COLUMNS, "created_at", "DESC"),
            query=query,
        )

    async def get_role(self, role_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow("select * from roles where role_id = $1", role_id)
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def role_name_exists(self, role_name: str) -> bool:
        role_id = await self.database.fetchval(
            "select role_id from roles where lower(role_name) = lower($1)",
            role_name.strip(),
        )
        return role_id is not None

    async def update_role(self, role_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(ROLE_COLUMNS, fields, where)
        async with self.database.transaction(conflict_message=DUPLICATE) as conn:
            exists = await conn.fetchval("select 1 from roles where role_id = $1", role_id)
            if exists is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            if fields.get("role_name") and await self._name_taken(conn, fields["role_name"], exclude_id=role_id):
                raise RepositoryConflictError(DUPLICATE)
            row = await conn.fetchrow(
                f"""
                update roles
                set {assignments}, updated_at = now()
                where role_id = {where.bind(role_id)}
                returning *
                """,
                *where.args,
            )
        logger.info("role updated role_id=%s", role_id)
        return dict(row)

    async def delete_role(self, role_id: int) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow("delete from roles where role_id = $1 returning *", role_id)
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("role deleted role_id=%s", role_id)
        return dict(row)

    @staticmethod
    async def _name_taken(conn: asyncpg.Connection, role_name: str, exclude_id: int | None = None) -> bool:
        role_id = await conn.fetchval(
            "select role_id from roles where lower(role_name) = lower($1) and role_id <> coalesce($2, 0)",
            role_name,
            exclude_id,
        )
        return role_id is not None


@lru_cache
def get_role_repository() -> RoleRepository:
    return RoleRepository(get_database())
