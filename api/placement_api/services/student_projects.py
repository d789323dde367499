from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryNotFoundError
from placement_api.services.imports import insert_each
from placement_api.services.listing import (
    ListQuery,
    WhereBuilder,
    coalesce_assignments,
    fetch_page,
    order_clause,
)

logger = logging.getLogger(__name__)

PROJECT_COLUMNS = ("title", "description", "tools_used", "repo_link")
PROJECT_SELECT = "sp.*, s.full_name as student_name"
PROJECT_SOURCE = "student_projects sp join students s on s.student_id = sp.student_id"
PROJECT_SORT_COLUMNS = {
    "project_id": "sp.project_id",
    "student_id": "sp.student_id",
    "title": "sp.title",
    "created_at": "sp.created_at",
}
PROJECT_SEARCH_COLUMNS = ("sp.title", "sp.tools_used", "sp.student_id", "s.full_name")
INSERT_PROJECT = f"""
    insert into student_projects (student_id, {", ".join(PROJECT_COLUMNS)})
    values ($1, $2, $3, $4, $5)
    returning project_id
"""
NOT_FOUND = "Project not found"
STUDENT_NOT_FOUND = "Student not found"


def split_tools(tools: str | None) -> list[str]:
    if not tools:
        return []
    return list(dict.fromkeys(tool.strip() for tool in tools.split(",") if tool.strip()))


class StudentProjectRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def _insert(self, conn, fields: dict[str, Any]) -> dict[str, Any]:
        project_id = await conn.fetchval(
            INSERT_PROJECT,
            fields["student_id"],
            *(fields.get(column) for column in PROJECT_COLUMNS),
        )
        row = await conn.fetchrow(f"select {PROJECT_SELECT} from {PROJECT_SOURCE} where sp.project_id = $1", project_id)
        return dict(row)

    async def create_project(self, fields: dict[str, Any]) -> dict[str, Any]:
        async with self.database.transaction(reference_message=STUDENT_NOT_FOUND) as conn:
            if await conn.fetchval("select 1 from students where student_id = $1", fields["student_id"]) is None:
                raise RepositoryNotFoundError(STUDENT_NOT_FOUND)
            row = await self._insert(conn, fields)
        logger.info("project created project_id=%s student_id=%s", row["project_id"], row["student_id"])
        return row

    async def import_projects(
        self,
        records: list[tuple[int, dict[str, Any]]],
    ) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        async with self.database.transaction() as conn:
            inserted, failures = await insert_each(conn, records, self._insert, reference_message=STUDENT_NOT_FOUND)
        logger.info("project import finished inserted=%s failed=%s", len(inserted), len(failures))
        return inserted, failures

    async def list_projects(
        self,
        query: ListQuery,
        *,
        student_id: str | None = None,
        tools: list[str] | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """List projects; `tools` matches a project using any one of them."""
        where = WhereBuilder()
        where.equals("sp.student_id", student_id)
        where.contains_any("sp.tools_used", tools or ())
        where.search(PROJECT_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select=PROJECT_SELECT,
            source=PROJECT_SOURCE,
            where=where,
            order=order_clause(query, PROJECT_SORT_COLUMNS, "project_id", "DESC"),
            query=query,
        )

    async def get_project(self, project_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow(f"select {PROJECT_SELECT} from {PROJECT_SOURCE} where sp.project_id = $1", project_id)
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def update_project(self, project_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(PROJECT_COLUMNS, fields, where)
        async with self.database.transaction() as conn:
            updated = await conn.fetchval(
                f"""
                update student_projects
                set {assignments}, updated_at = now()
                where project_id = {where.bind(project_id)}
                returning project_id
                """,
                *where.args,
            )
            if updated is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            row = await conn.fetchrow(f"select {PROJECT_SELECT} from {PROJECT_SOURCE} where sp.project_id = $1", project_id)
        logger.info("project updated project_id=%s", project_id)
        return dict(row)

    async def delete_project(self, project_id: int) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow("delete from student_projects where project_id = $1 returning *", project_id)
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("project deleted project_id=%s", project_id)
        return dict(row)


@lru_cache
def get_student_project_repository() -> StudentProjectRepository:
    return StudentProjectRepository(get_database())
