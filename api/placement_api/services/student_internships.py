from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryNotFoundError
from placement_api.services.listing import ListQuery, WhereBuilder, coalesce_assignments, fetch_page, order_clause

logger = logging.getLogger(__name__)

INTERNSHIP_COLUMNS = (
    "organization",
    "skills_acquired",
    "duration",
    "start_date",
    "end_date",
    "description",
    "stipend",
)
INTERNSHIP_SORT_COLUMNS = {
    name: f"si.{name}"
    for name in ("internship_id", "student_id", "organization", "start_date", "end_date", "stipend", "created_at")
}
INTERNSHIP_SEARCH_COLUMNS = ("si.organization", "si.skills_acquired", "si.student_id", "s.full_name")
INTERNSHIP_SOURCE = "student_internships si join students s on s.student_id = si.student_id"
INTERNSHIP_SELECT = "si.*, s.full_name"
NOT_FOUND = "Internship not found"
STUDENT_NOT_FOUND = "Student not found"


class StudentInternshipRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def create_internship(self, fields: dict[str, Any]) -> dict[str, Any]:
        async with self.database.transaction(reference_message=STUDENT_NOT_FOUND) as conn:
            if await conn.fetchval("select 1 from students where student_id = $1", fields["student_id"]) is None:
                raise RepositoryNotFoundError(STUDENT_NOT_FOUND)
            internship_id = await conn.fetchval(
                f"""
                insert into student_internships (student_id, {", ".join(INTERNSHIP_COLUMNS)})
                values ($1, $2, $3, $4, $5, $6, $7, $8)
                returning internship_id
                """,
                fields["student_id"],
                *(fields.get(column) for column in INTERNSHIP_COLUMNS),
            )
            row = await conn.fetchrow(
                f"select {INTERNSHIP_SELECT} from {INTERNSHIP_SOURCE} where si.internship_id = $1",
                internship_id,
            )
        logger.info("internship created internship_id=%s student_id=%s", internship_id, fields["student_id"])
        return dict(row)

    async def list_internships(
        self,
        query: ListQuery,
        *,
        student_id: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.equals("si.student_id", student_id)
        where.search(INTERNSHIP_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select=INTERNSHIP_SELECT,
            source=INTERNSHIP_SOURCE,
            where=where,
            order=order_clause(query, INTERNSHIP_SORT_COLUMNS, "internship_id", "DESC"),
            query=query,
        )

    async def get_internship(self, internship_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow(
            f"select {INTERNSHIP_SELECT} from {INTERNSHIP_SOURCE} where si.internship_id = $1",
            internship_id,
        )
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def update_internship(self, internship_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(INTERNSHIP_COLUMNS, fields, where)
        async with self.database.transaction() as conn:
            updated = await conn.fetchval(
                f"""
                update student_internships
                set {assignments}, updated_at = now()
                where internship_id = {where.bind(internship_id)}
                returning internship_id
                """,
                *where.args,
            )
            if updated is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            row = await conn.fetchrow(
                f"select {INTERNSHIP_SELECT} from {INTERNSHIP_SOURCE} where si.internship_id = $1",
                internship_id,
            )
        logger.info("internship updated internship_id=%s", internship_id)
        return dict(row)

    async def delete_internship(self, internship_id: int) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow(
                "delete from student_internships where internship_id = $1 returning *",
                internship_id,
            )
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("internship deleted internship_id=%s", internship_id)
        return dict(row)


@lru_cache
def get_student_internship_repository() -> StudentInternshipRepository:
    return StudentInternshipRepository(get_database())
