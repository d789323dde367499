from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryConflictError, RepositoryNotFoundError
from placement_api.services.listing import ListQuery, WhereBuilder, coalesce_assignments, fetch_page, order_clause

logger = logging.getLogger(__name__)

ACADEMIC_COLUMNS = (
    "tenth_percent",
    "tenth_year",
    "tenth_board",
    "tenth_school",
    "twelfth_percent",
    "twelfth_year",
    "twelfth_board",
    "twelfth_college",
    "diploma_percent",
    "diploma_year",
    "diploma_college",
    "ug_cgpa",
    "ug_year_of_passing",
    "pg_cgpa",
    "history_of_backs",
    "updated_arrears",
    "gap_years",
    "cet_rank",
    "comedk_rank",
    "category",
)
ACADEMIC_SORT_COLUMNS = {
    name: f"sa.{name}"
    for name in ("student_id", "tenth_percent", "twelfth_percent", "ug_cgpa", "pg_cgpa", "ug_year_of_passing")
}
ACADEMIC_SEARCH_COLUMNS = ("sa.student_id", "s.full_name", "sa.category")
ACADEMIC_SOURCE = "student_academics sa join students s on s.student_id = sa.student_id"
ACADEMIC_SELECT = "sa.*, s.full_name"
DUPLICATE = "Academic record already exists for this student"
NOT_FOUND = "Academic record not found"
STUDENT_NOT_FOUND = "Student not found"


class StudentAcademicsRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def create_academics(self, fields: dict[str, Any]) -> dict[str, Any]:
        student_id = fields["student_id"]
        columns = ["student_id", *(column for column in ACADEMIC_COLUMNS if fields.get(column) is not None)]
        placeholders = ", ".join(f"${index}" for index in range(1, len(columns) + 1))
        async with self.database.transaction(conflict_message=DUPLICATE, reference_message=STUDENT_NOT_FOUND) as conn:
            if await conn.fetchval("select 1 from students where student_id = $1", student_id) is None:
                raise RepositoryNotFoundError(STUDENT_NOT_FOUND)
            if await conn.fetchval("select 1 from student_academics where student_id = $1", student_id) is not None:
                raise RepositoryConflictError(DUPLICATE)
            await conn.execute(
                f"insert into student_academics ({', '.join(columns)}) values ({placeholders})",
                *(fields[column] for column in columns),
            )
            row = await conn.fetchrow(
                f"select {ACADEMIC_SELECT} from {ACADEMIC_SOURCE} where sa.student_id = $1",
                student_id,
            )
        logger.info("academic record created student_id=%s", student_id)
        return dict(row)

    async def list_academics(self, query: ListQuery) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.search(ACADEMIC_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select=ACADEMIC_SELECT,
            source=ACADEMIC_SOURCE,
            where=where,
            order=order_clause(query, ACADEMIC_SORT_COLUMNS, "student_id", "ASC"),
            query=query,
        )

    async def get_academics(self, student_id: str) -> dict[str, Any]:
        row = await self.database.fetchrow(
            f"select {ACADEMIC_SELECT} from {ACADEMIC_SOURCE} where sa.student_id = $1",
            student_id,
        )
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def update_academics(self, student_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(ACADEMIC_COLUMNS, fields, where)
        async with self.database.transaction() as conn:
            updated = await conn.fetchval(
                f"""
                update student_academics
                set {assignments}
                where student_id = {where.bind(student_id)}
                returning student_id
                """,
                *where.args,
            )
            if updated is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            row = await conn.fetchrow(
                f"select {ACADEMIC_SELECT} from {ACADEMIC_SOURCE} where sa.student_id = $1",
                student_id,
            )
        logger.info("academic record updated student_id=%s", student_id)
        return dict(row)

    async def delete_academics(self, student_id: str) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow("delete from student_academics where student_id = $1 returning *", student_id)
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("academic record deleted student_id=%s", student_id)
        return dict(row)


@lru_cache
def get_student_academics_repository() -> StudentAcademicsRepository:
    return StudentAcademicsRepository(get_database())
