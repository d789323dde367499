from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryConflictError, RepositoryNotFoundError
from placement_api.services.listing import ListQuery, WhereBuilder, coalesce_assignments, fetch_page, order_clause

logger = logging.getLogger(__name__)

STUDENT_COLUMNS = (
    "first_name",
    "middle_name",
    "last_name",
    "full_name",
    "gender",
    "dob",
    "email",
    "alt_email",
    "college_email",
    "mobile",
    "emergency_contact",
    "nationality",
    "placement_fee_status",
    "student_photo_path",
    "branch",
    "graduation_year",
    "semester",
)
STUDENT_SORT_COLUMNS = {
    name: name for name in ("student_id", "full_name", "branch", "graduation_year", "semester", "created_at")
}
STUDENT_SEARCH_COLUMNS = ("student_id", "full_name", "email", "college_email", "branch")
DUPLICATE = "Student with this ID already exists"
NOT_FOUND = "Student not found"


class StudentRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def create_student(self, fields: dict[str, Any]) -> dict[str, Any]:
        columns = [column for column in ("student_id", *STUDENT_COLUMNS) if fields.get(column) is not None]
        placeholders = ", ".join(f"${index}" for index in range(1, len(columns) + 1))
        async with self.database.transaction(conflict_message=DUPLICATE) as conn:
            existing = await conn.fetchval("select 1 from students where student_id = $1", fields["student_id"])
            if existing is not None:
                raise RepositoryConflictError(DUPLICATE)
            row = await conn.fetchrow(
                f"""
                insert into students ({", ".join(columns)})
                values ({placeholders})
                returning *
                """,
                *(fields.get(column) for column in columns),
            )
        logger.info("student created student_id=%s", fields["student_id"])
        return dict(row)

    async def list_students(
        self,
        query: ListQuery,
        *,
        branch: str | None = None,
        graduation_year: int | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.equals("branch", branch)
        where.equals("graduation_year", graduation_year)
        where.search(STUDENT_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select="*",
            source="students",
            where=where,
            order=order_clause(query, STUDENT_SORT_COLUMNS, "student_id", "ASC"),
            query=query,
        )

    async def get_student(self, student_id: str) -> dict[str, Any]:
        row = await self.database.fetchrow("select * from students where student_id = $1", student_id)
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def update_student(self, student_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(STUDENT_COLUMNS, fields, where)
        async with self.database.transaction() as conn:
            row = await conn.fetchrow(
                f"""
                update students
                set {assignments}, updated_at = now()
                where student_id = {where.bind(student_id)}
                returning *
                """,
                *where.args,
            )
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("student updated student_id=%s", student_id)
        return dict(row)

    async def delete_student(self, student_id: str) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow("delete from students where student_id = $1 returning *", student_id)
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("student deleted student_id=%s", student_id)
        return dict(row)


@lru_cache
def get_student_repository() -> StudentRepository:
    return StudentRepository(get_database())
