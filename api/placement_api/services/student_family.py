from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryConflictError, RepositoryNotFoundError
from placement_api.services.imports import insert_each
from placement_api.services.listing import ListQuery, WhereBuilder, coalesce_assignments, fetch_page, order_clause

logger = logging.getLogger(__name__)

FAMILY_COLUMNS = (
    "father_name",
    "father_occupation",
    "father_phone",
    "mother_name",
    "mother_occupation",
    "mother_phone",
    "blood_group",
)
FAMILY_SORT_COLUMNS = {
    "student_id": "sf.student_id",
    "student_name": "s.full_name",
    "father_name": "sf.father_name",
    "mother_name": "sf.mother_name",
    "blood_group": "sf.blood_group",
    "created_at": "sf.created_at",
}
FAMILY_SEARCH_COLUMNS = ("sf.student_id", "s.full_name", "sf.father_name", "sf.mother_name")
FAMILY_SOURCE = "student_family sf join students s on s.student_id = sf.student_id"
FAMILY_SELECT = "sf.*, s.full_name as student_name"
INSERT_FAMILY = f"""
    insert into student_family (student_id, {", ".join(FAMILY_COLUMNS)})
    values ($1, $2, $3, $4, $5, $6, $7, $8)
"""
DUPLICATE = "Family record already exists for this student"
NOT_FOUND = "Family record not found"
STUDENT_NOT_FOUND = "Student not found"


class StudentFamilyRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def create_family(self, fields: dict[str, Any]) -> dict[str, Any]:
        student_id = fields["student_id"]
        async with self.database.transaction(conflict_message=DUPLICATE, reference_message=STUDENT_NOT_FOUND) as conn:
            if await conn.fetchval("select 1 from students where student_id = $1", student_id) is None:
                raise RepositoryNotFoundError(STUDENT_NOT_FOUND)
            if await conn.fetchval("select 1 from student_family where student_id = $1", student_id) is not None:
                raise RepositoryConflictError(DUPLICATE)
            await conn.execute(INSERT_FAMILY, student_id, *(fields.get(column) for column in FAMILY_COLUMNS))
            row = await conn.fetchrow(f"select {FAMILY_SELECT} from {FAMILY_SOURCE} where sf.student_id = $1", student_id)
        logger.info("family record created student_id=%s", student_id)
        return dict(row)

    async def import_families(
        self,
        records: list[tuple[int, dict[str, Any]]],
    ) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        async def insert_one(conn, fields: dict[str, Any]) -> dict[str, Any]:
            student_id = fields["student_id"]
            await conn.execute(INSERT_FAMILY, student_id, *(fields.get(column) for column in FAMILY_COLUMNS))
            row = await conn.fetchrow(f"select {FAMILY_SELECT} from {FAMILY_SOURCE} where sf.student_id = $1", student_id)
            return dict(row)

        async with self.database.transaction() as conn:
            inserted, failures = await insert_each(
                conn,
                records,
                insert_one,
                duplicate_message=DUPLICATE,
                reference_message=STUDENT_NOT_FOUND,
            )
        logger.info("family import finished inserted=%s failed=%s", len(inserted), len(failures))
        return inserted, failures

    async def list_families(self, query: ListQuery) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.search(FAMILY_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select=FAMILY_SELECT,
            source=FAMILY_SOURCE,
            where=where,
            order=order_clause(query, FAMILY_SORT_COLUMNS, "student_id", "ASC"),
            query=query,
        )

    async def get_family(self, student_id: str) -> dict[str, Any]:
        row = await self.database.fetchrow(
            f"select {FAMILY_SELECT} from {FAMILY_SOURCE} where sf.student_id = $1",
            student_id,
        )
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def update_family(self, student_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(FAMILY_COLUMNS, fields, where)
        async with self.database.transaction() as conn:
            updated = await conn.fetchval(
                f"""
                update student_family
                set {assignments}, updated_at = now()
                where student_id = {where.bind(student_id)}
                returning student_id
                """,
                *where.args,
            )
            if updated is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            row = await conn.fetchrow(f"select {FAMILY_SELECT} from {FAMILY_SOURCE} where sf.student_id = $1", student_id)
        logger.info("family record updated student_id=%s", student_id)
        return dict(row)

    async def delete_family(self, student_id: str) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow("delete from student_family where student_id = $1 returning *", student_id)
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("family record deleted student_id=%s", student_id)
        return dict(row)


@lru_cache
def get_student_family_repository() -> StudentFamilyRepository:
    return StudentFamilyRepository(get_database())
