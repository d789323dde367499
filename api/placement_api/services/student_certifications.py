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

CERTIFICATION_COLUMNS = ("skill_name", "duration", "vendor", "certificate_file")
CERTIFICATION_SELECT = "sc.*, s.full_name as student_name"
CERTIFICATION_SOURCE = "student_certifications sc join students s on s.student_id = sc.student_id"
CERTIFICATION_SORT_COLUMNS = {
    "cert_id": "sc.cert_id",
    "student_id": "sc.student_id",
    "skill_name": "sc.skill_name",
    "vendor": "sc.vendor",
    "created_at": "sc.created_at",
}
CERTIFICATION_SEARCH_COLUMNS = ("sc.skill_name", "sc.vendor", "sc.student_id", "s.full_name")
INSERT_CERTIFICATION = f"""
    insert into student_certifications (student_id, {", ".join(CERTIFICATION_COLUMNS)})
    values ($1, $2, $3, $4, $5)
    returning cert_id
"""
NOT_FOUND = "Certification not found"
STUDENT_NOT_FOUND = "Student not found"


class StudentCertificationRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def _insert(self, conn, fields: dict[str, Any]) -> dict[str, Any]:
        cert_id = await conn.fetchval(
            INSERT_CERTIFICATION,
            fields["student_id"],
            *(fields.get(column) for column in CERTIFICATION_COLUMNS),
        )
        row = await conn.fetchrow(
            f"select {CERTIFICATION_SELECT} from {CERTIFICATION_SOURCE} where sc.cert_id = $1",
            cert_id,
        )
        return dict(row)

    async def create_certification(self, fields: dict[str, Any]) -> dict[str, Any]:
        async with self.database.transaction(reference_message=STUDENT_NOT_FOUND) as conn:
            if await conn.fetchval("select 1 from students where student_id = $1", fields["student_id"]) is None:
                raise RepositoryNotFoundError(STUDENT_NOT_FOUND)
            row = await self._insert(conn, fields)
        logger.info("certification created cert_id=%s student_id=%s", row["cert_id"], row["student_id"])
        return row

    async def import_certifications(
        self,
        records: list[tuple[int, dict[str, Any]]],
    ) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        async with self.database.transaction() as conn:
            inserted, failures = await insert_each(conn, records, self._insert, reference_message=STUDENT_NOT_FOUND)
        logger.info("certification import finished inserted=%s failed=%s", len(inserted), len(failures))
        return inserted, failures

    async def list_certifications(
        self,
        query: ListQuery,
        *,
        student_id: str | None = None,
        skill: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.equals("sc.student_id", student_id)
        where.search(("sc.skill_name",), skill)
        where.search(CERTIFICATION_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select=CERTIFICATION_SELECT,
            source=CERTIFICATION_SOURCE,
            where=where,
            order=order_clause(query, CERTIFICATION_SORT_COLUMNS, "cert_id", "DESC"),
            query=query,
        )

    async def get_certification(self, cert_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow(
            f"select {CERTIFICATION_SELECT} from {CERTIFICATION_SOURCE} where sc.cert_id = $1",
            cert_id,
        )
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def update_certification(self, cert_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(CERTIFICATION_COLUMNS, fields, where)
        async with self.database.transaction() as conn:
            updated = await conn.fetchval(
                f"""
                update student_certifications
                set {assignments}, updated_at = now()
                where cert_id = {where.bind(cert_id)}
                returning cert_id
                """,
                *where.args,
            )
            if updated is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            row = await conn.fetchrow(
                f"select {CERTIFICATION_SELECT} from {CERTIFICATION_SOURCE} where sc.cert_id = $1",
                cert_id,
            )
        logger.info("certification updated cert_id=%s", cert_id)
        return dict(row)

    async def delete_certification(self, cert_id: int) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow("delete from student_certifications where cert_id = $1 returning *", cert_id)
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("certification deleted cert_id=%s", cert_id)
        return dict(row)


@lru_cache
def get_student_certification_repository() -> StudentCertificationRepository:
    return StudentCertificationRepository(get_database())
