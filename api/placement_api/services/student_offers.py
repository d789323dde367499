from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryConflictError, RepositoryNotFoundError
from placement_api.services.listing import ListQuery, WhereBuilder, coalesce_assignments, fetch_page, order_clause

logger = logging.getLogger(__name__)

OFFER_COLUMNS = ("is_primary_offer", "is_pbc", "is_internship", "offer_ctc", "offer_stipend", "remarks")
OFFER_SELECT = (
    "so.*, s.full_name as student_name, s.email as student_email, j.job_title, c.company_id, c.company_name"
)
OFFER_SOURCE = (
    "student_offers so "
    "join students s on s.student_id = so.student_id "
    "join jobs j on j.job_id = so.job_id "
    "join companies c on c.company_id = j.company_id"
)
OFFER_SORT_COLUMNS = {
    name: f"so.{name}"
    for name in ("offer_id", "student_id", "job_id", "offered_at", "offer_ctc", "offer_stipend")
}
OFFER_SEARCH_COLUMNS = ("so.student_id", "s.full_name", "j.job_title", "c.company_name")
DUPLICATE = "Offer already exists for this student and job"
NOT_FOUND = "Offer not found"
STUDENT_NOT_FOUND = "Student not found"
JOB_NOT_FOUND = "Job not found"


class StudentOfferRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def create_offer(self, fields: dict[str, Any]) -> dict[str, Any]:
        student_id, job_id = fields["student_id"], fields["job_id"]
        async with self.database.transaction(conflict_message=DUPLICATE, reference_message=STUDENT_NOT_FOUND) as conn:
            if await conn.fetchval("select 1 from students where student_id = $1", student_id) is None:
                raise RepositoryNotFoundError(STUDENT_NOT_FOUND)
            if await conn.fetchval("select 1 from jobs where job_id = $1", job_id) is None:
                raise RepositoryNotFoundError(JOB_NOT_FOUND)
            existing = await conn.fetchval(
                "select 1 from student_offers where student_id = $1 and job_id = $2",
                student_id,
                job_id,
            )
            if existing is not None:
                raise RepositoryConflictError(DUPLICATE)
            offer_id = await conn.fetchval(
                """
                insert into student_offers (
                  student_id, job_id, offered_at, is_primary_offer, is_pbc, is_internship,
                  offer_ctc, offer_stipend, remarks
                )
                values ($1, $2, coalesce($3, now()), $4, $5, $6, $7, $8, $9)
                returning offer_id
                """,
                student_id,
                job_id,
                fields.get("offered_at"),
                fields.get("is_primary_offer", False),
                fields.get("is_pbc", False),
                fields.get("is_internship", False),
                fields.get("offer_ctc"),
                fields.get("offer_stipend"),
                fields.get("remarks"),
            )
            row = await conn.fetchrow(f"select {OFFER_SELECT} from {OFFER_SOURCE} where so.offer_id = $1", offer_id)
        logger.info("offer created offer_id=%s student_id=%s job_id=%s", offer_id, student_id, job_id)
        return dict(row)

    async def list_offers(
        self,
        query: ListQuery,
        *,
        student_id: str | None = None,
        job_id: int | None = None,
        is_primary_offer: bool | None = None,
        is_pbc: bool | None = None,
        is_internship: bool | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.equals("so.student_id", student_id)
        where.equals("so.job_id", job_id)
        where.equals("so.is_primary_offer", is_primary_offer)
        where.equals("so.is_pbc", is_pbc)
        where.equals("so.is_internship", is_internship)
        where.search(OFFER_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select=OFFER_SELECT,
            source=OFFER_SOURCE,
            where=where,
            order=order_clause(query, OFFER_SORT_COLUMNS, "offer_id", "DESC"),
            query=query,
        )

    async def get_offer(self, offer_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow(f"select {OFFER_SELECT} from {OFFER_SOURCE} where so.offer_id = $1", offer_id)
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def update_offer(self, offer_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(OFFER_COLUMNS, fields, where)
        async with self.database.transaction() as conn:
            updated = await conn.fetchval(
                f"""
                update student_offers
                set {assignments}, updated_at = now()
                where offer_id = {where.bind(offer_id)}
                returning offer_id
                """,
                *where.args,
            )
            if updated is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            row = await conn.fetchrow(f"select {OFFER_SELECT} from {OFFER_SOURCE} where so.offer_id = $1", offer_id)
        logger.info("offer updated offer_id=%s", offer_id)
        return dict(row)

    async def delete_offer(self, offer_id: int) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow("delete from student_offers where offer_id = $1 returning *", offer_id)
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("offer deleted offer_id=%s", offer_id)
        return dict(row)


@lru_cache
def get_student_offer_repository() -> StudentOfferRepository:
    return StudentOfferRepository(get_database())
