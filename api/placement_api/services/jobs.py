from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryNotFoundError
from placement_api.services.listing import ListQuery, WhereBuilder, coalesce_assignments, fetch_page, order_clause

logger = logging.getLogger(__name__)

JOB_COLUMNS = (
    "company_id",
    "job_title",
    "job_description",
    "job_type",
    "ctc_lpa",
    "stipend_per_month",
    "location",
    "interview_mode",
    "application_deadline",
    "drive_date",
    "year_of_graduation",
    "status",
)
JOB_SORT_COLUMNS = {
    name: f"j.{name}"
    for name in (
        "job_id",
        "job_title",
        "job_type",
        "ctc_lpa",
        "location",
        "application_deadline",
        "drive_date",
        "created_at",
    )
}
JOB_SEARCH_COLUMNS = ("j.job_title", "j.job_type", "j.location", "j.interview_mode", "c.company_name")
JOB_SOURCE = "jobs j join companies c on c.company_id = j.company_id"
NOT_FOUND = "Job not found"
COMPANY_NOT_FOUND = "Company not found"


class JobRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def create_job(self, fields: dict[str, Any]) -> dict[str, Any]:
        async with self.database.transaction(reference_message=COMPANY_NOT_FOUND) as conn:
            company = await conn.fetchval("select 1 from companies where company_id = $1", fields["company_id"])
            if company is None:
                raise RepositoryNotFoundError(COMPANY_NOT_FOUND)
            job_id = await conn.fetchval(
                f"""
                insert into jobs ({", ".join(JOB_COLUMNS)})
                values ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, coalesce($12, 'DRAFT'))
                returning job_id
                """,
                *(fields.get(column) for column in JOB_COLUMNS),
            )
            row = await conn.fetchrow(f"select j.*, c.company_name from {JOB_SOURCE} where j.job_id = $1", job_id)
        logger.info("job created job_id=%s company_id=%s", job_id, fields["company_id"])
        return dict(row)

    async def list_jobs(
        self,
        query: ListQuery,
        *,
        company_id: int | None = None,
        status: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.equals("j.company_id", company_id)
        where.equals("j.status", status)
        where.search(JOB_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select="j.*, c.company_name",
            source=JOB_SOURCE,
            where=where,
            order=order_clause(query, JOB_SORT_COLUMNS, "job_id", "DESC"),
            query=query,
        )

    async def get_job(self, job_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow(f"select j.*, c.company_name from {JOB_SOURCE} where j.job_id = $1", job_id)
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def update_job(self, job_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(JOB_COLUMNS, fields, where)
        async with self.database.transaction(reference_message=COMPANY_NOT_FOUND) as conn:
            exists = await conn.fetchval("select 1 from jobs where job_id = $1", job_id)
            if exists is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            if fields.get("company_id") is not None:
                company = await conn.fetchval("select 1 from companies where company_id = $1", fields["company_id"])
                if company is None:
                    raise RepositoryNotFoundError(COMPANY_NOT_FOUND)
            await conn.execute(
                f"update jobs set {assignments}, updated_at = now() where job_id = {where.bind(job_id)}",
                *where.args,
            )
            row = await conn.fetchrow(f"select j.*, c.company_name from {JOB_SOURCE} where j.job_id = $1", job_id)
        logger.info("job updated job_id=%s", job_id)
        return dict(row)

    async def delete_job(self, job_id: int) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow("delete from jobs where job_id = $1 returning *", job_id)
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("job deleted job_id=%s", job_id)
        return dict(row)


@lru_cache
def get_job_repository() -> JobRepository:
    return JobRepository(get_database())
