from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryConflictError, RepositoryNotFoundError
from placement_api.services.listing import ListQuery, WhereBuilder, coalesce_assignments, fetch_page, order_clause

logger = logging.getLogger(__name__)

REQUIREMENT_COLUMNS = (
    "tenth_percent",
    "twelfth_percent",
    "ug_cgpa",
    "pg_cgpa",
    "min_experience_yrs",
    "allowed_branches",
    "skills_required",
    "additional_notes",
    "backlogs_allowed",
)
REQUIREMENT_SORT_COLUMNS = {
    name: f"jr.{name}"
    for name in (
        "job_requirement_id",
        "job_id",
        "tenth_percent",
        "twelfth_percent",
        "ug_cgpa",
        "min_experience_yrs",
        "backlogs_allowed",
    )
}
REQUIREMENT_SEARCH_COLUMNS = (
    "jr.skills_required",
    "jr.additional_notes",
    "j.job_title",
    "c.company_name",
    "array_to_string(jr.allowed_branches, ',')",
)
REQUIREMENT_SOURCE = (
    "job_requirements jr join jobs j on j.job_id = jr.job_id join companies c on c.company_id = j.company_id"
)
REQUIREMENT_SELECT = "jr.*, j.job_title, c.company_name"
NOT_FOUND = "Job requirement not found"
JOB_NOT_FOUND = "Job not found"
DUPLICATE = "Job requirement already exists for this job"


class JobRequirementRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def create_requirement(self, fields: dict[str, Any]) -> dict[str, Any]:
        async with self.database.transaction(conflict_message=DUPLICATE, reference_message=JOB_NOT_FOUND) as conn:
            job = await conn.fetchval("select 1 from jobs where job_id = $1", fields["job_id"])
            if job is None:
                raise RepositoryNotFoundError(JOB_NOT_FOUND)
            existing = await conn.fetchval(
                "select job_requirement_id from job_requirements where job_id = $1",
                fields["job_id"],
            )
            if existing is not None:
                raise RepositoryConflictError(DUPLICATE)
            requirement_id = await conn.fetchval(
                f"""
                insert into job_requirements (job_id, {", ".join(REQUIREMENT_COLUMNS)})
                values ($1, $2, $3, $4, $5, $6, $7, $8, $9, coalesce($10, 0))
                returning job_requirement_id
                """,
                fields["job_id"],
                *(fields.get(column) for column in REQUIREMENT_COLUMNS),
            )
            row = await conn.fetchrow(
                f"select {REQUIREMENT_SELECT} from {REQUIREMENT_SOURCE} where jr.job_requirement_id = $1",
                requirement_id,
            )
        logger.info("job requirement created job_requirement_id=%s job_id=%s", requirement_id, fields["job_id"])
        return dict(row)

    async def list_requirements(
        self,
        query: ListQuery,
        *,
        job_id: int | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.equals("jr.job_id", job_id)
        where.search(REQUIREMENT_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select=REQUIREMENT_SELECT,
            source=REQUIREMENT_SOURCE,
            where=where,
            order=order_clause(query, REQUIREMENT_SORT_COLUMNS, "job_requirement_id", "DESC"),
            query=query,
        )

    async def get_requirement(self, requirement_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow(
            f"select {REQUIREMENT_SELECT} from {REQUIREMENT_SOURCE} where jr.job_requirement_id = $1",
            requirement_id,
        )
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def get_requirement_for_job(self, job_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow(
            f"select {REQUIREMENT_SELECT} from {REQUIREMENT_SOURCE} where jr.job_id = $1",
            job_id,
        )
        if row is None:
            raise RepositoryNotFoundError("Job requirement not found for this job")
        return dict(row)

    async def update_requirement(self, requirement_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        return await self._update("job_requirement_id", requirement_id, fields, NOT_FOUND)

    async def update_requirement_for_job(self, job_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        return await self._update("job_id", job_id, fields, "Job requirement not found for this job")

    async def delete_requirement(self, requirement_id: int) -> dict[str, Any]:
        return await self._delete("job_requirement_id", requirement_id, NOT_FOUND)

    async def delete_requirement_for_job(self, job_id: int) -> dict[str, Any]:
        return await self._delete("job_id", job_id, "Job requirement not found for this job")

    async def _update(self, column: str, value: int, fields: dict[str, Any], missing: str) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(REQUIREMENT_COLUMNS, fields, where)
        async with self.database.transaction() as conn:
            requirement_id = await conn.fetchval(
                f"select job_requirement_id from job_requirements where {column} = $1",
                value,
            )
            if requirement_id is None:
                raise RepositoryNotFoundError(missing)
            await conn.execute(
                f"update job_requirements set {assignments} where job_requirement_id = {where.bind(requirement_id)}",
                *where.args,
            )
            row = await conn.fetchrow(
                f"select {REQUIREMENT_SELECT} from {REQUIREMENT_SOURCE} where jr.job_requirement_id = $1",
                requirement_id,
            )
        logger.info("job requirement updated job_requirement_id=%s", requirement_id)
        return dict(row)

    async def _delete(self, column: str, value: int, missing: str) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow(f"delete from job_requirements where {column} = $1 returning *", value)
            if row is None:
                raise RepositoryNotFoundError(missing)
        logger.info("job requirement deleted job_requirement_id=%s", row["job_requirement_id"])
        return dict(row)


@lru_cache
def get_job_requirement_repository() -> JobRequirementRepository:
    return JobRequirementRepository(get_database())
