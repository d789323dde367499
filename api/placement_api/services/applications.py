from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

import asyncpg  # type: ignore[import-untyped]

from placement_api.services.database import Database, get_database
from placement_api.services.eligibility import (
    EligibilityOutcome,
    deadline_passed,
    evaluate_eligibility,
    experience_years,
)
from placement_api.services.errors import (
    RepositoryBusinessRuleError,
    RepositoryConflictError,
    RepositoryError,
    RepositoryNotFoundError,
)
from placement_api.services.listing import ListQuery, WhereBuilder, coalesce_assignments, fetch_page, order_clause

logger = logging.getLogger(__name__)

APPLICATION_COLUMNS = (
    "status",
    "eligibility_status",
    "eligibility_comments",
    "skills_match_score",
    "offer_type",
    "offer_ctc",
    "offer_stipend",
    "placement_date",
    "remarks",
)
APPLICATION_SORT_COLUMNS = {
    name: name
    for name in (
        "application_id",
        "applied_at",
        "updated_at",
        "student_id",
        "job_id",
        "status",
        "eligibility_status",
        "full_name",
        "job_title",
    )
}
APPLICATION_SEARCH_COLUMNS = ("full_name", "email", "job_title", "company_name")
DETAILS_VIEW = "application_details_view"
DUPLICATE = "Application already exists for this student and job"
NOT_FOUND = "Application not found"
STUDENT_NOT_FOUND = "Student not found"
JOB_NOT_FOUND = "Job not found"
DEADLINE_PASSED = "Application deadline has passed"


class ApplicationRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def create_application(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Create an application after existence, duplicate, deadline and eligibility checks.

        Every check and the insert share one transaction. A caller-supplied
        eligibility_status is stored as given; otherwise it is evaluated against
        the job requirement.
        """
        student_id = fields["student_id"]
        job_id = fields["job_id"]
        async with self.database.transaction(conflict_message=DUPLICATE) as conn:
            student = await conn.fetchrow("select student_id, branch from students where student_id = $1", student_id)
            if student is None:
                raise RepositoryNotFoundError(STUDENT_NOT_FOUND)
            job = await conn.fetchrow("select job_id, application_deadline from jobs where job_id = $1", job_id)
            if job is None:
                raise RepositoryNotFoundError(JOB_NOT_FOUND)
            existing = await conn.fetchval(
                "select application_id from applications where student_id = $1 and job_id = $2",
                student_id,
                job_id,
            )
            if existing is not None:
                raise RepositoryConflictError(DUPLICATE)
            if deadline_passed(job["application_deadline"]):
                raise RepositoryBusinessRuleError(DEADLINE_PASSED)

            supplied_status = fields.get("eligibility_status")
            if supplied_status:
                status = supplied_status
                comments = fields.get("eligibility_comments")
                checks: list[bool | None] = [None] * 6
            else:
                outcome = await self._evaluate(conn, student_id, student["branch"], job_id)
                status = outcome.status
                comments = outcome.comments or fields.get("eligibility_comments")
                checks = [
                    outcome.checks.tenth_percent_meets,
                    outcome.checks.twelfth_percent_meets,
                    outcome.checks.ug_cgpa_meets,
                    outcome.checks.pg_cgpa_meets,
                    outcome.checks.experience_meets,
                    outcome.checks.branch_meets,
                ]

            application_id = await conn.fetchval(
                """
                insert into applications (
                  student_id,
                  job_id,
                  status,
                  eligibility_status,
                  eligibility_checked_at,
                  eligibility_comments,
                  tenth_percent_meets,
                  twelfth_percent_meets,
                  ug_cgpa_meets,
                  pg_cgpa_meets,
                  experience_meets,
                  branch_meets,
                  skills_match_score,
                  remarks
                )
                values ($1, $2, coalesce($3, 'submitted'), $4, now(), $5, $6, $7, $8, $9, $10, $11, $12, $13)
                returning application_id
                """,
                student_id,
                job_id,
                fields.get("status"),
                status,
                comments,
                *checks,
                fields.get("skills_match_score"),
                fields.get("remarks"),
            )
            row = await conn.fetchrow(f"select * from {DETAILS_VIEW} where application_id = $1", application_id)
        logger.info(
            "application created application_id=%s student_id=%s job_id=%s eligibility_status=%s",
            application_id,
            student_id,
            job_id,
            status,
        )
        return dict(row)

    async def list_applications(
        self,
        query: ListQuery,
        *,
        student_id: str | None = None,
        job_id: int | None = None,
        status: str | None = None,
        eligibility_status: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.equals("student_id", student_id)
        where.equals("job_id", job_id)
        where.equals("status", status)
        where.equals("eligibility_status", eligibility_status)
        where.search(APPLICATION_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select="*",
            source=DETAILS_VIEW,
            where=where,
            order=order_clause(query, APPLICATION_SORT_COLUMNS, "applied_at", "DESC"),
            query=query,
        )

    async def get_application(self, application_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow(f"select * from {DETAILS_VIEW} where application_id = $1", application_id)
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def update_application(self, application_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(APPLICATION_COLUMNS, fields, where)
        async with self.database.transaction() as conn:
            updated = await conn.fetchval(
                f"""
                update applications
                set {assignments}, updated_at = now()
                where application_id = {where.bind(application_id)}
                returning application_id
                """,
                *where.args,
            )
            if updated is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            row = await conn.fetchrow(f"select * from {DETAILS_VIEW} where application_id = $1", application_id)
        logger.info("application updated application_id=%s", application_id)
        return dict(row)

    async def delete_application(self, application_id: int) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow("delete from applications where application_id = $1 returning *", application_id)
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("application deleted application_id=%s", application_id)
        return dict(row)

    async def recheck_eligibility(self) -> list[dict[str, Any]]:
        """Re-evaluate applications still pending or never checked, one transaction each."""
        pending = await self.database.fetch(
            """
            select application_id, student_id, job_id
            from applications
            where eligibility_status = 'pending' or eligibility_checked_at is null
            order by application_id
            """
        )
        results: list[dict[str, Any]] = []
        for application in pending:
            application_id = application["application_id"]
            try:
                async with self.database.transaction() as conn:
                    branch = await conn.fetchval(
                        "select branch from students where student_id = $1",
                        application["student_id"],
                    )
                    outcome = await self._evaluate(conn, application["student_id"], branch, application["job_id"])
                    await conn.execute(
                        """
                        update applications
                        set eligibility_status = $1,
                            eligibility_comments = $2,
                            eligibility_checked_at = now(),
                            tenth_percent_meets = $3,
                            twelfth_percent_meets = $4,
                            ug_cgpa_meets = $5,
                            pg_cgpa_meets = $6,
                            experience_meets = $7,
                            branch_meets = $8,
                            updated_at = now()
                        where application_id = $9
                        """,
                        outcome.status,
                        outcome.comments,
                        outcome.checks.tenth_percent_meets,
                        outcome.checks.twelfth_percent_meets,
                        outcome.checks.ug_cgpa_meets,
                        outcome.checks.pg_cgpa_meets,
                        outcome.checks.experience_meets,
                        outcome.checks.branch_meets,
                        application_id,
                    )
            except RepositoryError as exc:
                logger.warning("eligibility recheck failed application_id=%s error=%s", application_id, exc.message)
                results.append({"application_id": application_id, "status": "error", "error": exc.message})
                continue
            results.append(
                {
                    "application_id": application_id,
                    "status": "updated",
                    "eligible": outcome.eligible,
                    "eligibility_status": outcome.status,
                }
            )
        logger.info("eligibility recheck processed count=%s", len(results))
        return results

    async def _evaluate(
        self,
        conn: asyncpg.Connection,
        student_id: str,
        branch: str | None,
        job_id: int,
    ) -> EligibilityOutcome:
        requirement = await conn.fetchrow(
            """
            select tenth_percent, twelfth_percent, ug_cgpa, pg_cgpa, min_experience_yrs, allowed_branches
            from job_requirements
            where job_id = $1
            """,
            job_id,
        )
        academics = await conn.fetchrow(
            "select tenth_percent, twelfth_percent, ug_cgpa, pg_cgpa from student_academics where student_id = $1",
            student_id,
        )
        durations = await conn.fetch("select duration from student_internships where student_id = $1", student_id)
        return evaluate_eligibility(
            dict(requirement) if requirement is not None else None,
            dict(academics) if academics is not None else None,
            branch,
            experience_years(row["duration"] for row in durations),
        )


@lru_cache
def get_application_repository() -> ApplicationRepository:
    return ApplicationRepository(get_database())
