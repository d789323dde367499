from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryNotFoundError
from placement_api.services.listing import ListQuery, WhereBuilder, fetch_page, order_clause

logger = logging.getLogger(__name__)

# (report key, query, single row)
REPORT_SECTIONS = (
    ("address", "select * from student_addresses where student_id = $1 order by address_id limit 1", True),
    ("academics", "select * from student_academics where student_id = $1", True),
    ("family", "select * from student_family where student_id = $1", True),
    ("languages", "select * from student_languages where student_id = $1 order by level desc, language", False),
    (
        "internships",
        "select * from student_internships where student_id = $1 order by start_date desc nulls last",
        False,
    ),
    ("projects", "select * from student_projects where student_id = $1 order by project_id desc", False),
    ("certifications", "select * from student_certifications where student_id = $1 order by cert_id desc", False),
    ("documents", "select * from student_documents where student_id = $1 order by uploaded_at desc", False),
)
SUMMARY_SELECT = """
    s.student_id, s.full_name, s.email, s.mobile, s.gender, s.branch, s.graduation_year, s.semester,
    s.placement_fee_status, sa.ug_cgpa, sa.tenth_percent, sa.twelfth_percent, sa.diploma_percent,
    sa.history_of_backs,
    (select count(*) from student_internships si where si.student_id = s.student_id) as internship_count,
    (select count(*) from student_projects sp where sp.student_id = s.student_id) as project_count,
    (select count(*) from student_certifications sc where sc.student_id = s.student_id) as certification_count,
    (select count(*) from student_offers so where so.student_id = s.student_id) as offer_count
"""
SUMMARY_SOURCE = "students s left join student_academics sa on sa.student_id = s.student_id"
SUMMARY_SORT_COLUMNS = {
    "full_name": "s.full_name",
    "student_id": "s.student_id",
    "branch": "s.branch",
    "graduation_year": "s.graduation_year",
    "ug_cgpa": "sa.ug_cgpa",
}
SUMMARY_SEARCH_COLUMNS = ("s.student_id", "s.full_name", "s.email", "s.branch")


class StudentReportRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def get_report(self, student_id: str) -> dict[str, Any]:
        """Every profile section of one student, read from a single snapshot."""
        async with self.database.transaction() as conn:
            student = await conn.fetchrow("select * from students where student_id = $1", student_id)
            if student is None:
                raise RepositoryNotFoundError("Student not found")
            report: dict[str, Any] = {"student": dict(student)}
            for key, query, single in REPORT_SECTIONS:
                if single:
                    row = await conn.fetchrow(query, student_id)
                    report[key] = dict(row) if row is not None else None
                else:
                    report[key] = [dict(row) for row in await conn.fetch(query, student_id)]
        logger.info("student report built student_id=%s", student_id)
        return report

    async def list_summaries(
        self,
        query: ListQuery,
        *,
        branch: str | None = None,
        graduation_year: int | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.equals("s.branch", branch)
        where.equals("s.graduation_year", graduation_year)
        where.search(SUMMARY_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select=SUMMARY_SELECT,
            source=SUMMARY_SOURCE,
            where=where,
            order=order_clause(query, SUMMARY_SORT_COLUMNS, "full_name", "ASC"),
            query=query,
        )


@lru_cache
def get_student_report_repository() -> StudentReportRepository:
    return StudentReportRepository(get_database())
