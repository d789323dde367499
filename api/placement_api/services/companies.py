from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryConflictError, RepositoryNotFoundError
from placement_api.services.listing import ListQuery, WhereBuilder, coalesce_assignments, fetch_page, order_clause

logger = logging.getLogger(__name__)

COMPANY_COLUMNS = (
    "company_name",
    "company_type",
    "website",
    "contact_person",
    "contact_email",
    "contact_phone",
    "company_logo",
)
COMPANY_SORT_COLUMNS = {
    name: name for name in ("company_id", "company_name", "company_type", "contact_person", "created_at")
}
COMPANY_SEARCH_COLUMNS = ("company_name", "company_type", "contact_person", "contact_email")
DUPLICATE_NAME = "Company with this name already exists"
NOT_FOUND = "Company not found"


class CompanyRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def create_company(self, fields: dict[str, Any]) -> dict[str, Any]:
        async with self.database.transaction(conflict_message=DUPLICATE_NAME) as conn:
            existing = await conn.fetchval(
                "select company_id from companies where company_name = $1",
                fields["company_name"],
            )
            if existing is not None:
                raise RepositoryConflictError(DUPLICATE_NAME)
            row = await conn.fetchrow(
                f"""
                insert into companies ({", ".join(COMPANY_COLUMNS)})
                values ($1, $2, $3, $4, $5, $6, $7)
                returning *
                """,
                *(fields.get(column) for column in COMPANY_COLUMNS),
            )
        logger.info("company created company_id=%s", row["company_id"])
        return dict(row)

    async def list_companies(self, query: ListQuery) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.search(COMPANY_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select="*",
            source="companies",
            where=where,
            order=order_clause(query, COMPANY_SORT_COLUMNS, "company_id", "ASC"),
            query=query,
        )

    async def get_company(self, company_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow("select * from companies where company_id = $1", company_id)
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def update_company(self, company_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(COMPANY_COLUMNS, fields, where)
        async with self.database.transaction(conflict_message=DUPLICATE_NAME) as conn:
            exists = await conn.fetchval("select 1 from companies where company_id = $1", company_id)
            if exists is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            if fields.get("company_name"):
                clash = await conn.fetchval(
                    "select company_id from companies where company_name = $1 and company_id <> $2",
                    fields["company_name"],
                    company_id,
                )
                if clash is not None:
                    raise RepositoryConflictError(DUPLICATE_NAME)
            row = await conn.fetchrow(
                f"""
                update companies
                set {assignments}, updated_at = now()
                where company_id = {where.bind(company_id)}
                returning *
                """,
                *where.args,
            )
        logger.info("company updated company_id=%s", company_id)
        return dict(row)

    async def delete_company(self, company_id: int) -> dict[str, Any]:
        async with self.database.transaction(
            reference_message="Company has jobs and cannot be deleted",
        ) as conn:
            row = await conn.fetchrow("delete from companies where company_id = $1 returning *", company_id)
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("company deleted company_id=%s", company_id)
        return dict(row)


@lru_cache
def get_company_repository() -> CompanyRepository:
    return CompanyRepository(get_database())
