from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryNotFoundError
from placement_api.services.listing import ListQuery, WhereBuilder, coalesce_assignments, fetch_page, order_clause

logger = logging.getLogger(__name__)

ADDRESS_COLUMNS = (
    "permanent_address",
    "permanent_city",
    "permanent_state",
    "permanent_pin",
    "permanent_contact",
    "current_address",
    "current_city",
    "current_state",
    "current_pin",
)
ADDRESS_SORT_COLUMNS = {
    "address_id": "sa.address_id",
    "student_id": "sa.student_id",
    "full_name": "s.full_name",
    "permanent_city": "sa.permanent_city",
    "current_city": "sa.current_city",
    "created_at": "sa.created_at",
}
ADDRESS_SEARCH_COLUMNS = ("sa.student_id", "s.full_name", "sa.permanent_city", "sa.current_city", "sa.address_id::text")
ADDRESS_SOURCE = "student_addresses sa join students s on s.student_id = sa.student_id"
ADDRESS_SELECT = "sa.*, s.full_name"
NOT_FOUND = "Student address not found"
STUDENT_NOT_FOUND = "Student not found"


class StudentAddressRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def create_address(self, fields: dict[str, Any]) -> dict[str, Any]:
        async with self.database.transaction(reference_message=STUDENT_NOT_FOUND) as conn:
            if await conn.fetchval("select 1 from students where student_id = $1", fields["student_id"]) is None:
                raise RepositoryNotFoundError(STUDENT_NOT_FOUND)
            address_id = await conn.fetchval(
                f"""
                insert into student_addresses (student_id, {", ".join(ADDRESS_COLUMNS)})
                values ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                returning address_id
                """,
                fields["student_id"],
                *(fields.get(column) for column in ADDRESS_COLUMNS),
            )
            row = await conn.fetchrow(
                f"select {ADDRESS_SELECT} from {ADDRESS_SOURCE} where sa.address_id = $1",
                address_id,
            )
        logger.info("address created address_id=%s student_id=%s", address_id, fields["student_id"])
        return dict(row)

    async def list_addresses(
        self,
        query: ListQuery,
        *,
        student_id: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.equals("sa.student_id", student_id)
        where.search(ADDRESS_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select=ADDRESS_SELECT,
            source=ADDRESS_SOURCE,
            where=where,
            order=order_clause(query, ADDRESS_SORT_COLUMNS, "address_id", "ASC"),
            query=query,
        )

    async def get_address(self, address_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow(
            f"select {ADDRESS_SELECT} from {ADDRESS_SOURCE} where sa.address_id = $1",
            address_id,
        )
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def get_student_addresses(self, student_id: str) -> list[dict[str, Any]]:
        rows = await self.database.fetch(
            f"select {ADDRESS_SELECT} from {ADDRESS_SOURCE} where sa.student_id = $1 order by sa.address_id",
            student_id,
        )
        if not rows:
            raise RepositoryNotFoundError("No addresses found for this student")
        return [dict(row) for row in rows]

    async def update_address(self, address_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(ADDRESS_COLUMNS, fields, where)
        async with self.database.transaction() as conn:
            updated = await conn.fetchval(
                f"""
                update student_addresses
                set {assignments}, updated_at = now()
                where address_id = {where.bind(address_id)}
                returning address_id
                """,
                *where.args,
            )
            if updated is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            row = await conn.fetchrow(
                f"select {ADDRESS_SELECT} from {ADDRESS_SOURCE} where sa.address_id = $1",
                address_id,
            )
        logger.info("address updated address_id=%s", address_id)
        return dict(row)

    async def delete_address(self, address_id: int) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow("delete from student_addresses where address_id = $1 returning *", address_id)
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("address deleted address_id=%s", address_id)
        return dict(row)


@lru_cache
def get_student_address_repository() -> StudentAddressRepository:
    return StudentAddressRepository(get_database())
